from __future__ import annotations
from typing import Callable, List, Optional
import logging
import threading

from .annotations import Annotation, PdfDocument
from .client import DocumentStoreClient, DocumentStoreError
from .geometry import ScreenRect, SelectionSnapshot, annotations_from_snapshot
from .history import DEFAULT_HISTORY_LIMIT
from .modes import (
    AnnotationMode, ClosePopupCommand, CommandDispatcher, ModeStateMachine, SetModeCommand, UndoCommand,
)
from .popup import PopupController
from .scroll_state import ScrollRecord, ScrollStateStore
from .settings import Settings
from .store import AddAnnotations, AnnotationStore
from .timers import Debouncer, Scheduler, ThreadingScheduler, TimerGroup

logger = logging.getLogger(__name__)

STATUS_CLEAR_DELAY = 3.0
SCROLL_RESTORE_RETRY_DELAY = 0.3

MSG_SAVED = "Annotations saved."
MSG_SAVE_FAILED = "Failed to save annotations."
MSG_AUTOSAVE_FAILED = "Autosave failed; changes are kept locally."


class ViewSession:
    """One open document in the viewer.

    Owns the annotation store, mode machine, popup, debounced autosave and every
    timer it schedules; ``teardown()`` cancels them all. Callbacks let the viewer
    react without the session touching any UI:

      on_status(message)       transient status line ('' clears it)
      on_navigate_home()       the document could not be loaded
      on_change()              annotations changed, re-render the highlight layer
      on_scroll_to(top)        apply a restored scroll offset

    With the default ``ThreadingScheduler`` deferred work (autosave, status
    clearing, scroll retry) runs on timer threads, so session state is guarded by
    an RLock and ``on_status``/``on_scroll_to`` may be called off the UI thread.
    A viewer with an event loop should pass a scheduler that posts to it.
    Network calls are made outside the lock.
    """

    def __init__(self, client: DocumentStoreClient, *, scheduler: Optional[Scheduler] = None,
                 scroll_store: Optional[ScrollStateStore] = None, autosave_delay: float = 1.0,
                 history_limit: int = DEFAULT_HISTORY_LIMIT, revert_after_selection: bool = False,
                 on_status: Optional[Callable[[str], None]] = None,
                 on_navigate_home: Optional[Callable[[], None]] = None,
                 on_change: Optional[Callable[[], None]] = None,
                 on_scroll_to: Optional[Callable[[float], None]] = None):
        self.client = client
        self.scheduler = scheduler or ThreadingScheduler()
        self.scroll_store = scroll_store
        self.on_status = on_status
        self.on_navigate_home = on_navigate_home
        self.on_change = on_change
        self.on_scroll_to = on_scroll_to

        self._lock = threading.RLock()
        self.document: Optional[PdfDocument] = None
        self.status_message = ''
        self.dirty = False
        self._revision = 0
        self._skip_next_autosave = False

        self.store = AnnotationStore(history_limit=history_limit)
        self.modes = ModeStateMachine(revert_after_selection=revert_after_selection)
        self.popup = PopupController(self.store)
        self.dispatcher = CommandDispatcher()
        self.dispatcher.register(SetModeCommand, lambda cmd: self.modes.set_mode(cmd.mode))
        self.dispatcher.register(UndoCommand, lambda cmd: self.store.undo())
        self.dispatcher.register(ClosePopupCommand, lambda cmd: self.popup.close())

        self.timers = TimerGroup(self.scheduler)
        self._status_timer = None
        self.autosave = Debouncer(self.scheduler, autosave_delay, self._autosave)
        self._unsubscribe = self.store.subscribe(self._on_store_change)

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> 'ViewSession':
        client = DocumentStoreClient(settings.api_url, timeout=settings.http_timeout)
        kwargs.setdefault('scroll_store', ScrollStateStore(settings.state_dir))
        kwargs.setdefault('autosave_delay', settings.autosave_delay)
        kwargs.setdefault('history_limit', settings.history_limit)
        return cls(client, **kwargs)

    # ---- Loading ----
    def load(self, doc_id: str) -> bool:
        try:
            doc = self.client.get_document(doc_id)
        except DocumentStoreError as e:
            logger.warning("Failed to load document %s: %s", doc_id, e)
            with self._lock:
                self.document = None
            if self.on_navigate_home:
                self.on_navigate_home()
            return False
        with self._lock:
            self.document = doc
            # the initial load is a change too; it must not be written back
            self._skip_next_autosave = True
            self.store.replace_all(doc.annotations)
        logger.info("Loaded document %s with %d annotation(s)", doc.id, len(doc.annotations))
        return True

    def _on_store_change(self):
        with self._lock:
            if self.document is None:
                return
            self.document.annotations = self.store.snapshot()
            self.popup.sync()
            if self._skip_next_autosave:
                self._skip_next_autosave = False
                self.dirty = False
            else:
                self._revision += 1
                self.dirty = True
                self.autosave.trigger()
        if self.on_change:
            self.on_change()

    # ---- Saving ----
    def save(self) -> bool:
        """Manual save. Any pending autosave is left alone; the last response wins."""
        return self._persist(manual=True)

    def _autosave(self):
        self._persist(manual=False)

    def _persist(self, manual: bool) -> bool:
        with self._lock:
            doc = self.document
            if doc is None:
                return False
            revision = self._revision
            doc_id, title = doc.id, doc.title
            annotations = self.store.snapshot()
        try:
            self.client.update_document(doc_id, title=title, annotations=annotations)
        except DocumentStoreError as e:
            logger.warning("%s save of %s failed: %s", "Manual" if manual else "Auto", doc_id, e)
            self.show_status(MSG_SAVE_FAILED if manual else MSG_AUTOSAVE_FAILED)
            return False
        with self._lock:
            if revision == self._revision:
                self.dirty = False
        if manual:
            self.show_status(MSG_SAVED)
        return True

    def show_status(self, message: str):
        with self._lock:
            self.status_message = message
            self.timers.cancel(self._status_timer)
            self._status_timer = self.timers.call_later(STATUS_CLEAR_DELAY, self._clear_status)
        if self.on_status:
            self.on_status(message)

    def _clear_status(self):
        with self._lock:
            self._status_timer = None
            self.status_message = ''
        if self.on_status:
            self.on_status('')

    # ---- Input ----
    def set_mode(self, mode: AnnotationMode):
        with self._lock:
            self.dispatcher.dispatch(SetModeCommand(AnnotationMode(mode)))

    def undo(self) -> bool:
        with self._lock:
            return bool(self.dispatcher.dispatch(UndoCommand()))

    def key_down(self, key: str, *, ctrl: bool = False, meta: bool = False, alt: bool = False,
                 shift: bool = False, in_text_input: bool = False) -> bool:
        """Handle a key press; returns True when it was a shortcut."""
        command = self.modes.command_for_key(key, ctrl=ctrl, meta=meta, alt=alt, shift=shift,
                                             in_text_input=in_text_input)
        if command is None:
            return False
        with self._lock:
            self.dispatcher.dispatch(command)
        return True

    def pointer_up(self, snapshot: SelectionSnapshot) -> List[Annotation]:
        with self._lock:
            if self.document is None or not self.modes.maps_selections:
                return []
            created = annotations_from_snapshot(snapshot, self.modes.mode)
            if not created:
                return []
            self.store.apply(AddAnnotations(created))
            self.modes.selection_completed()
            return created

    def annotation_clicked(self, annotation_id: str, anchor_rect: ScreenRect) -> bool:
        with self._lock:
            if not self.modes.annotation_hit_targets or annotation_id not in self.store:
                return False
            self.popup.open(annotation_id, anchor_rect)
            return True

    # ---- Scroll position ----
    def on_scroll(self, top: float, scroll_height: float, viewport_height: float):
        with self._lock:
            doc = self.document
        if doc is None or self.scroll_store is None:
            return
        scrollable = scroll_height - viewport_height
        ratio = top / scrollable if scrollable > 0 else 0.0
        self.scroll_store.save(doc.id, top, ratio)

    def restore_scroll(self, scrollable_height: Callable[[], float]) -> Optional[ScrollRecord]:
        """Apply the saved offset now and once more after late layout shifts."""
        with self._lock:
            doc = self.document
        if doc is None or self.scroll_store is None or self.on_scroll_to is None:
            return None
        record = self.scroll_store.load(doc.id)
        if record is None:
            return None

        def apply():
            scrollable = scrollable_height()
            self.on_scroll_to(record.ratio * scrollable if scrollable > 0 else record.top)

        apply()
        with self._lock:
            self.timers.call_later(SCROLL_RESTORE_RETRY_DELAY, apply)
        return record

    # ---- Teardown ----
    def teardown(self):
        with self._lock:
            self.autosave.cancel()
            self.timers.cancel_all()
            self._status_timer = None
            self._unsubscribe()
            self.popup.close()
            self.document = None
