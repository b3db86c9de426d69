from __future__ import annotations
from typing import Optional, Tuple

from .annotations import normalize_note
from .geometry import ScreenRect
from .store import AnnotationStore, SetNote, Delete

ANCHOR_OFFSET = 8.0  # px below the clicked annotation rect


class PopupController:
    """Transient note editor bound to a single annotation."""

    def __init__(self, store: AnnotationStore):
        self.store = store
        self.active_annotation_id: Optional[str] = None
        self.note_draft: str = ''
        self.anchor_position: Optional[Tuple[float, float]] = None
        self.caret_position: int = 0
        self.wants_focus: bool = False

    @property
    def is_open(self) -> bool:
        return self.active_annotation_id is not None

    def open(self, annotation_id: str, anchor_rect: ScreenRect):
        annotation = self.store.get(annotation_id)
        if annotation is None:
            raise KeyError(annotation_id)
        self.active_annotation_id = annotation_id
        self.note_draft = annotation.note or ''
        self.anchor_position = (anchor_rect.left + anchor_rect.width / 2, anchor_rect.bottom + ANCHOR_OFFSET)
        self.caret_position = len(self.note_draft)
        self.wants_focus = True

    def set_draft(self, text: str):
        self.note_draft = text
        self.caret_position = len(text)

    def focus_taken(self):
        self.wants_focus = False

    def close(self):
        self.active_annotation_id = None
        self.note_draft = ''
        self.anchor_position = None
        self.caret_position = 0
        self.wants_focus = False

    def commit(self) -> bool:
        """Store the trimmed draft if it differs from the saved note, then close."""
        changed = False
        if self.active_annotation_id is not None:
            changed = self.store.apply(SetNote(self.active_annotation_id, normalize_note(self.note_draft)))
        self.close()
        return changed

    def delete(self) -> bool:
        changed = False
        if self.active_annotation_id is not None:
            changed = self.store.apply(Delete(self.active_annotation_id))
        self.close()
        return changed

    def dismiss(self, point: Tuple[float, float], popup_bounds: ScreenRect) -> bool:
        """Close without committing when ``point`` lies outside the popup."""
        if not self.is_open or popup_bounds.contains(*point):
            return False
        self.close()
        return True

    def sync(self):
        # the active annotation may disappear through undo
        if self.is_open and self.active_annotation_id not in self.store:
            self.close()
