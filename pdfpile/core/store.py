from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Union
import logging

from .annotations import Annotation, clone_annotations, normalize_note
from .history import HistoryStack, DEFAULT_HISTORY_LIMIT

logger = logging.getLogger(__name__)


# ---- Mutations ----

@dataclass(frozen=True)
class AddAnnotations:
    annotations: List[Annotation] = field(default_factory=list)


@dataclass(frozen=True)
class SetNote:
    annotation_id: str
    note: Optional[str] = None


@dataclass(frozen=True)
class Delete:
    annotation_id: str


Mutation = Union[AddAnnotations, SetNote, Delete]


class AnnotationStore:
    """Ordered annotations of the open document plus their undo history.

    Every mutation that changes the collection snapshots the previous state first.
    Listeners are called with no arguments after any change, including undo and
    wholesale replacement.
    """

    def __init__(self, annotations: Optional[List[Annotation]] = None, history_limit: int = DEFAULT_HISTORY_LIMIT):
        self._annotations: List[Annotation] = clone_annotations(annotations or [])
        self.history = HistoryStack(history_limit)
        self._listeners: List[Callable[[], None]] = []

    # ---- Reads ----
    @property
    def annotations(self) -> List[Annotation]:
        return list(self._annotations)

    def snapshot(self) -> List[Annotation]:
        return clone_annotations(self._annotations)

    def get(self, annotation_id: str) -> Optional[Annotation]:
        idx = self._index_of(annotation_id)
        return self._annotations[idx] if idx is not None else None

    def __contains__(self, annotation_id: str) -> bool:
        return self._index_of(annotation_id) is not None

    def __len__(self) -> int:
        return len(self._annotations)

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    # ---- Listeners ----
    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _notify(self):
        for listener in list(self._listeners):
            listener()

    # ---- Writes ----
    def apply(self, mutation: Mutation) -> bool:
        """Apply ``mutation``; returns True when the collection changed."""
        if isinstance(mutation, AddAnnotations):
            changed = self._add(mutation.annotations)
        elif isinstance(mutation, SetNote):
            changed = self._set_note(mutation.annotation_id, mutation.note)
        elif isinstance(mutation, Delete):
            changed = self._delete(mutation.annotation_id)
        else:
            raise TypeError(f"Unsupported mutation: {mutation!r}")
        if changed:
            self._notify()
        return changed

    def undo(self) -> bool:
        previous = self.history.pop()
        if previous is None:
            return False
        self._annotations = previous
        self._notify()
        return True

    def replace_all(self, annotations: List[Annotation]):
        """Load a fresh collection (document load/reload). Not undoable."""
        self._annotations = clone_annotations(annotations)
        self.history.clear()
        self._notify()

    def _add(self, annotations: List[Annotation]) -> bool:
        if not annotations:
            return False
        self.history.push(self._annotations)
        self._annotations.extend(clone_annotations(annotations))
        logger.debug("Added %d annotation(s)", len(annotations))
        return True

    def _set_note(self, annotation_id: str, note: Optional[str]) -> bool:
        idx = self._index_of(annotation_id)
        if idx is None:
            return False
        current = self._annotations[idx]
        new_note = normalize_note(note)
        if new_note == normalize_note(current.note):
            return False
        self.history.push(self._annotations)
        self._annotations[idx] = current.with_note(new_note)
        return True

    def _delete(self, annotation_id: str) -> bool:
        idx = self._index_of(annotation_id)
        if idx is None:
            return False
        self.history.push(self._annotations)
        del self._annotations[idx]
        return True

    def _index_of(self, annotation_id: str) -> Optional[int]:
        for i, a in enumerate(self._annotations):
            if a.id == annotation_id:
                return i
        return None
