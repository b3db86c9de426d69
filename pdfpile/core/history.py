from __future__ import annotations
from collections import deque
from typing import Deque, List, Optional

from .annotations import Annotation, clone_annotations

DEFAULT_HISTORY_LIMIT = 50


class HistoryStack:
    """Bounded undo log of full annotation snapshots.

    LIFO access at the top; once ``limit`` is reached the oldest entry is evicted
    from the bottom. Every entry is a deep copy, so later edits to the live
    collection never reach a pushed snapshot.
    """

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT):
        if limit < 1:
            raise ValueError("History limit must be positive")
        self.limit = limit
        self._entries: Deque[List[Annotation]] = deque(maxlen=limit)

    def push(self, annotations: List[Annotation]):
        self._entries.append(clone_annotations(annotations))

    def pop(self) -> Optional[List[Annotation]]:
        if not self._entries:
            return None
        return self._entries.pop()

    def clear(self):
        self._entries.clear()

    @property
    def can_undo(self) -> bool:
        return bool(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
