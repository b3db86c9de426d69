from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple
import logging

from .annotations import Annotation, Rect, new_id

logger = logging.getLogger(__name__)

"""geometry

Maps a browser text selection onto page-relative annotation rectangles.

Screen space: CSS pixels as reported by ``Range.getClientRects()`` and
``getBoundingClientRect()`` (origin top-left, y grows downwards).
Page space: percentages of the page layer's bounding box, see ``annotations.Rect``.

The mapper never reads live DOM state; the viewer hands it a ``SelectionSnapshot``
captured on pointer release.
"""

ANNOTATING_MODES = ('highlight', 'underline')


@dataclass(frozen=True)
class ScreenRect:
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center(self) -> Tuple[float, float]:
        return self.left + self.width / 2, self.top + self.height / 2

    def is_degenerate(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def contains(self, x: float, y: float) -> bool:
        # edges inclusive
        return self.left <= x <= self.right and self.top <= y <= self.bottom


@dataclass(frozen=True)
class PageLayout:
    page_index: int
    box: ScreenRect


@dataclass(frozen=True)
class SelectionSnapshot:
    """Everything the mapper needs from one pointer-up, captured by the viewer."""
    rects: Tuple[ScreenRect, ...] = ()
    page_layouts: Tuple[PageLayout, ...] = ()
    text: str = ''
    collapsed: bool = False
    in_text_layer: bool = True

    def is_actionable(self) -> bool:
        return not self.collapsed and self.in_text_layer and bool(self.text.strip())


def _find_page(rect: ScreenRect, pages: Sequence[PageLayout]) -> Optional[PageLayout]:
    cx, cy = rect.center
    for page in pages:
        if page.box.contains(cx, cy):
            return page
    return None


def to_page_rect(rect: ScreenRect, page: ScreenRect) -> Optional[Rect]:
    """Convert a screen rect into percentages of ``page``, clipped to the page.

    Returns None when nothing of the rect remains inside the page.
    """
    left = max(rect.left, page.left)
    top = max(rect.top, page.top)
    right = min(rect.right, page.right)
    bottom = min(rect.bottom, page.bottom)
    if right <= left or bottom <= top:
        return None
    x = (left - page.left) / page.width * 100
    y = (top - page.top) / page.height * 100
    width = (right - left) / page.width * 100
    height = (bottom - top) / page.height * 100
    return Rect(x=x, y=y, width=width, height=height)


def map_selection_to_annotations(
    selection_rects: Iterable[ScreenRect],
    page_layouts: Iterable[PageLayout],
    mode: str,
    id_factory: Callable[[], str] = new_id,
) -> List[Annotation]:
    """Group selection fragments by page and emit one unsaved Annotation per page.

    Fragments keep the order the browser enumerated them in; pages are emitted in
    order of their first fragment. Nothing mappable yields an empty list.
    """
    mode = getattr(mode, 'value', mode)
    if mode not in ANNOTATING_MODES:
        raise ValueError(f'Cannot map a selection in mode {mode!r}')
    pages = [p for p in page_layouts if not p.box.is_degenerate()]
    grouped: Dict[int, List[Rect]] = {}
    for rect in selection_rects:
        if rect.is_degenerate():
            continue
        page = _find_page(rect, pages)
        if page is None:
            continue
        rel = to_page_rect(rect, page.box)
        if rel is None:
            continue
        grouped.setdefault(page.page_index, []).append(rel)
    return [
        Annotation(id=id_factory(), type=mode, page_index=page_index, rects=rects)
        for page_index, rects in grouped.items()
    ]


def annotations_from_snapshot(
    snapshot: SelectionSnapshot,
    mode: str,
    id_factory: Callable[[], str] = new_id,
) -> List[Annotation]:
    """Map a pointer-up snapshot, honouring the mode and selection gates."""
    mode = getattr(mode, 'value', mode)
    if mode not in ANNOTATING_MODES:
        return []
    if not snapshot.is_actionable():
        return []
    out = map_selection_to_annotations(snapshot.rects, snapshot.page_layouts, mode, id_factory)
    if not out:
        logger.debug("Selection of %d rect(s) mapped to no page", len(snapshot.rects))
    return out


__all__ = [
    "ScreenRect", "PageLayout", "SelectionSnapshot",
    "map_selection_to_annotations", "annotations_from_snapshot", "to_page_rect",
]
