import pytest
from pdfpile.core.geometry import (
    ScreenRect, PageLayout, SelectionSnapshot, map_selection_to_annotations, annotations_from_snapshot,
)
from pdfpile.core.modes import AnnotationMode

PAGE0 = PageLayout(page_index=0, box=ScreenRect(0, 0, 200, 1000))
PAGE1 = PageLayout(page_index=1, box=ScreenRect(0, 1010, 200, 1000))


def _ids():
    counter = iter(range(1000))
    return lambda: f"a{next(counter)}"


def test_example_rect_conversion():
    out = map_selection_to_annotations([ScreenRect(10, 10, 50, 5)], [PAGE0], 'highlight')
    assert len(out) == 1
    r = out[0].rects[0]
    assert (r.x, r.y, r.width, r.height) == pytest.approx((5, 1, 25, 0.5))
    assert out[0].type == 'highlight' and out[0].page_index == 0


def test_single_page_keeps_order_and_drops_degenerate():
    rects = [ScreenRect(10, 100, 80, 10), ScreenRect(10, 120, 0, 10), ScreenRect(10, 140, 60, 10), ScreenRect(10, 160, 40, 0)]
    out = map_selection_to_annotations(rects, [PAGE0, PAGE1], 'underline')
    assert len(out) == 1
    assert [r.y for r in out[0].rects] == pytest.approx([10, 14])
    assert out[0].type == 'underline'


def test_multi_page_selection_yields_one_annotation_per_page():
    rects = [ScreenRect(10, 980, 50, 10), ScreenRect(10, 1020, 50, 10), ScreenRect(10, 1040, 50, 10)]
    out = map_selection_to_annotations(rects, [PAGE0, PAGE1], 'highlight', id_factory=_ids())
    assert [a.page_index for a in out] == [0, 1]
    assert [len(a.rects) for a in out] == [1, 2]
    assert len({a.id for a in out}) == 2
    for a in out:
        assert all(r.within_page() for r in a.rects)


def test_rect_outside_every_page_is_dropped():
    rects = [ScreenRect(300, 50, 20, 10), ScreenRect(10, 1002, 50, 4)]  # right of page, in the gap
    assert map_selection_to_annotations(rects, [PAGE0, PAGE1], 'highlight') == []


def test_rect_overhanging_page_edge_is_clipped():
    # centre lies on the page, the right edge spills past it
    out = map_selection_to_annotations([ScreenRect(150, 10, 80, 10)], [PAGE0], 'highlight')
    r = out[0].rects[0]
    assert r.x + r.width == pytest.approx(100)
    assert r.within_page()


def test_page_offset_is_subtracted():
    page = PageLayout(page_index=3, box=ScreenRect(100, 50, 400, 500))
    out = map_selection_to_annotations([ScreenRect(300, 300, 40, 50)], [page], 'highlight')
    r = out[0].rects[0]
    assert (r.x, r.y, r.width, r.height) == pytest.approx((50, 50, 10, 10))
    assert out[0].page_index == 3


def test_neutral_mode_is_rejected_by_mapper():
    with pytest.raises(ValueError):
        map_selection_to_annotations([ScreenRect(10, 10, 50, 5)], [PAGE0], 'none')


def test_snapshot_gates():
    snap = SelectionSnapshot(rects=(ScreenRect(10, 10, 50, 5),), page_layouts=(PAGE0,), text='hello')
    assert len(annotations_from_snapshot(snap, AnnotationMode.HIGHLIGHT)) == 1
    assert annotations_from_snapshot(snap, AnnotationMode.NONE) == []
    collapsed = SelectionSnapshot(rects=snap.rects, page_layouts=snap.page_layouts, text='hello', collapsed=True)
    assert annotations_from_snapshot(collapsed, 'highlight') == []
    blank = SelectionSnapshot(rects=snap.rects, page_layouts=snap.page_layouts, text='   ')
    assert annotations_from_snapshot(blank, 'highlight') == []
    outside = SelectionSnapshot(rects=snap.rects, page_layouts=snap.page_layouts, text='x', in_text_layer=False)
    assert annotations_from_snapshot(outside, 'highlight') == []


def test_no_pages_means_no_annotations():
    snap = SelectionSnapshot(rects=(ScreenRect(10, 10, 50, 5),), page_layouts=(), text='hello')
    assert annotations_from_snapshot(snap, 'underline') == []
