import pytest
from pydantic import ValidationError
from pdfpile.core.annotations import Annotation, PdfDocument, Rect, normalize_note


def test_wire_format_is_camel_case_and_accepts_both_spellings():
    ann = Annotation.model_validate({"type": "highlight", "pageIndex": 2, "rects": [{"x": 1, "y": 2, "width": 3, "height": 4}]})
    assert ann.page_index == 2 and ann.id
    same = Annotation(type='highlight', page_index=2, rects=[Rect(x=1, y=2, width=3, height=4)])
    assert same.to_wire()['pageIndex'] == 2
    assert 'page_index' not in same.to_wire()


def test_rect_requires_positive_size():
    with pytest.raises(ValidationError):
        Rect(x=0, y=0, width=0, height=1)
    with pytest.raises(ValidationError):
        Rect(x=0, y=0, width=1, height=-1)


def test_within_page_tolerance():
    assert Rect(x=90, y=0, width=10.0000000001, height=5).within_page()
    assert not Rect(x=95, y=0, width=10, height=5).within_page()
    assert not Rect(x=-1, y=0, width=10, height=5).within_page()


def test_note_normalization():
    assert normalize_note(None) is None
    assert normalize_note('   ') is None
    assert normalize_note('') is None
    assert normalize_note(' hi ') == 'hi'


def test_document_lookup_and_defaults():
    ann = Annotation(id='x', type='underline', page_index=0, rects=[Rect(x=0, y=0, width=1, height=1)])
    doc = PdfDocument(title='t', path='/files/t.pdf', annotations=[ann])
    assert doc.annotation('x') is not None
    assert doc.annotation('y') is None
    assert doc.author == '' and doc.journal == ''
    wire = doc.to_wire()
    assert PdfDocument.from_wire(wire) == doc
