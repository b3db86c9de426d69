from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
try:
    from pypdf import PdfReader  # type: ignore
except ImportError as e:  # pragma: no cover
    raise ImportError(
        "Missing dependency 'pypdf'. Activate your virtual environment and run 'pip install -e .'."
    ) from e

"""pdf_loader

Inspection of uploaded files with pypdf. Rendering is the viewer's job; the
server only needs to know that a file is a readable PDF and what its document
information dictionary says.
"""


class InvalidPdfError(ValueError):
    pass


@dataclass
class PdfInfo:
    page_count: int
    title: Optional[str] = None
    author: Optional[str] = None


def _clean(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def read_pdf_info(path: str) -> PdfInfo:
    """Open ``path`` with pypdf; raises InvalidPdfError if it is not a readable PDF."""
    try:
        reader = PdfReader(path)
        page_count = len(reader.pages)
        meta = reader.metadata
    except Exception as e:  # pypdf raises a variety of errors on malformed input
        raise InvalidPdfError(f"Not a readable PDF: {e}") from e
    title = author = None
    if meta is not None:
        title = _clean(meta.title)
        author = _clean(meta.author)
    return PdfInfo(page_count=page_count, title=title, author=author)
