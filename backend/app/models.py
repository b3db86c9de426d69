from __future__ import annotations
from typing import List, Optional
from pydantic import BaseModel

# Stored records reuse the core shapes so the viewer and the server agree on the wire format
from pdfpile.core.annotations import Annotation, PdfDocument, WireModel


class PdfSummary(WireModel):
    id: str
    title: str
    author: str = ''


class PdfUpdate(WireModel):
    # None means "keep the stored value"
    title: Optional[str] = None
    author: Optional[str] = None
    journal: Optional[str] = None
    annotations: Optional[List[Annotation]] = None


class MessageResponse(BaseModel):
    message: str


__all__ = ["PdfDocument", "PdfSummary", "PdfUpdate", "MessageResponse", "Annotation"]
