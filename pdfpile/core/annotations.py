from __future__ import annotations
from typing import List, Optional, Literal, Any
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from datetime import datetime, timezone
import uuid

# Coordinate system: percentages (0-100) of a single page's rendered bounding box,
# rectangle = (x, y, width, height) with the origin at the page's top-left corner.

BOUND_TOLERANCE = 1e-6

AnnotationType = Literal['highlight', 'underline']


def new_id() -> str:
    return str(uuid.uuid4())


class WireModel(BaseModel):
    """Base for models exchanged with the Document Store (camelCase on the wire)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode='json', by_alias=True)


class Rect(WireModel):
    x: float
    y: float
    width: float = Field(gt=0)
    height: float = Field(gt=0)

    def within_page(self, tolerance: float = BOUND_TOLERANCE) -> bool:
        return (
            self.x >= -tolerance and self.y >= -tolerance
            and self.x + self.width <= 100 + tolerance
            and self.y + self.height <= 100 + tolerance
        )


class Annotation(WireModel):
    id: str = Field(default_factory=new_id)
    type: AnnotationType
    page_index: int = Field(ge=0)
    rects: List[Rect] = Field(min_length=1)  # one per selected line fragment
    note: Optional[str] = None

    def with_note(self, note: Optional[str]) -> 'Annotation':
        """Return an independent copy of this annotation with ``note`` replaced."""
        return self.model_copy(update={'note': note}, deep=True)


class PdfDocument(WireModel):
    id: str = Field(default_factory=new_id)
    title: str
    path: str
    author: str = ''
    journal: str = ''
    original_name: Optional[str] = None
    filename: Optional[str] = None
    annotations: List[Annotation] = []
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def annotation(self, annotation_id: str) -> Optional[Annotation]:
        for a in self.annotations:
            if a.id == annotation_id:
                return a
        return None

    @staticmethod
    def from_wire(data: Any) -> 'PdfDocument':
        return PdfDocument.model_validate(data)


def normalize_note(note: Optional[str]) -> Optional[str]:
    """Trim a note; blank or missing both mean "no note"."""
    if note is None:
        return None
    trimmed = note.strip()
    return trimmed or None


def clone_annotations(annotations: List[Annotation]) -> List[Annotation]:
    return [a.model_copy(deep=True) for a in annotations]
