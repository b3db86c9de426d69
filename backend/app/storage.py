from __future__ import annotations
import os, json, threading, logging
from typing import Dict, List, Optional
from .models import PdfDocument, PdfUpdate

logger = logging.getLogger(__name__)

_STORAGE_LOCK = threading.RLock()


class DocStore:
    """Flat-file record store: ``<base>/db.json`` holds ``{"pdfs": [...]}``.

    Every write rewrites the whole file; last write wins.
    """

    def __init__(self, base: str = "storage", uploads_dir: Optional[str] = None):
        self.base = str(base)
        self.uploads_dir = str(uploads_dir or os.path.join(self.base, 'uploads'))
        os.makedirs(self.base, exist_ok=True)
        os.makedirs(self.uploads_dir, exist_ok=True)
        self._docs: Dict[str, PdfDocument] = {}
        self._load_index()

    def _index_path(self):
        return os.path.join(self.base, 'db.json')

    def _load_index(self):
        path = self._index_path()
        if not os.path.exists(path):
            self._persist_index()
            return
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            for d in data.get('pdfs', []):
                doc = PdfDocument.from_wire(d)
                self._docs[doc.id] = doc
        except Exception:
            corrupt = path + '.corrupt'
            os.replace(path, corrupt)
            logger.exception("Could not read %s; moved it to %s and starting with an empty store", path, corrupt)
            self._docs = {}

    def _persist_index(self):
        payload = {"pdfs": [d.to_wire() for d in self._docs.values()]}
        tmp = self._index_path() + '.tmp'
        with open(tmp, 'w', encoding='utf-8') as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
        os.replace(tmp, self._index_path())

    def add_document(self, doc: PdfDocument):
        with _STORAGE_LOCK:
            self._docs[doc.id] = doc
            self._persist_index()

    def get(self, doc_id: str) -> PdfDocument | None:
        return self._docs.get(doc_id)

    def list(self) -> List[PdfDocument]:
        return list(self._docs.values())

    def update(self, doc_id: str, patch: PdfUpdate) -> PdfDocument | None:
        """Merge the provided fields over the stored record."""
        with _STORAGE_LOCK:
            doc = self._docs.get(doc_id)
            if doc is None:
                return None
            changes = patch.model_dump(exclude_none=True, exclude={'annotations'})
            if patch.annotations is not None:
                changes['annotations'] = [a.model_copy(deep=True) for a in patch.annotations]
            updated = doc.model_copy(update=changes)
            self._docs[doc_id] = updated
            self._persist_index()
            return updated

    def delete(self, doc_id: str) -> PdfDocument | None:
        """Remove the record and its file; returns the removed record."""
        with _STORAGE_LOCK:
            doc = self._docs.pop(doc_id, None)
            if doc is None:
                return None
            self._persist_index()
        if doc.filename:
            file_path = self.file_path(doc.filename)
            try:
                os.remove(file_path)
            except FileNotFoundError:
                pass
        logger.info("Deleted document %s", doc_id)
        return doc

    def file_path(self, filename: str) -> str:
        return os.path.join(self.uploads_dir, os.path.basename(filename))
