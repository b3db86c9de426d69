from __future__ import annotations
from typing import Any, Dict, List, Optional
import logging
import os
import requests

from .annotations import Annotation, PdfDocument

logger = logging.getLogger(__name__)


class DocumentStoreError(RuntimeError):
    pass


class NotFoundError(DocumentStoreError):
    pass


class DocumentStoreClient:
    """HTTP client for the PDF-Pile Document Store (``/api/pdfs``).

    Every failure, network or HTTP, surfaces as ``DocumentStoreError``.
    """

    def __init__(self, base_url: str = 'http://localhost:3001', timeout: float = 10.0,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise DocumentStoreError(f"Document store network error: {e}") from e
        if resp.status_code == 404:
            raise NotFoundError(f"{method} {path}: not found")
        if not 200 <= resp.status_code < 300:
            raise DocumentStoreError(f"Document store error {resp.status_code}: {resp.text[:400]}")
        try:
            return resp.json()
        except ValueError as e:
            raise DocumentStoreError(f"Unexpected document store response: {e}") from e

    def list_documents(self) -> List[Dict[str, Any]]:
        return self._request('GET', '/api/pdfs')

    def get_document(self, doc_id: str) -> PdfDocument:
        return PdfDocument.from_wire(self._request('GET', f'/api/pdfs/{doc_id}'))

    def update_document(self, doc_id: str, *, title: Optional[str] = None, author: Optional[str] = None,
                        journal: Optional[str] = None, annotations: Optional[List[Annotation]] = None) -> PdfDocument:
        body: Dict[str, Any] = {}
        if title is not None:
            body['title'] = title
        if author is not None:
            body['author'] = author
        if journal is not None:
            body['journal'] = journal
        if annotations is not None:
            body['annotations'] = [a.to_wire() for a in annotations]
        return PdfDocument.from_wire(self._request('PUT', f'/api/pdfs/{doc_id}', json=body))

    def upload(self, file_path: str) -> PdfDocument:
        with open(file_path, 'rb') as f:
            files = {'file': (os.path.basename(file_path), f, 'application/pdf')}
            return PdfDocument.from_wire(self._request('POST', '/api/upload', files=files))

    def delete_document(self, doc_id: str) -> Dict[str, Any]:
        return self._request('DELETE', f'/api/pdfs/{doc_id}')

    def file_url(self, doc: PdfDocument) -> str:
        return f"{self.base_url}{doc.path}"
