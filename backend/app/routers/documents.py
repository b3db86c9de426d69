from __future__ import annotations
from fastapi import APIRouter, UploadFile, File, HTTPException, Request, Depends
from typing import List, Optional
import os, random, shutil, time, logging
from ..models import PdfDocument, PdfSummary, PdfUpdate, MessageResponse
from ..storage import DocStore
from pdfpile.core.pdf_loader import read_pdf_info, InvalidPdfError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["documents"])

NOT_FOUND = 'PDF not found'


def get_store(request: Request) -> DocStore:
    return request.app.state.store


def _require(store: DocStore, doc_id: str) -> PdfDocument:
    doc = store.get(doc_id)
    if not doc:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return doc


@router.get('/pdfs', response_model=List[PdfSummary])
def list_documents(store: DocStore = Depends(get_store)):
    return [PdfSummary(id=d.id, title=d.title, author=d.author) for d in store.list()]


@router.get('/pdfs/{doc_id}', response_model=PdfDocument)
def get_document(doc_id: str, store: DocStore = Depends(get_store)):
    return _require(store, doc_id)


@router.put('/pdfs/{doc_id}', response_model=PdfDocument)
def update_document(doc_id: str, payload: PdfUpdate, store: DocStore = Depends(get_store)):
    doc = store.update(doc_id, payload)
    if not doc:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return doc


@router.delete('/pdfs/{doc_id}', response_model=MessageResponse)
def delete_document(doc_id: str, store: DocStore = Depends(get_store)):
    if not store.delete(doc_id):
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return MessageResponse(message='PDF deleted.')


@router.post('/upload', response_model=PdfDocument, status_code=201)
def upload_pdf(file: Optional[UploadFile] = File(None), store: DocStore = Depends(get_store)):
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail='No file uploaded')
    if not file.filename.lower().endswith('.pdf'):
        raise HTTPException(status_code=400, detail='Only PDF files allowed')
    filename = _unique_filename(file.filename)
    dest_path = store.file_path(filename)
    with open(dest_path, 'wb') as out:
        shutil.copyfileobj(file.file, out)
    try:
        info = read_pdf_info(dest_path)
    except InvalidPdfError as e:
        os.remove(dest_path)
        raise HTTPException(status_code=400, detail=str(e))
    doc = PdfDocument(
        original_name=file.filename,
        filename=filename,
        path=f'/files/{filename}',
        title=os.path.splitext(os.path.basename(file.filename))[0],
        author=info.author or '',
        annotations=[],
    )
    store.add_document(doc)
    logger.info("Uploaded %s as %s (%d pages)", file.filename, doc.id, info.page_count)
    return doc


# Helper

def _unique_filename(original: str) -> str:
    ext = os.path.splitext(original)[1].lower() or '.pdf'
    return f"file-{int(time.time() * 1000)}-{random.randint(0, 10**9 - 1)}{ext}"
