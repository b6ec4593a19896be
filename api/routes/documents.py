from __future__ import annotations

import dataclasses
import functools
import os
import tempfile
from pathlib import Path
from typing import Optional

import anyio
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import BaseModel

from docmate.enrichment import AllProvidersExhausted, EnrichmentService
from docmate.reading import Document, DocumentLibrary, DocumentNotFoundError

from api.dependencies import SessionCache, get_enrichment, get_library, get_sessions

router = APIRouter(prefix="/documents", tags=["documents"])


class IngestTextBody(BaseModel):
    title: str
    content: str
    language: str = "en"


class RenameBody(BaseModel):
    title: str


class PositionBody(BaseModel):
    page_index: int


class LanguageBody(BaseModel):
    language: str


def _summary(document: Document) -> dict:
    return {
        "id": document.id,
        "title": document.title,
        "content_type": document.content_type.value,
        "language": document.language,
        "source_language": document.source_language,
        "page_count": document.page_count,
        "current_page_index": document.current_page_index,
        "upload_timestamp": document.upload_timestamp.isoformat(),
    }


def _require(library: DocumentLibrary, document_id: str) -> Document:
    try:
        return library.require(document_id)
    except DocumentNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.get("")
def list_documents(library: DocumentLibrary = Depends(get_library)):
    return [_summary(d) for d in library.list_documents()]


@router.get("/search")
def search_documents(query: str = "", library: DocumentLibrary = Depends(get_library)):
    return [_summary(d) for d in library.search(query)]


@router.post("", status_code=201)
def ingest_text(body: IngestTextBody, library: DocumentLibrary = Depends(get_library)):
    try:
        document = library.ingest_text(body.title, body.content, language=body.language)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return _summary(document)


@router.post("/upload", status_code=201)
async def upload_document(
    file: UploadFile = File(...),
    title: Optional[str] = Form(None),
    language: str = Form("en"),
    library: DocumentLibrary = Depends(get_library),
):
    payload = await file.read()
    if not payload:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    filename = file.filename or "upload.txt"
    tmp_fd, tmp_path_str = tempfile.mkstemp(suffix=Path(filename).suffix)
    tmp_path = Path(tmp_path_str)
    with os.fdopen(tmp_fd, "wb") as tmp_file:
        tmp_file.write(payload)
    # Extraction (pypdf, Docling OCR) and the repository writes are blocking.
    ingest = functools.partial(
        library.ingest_file,
        tmp_path,
        title=title or Path(filename).stem,
        mime_type=file.content_type,
        language=language,
    )
    try:
        document = await anyio.to_thread.run_sync(ingest)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except RuntimeError as exc:
        raise HTTPException(status_code=422, detail=f"Could not read file: {exc}")
    finally:
        tmp_path.unlink(missing_ok=True)
    return _summary(document)


@router.get("/{document_id}")
def get_document(document_id: str, library: DocumentLibrary = Depends(get_library)):
    document = _require(library, document_id)
    summary = _summary(document)
    summary["current_page"] = document.current_page
    return summary


@router.patch("/{document_id}")
def rename_document(document_id: str, body: RenameBody, library: DocumentLibrary = Depends(get_library)):
    _require(library, document_id)
    try:
        document = library.rename(document_id, body.title)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return _summary(document)


@router.delete("/{document_id}")
def delete_document(
    document_id: str,
    library: DocumentLibrary = Depends(get_library),
    sessions: SessionCache = Depends(get_sessions),
):
    try:
        library.delete(document_id)
    except DocumentNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    sessions.drop(document_id)
    return {"status": "deleted", "document_id": document_id}


@router.get("/{document_id}/pages/{page_index}")
def get_page(document_id: str, page_index: int, library: DocumentLibrary = Depends(get_library)):
    document = _require(library, document_id)
    if not 0 <= page_index < document.page_count:
        raise HTTPException(status_code=404, detail=f"Page not found: {document_id} page {page_index}")
    return {"page_index": page_index, "page_count": document.page_count, "text": document.pages[page_index]}


@router.put("/{document_id}/position")
def move_to_page(
    document_id: str,
    body: PositionBody,
    library: DocumentLibrary = Depends(get_library),
    sessions: SessionCache = Depends(get_sessions),
):
    _require(library, document_id)
    session = sessions.get(library, document_id)
    text = session.go_to_page(body.page_index)
    return {
        "page_index": session.document.current_page_index,
        "page_info": session.page_info,
        "has_previous": session.has_previous,
        "has_next": session.has_next,
        "text": text,
    }


@router.post("/{document_id}/language")
async def change_language(
    document_id: str,
    body: LanguageBody,
    library: DocumentLibrary = Depends(get_library),
    sessions: SessionCache = Depends(get_sessions),
    enrichment: EnrichmentService = Depends(get_enrichment),
):
    try:
        session = await anyio.to_thread.run_sync(sessions.get, library, document_id)
        document = await session.change_language(body.language, enrichment)
    except DocumentNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except AllProvidersExhausted:
        raise HTTPException(status_code=502, detail="Translation failed. Please try again.")
    except RuntimeError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return _summary(document)


@router.post("/{document_id}/analysis")
async def analyze_document(
    document_id: str,
    library: DocumentLibrary = Depends(get_library),
    enrichment: EnrichmentService = Depends(get_enrichment),
):
    document = await anyio.to_thread.run_sync(_require, library, document_id)
    result = await enrichment.analyze(document.content, document.title)
    return dataclasses.asdict(result)
