from __future__ import annotations

import asyncio
import logging
import uuid
from pathlib import Path
from typing import List, Optional, Protocol

import anyio

from ..languages import require_language
from .extract import TextExtractor, build_extractor, detect_content_type
from .indexing import LibraryIndex, NoopLibraryIndex
from .models import ContentType, Document, Note
from .pagination import DEFAULT_WORDS_PER_PAGE
from .repository import DocumentRepository, NoteRepository
from .storage import LocalDocumentStorage

logger = logging.getLogger(__name__)


class DocumentNotFoundError(LookupError):
    pass


class NoteNotFoundError(LookupError):
    pass


class Translator(Protocol):
    async def translate(self, text: str, target_lang: str, source_lang: str = "en") -> str:
        ...


class DocumentLibrary:
    """
    Owns the user's documents. Every write goes through the repository as a
    whole-library save, and the full-text index is refreshed alongside it.
    """

    def __init__(
        self,
        repository: DocumentRepository,
        storage: Optional[LocalDocumentStorage] = None,
        index: Optional[LibraryIndex] = None,
        words_per_page: int = DEFAULT_WORDS_PER_PAGE,
    ):
        self.repo = repository
        self.storage = storage
        self.index = index or NoopLibraryIndex()
        self.words_per_page = words_per_page

    def list_documents(self) -> List[Document]:
        return self.repo.load()

    def get(self, document_id: str) -> Optional[Document]:
        for document in self.repo.load():
            if document.id == document_id:
                return document
        return None

    def require(self, document_id: str) -> Document:
        document = self.get(document_id)
        if not document:
            raise DocumentNotFoundError(f"Document not found: {document_id}")
        return document

    def ingest_text(
        self,
        title: str,
        content: str,
        content_type: ContentType = ContentType.TEXT,
        language: str = "en",
    ) -> Document:
        language = require_language(language).code
        if not content or not content.strip():
            raise ValueError("No readable content found in the document")
        document = Document.create(
            id=uuid.uuid4().hex,
            title=title.strip() or "Untitled",
            content=content,
            content_type=content_type,
            language=language,
            words_per_page=self.words_per_page,
        )
        documents = self.repo.load()
        documents.insert(0, document)
        self.repo.save_all(documents)
        self.index.index_document(document)
        logger.info("Ingested document %s (%s, %d pages)", document.id, content_type.value, document.page_count)
        return document

    def ingest_file(
        self,
        path: Path,
        title: Optional[str] = None,
        mime_type: Optional[str] = None,
        language: str = "en",
        extractor: Optional[TextExtractor] = None,
    ) -> Document:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"File not found at {path}")
        language = require_language(language).code
        content_type = detect_content_type(path.name, mime_type)
        extractor = extractor or build_extractor(content_type)
        content = extractor.extract(path)
        document = self.ingest_text(title or path.stem, content, content_type=content_type, language=language)
        if self.storage:
            self.storage.save_original(document.id, path)
        return document

    def save(self, document: Document) -> None:
        documents = self.repo.load()
        for position, existing in enumerate(documents):
            if existing.id == document.id:
                documents[position] = document
                break
        else:
            raise DocumentNotFoundError(f"Document not found: {document.id}")
        self.repo.save_all(documents)
        self.index.index_document(document)

    def save_position(self, document: Document) -> None:
        """
        Persist the reading position only; the index does not change.
        """
        documents = self.repo.load()
        for existing in documents:
            if existing.id == document.id:
                existing.move_to(document.current_page_index)
                self.repo.save_all(documents)
                return
        raise DocumentNotFoundError(f"Document not found: {document.id}")

    def rename(self, document_id: str, title: str) -> Document:
        if not title or not title.strip():
            raise ValueError("Title must not be empty")
        document = self.require(document_id)
        document.title = title.strip()
        self.save(document)
        return document

    def delete(self, document_id: str) -> None:
        documents = self.repo.load()
        remaining = [d for d in documents if d.id != document_id]
        if len(remaining) == len(documents):
            raise DocumentNotFoundError(f"Document not found: {document_id}")
        self.repo.save_all(remaining)
        self.index.delete_document(document_id)
        if self.storage:
            self.storage.delete_document(document_id)

    def search(self, query: str) -> List[Document]:
        needle = (query or "").strip().lower()
        if not needle:
            return self.list_documents()
        return [
            d for d in self.repo.load() if needle in d.title.lower() or needle in d.content.lower()
        ]


class NoteBook:
    """
    Text notes, newest first, optionally pinned to a page of a document.
    """

    def __init__(self, repository: NoteRepository):
        self.repo = repository

    def list_notes(self) -> List[Note]:
        return self.repo.load()

    def require(self, note_id: str) -> Note:
        for note in self.repo.load():
            if note.id == note_id:
                return note
        raise NoteNotFoundError(f"Note not found: {note_id}")

    def add(self, content: str, document: Optional[Document] = None) -> Note:
        content = (content or "").strip()
        if not content:
            raise ValueError("Please enter some content for the note")
        note = Note(
            id=uuid.uuid4().hex,
            content=content,
            document_id=document.id if document else None,
            document_title=document.title if document else None,
            page_index=document.current_page_index if document else 0,
        )
        notes = self.repo.load()
        notes.insert(0, note)
        self.repo.save_all(notes)
        logger.info("Saved note %s (document %s, page %d)", note.id, note.document_id, note.page_index)
        return note

    def edit(self, note_id: str, content: str) -> Note:
        content = (content or "").strip()
        if not content:
            raise ValueError("Please enter some content for the note")
        notes = self.repo.load()
        for note in notes:
            if note.id == note_id:
                note.content = content
                self.repo.save_all(notes)
                return note
        raise NoteNotFoundError(f"Note not found: {note_id}")

    def search(self, query: str) -> List[Note]:
        needle = (query or "").strip().lower()
        if not needle:
            return self.list_notes()
        return [
            n
            for n in self.repo.load()
            if needle in n.content.lower() or (n.document_title and needle in n.document_title.lower())
        ]


class ReadingSession:
    """
    Reading state for one open document: which document, which page, which
    display language. Content changes are serialized per session.
    """

    def __init__(self, library: DocumentLibrary, document_id: str):
        self.library = library
        self.document = library.require(document_id)
        self._lock = asyncio.Lock()

    @property
    def current_page(self) -> str:
        return self.document.current_page

    @property
    def page_info(self) -> str:
        return f"Page {self.document.current_page_index + 1} of {self.document.page_count}"

    @property
    def has_previous(self) -> bool:
        return self.document.current_page_index > 0

    @property
    def has_next(self) -> bool:
        return self.document.current_page_index < self.document.page_count - 1

    def refresh(self) -> Document:
        self.document = self.library.require(self.document.id)
        return self.document

    def go_to_page(self, index: int) -> str:
        """
        Move to a page (clamped) and persist the position. Navigation does not
        take the session lock: a language change in flight re-reads the
        document before committing, so it keeps whatever position was saved
        here in the meantime.
        """
        self.refresh()
        self.document.move_to(index)
        self.library.save_position(self.document)
        return self.current_page

    def next_page(self) -> str:
        return self.go_to_page(self.refresh().current_page_index + 1)

    def previous_page(self) -> str:
        return self.go_to_page(self.refresh().current_page_index - 1)

    def add_note(self, notebook: NoteBook, content: str) -> Note:
        return notebook.add(content, self.refresh())

    async def change_language(self, target_language: str, translator: Translator) -> Document:
        """
        Switch the display language. The source language restores the
        original text; any other language is translated from the original.
        A failed translation propagates and leaves the document untouched.

        The document is read again once the translation is back, so renames
        and page moves made while waiting survive; the saved position is then
        clamped to the new page count.
        """
        target = require_language(target_language).code
        async with self._lock:
            document = await anyio.to_thread.run_sync(self.refresh)
            if target == document.language:
                return document
            if target == document.source_language:
                content = document.original_content
            else:
                content = await translator.translate(document.original_content, target, document.source_language)

            fresh = await anyio.to_thread.run_sync(self.refresh)
            if (
                fresh.original_content != document.original_content
                or fresh.source_language != document.source_language
            ):
                raise RuntimeError(f"Document {fresh.id} changed while it was being translated")
            fresh.set_content(content, target)
            await anyio.to_thread.run_sync(self.library.save, fresh)
            logger.info(
                "Document %s now in %s (%d pages, at page %d)",
                fresh.id,
                target,
                fresh.page_count,
                fresh.current_page_index,
            )
            return fresh
