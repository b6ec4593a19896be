"""
Reading subsystem exports.
"""

from .extract import (
    DoclingTextExtractor,
    PdfTextExtractor,
    PlainTextExtractor,
    TextExtractor,
    build_extractor,
    detect_content_type,
)
from .indexing import LibraryIndex, NoopLibraryIndex, WhooshLibraryIndex
from .library import DocumentLibrary, DocumentNotFoundError, NoteBook, NoteNotFoundError, ReadingSession
from .models import ContentType, Document, Note
from .pagination import DEFAULT_WORDS_PER_PAGE, NO_CONTENT_PAGE, clamp_page_index, paginate
from .repository import (
    DocumentRepository,
    InMemoryDocumentRepository,
    InMemoryNoteRepository,
    NoteRepository,
    SqlAlchemyDocumentRepository,
    SqlAlchemyNoteRepository,
)
from .storage import LocalDocumentStorage, StoragePaths
from .text import split_paragraphs, split_sentences, split_words

__all__ = [
    "ContentType",
    "DEFAULT_WORDS_PER_PAGE",
    "DoclingTextExtractor",
    "Document",
    "DocumentLibrary",
    "DocumentNotFoundError",
    "DocumentRepository",
    "InMemoryDocumentRepository",
    "InMemoryNoteRepository",
    "LibraryIndex",
    "LocalDocumentStorage",
    "NO_CONTENT_PAGE",
    "Note",
    "NoteBook",
    "NoteNotFoundError",
    "NoteRepository",
    "NoopLibraryIndex",
    "PdfTextExtractor",
    "PlainTextExtractor",
    "ReadingSession",
    "SqlAlchemyDocumentRepository",
    "SqlAlchemyNoteRepository",
    "StoragePaths",
    "TextExtractor",
    "WhooshLibraryIndex",
    "build_extractor",
    "clamp_page_index",
    "detect_content_type",
    "paginate",
    "split_paragraphs",
    "split_sentences",
    "split_words",
]
