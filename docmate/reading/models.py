from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .pagination import DEFAULT_WORDS_PER_PAGE, clamp_page_index, paginate


class ContentType(str, Enum):
    TEXT = "text"
    PDF = "pdf"
    DOCX = "docx"
    OCR = "ocr"


@dataclass
class Document:
    """
    An ingested document. `pages` is always derived from `content`; change the
    text only through `set_content` so the page sequence and reading position
    are recomputed together.
    """

    id: str
    title: str
    content: str
    original_content: str
    content_type: ContentType = ContentType.TEXT
    pages: List[str] = field(default_factory=list)
    current_page_index: int = 0
    upload_timestamp: datetime = field(default_factory=datetime.utcnow)
    language: str = "en"
    source_language: str = "en"
    words_per_page: int = DEFAULT_WORDS_PER_PAGE

    @classmethod
    def create(
        cls,
        id: str,
        title: str,
        content: str,
        content_type: ContentType = ContentType.TEXT,
        language: str = "en",
        words_per_page: int = DEFAULT_WORDS_PER_PAGE,
    ) -> "Document":
        document = cls(
            id=id,
            title=title,
            content=content,
            original_content=content,
            content_type=content_type,
            language=language,
            source_language=language,
            words_per_page=words_per_page,
        )
        document.pages = paginate(content, words_per_page)
        return document

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def current_page(self) -> str:
        return self.pages[self.current_page_index]

    def set_content(self, content: str, language: str) -> None:
        """
        Replace the display text, re-paginate from scratch and clamp the
        reading position so it still points at an existing page.
        """
        pages = paginate(content, self.words_per_page)
        self.content = content
        self.language = language
        self.pages = pages
        self.current_page_index = clamp_page_index(self.current_page_index, len(pages))

    def move_to(self, index: int) -> int:
        self.current_page_index = clamp_page_index(index, len(self.pages))
        return self.current_page_index

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "original_content": self.original_content,
            "content_type": self.content_type.value,
            "pages": list(self.pages),
            "current_page_index": self.current_page_index,
            "upload_timestamp": self.upload_timestamp.isoformat(),
            "language": self.language,
            "source_language": self.source_language,
            "words_per_page": self.words_per_page,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Document":
        words_per_page = int(data.get("words_per_page") or DEFAULT_WORDS_PER_PAGE)
        content = data.get("content") or ""
        document = cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            content=content,
            original_content=data.get("original_content") or content,
            content_type=ContentType(data.get("content_type") or ContentType.TEXT.value),
            current_page_index=int(data.get("current_page_index") or 0),
            upload_timestamp=_parse_timestamp(data.get("upload_timestamp")),
            language=data.get("language") or "en",
            source_language=data.get("source_language") or "en",
            words_per_page=words_per_page,
        )
        # Stored pages are not trusted; they are re-derived from the content.
        document.pages = paginate(content, words_per_page)
        document.current_page_index = clamp_page_index(document.current_page_index, len(document.pages))
        return document


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if value:
        try:
            return datetime.fromisoformat(str(value))
        except ValueError:
            pass
    return datetime.utcnow()


@dataclass
class Note:
    """
    A text note, optionally pinned to a page of a document. The document
    title is copied at creation time so the note still reads well after the
    document is renamed or deleted.
    """

    id: str
    content: str
    document_id: Optional[str] = None
    document_title: Optional[str] = None
    page_index: int = 0
    timestamp: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "type": "text",
            "document_id": self.document_id,
            "document_title": self.document_title,
            "page_index": self.page_index,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Note":
        return cls(
            id=str(data["id"]),
            content=data.get("content") or "",
            document_id=data.get("document_id"),
            document_title=data.get("document_title"),
            page_index=int(data.get("page_index") or 0),
            timestamp=_parse_timestamp(data.get("timestamp")),
        )
