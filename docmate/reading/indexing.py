from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Protocol

from whoosh import index
from whoosh.fields import ID, NUMERIC, TEXT, Schema
from whoosh.qparser import MultifieldParser

from .models import Document


class LibraryIndex(Protocol):
    def index_document(self, document: Document) -> None:
        ...

    def delete_document(self, document_id: str) -> None:
        ...

    def search(self, query_str: str, limit: int = 10) -> List[Dict]:
        ...


class NoopLibraryIndex:
    """
    Default index stub. Keeps the library wired without pulling in Whoosh.
    """

    def index_document(self, document: Document) -> None:
        return None

    def delete_document(self, document_id: str) -> None:
        return None

    def search(self, query_str: str, limit: int = 10) -> List[Dict]:
        return []


class WhooshLibraryIndex:
    """
    File-system backed Whoosh index over the pages of every library document.
    Re-indexing a document first deletes its existing pages, so it is safe to
    call after every content change.
    """

    def __init__(self, index_dir: Path):
        self.index_dir = Path(index_dir)
        self.index_dir.mkdir(parents=True, exist_ok=True)
        self.schema = Schema(
            document_id=ID(stored=True),
            page_key=ID(stored=True, unique=True),
            page_index=NUMERIC(stored=True, sortable=True),
            title=TEXT(stored=True),
            text=TEXT(stored=True),
        )
        if index.exists_in(self.index_dir):
            self.ix = index.open_dir(self.index_dir)
        else:
            self.ix = index.create_in(self.index_dir, self.schema)

    def index_document(self, document: Document) -> None:
        writer = self.ix.writer()
        writer.delete_by_term("document_id", document.id)
        for page_index, page_text in enumerate(document.pages):
            writer.add_document(
                document_id=document.id,
                page_key=f"{document.id}-p{page_index}",
                page_index=page_index,
                title=document.title or "",
                text=page_text or "",
            )
        writer.commit()

    def delete_document(self, document_id: str) -> None:
        writer = self.ix.writer()
        writer.delete_by_term("document_id", document_id)
        writer.commit()

    def search(self, query_str: str, limit: int = 10) -> List[Dict]:
        """
        Return a list of plain dicts so callers are safe after the searcher closes.
        """
        qp = MultifieldParser(["title", "text"], schema=self.schema)
        q = qp.parse(query_str)
        with self.ix.searcher() as searcher:
            results = searcher.search(q, limit=limit)
            hits = []
            for hit in results:
                fields = hit.fields()
                hits.append(
                    {
                        "document_id": fields.get("document_id"),
                        "page_index": fields.get("page_index"),
                        "title": fields.get("title"),
                        "text": fields.get("text"),
                    }
                )
            return hits
