from __future__ import annotations

import json
from copy import deepcopy
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import Column, DateTime, String, Text, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .models import Document, Note

Base = declarative_base()

DOCUMENTS_KEY = "docmate_books"
NOTES_KEY = "docmate_notes"


class BlobModel(Base):
    __tablename__ = "blobs"
    key = Column(String, primary_key=True)
    value = Column(Text)
    updated_at = Column(DateTime)


class DocumentRepository:
    """
    Durable store for the document library. The library is read and written
    as a whole; implementations decide how the blob is kept.
    """

    def load(self) -> List[Document]:
        raise NotImplementedError

    def save_all(self, documents: Iterable[Document]) -> None:
        raise NotImplementedError


class InMemoryDocumentRepository(DocumentRepository):
    """
    Simple in-memory store for local runs and tests. Keeps copies so callers
    cannot mutate stored documents behind the repository's back.
    """

    def __init__(self, documents: Optional[Iterable[Document]] = None):
        self.documents: List[Document] = [deepcopy(d) for d in documents or []]
        self.save_count = 0

    def load(self) -> List[Document]:
        return [deepcopy(d) for d in self.documents]

    def save_all(self, documents: Iterable[Document]) -> None:
        self.documents = [deepcopy(d) for d in documents]
        self.save_count += 1


class SqlAlchemyBlobStore:
    """
    One JSON list kept in a single row of the `blobs` table, keyed by name.
    Works with SQLite/Postgres URLs.
    """

    def __init__(self, database_url: str, key: str):
        self.key = key
        self.engine = create_engine(database_url, future=True)
        Base.metadata.create_all(self.engine)
        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False, future=True)

    def _session(self) -> Session:
        return self.SessionLocal()

    def read_items(self) -> List[dict]:
        with self._session() as session:
            model = session.get(BlobModel, self.key)
            if not model or not model.value:
                return []
            return json.loads(model.value)

    def write_items(self, items: List[dict]) -> None:
        payload = json.dumps(items, ensure_ascii=False)
        with self._session() as session:
            session.merge(BlobModel(key=self.key, value=payload, updated_at=datetime.utcnow()))
            session.commit()


class SqlAlchemyDocumentRepository(SqlAlchemyBlobStore, DocumentRepository):
    def __init__(self, database_url: str, key: str = DOCUMENTS_KEY):
        super().__init__(database_url, key)

    def load(self) -> List[Document]:
        return [Document.from_dict(item) for item in self.read_items()]

    def save_all(self, documents: Iterable[Document]) -> None:
        self.write_items([d.to_dict() for d in documents])


class NoteRepository:
    """
    Durable store for text notes, read and written as a whole like the
    document library.
    """

    def load(self) -> List[Note]:
        raise NotImplementedError

    def save_all(self, notes: Iterable[Note]) -> None:
        raise NotImplementedError


class InMemoryNoteRepository(NoteRepository):
    def __init__(self, notes: Optional[Iterable[Note]] = None):
        self.notes: List[Note] = [deepcopy(n) for n in notes or []]

    def load(self) -> List[Note]:
        return [deepcopy(n) for n in self.notes]

    def save_all(self, notes: Iterable[Note]) -> None:
        self.notes = [deepcopy(n) for n in notes]


class SqlAlchemyNoteRepository(SqlAlchemyBlobStore, NoteRepository):
    def __init__(self, database_url: str, key: str = NOTES_KEY):
        super().__init__(database_url, key)

    def load(self) -> List[Note]:
        return [Note.from_dict(item) for item in self.read_items()]

    def save_all(self, notes: Iterable[Note]) -> None:
        self.write_items([n.to_dict() for n in notes])
