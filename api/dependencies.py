from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Dict

from docmate.config import DocmateConfig
from docmate.enrichment import EnrichmentService
from docmate.reading import (
    DocumentLibrary,
    DocumentRepository,
    LocalDocumentStorage,
    NoteBook,
    ReadingSession,
    SqlAlchemyDocumentRepository,
    SqlAlchemyNoteRepository,
    StoragePaths,
    WhooshLibraryIndex,
)


@lru_cache(maxsize=1)
def get_config() -> DocmateConfig:
    return DocmateConfig.from_env()


@lru_cache(maxsize=1)
def get_repo() -> DocumentRepository:
    config = get_config()
    Path(config.storage_root).mkdir(parents=True, exist_ok=True)
    return SqlAlchemyDocumentRepository(config.database_url)


@lru_cache(maxsize=1)
def get_storage() -> LocalDocumentStorage:
    return LocalDocumentStorage(StoragePaths(Path(get_config().storage_root)))


@lru_cache(maxsize=1)
def get_index() -> WhooshLibraryIndex:
    return WhooshLibraryIndex(Path(get_config().whoosh_index_dir))


@lru_cache(maxsize=1)
def get_library() -> DocumentLibrary:
    return DocumentLibrary(
        repository=get_repo(),
        storage=get_storage(),
        index=get_index(),
        words_per_page=get_config().words_per_page,
    )


@lru_cache(maxsize=1)
def get_enrichment() -> EnrichmentService:
    return EnrichmentService.from_config(get_config(), index=get_index())


@lru_cache(maxsize=1)
def get_notebook() -> NoteBook:
    config = get_config()
    Path(config.storage_root).mkdir(parents=True, exist_ok=True)
    return NoteBook(SqlAlchemyNoteRepository(config.database_url))


class SessionCache:
    """
    One reading session per open document, so language changes on the same
    document are serialized by that session's lock.
    """

    def __init__(self):
        self._sessions: Dict[str, ReadingSession] = {}

    def get(self, library: DocumentLibrary, document_id: str) -> ReadingSession:
        session = self._sessions.get(document_id)
        if session is None or session.library is not library:
            session = ReadingSession(library, document_id)
            self._sessions[document_id] = session
        return session

    def drop(self, document_id: str) -> None:
        self._sessions.pop(document_id, None)


@lru_cache(maxsize=1)
def get_sessions() -> SessionCache:
    return SessionCache()
