import asyncio

import pytest

from docmate.enrichment import AllProvidersExhausted, Capability
from docmate.reading import (
    ContentType,
    Document,
    DocumentLibrary,
    DocumentNotFoundError,
    InMemoryDocumentRepository,
    InMemoryNoteRepository,
    LocalDocumentStorage,
    NoteBook,
    NoteNotFoundError,
    PdfTextExtractor,
    ReadingSession,
    SqlAlchemyDocumentRepository,
    SqlAlchemyNoteRepository,
    StoragePaths,
    WhooshLibraryIndex,
    detect_content_type,
)


TWENTY_WORDS = " ".join(f"w{i}" for i in range(20))
TEN_WORDS = " ".join(f"t{i}" for i in range(10))


class FakeTranslator:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    async def translate(self, text, target_lang, source_lang="en"):
        self.calls.append((text, target_lang, source_lang))
        if self.error is not None:
            raise self.error
        return self.result


def _library(words_per_page=2, **kwargs):
    return DocumentLibrary(InMemoryDocumentRepository(), words_per_page=words_per_page, **kwargs)


def test_sqlalchemy_repository_roundtrip(tmp_path):
    db_path = tmp_path / "test.db"
    repo = SqlAlchemyDocumentRepository(f"sqlite+pysqlite:///{db_path}")
    assert repo.load() == []

    document = Document.create(id="doc-1", title="Test", content=TWENTY_WORDS, words_per_page=4)
    document.move_to(3)
    document.set_content(TEN_WORDS, "fr")
    repo.save_all([document])

    reopened = SqlAlchemyDocumentRepository(f"sqlite+pysqlite:///{db_path}")
    loaded = reopened.load()
    assert len(loaded) == 1
    fetched = loaded[0]
    assert fetched.title == "Test"
    assert fetched.content == TEN_WORDS
    assert fetched.original_content == TWENTY_WORDS
    assert fetched.language == "fr" and fetched.source_language == "en"
    assert fetched.pages == document.pages
    assert fetched.current_page_index == 2
    assert fetched.upload_timestamp == document.upload_timestamp


def test_from_dict_rederives_pages_and_clamps_position():
    data = Document.create(id="d", title="T", content=TEN_WORDS, words_per_page=5).to_dict()
    data["pages"] = ["stale"]
    data["current_page_index"] = 7

    document = Document.from_dict(data)

    assert document.page_count == 2
    assert document.current_page_index == 1


def test_in_memory_repository_keeps_copies():
    repo = InMemoryDocumentRepository()
    document = Document.create(id="d", title="Original", content="some words")
    repo.save_all([document])
    document.title = "Changed"
    assert repo.load()[0].title == "Original"
    assert repo.save_count == 1


def test_ingest_text_inserts_newest_first():
    library = _library()
    first = library.ingest_text("First", "alpha beta")
    second = library.ingest_text("  Second  ", "gamma delta")

    assert [d.id for d in library.list_documents()] == [second.id, first.id]
    assert second.title == "Second"
    assert library.require(first.id).source_language == "en"

    with pytest.raises(ValueError):
        library.ingest_text("Empty", "   ")


def test_rename_delete_and_search():
    library = _library()
    document = library.ingest_text("Biology Notes", "Cells divide by mitosis.")
    library.ingest_text("History", "The empire fell.")

    library.rename(document.id, "Cell Biology")
    assert library.require(document.id).title == "Cell Biology"
    assert [d.title for d in library.search("MITOSIS")] == ["Cell Biology"]
    assert len(library.search("")) == 2

    library.delete(document.id)
    assert library.get(document.id) is None
    with pytest.raises(DocumentNotFoundError):
        library.delete(document.id)
    with pytest.raises(ValueError):
        library.rename(library.list_documents()[0].id, " ")


def test_ingest_file_keeps_original(tmp_path):
    storage = LocalDocumentStorage(StoragePaths(tmp_path / "data"))
    library = _library(words_per_page=400, storage=storage)
    source = tmp_path / "chapter.txt"
    source.write_text("Once upon a time. The end.", encoding="utf-8")

    document = library.ingest_file(source, mime_type="text/plain")

    assert document.title == "chapter"
    assert document.content_type == ContentType.TEXT
    stored = storage.find_original(document.id)
    assert stored is not None and stored.name == "original.txt"

    library.delete(document.id)
    assert storage.find_original(document.id) is None


def test_ingest_file_rejects_unknown_types(tmp_path):
    source = tmp_path / "archive.zip"
    source.write_bytes(b"PK")
    with pytest.raises(ValueError):
        _library().ingest_file(source, mime_type="application/zip")


def test_detect_content_type():
    assert detect_content_type("book.pdf") == ContentType.PDF
    assert detect_content_type("upload", "application/pdf") == ContentType.PDF
    assert detect_content_type("essay.DOCX") == ContentType.DOCX
    assert detect_content_type("notes.md") == ContentType.TEXT
    assert detect_content_type("scan.jpg", "image/jpeg") == ContentType.OCR


def test_whoosh_index_follows_library(tmp_path):
    index = WhooshLibraryIndex(tmp_path / "whoosh")
    library = _library(words_per_page=400, index=index)
    document = library.ingest_text("Plants", "Photosynthesis converts light into chemical energy.")

    hits = index.search("photosynthesis")
    assert hits and hits[0]["document_id"] == document.id
    assert hits[0]["page_index"] == 0

    library.delete(document.id)
    assert index.search("photosynthesis") == []


def test_session_navigation_persists_position():
    library = _library()
    document = library.ingest_text("Doc", TWENTY_WORDS)
    session = ReadingSession(library, document.id)

    assert session.page_info == "Page 1 of 10"
    assert not session.has_previous
    assert session.next_page() == "w2 w3"
    assert session.go_to_page(42) == "w18 w19"
    assert not session.has_next
    assert session.previous_page() == "w16 w17"
    assert library.require(document.id).current_page_index == 8


def test_change_language_repaginates_and_clamps():
    library = _library()
    document = library.ingest_text("Doc", TWENTY_WORDS)
    session = ReadingSession(library, document.id)
    session.go_to_page(9)
    translator = FakeTranslator(result=TEN_WORDS)

    asyncio.run(session.change_language("fr", translator))

    stored = library.require(document.id)
    assert translator.calls == [(TWENTY_WORDS, "fr", "en")]
    assert stored.language == "fr"
    assert stored.page_count == 5
    assert stored.current_page_index == 4
    assert session.page_info == "Page 5 of 5"


def test_change_language_back_to_source_restores_original():
    library = _library()
    document = library.ingest_text("Doc", TWENTY_WORDS)
    session = ReadingSession(library, document.id)
    asyncio.run(session.change_language("fr", FakeTranslator(result=TEN_WORDS)))

    translator = FakeTranslator(result="unused")
    asyncio.run(session.change_language("en", translator))
    asyncio.run(session.change_language("en", translator))

    stored = library.require(document.id)
    assert translator.calls == []
    assert stored.content == TWENTY_WORDS
    assert stored.page_count == 10


def test_failed_translation_leaves_document_untouched():
    library = _library()
    document = library.ingest_text("Doc", TWENTY_WORDS)
    session = ReadingSession(library, document.id)
    session.go_to_page(6)
    before = library.require(document.id).to_dict()
    translator = FakeTranslator(error=AllProvidersExhausted(Capability.TRANSLATE))

    with pytest.raises(AllProvidersExhausted):
        asyncio.run(session.change_language("fr", translator))

    assert library.require(document.id).to_dict() == before
    assert session.document.language == "en"


class GatedTranslator(FakeTranslator):
    """Holds every translation until the test releases it."""

    def __init__(self, result):
        super().__init__(result=result)
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def translate(self, text, target_lang, source_lang="en"):
        self.entered.set()
        await self.release.wait()
        return await super().translate(text, target_lang, source_lang)


def test_change_language_keeps_edits_made_while_translating():
    library = _library()
    document = library.ingest_text("Doc", TWENTY_WORDS)
    session = ReadingSession(library, document.id)
    translated = TWENTY_WORDS.upper()

    async def scenario():
        translator = GatedTranslator(result=translated)
        task = asyncio.create_task(session.change_language("fr", translator))
        await translator.entered.wait()
        library.rename(document.id, "Renamed meanwhile")
        ReadingSession(library, document.id).go_to_page(7)
        translator.release.set()
        return await task

    result = asyncio.run(scenario())

    stored = library.require(document.id)
    assert result.title == stored.title == "Renamed meanwhile"
    assert stored.content == translated
    assert stored.language == "fr"
    assert stored.current_page_index == 7


def test_change_language_refuses_when_original_changed_meanwhile():
    library = _library()
    document = library.ingest_text("Doc", TWENTY_WORDS)
    session = ReadingSession(library, document.id)

    async def scenario():
        translator = GatedTranslator(result=TEN_WORDS)
        task = asyncio.create_task(session.change_language("fr", translator))
        await translator.entered.wait()
        replaced = library.require(document.id)
        replaced.original_content = TEN_WORDS
        library.save(replaced)
        translator.release.set()
        await task

    with pytest.raises(RuntimeError):
        asyncio.run(scenario())
    assert library.require(document.id).language == "en"


def test_change_language_normalizes_codes():
    library = _library()
    document = library.ingest_text("Doc", TWENTY_WORDS)
    session = ReadingSession(library, document.id)
    translator = FakeTranslator(result=TEN_WORDS)

    asyncio.run(session.change_language("FR", translator))
    asyncio.run(session.change_language("fr", translator))

    assert len(translator.calls) == 1
    assert library.require(document.id).language == "fr"
    with pytest.raises(ValueError):
        asyncio.run(session.change_language("xx", translator))


def test_ingest_rejects_unknown_language(tmp_path):
    library = _library()
    with pytest.raises(ValueError):
        library.ingest_text("Doc", TWENTY_WORDS, language="xx")
    assert library.ingest_text("Doc", TWENTY_WORDS, language="ES").language == "es"

    source = tmp_path / "chapter.txt"
    source.write_text("Some words.", encoding="utf-8")
    with pytest.raises(ValueError):
        library.ingest_file(source, language="xx")
    assert library.list_documents()[0].language == "es"


def test_unreadable_pdf_raises_value_error(tmp_path):
    source = tmp_path / "broken.pdf"
    source.write_bytes(b"not a pdf")
    with pytest.raises(ValueError):
        PdfTextExtractor().extract(source)


def test_notebook_add_edit_and_search():
    library = _library()
    document = library.ingest_text("Biology", TWENTY_WORDS)
    session = ReadingSession(library, document.id)
    session.go_to_page(3)
    notebook = NoteBook(InMemoryNoteRepository())

    loose = notebook.add("  Remember the exam date  ")
    pinned = session.add_note(notebook, "Mitosis has four phases")

    assert loose.content == "Remember the exam date"
    assert loose.document_id is None and loose.page_index == 0
    assert pinned.document_id == document.id
    assert pinned.document_title == "Biology"
    assert pinned.page_index == 3
    assert [n.id for n in notebook.list_notes()] == [pinned.id, loose.id]

    edited = notebook.edit(loose.id, "Exam moved to Friday")
    assert notebook.require(loose.id).content == edited.content == "Exam moved to Friday"

    assert [n.id for n in notebook.search("FRIDAY")] == [loose.id]
    assert [n.id for n in notebook.search("biology")] == [pinned.id]
    assert len(notebook.search(" ")) == 2

    with pytest.raises(ValueError):
        notebook.add("   ")
    with pytest.raises(ValueError):
        notebook.edit(loose.id, "")
    with pytest.raises(NoteNotFoundError):
        notebook.edit("missing", "text")


def test_sqlalchemy_note_repository_shares_database_with_documents(tmp_path):
    url = f"sqlite+pysqlite:///{tmp_path / 'test.db'}"
    documents = SqlAlchemyDocumentRepository(url)
    documents.save_all([Document.create(id="doc-1", title="Test", content=TEN_WORDS)])

    notebook = NoteBook(SqlAlchemyNoteRepository(url))
    note = notebook.add("A thought", Document.create(id="doc-1", title="Test", content=TEN_WORDS))

    reopened = SqlAlchemyNoteRepository(url).load()
    assert [n.id for n in reopened] == [note.id]
    assert reopened[0].document_title == "Test"
    assert reopened[0].timestamp == note.timestamp
    assert [d.id for d in SqlAlchemyDocumentRepository(url).load()] == ["doc-1"]
