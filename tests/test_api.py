import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from api.dependencies import SessionCache, get_enrichment, get_library, get_notebook, get_sessions
from docmate.enrichment import Capability, EnrichmentService, Provider, ProviderRegistry
from docmate.enrichment.providers import CuratedResourcesProvider, NoDefinitionProvider
from docmate.reading import DocumentLibrary, InMemoryDocumentRepository, InMemoryNoteRepository, NoteBook


class UpperCaseTranslator(Provider):
    capability = Capability.TRANSLATE
    name = "upper"
    default_priority = 10

    def __init__(self, fail=False):
        super().__init__()
        self.fail = fail

    async def invoke(self, request):
        if self.fail:
            raise ConnectionError("offline")
        return request.text.upper()

    def normalize(self, raw, request):
        return raw


def _client(fail_translation=False):
    library = DocumentLibrary(InMemoryDocumentRepository(), words_per_page=3)
    registry = ProviderRegistry()
    registry.register(UpperCaseTranslator(fail=fail_translation))
    registry.set_baseline(Capability.SEARCH, CuratedResourcesProvider())
    registry.set_baseline(Capability.DEFINE, NoDefinitionProvider())
    enrichment = EnrichmentService(registry, words_per_page=3)
    sessions = SessionCache()
    notebook = NoteBook(InMemoryNoteRepository())

    app = create_app()
    app.dependency_overrides[get_library] = lambda: library
    app.dependency_overrides[get_enrichment] = lambda: enrichment
    app.dependency_overrides[get_sessions] = lambda: sessions
    app.dependency_overrides[get_notebook] = lambda: notebook
    return TestClient(app), library


@pytest.fixture
def client():
    test_client, _ = _client()
    return test_client


def _create(client, content="one two three four five six seven", title="Sample"):
    response = client.post("/documents", json={"title": title, "content": content})
    assert response.status_code == 201
    return response.json()


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_document_lifecycle(client):
    created = _create(client)
    assert created["page_count"] == 3
    document_id = created["id"]

    assert [d["id"] for d in client.get("/documents").json()] == [document_id]
    detail = client.get(f"/documents/{document_id}").json()
    assert detail["current_page"] == "one two three"

    page = client.get(f"/documents/{document_id}/pages/2").json()
    assert page["text"] == "seven"
    assert client.get(f"/documents/{document_id}/pages/3").status_code == 404

    moved = client.put(f"/documents/{document_id}/position", json={"page_index": 1}).json()
    assert moved["page_info"] == "Page 2 of 3"
    assert moved["text"] == "four five six"

    renamed = client.patch(f"/documents/{document_id}", json={"title": "Renamed"}).json()
    assert renamed["title"] == "Renamed"
    assert [d["title"] for d in client.get("/documents/search", params={"query": "five"}).json()] == ["Renamed"]

    assert client.delete(f"/documents/{document_id}").json()["status"] == "deleted"
    assert client.get(f"/documents/{document_id}").status_code == 404


def test_empty_document_is_rejected(client):
    response = client.post("/documents", json={"title": "Blank", "content": "  "})
    assert response.status_code == 400


def test_upload_text_file(client):
    response = client.post(
        "/documents/upload",
        files={"file": ("notes.txt", b"Uploaded words here.", "text/plain")},
        data={"language": "en"},
    )
    assert response.status_code == 201
    assert response.json()["title"] == "notes"
    assert response.json()["content_type"] == "text"

    unsupported = client.post("/documents/upload", files={"file": ("blob.bin", b"\x00\x01", "application/octet-stream")})
    assert unsupported.status_code == 400


def test_change_language(client):
    document_id = _create(client)["id"]

    response = client.post(f"/documents/{document_id}/language", json={"language": "fr"})
    assert response.status_code == 200
    assert response.json()["language"] == "fr"
    assert client.get(f"/documents/{document_id}/pages/0").json()["text"] == "ONE TWO THREE"

    assert client.post(f"/documents/{document_id}/language", json={"language": "xx"}).status_code == 400


def test_change_language_failure_keeps_document():
    test_client, library = _client(fail_translation=True)
    document_id = _create(test_client)["id"]

    response = test_client.post(f"/documents/{document_id}/language", json={"language": "fr"})

    assert response.status_code == 502
    assert library.require(document_id).content == "one two three four five six seven"
    assert library.require(document_id).language == "en"


def test_document_analysis(client):
    document_id = _create(client, content="Cells divide. Cells grow.")["id"]
    body = client.post(f"/documents/{document_id}/analysis").json()
    assert body["label"] == "Sample"
    assert body["degraded"] is True
    assert body["stats"]["sentences"] == 2


def test_enrichment_endpoints(client):
    translated = client.post("/enrichment/translate", json={"text": "hi", "target_lang": "es"}).json()
    assert translated == {"text": "HI", "provider": "upper", "degraded": False}

    search = client.get("/enrichment/search", params={"query": "algebra"}).json()
    assert search["degraded"] is True
    assert len(search["items"]) == 4
    assert client.get("/enrichment/search").status_code == 400

    definition = client.get("/enrichment/define/lucid").json()
    assert definition["source"] == "DOCMATE"
    candidates = client.get("/enrichment/define/lucid/candidates").json()
    assert [c["source"] for c in candidates] == ["Wiktionary", "Merriam-Webster"]

    analysis = client.post("/enrichment/analyze", json={"content": "", "label": "Empty"}).json()
    assert analysis["stats"]["words"] == 0

    pages = client.post("/enrichment/paginate", json={"content": "a b c d"}).json()
    assert pages == {"page_count": 2, "pages": ["a b c", "d"]}
    assert client.post("/enrichment/paginate", json={"content": "a", "words_per_page": 0}).status_code == 400

    providers = client.get("/enrichment/providers").json()
    assert providers["translate"][0]["name"] == "upper"

    languages = client.get("/enrichment/languages").json()
    assert {"code": "yo", "name": "Yoruba", "speech_locale": "yo-NG", "speech_fallback": "en-US"} in languages


def test_translate_exhaustion_maps_to_502():
    test_client, _ = _client(fail_translation=True)
    response = test_client.post("/enrichment/translate", json={"text": "hi", "target_lang": "es"})
    assert response.status_code == 502


def test_upload_unreadable_pdf_is_rejected(client):
    response = client.post("/documents/upload", files={"file": ("broken.pdf", b"not a pdf", "application/pdf")})
    assert response.status_code == 400
    assert response.json()["detail"].startswith("Could not read file")


def test_upload_extraction_failure_maps_to_422(client, monkeypatch):
    class FailingExtractor:
        def extract(self, path):
            raise RuntimeError("extraction failed")

    monkeypatch.setattr("docmate.reading.library.build_extractor", lambda content_type: FailingExtractor())
    docx = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    response = client.post("/documents/upload", files={"file": ("essay.docx", b"PK\x03\x04", docx)})

    assert response.status_code == 422
    assert client.get("/documents").json() == []


def test_upload_rejects_unknown_language(client):
    response = client.post(
        "/documents/upload",
        files={"file": ("notes.txt", b"Uploaded words here.", "text/plain")},
        data={"language": "xx"},
    )
    assert response.status_code == 400
    assert client.post("/documents", json={"title": "T", "content": "words", "language": "xx"}).status_code == 400


def test_change_language_on_missing_document(client):
    response = client.post("/documents/missing/language", json={"language": "fr"})
    assert response.status_code == 404


def test_notes_endpoints(client):
    document_id = _create(client, title="Biology")["id"]
    client.put(f"/documents/{document_id}/position", json={"page_index": 2})

    loose = client.post("/notes", json={"content": "Buy a new notebook"})
    assert loose.status_code == 201
    assert loose.json()["document_id"] is None
    assert loose.json()["type"] == "text"

    pinned = client.post("/notes", json={"content": "Check page three", "document_id": document_id}).json()
    assert pinned["document_title"] == "Biology"
    assert pinned["page_index"] == 2

    assert [n["id"] for n in client.get("/notes").json()] == [pinned["id"], loose.json()["id"]]
    assert [n["id"] for n in client.get("/notes", params={"query": "biology"}).json()] == [pinned["id"]]

    edited = client.patch(f"/notes/{pinned['id']}", json={"content": "Check page two"})
    assert edited.json()["content"] == "Check page two"

    assert client.post("/notes", json={"content": "  "}).status_code == 400
    assert client.post("/notes", json={"content": "x", "document_id": "missing"}).status_code == 404
    assert client.patch("/notes/missing", json={"content": "x"}).status_code == 404
    assert client.patch(f"/notes/{pinned['id']}", json={"content": ""}).status_code == 400
