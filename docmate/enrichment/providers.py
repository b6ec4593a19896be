from __future__ import annotations

import logging
from typing import Any, List, Optional
from urllib.parse import quote, quote_plus

import anyio
import httpx

from ..languages import deepl_code
from ..reading.indexing import LibraryIndex
from . import normalizers
from .analysis import analyze_locally
from .models import (
    AnalysisRequest,
    AnalysisResult,
    Capability,
    DefinitionRequest,
    DefinitionResult,
    SearchItem,
    SearchRequest,
    TranslationRequest,
)
from .registry import Provider, RateLimit, is_configured

logger = logging.getLogger(__name__)

ANALYSIS_SYSTEM_PROMPT = (
    "You are a document analysis expert. Provide a comprehensive analysis "
    "including summary, key points, and main topics."
)
ANALYSIS_CONTENT_CHARS = 4000


class HttpProvider(Provider):
    """
    Provider backed by one HTTP endpoint. The shared `httpx.AsyncClient` is
    owned by the caller; `invoke` returns the decoded JSON body.
    """

    def __init__(self, http: httpx.AsyncClient, priority: Optional[int] = None, rate_limit: Optional[RateLimit] = None):
        super().__init__(priority=priority, rate_limit=rate_limit)
        self.http = http

    async def _json(self, response: httpx.Response) -> Any:
        response.raise_for_status()
        return response.json()


# region translate
class GoogleTranslateProvider(HttpProvider):
    capability = Capability.TRANSLATE
    name = "google-translate"
    default_priority = 10

    def __init__(self, http: httpx.AsyncClient, api_key: Optional[str], **kwargs):
        super().__init__(http, **kwargs)
        self.api_key = api_key

    def is_available(self) -> bool:
        return is_configured(self.api_key)

    async def invoke(self, request: TranslationRequest) -> Any:
        response = await self.http.post(
            "https://translation.googleapis.com/language/translate/v2",
            params={"key": self.api_key},
            json={
                "q": request.text,
                "target": request.target_lang,
                "source": request.source_lang,
                "format": "text",
            },
        )
        return await self._json(response)

    def normalize(self, raw: Any, request: TranslationRequest) -> Optional[str]:
        return normalizers.google_translation(raw)


class AzureTranslatorProvider(HttpProvider):
    capability = Capability.TRANSLATE
    name = "azure-translator"
    default_priority = 20

    def __init__(self, http: httpx.AsyncClient, api_key: Optional[str], region: Optional[str], **kwargs):
        super().__init__(http, **kwargs)
        self.api_key = api_key
        self.region = region

    def is_available(self) -> bool:
        return is_configured(self.api_key)

    async def invoke(self, request: TranslationRequest) -> Any:
        headers = {"Ocp-Apim-Subscription-Key": self.api_key or ""}
        if is_configured(self.region):
            headers["Ocp-Apim-Subscription-Region"] = self.region
        response = await self.http.post(
            "https://api.cognitive.microsofttranslator.com/translate",
            params={"api-version": "3.0", "from": request.source_lang, "to": request.target_lang},
            headers=headers,
            json=[{"text": request.text}],
        )
        return await self._json(response)

    def normalize(self, raw: Any, request: TranslationRequest) -> Optional[str]:
        return normalizers.azure_translation(raw)


class DeepLProvider(HttpProvider):
    capability = Capability.TRANSLATE
    name = "deepl"
    default_priority = 30

    def __init__(self, http: httpx.AsyncClient, api_key: Optional[str], api_url: str, **kwargs):
        super().__init__(http, **kwargs)
        self.api_key = api_key
        self.api_url = api_url

    def is_available(self) -> bool:
        return is_configured(self.api_key)

    async def invoke(self, request: TranslationRequest) -> Any:
        response = await self.http.post(
            self.api_url,
            headers={"Authorization": f"DeepL-Auth-Key {self.api_key}"},
            data={
                "text": request.text,
                "target_lang": deepl_code(request.target_lang, target=True),
                "source_lang": deepl_code(request.source_lang),
            },
        )
        return await self._json(response)

    def normalize(self, raw: Any, request: TranslationRequest) -> Optional[str]:
        return normalizers.deepl_translation(raw)


class LibreTranslateProvider(HttpProvider):
    """
    Self-hosted or public LibreTranslate instance. Available whenever a URL is
    configured; the API key is optional.
    """

    capability = Capability.TRANSLATE
    name = "libretranslate"
    default_priority = 40

    def __init__(self, http: httpx.AsyncClient, base_url: Optional[str], api_key: Optional[str] = None, **kwargs):
        super().__init__(http, **kwargs)
        self.base_url = (base_url or "").rstrip("/")
        self.api_key = api_key

    def is_available(self) -> bool:
        return is_configured(self.base_url)

    async def invoke(self, request: TranslationRequest) -> Any:
        payload = {
            "q": request.text,
            "source": request.source_lang,
            "target": request.target_lang,
            "format": "text",
        }
        if is_configured(self.api_key):
            payload["api_key"] = self.api_key
        response = await self.http.post(f"{self.base_url}/translate", json=payload)
        return await self._json(response)

    def normalize(self, raw: Any, request: TranslationRequest) -> Optional[str]:
        return normalizers.libretranslate_translation(raw)


# endregion


# region search
class WikipediaSearchProvider(HttpProvider):
    capability = Capability.SEARCH
    name = "wikipedia"
    default_priority = 10

    def __init__(self, http: httpx.AsyncClient, api_base: str, **kwargs):
        super().__init__(http, **kwargs)
        self.api_base = api_base.rstrip("/")

    async def invoke(self, request: SearchRequest) -> Any:
        response = await self.http.get(f"{self.api_base}/page/summary/{quote(request.query)}")
        return await self._json(response)

    def normalize(self, raw: Any, request: SearchRequest) -> Optional[List[SearchItem]]:
        return normalizers.wikipedia_search(raw, request.query)


class GoogleSearchProvider(HttpProvider):
    capability = Capability.SEARCH
    name = "google-search"
    default_priority = 20

    def __init__(self, http: httpx.AsyncClient, api_key: Optional[str], engine_id: Optional[str], **kwargs):
        super().__init__(http, **kwargs)
        self.api_key = api_key
        self.engine_id = engine_id

    def is_available(self) -> bool:
        return is_configured(self.api_key) and is_configured(self.engine_id)

    async def invoke(self, request: SearchRequest) -> Any:
        response = await self.http.get(
            "https://www.googleapis.com/customsearch/v1",
            params={"key": self.api_key, "cx": self.engine_id, "q": request.query, "num": 3},
        )
        return await self._json(response)

    def normalize(self, raw: Any, request: SearchRequest) -> Optional[List[SearchItem]]:
        return normalizers.google_search(raw)


class DuckDuckGoSearchProvider(HttpProvider):
    capability = Capability.SEARCH
    name = "duckduckgo"
    default_priority = 30

    def __init__(self, http: httpx.AsyncClient, api_base: str, **kwargs):
        super().__init__(http, **kwargs)
        self.api_base = api_base.rstrip("/")

    async def invoke(self, request: SearchRequest) -> Any:
        response = await self.http.get(
            f"{self.api_base}/",
            params={"q": request.query, "format": "json", "no_html": 1, "skip_disambig": 1},
        )
        return await self._json(response)

    def normalize(self, raw: Any, request: SearchRequest) -> Optional[List[SearchItem]]:
        return normalizers.duckduckgo_search(raw, request.query)


class LibrarySearchProvider(Provider):
    """
    Searches the pages of the user's own documents through the library index.
    """

    capability = Capability.SEARCH
    name = "library"
    default_priority = 40

    def __init__(self, index: LibraryIndex, limit: int = 3, **kwargs):
        super().__init__(**kwargs)
        self.index = index
        self.limit = limit

    async def invoke(self, request: SearchRequest) -> Any:
        # Whoosh is synchronous; keep it off the event loop.
        return await anyio.to_thread.run_sync(self.index.search, request.query, self.limit)

    def normalize(self, raw: Any, request: SearchRequest) -> Optional[List[SearchItem]]:
        if not isinstance(raw, list):
            return None
        items = []
        for hit in raw:
            document_id = hit.get("document_id")
            if not document_id:
                continue
            page_index = int(hit.get("page_index") or 0)
            items.append(
                SearchItem(
                    title=f"{hit.get('title') or document_id} (page {page_index + 1})",
                    snippet=(hit.get("text") or "")[:200],
                    url=f"/documents/{document_id}/pages/{page_index}",
                    source="My Library",
                )
            )
        return items or None


class CuratedResourcesProvider(Provider):
    """
    Static educational resources; the guaranteed tail of every search.
    """

    capability = Capability.SEARCH
    name = "curated-resources"
    default_priority = 1000

    async def invoke(self, request: SearchRequest) -> Any:
        return self.resources(request.query)

    def normalize(self, raw: Any, request: SearchRequest) -> List[SearchItem]:
        return raw

    @staticmethod
    def resources(query: str) -> List[SearchItem]:
        q = quote_plus(query)
        return [
            SearchItem(
                title=f"{query} - Khan Academy",
                snippet=f"Learn about {query} with free online courses, lessons, and practice exercises from Khan Academy.",
                url=f"https://www.khanacademy.org/search?page_search_query={q}",
                source="Khan Academy",
            ),
            SearchItem(
                title=f"{query} Courses - Coursera",
                snippet=f"Explore {query} courses from top universities and companies. Get certified upon completion.",
                url=f"https://coursera.org/search?query={q}",
                source="Coursera",
            ),
            SearchItem(
                title=f"{query} Video Tutorials - YouTube",
                snippet=f"Watch comprehensive video tutorials about {query} from educators and professionals.",
                url=f"https://www.youtube.com/results?search_query={q}",
                source="YouTube Education",
            ),
            SearchItem(
                title=f"{query} Research Papers - Google Scholar",
                snippet=f"Find academic papers and research articles about {query} from scholars worldwide.",
                url=f"https://scholar.google.com/scholar?q={q}",
                source="Google Scholar",
            ),
        ]


# endregion


# region analyze
class ChatCompletionAnalysisProvider(HttpProvider):
    """
    Document analysis through an OpenAI-compatible chat completions endpoint.
    """

    capability = Capability.ANALYZE
    name = "openai"
    default_priority = 10

    def __init__(self, http: httpx.AsyncClient, api_key: Optional[str], base_url: str, model: str, **kwargs):
        super().__init__(http, **kwargs)
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model

    def is_available(self) -> bool:
        return is_configured(self.api_key)

    async def invoke(self, request: AnalysisRequest) -> Any:
        response = await self.http.post(
            f"{self.base_url}/chat/completions",
            headers={"Authorization": f"Bearer {self.api_key}"},
            json={
                "model": self.model,
                "messages": [
                    {"role": "system", "content": ANALYSIS_SYSTEM_PROMPT},
                    {
                        "role": "user",
                        "content": f'Analyze this document titled "{request.label}":\n\n'
                        f"{request.content[:ANALYSIS_CONTENT_CHARS]}",
                    },
                ],
                "max_tokens": 1000,
                "temperature": 0.7,
            },
        )
        return await self._json(response)

    def normalize(self, raw: Any, request: AnalysisRequest) -> Optional[AnalysisResult]:
        return normalizers.chat_completion_analysis(raw, request.content, request.label, self.name)


class LocalAnalysisProvider(Provider):
    capability = Capability.ANALYZE
    name = "local-analysis"
    default_priority = 1000

    async def invoke(self, request: AnalysisRequest) -> Any:
        return analyze_locally(request.content, request.label)

    def normalize(self, raw: Any, request: AnalysisRequest) -> AnalysisResult:
        return raw


# endregion


# region define
class DuckDuckGoDefinitionProvider(HttpProvider):
    capability = Capability.DEFINE
    name = "duckduckgo"
    default_priority = 10

    def __init__(self, http: httpx.AsyncClient, api_base: str, **kwargs):
        super().__init__(http, **kwargs)
        self.api_base = api_base.rstrip("/")

    async def invoke(self, request: DefinitionRequest) -> Any:
        response = await self.http.get(
            f"{self.api_base}/",
            params={"q": request.word, "format": "json", "no_html": 1, "skip_disambig": 1},
        )
        return await self._json(response)

    def normalize(self, raw: Any, request: DefinitionRequest) -> Optional[DefinitionResult]:
        return normalizers.duckduckgo_definition(raw, request.word)


class WikipediaDefinitionProvider(HttpProvider):
    capability = Capability.DEFINE
    name = "wikipedia"
    default_priority = 20

    def __init__(self, http: httpx.AsyncClient, api_base: str, **kwargs):
        super().__init__(http, **kwargs)
        self.api_base = api_base.rstrip("/")

    async def invoke(self, request: DefinitionRequest) -> Any:
        response = await self.http.get(f"{self.api_base}/page/summary/{quote(request.word)}")
        return await self._json(response)

    def normalize(self, raw: Any, request: DefinitionRequest) -> Optional[DefinitionResult]:
        return normalizers.wikipedia_definition(raw, request.word)


class FreeDictionaryProvider(HttpProvider):
    capability = Capability.DEFINE
    name = "free-dictionary"
    default_priority = 30

    def __init__(self, http: httpx.AsyncClient, api_base: str, **kwargs):
        super().__init__(http, **kwargs)
        self.api_base = api_base.rstrip("/")

    async def invoke(self, request: DefinitionRequest) -> Any:
        response = await self.http.get(f"{self.api_base}/{quote(request.word)}")
        return await self._json(response)

    def normalize(self, raw: Any, request: DefinitionRequest) -> Optional[DefinitionResult]:
        return normalizers.free_dictionary_definition(raw, request.word)


class NoDefinitionProvider(Provider):
    capability = Capability.DEFINE
    name = "docmate"
    default_priority = 1000

    async def invoke(self, request: DefinitionRequest) -> Any:
        return DefinitionResult(
            word=request.word,
            definition=(
                f'No definition found for "{request.word}". '
                "Try checking the spelling or search for related terms."
            ),
            source="DOCMATE",
        )

    def normalize(self, raw: Any, request: DefinitionRequest) -> DefinitionResult:
        return raw


class CuratedDictionaryProvider(Provider):
    """
    Static dictionary links; the guaranteed tail of definition candidates.
    """

    capability = Capability.DEFINE
    name = "curated-dictionaries"
    default_priority = 1000

    async def invoke(self, request: DefinitionRequest) -> Any:
        word = request.word
        return [
            DefinitionResult(
                word=word,
                definition=f'Look up "{word}" on Wiktionary, the free dictionary.',
                source="Wiktionary",
                url=f"https://en.wiktionary.org/wiki/{quote(word)}",
            ),
            DefinitionResult(
                word=word,
                definition=f'Look up "{word}" in the Merriam-Webster dictionary.',
                source="Merriam-Webster",
                url=f"https://www.merriam-webster.com/dictionary/{quote(word)}",
            ),
        ]

    def normalize(self, raw: Any, request: DefinitionRequest) -> List[DefinitionResult]:
        return raw


# endregion
