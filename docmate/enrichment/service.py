from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config import DocmateConfig
from ..languages import require_language
from ..reading.indexing import LibraryIndex
from ..reading.pagination import DEFAULT_WORDS_PER_PAGE, paginate
from .errors import AllProvidersExhausted
from .models import (
    AnalysisRequest,
    AnalysisResult,
    Capability,
    DefinitionRequest,
    DefinitionResult,
    OrchestrationReport,
    SearchRequest,
    SearchResult,
    TranslationRequest,
    TranslationResult,
)
from .orchestrator import FallbackOrchestrator
from .providers import (
    AzureTranslatorProvider,
    ChatCompletionAnalysisProvider,
    CuratedDictionaryProvider,
    CuratedResourcesProvider,
    DeepLProvider,
    DuckDuckGoDefinitionProvider,
    DuckDuckGoSearchProvider,
    FreeDictionaryProvider,
    GoogleSearchProvider,
    GoogleTranslateProvider,
    LibrarySearchProvider,
    LibreTranslateProvider,
    LocalAnalysisProvider,
    NoDefinitionProvider,
    WikipediaDefinitionProvider,
    WikipediaSearchProvider,
)
from .rate_limit import SlidingWindowRateLimiter
from .registry import ProviderRegistry, RateLimit

logger = logging.getLogger(__name__)


def build_default_registry(
    config: DocmateConfig,
    http: httpx.AsyncClient,
    index: Optional[LibraryIndex] = None,
) -> ProviderRegistry:
    limit = RateLimit(config.rate_limit_max_requests, config.rate_limit_window_ms)
    registry = ProviderRegistry()

    registry.register(GoogleTranslateProvider(http, config.google_translate_api_key, rate_limit=limit))
    registry.register(
        AzureTranslatorProvider(http, config.azure_translator_key, config.azure_translator_region, rate_limit=limit)
    )
    registry.register(DeepLProvider(http, config.deepl_api_key, config.deepl_api_url, rate_limit=limit))
    registry.register(
        LibreTranslateProvider(http, config.libretranslate_url, config.libretranslate_api_key, rate_limit=limit)
    )

    registry.register(WikipediaSearchProvider(http, config.wikipedia_api_base, rate_limit=limit))
    registry.register(
        GoogleSearchProvider(http, config.google_search_api_key, config.google_search_engine_id, rate_limit=limit)
    )
    registry.register(DuckDuckGoSearchProvider(http, config.duckduckgo_api_base, rate_limit=limit))
    if index is not None:
        registry.register(LibrarySearchProvider(index))
    registry.set_baseline(Capability.SEARCH, CuratedResourcesProvider())

    registry.register(
        ChatCompletionAnalysisProvider(
            http, config.openai_api_key, config.openai_base_url, config.openai_model, rate_limit=limit
        )
    )
    registry.set_baseline(Capability.ANALYZE, LocalAnalysisProvider())

    registry.register(DuckDuckGoDefinitionProvider(http, config.duckduckgo_api_base, rate_limit=limit))
    registry.register(WikipediaDefinitionProvider(http, config.wikipedia_api_base, rate_limit=limit))
    registry.register(FreeDictionaryProvider(http, config.free_dictionary_api_base, rate_limit=limit))
    registry.set_baseline(Capability.DEFINE, NoDefinitionProvider())
    return registry


class EnrichmentService:
    """
    Capability request surface used by the API and the reading session.

    translate/analyze/define run first-success chains; search and
    define_candidates fan out. Analysis and definitions always answer (with
    `degraded=True` when a local fallback was used); translation raises
    `AllProvidersExhausted` when no provider produced a result.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        orchestrator: Optional[FallbackOrchestrator] = None,
        words_per_page: int = DEFAULT_WORDS_PER_PAGE,
        http: Optional[httpx.AsyncClient] = None,
    ):
        self.registry = registry
        self.orchestrator = orchestrator or FallbackOrchestrator(registry)
        self.words_per_page = words_per_page
        self.http = http
        self.dictionary_links = CuratedDictionaryProvider()
        if registry.baseline(Capability.ANALYZE) is None:
            registry.set_baseline(Capability.ANALYZE, LocalAnalysisProvider())

    @classmethod
    def from_config(cls, config: DocmateConfig, index: Optional[LibraryIndex] = None) -> "EnrichmentService":
        http = httpx.AsyncClient(timeout=config.provider_timeout, follow_redirects=True)
        registry = build_default_registry(config, http, index=index)
        orchestrator = FallbackOrchestrator(
            registry,
            rate_limiter=SlidingWindowRateLimiter(),
            provider_timeout=config.provider_timeout,
        )
        return cls(registry, orchestrator=orchestrator, words_per_page=config.words_per_page, http=http)

    async def aclose(self) -> None:
        if self.http is not None:
            await self.http.aclose()

    async def translate(self, text: str, target_lang: str, source_lang: str = "en") -> str:
        result = await self.translate_detailed(text, target_lang, source_lang)
        return result.text

    async def translate_detailed(self, text: str, target_lang: str, source_lang: str = "en") -> TranslationResult:
        target = require_language(target_lang).code
        source = require_language(source_lang).code
        if target == source or not text or not text.strip():
            return TranslationResult(text=text or "", provider="none")

        report = OrchestrationReport(Capability.TRANSLATE)
        request = TranslationRequest(text=text, target_lang=target, source_lang=source)
        try:
            translated = await self.orchestrator.first_success(Capability.TRANSLATE, request, report=report)
        except AllProvidersExhausted:
            logger.error("Translation %s -> %s failed on every provider", source, target)
            raise
        return TranslationResult(text=translated, provider=report.succeeded_by or "")

    async def search(self, query: str) -> SearchResult:
        query = (query or "").strip()
        if not query:
            raise ValueError("Please enter a question or topic to search for")
        report = OrchestrationReport(Capability.SEARCH)
        items = await self.orchestrator.fan_out(Capability.SEARCH, SearchRequest(query=query), report=report)
        live = [a for a in report.attempts if a.outcome == "success" and a.detail != "baseline"]
        if not live:
            return SearchResult(summary=f'Educational resources for "{query}":', items=items, degraded=True)
        return SearchResult(summary=f'Search results for "{query}":', items=items)

    async def analyze(self, content: str, label: str) -> AnalysisResult:
        request = AnalysisRequest(content=content or "", label=label)
        return await self.orchestrator.first_success(Capability.ANALYZE, request)

    async def define(self, word: str) -> DefinitionResult:
        word = (word or "").strip()
        if not word:
            raise ValueError("Word must not be empty")
        report = OrchestrationReport(Capability.DEFINE)
        result = await self.orchestrator.first_success(Capability.DEFINE, DefinitionRequest(word=word), report=report)
        result.provider = report.succeeded_by or ""
        return result

    async def define_candidates(self, word: str) -> List[DefinitionResult]:
        word = (word or "").strip()
        if not word:
            raise ValueError("Word must not be empty")
        return await self.orchestrator.fan_out(
            Capability.DEFINE, DefinitionRequest(word=word), baseline=self.dictionary_links
        )

    def paginate(self, content: str, words_per_page: Optional[int] = None) -> List[str]:
        return paginate(content, self.words_per_page if words_per_page is None else words_per_page)

    def describe_providers(self) -> Dict[str, List[Dict[str, Any]]]:
        return self.registry.describe()
