"""
Enrichment subsystem exports.
"""

from ..languages import LANGUAGES, Language, require_language
from .errors import AllProvidersExhausted, EnrichmentError, ProviderInvocationFailed, ProviderUnavailable
from .models import (
    AnalysisRequest,
    AnalysisResult,
    AnalysisStats,
    Attempt,
    Capability,
    DefinitionRequest,
    DefinitionResult,
    OrchestrationReport,
    SearchItem,
    SearchRequest,
    SearchResult,
    TranslationRequest,
    TranslationResult,
)
from .orchestrator import FallbackOrchestrator
from .rate_limit import SlidingWindowRateLimiter
from .registry import Provider, ProviderRegistry, RateLimit, is_configured
from .service import EnrichmentService, build_default_registry

__all__ = [
    "AllProvidersExhausted",
    "AnalysisRequest",
    "AnalysisResult",
    "AnalysisStats",
    "Attempt",
    "Capability",
    "DefinitionRequest",
    "DefinitionResult",
    "EnrichmentError",
    "EnrichmentService",
    "FallbackOrchestrator",
    "LANGUAGES",
    "Language",
    "OrchestrationReport",
    "Provider",
    "ProviderInvocationFailed",
    "ProviderRegistry",
    "ProviderUnavailable",
    "RateLimit",
    "SearchItem",
    "SearchRequest",
    "SearchResult",
    "SlidingWindowRateLimiter",
    "TranslationRequest",
    "TranslationResult",
    "build_default_registry",
    "is_configured",
    "require_language",
]
