from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class Capability(str, Enum):
    TRANSLATE = "translate"
    SEARCH = "search"
    ANALYZE = "analyze"
    DEFINE = "define"
    SPEAK = "speak"


@dataclass
class TranslationRequest:
    text: str
    target_lang: str
    source_lang: str = "en"


@dataclass
class SearchRequest:
    query: str


@dataclass
class AnalysisRequest:
    content: str
    label: str


@dataclass
class DefinitionRequest:
    word: str


@dataclass
class TranslationResult:
    text: str
    provider: str = ""
    degraded: bool = False


@dataclass
class SearchItem:
    title: str
    snippet: str
    url: str
    source: str


@dataclass
class SearchResult:
    summary: str
    items: List[SearchItem] = field(default_factory=list)
    degraded: bool = False


@dataclass
class DefinitionResult:
    word: str
    definition: str
    source: str
    url: Optional[str] = None
    provider: str = ""
    degraded: bool = False


@dataclass
class AnalysisStats:
    words: int
    sentences: int
    paragraphs: int
    reading_time_minutes: int
    difficulty: str


@dataclass
class AnalysisResult:
    label: str
    stats: AnalysisStats
    summary: str
    key_points: List[str] = field(default_factory=list)
    main_topics: List[str] = field(default_factory=list)
    provider: str = ""
    degraded: bool = False


@dataclass
class Attempt:
    provider: str
    outcome: str
    detail: str = ""


@dataclass
class OrchestrationReport:
    """
    What happened during one capability request, provider by provider.
    """

    capability: Capability
    attempts: List[Attempt] = field(default_factory=list)
    degraded: bool = False

    def record(self, provider: str, outcome: str, detail: str = "") -> None:
        self.attempts.append(Attempt(provider=provider, outcome=outcome, detail=detail))

    @property
    def succeeded_by(self) -> Optional[str]:
        for attempt in reversed(self.attempts):
            if attempt.outcome == "success":
                return attempt.provider
        return None

    @property
    def invoked(self) -> List[str]:
        return [a.provider for a in self.attempts if a.outcome != "unavailable"]

    def summary(self) -> Dict[str, str]:
        return {a.provider: a.outcome for a in self.attempts}
