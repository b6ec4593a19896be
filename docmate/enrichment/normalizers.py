"""
Pure mappings from provider-shaped responses to canonical results.

Each function returns None when the response does not carry the expected
fields; none of them raise on malformed input.
"""

from __future__ import annotations

from typing import Any, List, Optional
from urllib.parse import quote

from .analysis import parse_ai_analysis
from .models import AnalysisResult, DefinitionResult, SearchItem


def dig(obj: Any, *path: Any) -> Any:
    """
    Walk nested dicts/lists; None as soon as a key or index is missing.
    """
    current = obj
    for step in path:
        if isinstance(step, int):
            if not isinstance(current, list) or not -len(current) <= step < len(current):
                return None
            current = current[step]
        else:
            if not isinstance(current, dict) or step not in current:
                return None
            current = current[step]
    return current


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


# region translate
def google_translation(raw: Any) -> Optional[str]:
    return _text(dig(raw, "data", "translations", 0, "translatedText"))


def azure_translation(raw: Any) -> Optional[str]:
    return _text(dig(raw, 0, "translations", 0, "text"))


def deepl_translation(raw: Any) -> Optional[str]:
    return _text(dig(raw, "translations", 0, "text"))


def libretranslate_translation(raw: Any) -> Optional[str]:
    return _text(dig(raw, "translatedText"))


# endregion


# region search
def wikipedia_url(title: str) -> str:
    return f"https://en.wikipedia.org/wiki/{quote(title)}"


def wikipedia_search(raw: Any, query: str) -> Optional[List[SearchItem]]:
    extract = _text(dig(raw, "extract"))
    if not extract:
        return None
    return [
        SearchItem(
            title=_text(dig(raw, "title")) or query,
            snippet=extract,
            url=_text(dig(raw, "content_urls", "desktop", "page")) or wikipedia_url(query),
            source="Wikipedia",
        )
    ]


def google_search(raw: Any) -> Optional[List[SearchItem]]:
    items = dig(raw, "items")
    if not isinstance(items, list):
        return None
    results = []
    for item in items:
        title, link = _text(dig(item, "title")), _text(dig(item, "link"))
        if not title or not link:
            continue
        results.append(
            SearchItem(title=title, snippet=dig(item, "snippet") or "", url=link, source="Google Search")
        )
    return results or None


def duckduckgo_search(raw: Any, query: str, related_limit: int = 3) -> Optional[List[SearchItem]]:
    results = []
    abstract = _text(dig(raw, "AbstractText"))
    if abstract:
        results.append(
            SearchItem(
                title=_text(dig(raw, "Heading")) or query,
                snippet=abstract,
                url=_text(dig(raw, "AbstractURL")) or "",
                source="DuckDuckGo",
            )
        )
    related = dig(raw, "RelatedTopics")
    if isinstance(related, list):
        topics = [(_text(dig(t, "Text")), _text(dig(t, "FirstURL"))) for t in related]
        for text, url in [(text, url) for text, url in topics if text and url][:related_limit]:
            results.append(SearchItem(title=text.split(" - ")[0], snippet=text, url=url, source="DuckDuckGo"))
    return results or None


# endregion


# region analyze
def chat_completion_analysis(raw: Any, content: str, label: str, provider: str) -> Optional[AnalysisResult]:
    message = _text(dig(raw, "choices", 0, "message", "content"))
    if not message:
        return None
    return parse_ai_analysis(message, content, label, provider)


# endregion


# region define
def duckduckgo_definition(raw: Any, word: str) -> Optional[DefinitionResult]:
    abstract = _text(dig(raw, "AbstractText"))
    if not abstract:
        return None
    return DefinitionResult(
        word=word, definition=abstract, source="DuckDuckGo", url=_text(dig(raw, "AbstractURL"))
    )


def wikipedia_definition(raw: Any, word: str) -> Optional[DefinitionResult]:
    extract = _text(dig(raw, "extract"))
    if not extract:
        return None
    return DefinitionResult(
        word=_text(dig(raw, "title")) or word,
        definition=extract,
        source="Wikipedia",
        url=_text(dig(raw, "content_urls", "desktop", "page")),
    )


def free_dictionary_definition(raw: Any, word: str) -> Optional[DefinitionResult]:
    definition = _text(dig(raw, 0, "meanings", 0, "definitions", 0, "definition"))
    if not definition:
        return None
    part_of_speech = _text(dig(raw, 0, "meanings", 0, "partOfSpeech"))
    if part_of_speech:
        definition = f"({part_of_speech}) {definition}"
    return DefinitionResult(
        word=_text(dig(raw, 0, "word")) or word,
        definition=definition,
        source="Free Dictionary",
        url=_text(dig(raw, 0, "sourceUrls", 0)),
    )


# endregion
