from __future__ import annotations

import math
import re
from collections import Counter
from typing import Iterable, List

from ..reading.text import split_paragraphs, split_sentences, split_words
from .models import AnalysisResult, AnalysisStats

WORDS_PER_MINUTE = 200
SUMMARY_CHARS = 500

STOP_WORDS = {
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
    "is", "are", "was", "were", "be", "been", "have", "has", "had", "do", "does", "did",
    "will", "would", "could", "should", "may", "might", "must", "can", "shall",
    "this", "that", "these", "those",
}
AI_COMMON_WORDS = {"the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by"}
KEY_POINT_MARKERS = ("important", "key", "main", "significant", "conclusion", "result")

_NON_WORD = re.compile(r"[^\w]")
_BULLET = re.compile(r"^\s*(?:[-•*]|\d+\.)\s+")


def assess_difficulty(text: str) -> str:
    words = split_words(text)
    sentences = split_sentences(text)
    if not words or not sentences:
        return "Beginner"
    avg_word_length = sum(len(w) for w in words) / len(words)
    avg_sentence_length = len(words) / len(sentences)
    if avg_word_length > 6 and avg_sentence_length > 20:
        return "Advanced"
    if avg_word_length > 5 and avg_sentence_length > 15:
        return "Intermediate"
    return "Beginner"


def compute_stats(content: str) -> AnalysisStats:
    words = split_words(content)
    return AnalysisStats(
        words=len(words),
        sentences=len(split_sentences(content)),
        paragraphs=len(split_paragraphs(content)),
        reading_time_minutes=math.ceil(len(words) / WORDS_PER_MINUTE),
        difficulty=assess_difficulty(content),
    )


def local_summary(content: str) -> str:
    sentences = split_sentences(content, min_length=30)
    if not sentences:
        return "This document contains limited analyzable content."
    picked = [sentences[0]]
    if len(sentences) > 5:
        picked.append(sentences[len(sentences) // 2])
    if len(sentences) > 2:
        picked.append(sentences[-1])
    return " ".join(f"{s}." for s in picked)


def local_key_points(content: str, limit: int = 5) -> List[str]:
    sentences = split_sentences(content, min_length=50)
    points = [
        s
        for s in sentences
        if any(marker in s.lower() for marker in KEY_POINT_MARKERS) or 80 < len(s) < 200
    ]
    return points[:limit] if points else sentences[:3]


def top_words(text: str, min_length: int, ignore: Iterable[str], limit: int) -> List[str]:
    ignore = set(ignore)
    counts: Counter = Counter()
    for raw in text.lower().split():
        word = _NON_WORD.sub("", raw)
        if len(word) > min_length and word not in ignore:
            counts[word] += 1
    return [word for word, _ in counts.most_common(limit)]


def analyze_locally(content: str, label: str) -> AnalysisResult:
    """
    Offline analysis used whenever no AI provider answers. Works on any input,
    including empty text.
    """
    content = content or ""
    return AnalysisResult(
        label=label,
        stats=compute_stats(content),
        summary=local_summary(content),
        key_points=local_key_points(content),
        main_topics=top_words(content, min_length=3, ignore=STOP_WORDS, limit=8),
        provider="local",
    )


def ai_key_points(response: str, limit: int = 5) -> List[str]:
    points = [_BULLET.sub("", line).strip() for line in response.splitlines() if _BULLET.match(line)]
    points = [p for p in points if p][:limit]
    return points or ["AI analysis provided comprehensive insights"]


def parse_ai_analysis(response: str, content: str, label: str, provider: str) -> AnalysisResult:
    summary = response[:SUMMARY_CHARS]
    if len(response) > SUMMARY_CHARS:
        summary += "..."
    return AnalysisResult(
        label=label,
        stats=compute_stats(content),
        summary=summary,
        key_points=ai_key_points(response),
        main_topics=top_words(response, min_length=4, ignore=AI_COMMON_WORDS, limit=6),
        provider=provider,
    )
