from __future__ import annotations

import re
from typing import List

_WHITESPACE = re.compile(r"\s+")
_SENTENCE_END = re.compile(r"[.!?]+")
_BLANK_LINES = re.compile(r"\n\s*\n")


def split_words(text: str) -> List[str]:
    if not text:
        return []
    return [w for w in _WHITESPACE.split(text) if w]


def split_sentences(text: str, min_length: int = 0) -> List[str]:
    """
    Split on runs of sentence punctuation. Sentences whose trimmed length is
    not greater than `min_length` are dropped, so the default only drops
    empty fragments.
    """
    if not text:
        return []
    sentences = (s.strip() for s in _SENTENCE_END.split(text))
    return [s for s in sentences if len(s) > min_length]


def split_paragraphs(text: str) -> List[str]:
    if not text:
        return []
    paragraphs = (p.strip() for p in _BLANK_LINES.split(text))
    return [p for p in paragraphs if p]


def ends_sentence(text: str) -> bool:
    return bool(text) and text[-1] in ".!?"
