from __future__ import annotations

from typing import List

from .text import ends_sentence, split_words

DEFAULT_WORDS_PER_PAGE = 400
NO_CONTENT_PAGE = "No content available"

# A sentence boundary is only used when it sits in the last 30% of the page.
SENTENCE_SNAP_RATIO = 0.7


def paginate(content: str, words_per_page: int = DEFAULT_WORDS_PER_PAGE) -> List[str]:
    """
    Split `content` into page texts of at most `words_per_page` words.

    Every page except the last is shortened to end on a sentence boundary
    when one exists in its trailing 30%; the words cut off that way roll over
    into the next page. Words are re-joined with single spaces. The result is
    never empty: content without words yields a single placeholder page.
    """
    if words_per_page < 1:
        raise ValueError(f"words_per_page must be positive, got {words_per_page}")

    words = split_words(content)
    if not words:
        return [NO_CONTENT_PAGE]

    pages: List[str] = []
    cursor = 0
    total = len(words)
    while cursor < total:
        chunk = words[cursor : cursor + words_per_page]
        consumed = len(chunk)
        page_text = " ".join(chunk)

        is_final = cursor + words_per_page >= total
        if not is_final and not ends_sentence(page_text):
            snapped = _snap_to_sentence(page_text)
            if snapped is not None:
                page_text, consumed = snapped

        pages.append(page_text)
        cursor += consumed
    return pages


def _snap_to_sentence(page_text: str):
    boundary = max(page_text.rfind("."), page_text.rfind("!"), page_text.rfind("?"))
    if boundary < 0 or boundary < len(page_text) * SENTENCE_SNAP_RATIO:
        return None

    # Keep whole words: a boundary inside a word (e.g. "3.14") keeps that word.
    consumed = len(split_words(page_text[: boundary + 1]))
    kept = page_text.split(" ")[:consumed]
    return " ".join(kept), consumed


def clamp_page_index(index: int, page_count: int) -> int:
    if page_count <= 0:
        return 0
    return min(max(index, 0), page_count - 1)
