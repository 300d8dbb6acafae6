"""Near-duplicate detection for question texts."""

import re
from collections.abc import Iterable
from dataclasses import dataclass

from quizcore.matching.normalizer import normalize

DEFAULT_MIN_LENGTH = 20
CONTAINMENT_SCORE = 0.9
MIN_WORD_LENGTH = 4
JACCARD_WEIGHT = 0.5
TRIGRAM_WEIGHT = 0.5

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class SimilarityBreakdown:
    """Component scores for one comparison."""

    jaccard: float = 0.0
    trigram: float = 0.0
    combined: float = 0.0
    contained: bool = False


def clean_for_similarity(text: str) -> str:
    """Lowercase and keep only letters, digits and single spaces."""
    cleaned = _NON_ALNUM.sub("", text.lower())
    return _WHITESPACE.sub(" ", cleaned).strip()


def trigrams(text: str) -> set[str]:
    """Character trigrams of ``text``; empty for strings under three characters."""
    return {text[i : i + 3] for i in range(len(text) - 2)}


def jaccard(a: set[str], b: set[str]) -> float:
    """Size of the intersection over size of the union; 0 when both are empty."""
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


def word_jaccard(clean_a: str, clean_b: str) -> float:
    """Jaccard similarity over words of four or more characters."""
    words_a = {word for word in clean_a.split() if len(word) >= MIN_WORD_LENGTH}
    words_b = {word for word in clean_b.split() if len(word) >= MIN_WORD_LENGTH}
    if not words_a or not words_b:
        return 0.0
    return jaccard(words_a, words_b)


def trigram_similarity(clean_a: str, clean_b: str) -> float:
    """Jaccard similarity over character trigrams."""
    return jaccard(trigrams(clean_a), trigrams(clean_b))


def _too_short(text: str, cleaned: str, min_length: int) -> bool:
    return len(cleaned) < min_length or len(normalize(text)) < min_length


def similarity_breakdown(
    text_a: str, text_b: str, min_length: int = DEFAULT_MIN_LENGTH
) -> SimilarityBreakdown:
    """
    Score how alike two question texts are.

    Texts shorter than ``min_length`` after cleaning or normalization score
    0, so a leading article never lifts a short text over the limit. If one
    cleaned text contains the other the score is fixed at 0.9. Otherwise the
    score is the even blend of word Jaccard and trigram Jaccard.

    Args:
        text_a: First text
        text_b: Second text
        min_length: Minimum cleaned length for a comparison

    Returns:
        SimilarityBreakdown with the component and combined scores
    """
    clean_a = clean_for_similarity(text_a)
    clean_b = clean_for_similarity(text_b)

    if _too_short(text_a, clean_a, min_length) or _too_short(text_b, clean_b, min_length):
        return SimilarityBreakdown()

    if clean_a in clean_b or clean_b in clean_a:
        return SimilarityBreakdown(combined=CONTAINMENT_SCORE, contained=True)

    word_score = word_jaccard(clean_a, clean_b)
    trigram_score = trigram_similarity(clean_a, clean_b)
    return SimilarityBreakdown(
        jaccard=word_score,
        trigram=trigram_score,
        combined=JACCARD_WEIGHT * word_score + TRIGRAM_WEIGHT * trigram_score,
    )


def similarity(text_a: str, text_b: str, min_length: int = DEFAULT_MIN_LENGTH) -> float:
    """Combined similarity score in [0, 1]."""
    return similarity_breakdown(text_a, text_b, min_length).combined


def max_similarity(
    text: str, others: Iterable[str], min_length: int = DEFAULT_MIN_LENGTH
) -> tuple[float, str | None]:
    """
    Highest similarity between ``text`` and any of ``others``.

    Returns:
        Tuple of (score, most similar text), or (0.0, None) when ``others`` is empty
    """
    best_score = 0.0
    best_text = None
    for other in others:
        score = similarity(text, other, min_length)
        if score > best_score:
            best_score, best_text = score, other
    return best_score, best_text


def is_too_similar(score: float, threshold: float) -> bool:
    """Near-duplicate when the score is strictly above the threshold."""
    return score > threshold
