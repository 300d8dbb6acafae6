"""Text normalization, similarity scoring and answer checking."""

from .equivalence import MatchingThresholds, check_answer, is_equivalent
from .normalizer import normalize, tokenize
from .similarity import (
    SimilarityBreakdown,
    is_too_similar,
    max_similarity,
    similarity,
    similarity_breakdown,
)

__all__ = [
    "normalize",
    "tokenize",
    "similarity",
    "similarity_breakdown",
    "max_similarity",
    "is_too_similar",
    "SimilarityBreakdown",
    "is_equivalent",
    "check_answer",
    "MatchingThresholds",
]
