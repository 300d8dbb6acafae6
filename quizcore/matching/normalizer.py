"""Canonical form of free text for answer comparison."""

import re

_LEADING_ARTICLE = re.compile(r"^(?:the|a|an)\s+")
_PUNCTUATION = re.compile(r"[.,!?;:'\"-]")
_WHITESPACE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """
    Lowercase, drop leading articles, strip punctuation and collapse whitespace.

    The result is stable under a second pass: ``normalize(normalize(s)) == normalize(s)``.

    Args:
        text: Raw answer or question text

    Returns:
        Normalized text, possibly empty
    """
    if not text:
        return ""
    result = _WHITESPACE.sub(" ", text.lower()).strip()
    result = _PUNCTUATION.sub("", result)
    result = _WHITESPACE.sub(" ", result).strip()
    # Repeat so a second pass never finds another article.
    while True:
        stripped = _LEADING_ARTICLE.sub("", result, count=1)
        if stripped == result:
            break
        result = stripped
    return result


def tokenize(text: str, min_length: int = 0) -> list[str]:
    """Split normalized text into words longer than ``min_length``, dropping brackets."""
    words = (word.strip("()[]") for word in text.split())
    return [word for word in words if len(word) > min_length]
