"""Decide whether a student's answer matches the expected answer."""

import logging
import re
from dataclasses import dataclass

from quizcore.matching.normalizer import normalize, tokenize
from quizcore.matching.vocabulary import (
    ANSWER_VARIATIONS,
    FALSE_TOKENS,
    FLEXIBLE_ANSWER_MARKERS,
    GEOGRAPHY_CONCEPTS,
    GEOGRAPHY_TRIGGERS,
    KEY_CONCEPTS,
    NO_EFFORT_RESPONSES,
    POPULATION_CONCEPTS,
    POPULATION_TRIGGERS,
    SEMANTIC_MAPPINGS,
    TRUE_TOKENS,
)
from quizcore.models.question import OPTION_LETTERS, Question, QuestionType

logger = logging.getLogger(__name__)

_COMPOUND_GLOSS = re.compile(r"(.+?)\s*\([^)]*\)\s*(?:or|and)\s*(.+?)\s*\([^)]*\)")
_SINGLE_GLOSS = re.compile(r"(.+?)\s*\([^)]*\)")
_QUESTION_MARKS_ONLY = re.compile(r"^[?\s]*$")

# A user answer must be at least this long before "is contained in" counts.
MIN_CONTAINMENT_LENGTH = 2
MIN_FLEXIBLE_LENGTH = 2


@dataclass(frozen=True)
class MatchingThresholds:
    """Leniency knobs for free-text matching."""

    word_overlap: float = 0.3
    concept_coverage: float = 0.5

    @classmethod
    def from_settings(cls, settings) -> "MatchingThresholds":
        """Read thresholds from a Settings instance."""
        return cls(
            word_overlap=settings.word_overlap_threshold,
            concept_coverage=settings.concept_coverage_threshold,
        )


DEFAULT_THRESHOLDS = MatchingThresholds()

_NORMALIZED_NO_EFFORT = frozenset(normalize(reply) for reply in NO_EFFORT_RESPONSES)
_NORMALIZED_VARIATIONS = {
    term: frozenset(normalize(variant) for variant in variants)
    for term, variants in ANSWER_VARIATIONS.items()
}


def to_true_false(normalized: str) -> str:
    """Map yes/no style tokens onto 'true' or 'false'; anything else is returned unchanged."""
    if normalized in TRUE_TOKENS:
        return "true"
    if normalized in FALSE_TOKENS:
        return "false"
    return normalized


def option_letter(index: int) -> str:
    """0 -> 'a', 1 -> 'b', ..."""
    return chr(ord("a") + index)


def correct_letter(correct: str, question: Question) -> str | None:
    """The letter of the correct option, whether stored as a letter or as option text."""
    options = [normalize(option) for option in question.options]
    if correct in options:
        return option_letter(options.index(correct))
    if len(correct) == 1 and correct in OPTION_LETTERS:
        return correct
    return None


def is_flexible_answer(expected: str) -> bool:
    """True when the expected answer says any reasonable reply is acceptable."""
    lowered = expected.lower()
    return any(marker in lowered for marker in FLEXIBLE_ANSWER_MARKERS)


def shows_effort(user_answer: str) -> bool:
    """Reject empty, 'idk'-style, question-mark-only and one-character replies."""
    if _QUESTION_MARKS_ONLY.match(user_answer):
        return False
    candidate = normalize(user_answer)
    if candidate in _NORMALIZED_NO_EFFORT:
        return False
    return len(user_answer.strip()) >= MIN_FLEXIBLE_LENGTH and len(candidate) >= MIN_FLEXIBLE_LENGTH


def split_answer_terms(correct: str) -> list[str]:
    """
    Break an expected answer into the terms a student may give on their own.

    Handles "term (gloss) or term (gloss)", "term (gloss)", "x or y" and "x and y".
    """
    compound = _COMPOUND_GLOSS.search(correct)
    if compound:
        return [normalize(compound.group(1)), normalize(compound.group(2))]
    single = _SINGLE_GLOSS.search(correct)
    if single:
        return [normalize(single.group(1))]
    if " or " in correct:
        return [normalize(part) for part in correct.split(" or ")]
    if " and " in correct:
        return [normalize(part) for part in correct.split(" and ")]
    return [correct]


def _contains(outer: str, inner: str) -> bool:
    return len(inner) >= MIN_CONTAINMENT_LENGTH and inner in outer


def matches_term(user: str, terms: list[str]) -> bool:
    """Equal to, containing, or contained by any non-empty term."""
    for term in terms:
        if not term:
            continue
        if term == user or _contains(term, user) or _contains(user, term):
            return True
    return False


def matches_known_variation(user: str, terms: list[str]) -> bool:
    """User gave a listed paraphrase of one of the terms."""
    for term in terms:
        variants = _NORMALIZED_VARIATIONS.get(term)
        if variants and user in variants:
            return True
    return False


def words_match(user_word: str, correct_word: str) -> bool:
    """Equality, containment, shared prefix, or a listed synonym."""
    if user_word == correct_word:
        return True
    if len(user_word) > 3 and user_word in correct_word:
        return True
    if len(correct_word) > 3 and correct_word in user_word:
        return True
    if len(user_word) > 4 and correct_word.startswith(user_word):
        return True
    if len(correct_word) > 4 and user_word.startswith(correct_word):
        return True
    if correct_word in SEMANTIC_MAPPINGS.get(user_word, ()):
        return True
    return user_word in SEMANTIC_MAPPINGS.get(correct_word, ())


def matches_concepts(
    user: str, terms: list[str], thresholds: MatchingThresholds = DEFAULT_THRESHOLDS
) -> bool:
    """
    Lenient keyword check for free-text answers.

    Accepts when the student names a key concept the expected answer also
    names, when enough of their words match expected words, or when they
    cover enough of the expected key concepts.
    """
    user_words = tokenize(user, min_length=2)
    correct_words = [word for term in terms for word in tokenize(term, min_length=2)]
    if not user_words or not correct_words:
        return False

    user_concepts = set(user_words) & KEY_CONCEPTS
    correct_concepts = set(correct_words) & KEY_CONCEPTS
    if user_concepts & correct_concepts:
        return True

    matching = sum(
        1
        for user_word in user_words
        if any(words_match(user_word, correct_word) for correct_word in correct_words)
    )
    overlap = matching / max(len(user_words), len(correct_words))
    if overlap >= thresholds.word_overlap:
        return True

    if correct_concepts:
        coverage = len(correct_concepts & user_concepts) / len(correct_concepts)
        if coverage >= thresholds.concept_coverage:
            return True
    return False


def matches_geographic_concepts(user: str, correct: str) -> bool:
    """Narrow concept check for population and climate questions."""
    user_words = set(tokenize(user, min_length=2))
    correct_words = set(tokenize(correct, min_length=2))

    if correct_words & POPULATION_TRIGGERS:
        if user_words & POPULATION_CONCEPTS and correct_words & POPULATION_CONCEPTS:
            return True

    if correct_words & GEOGRAPHY_TRIGGERS:
        if user_words & GEOGRAPHY_CONCEPTS and correct_words & GEOGRAPHY_CONCEPTS:
            return True
    return False


def check_answer_variations(
    user: str, correct: str, thresholds: MatchingThresholds = DEFAULT_THRESHOLDS
) -> bool:
    """
    Variation and semantic cascade for answers that did not match exactly.

    Both arguments must already be normalized. Steps run in order and the
    first that accepts wins: compound-term splitting, the paraphrase table,
    keyword and concept overlap, then the geography-specific concept check.
    """
    if not user:
        return False

    terms = split_answer_terms(correct)
    if matches_term(user, terms):
        return True

    if matches_known_variation(user, terms + [correct]):
        return True

    if matches_concepts(user, terms, thresholds):
        return True

    return matches_geographic_concepts(user, correct)


def _expected_text(correct: str, question: Question) -> str:
    """For a letter-keyed multiple choice answer, the text of that option."""
    letter = correct_letter(correct, question)
    if letter is not None:
        index = OPTION_LETTERS.index(letter)
        if index < len(question.options):
            return normalize(question.options[index])
    return correct


def is_equivalent(
    user_answer: str,
    correct_answer: str,
    question: Question,
    thresholds: MatchingThresholds = DEFAULT_THRESHOLDS,
) -> bool:
    """
    Decide if ``user_answer`` should be marked correct.

    Rules are tried in a fixed order and the first that applies decides:

    1. Exact match after normalization.
    2. True/false: yes/no/t/f/1/0 style tokens are mapped before comparing.
    3. Multiple choice: option text is converted to its letter, then a bare
       letter is compared to the correct letter; anything else falls through
       to step 5. Option text wins over a letter reading of the same reply.
    4. Fill-in-blank and short answer with an open-ended expected answer:
       any reply that shows effort is accepted, and nothing else is tried.
    5. The variation and semantic cascade.

    Args:
        user_answer: What the student typed or selected
        correct_answer: The stored correct answer
        question: The question being answered

    Returns:
        True if the answer is accepted
    """
    user = normalize(user_answer)
    correct = normalize(correct_answer)

    if user == correct:
        return True

    question_type = question.question_type

    if question_type == QuestionType.TRUE_FALSE:
        return to_true_false(user) == to_true_false(correct)

    if question_type == QuestionType.MULTIPLE_CHOICE:
        expected_letter = correct_letter(correct, question)
        options = [normalize(option) for option in question.options]
        if user in options:
            return option_letter(options.index(user)) == expected_letter
        if len(user) == 1 and user in OPTION_LETTERS:
            return user == expected_letter
        return check_answer_variations(user, _expected_text(correct, question), thresholds)

    if is_flexible_answer(correct_answer):
        return shows_effort(user_answer)

    return check_answer_variations(user, correct, thresholds)


def check_answer(
    user_answer: str,
    question: Question,
    thresholds: MatchingThresholds = DEFAULT_THRESHOLDS,
) -> bool:
    """Check a student's answer against the question's stored correct answer."""
    correct = is_equivalent(user_answer, question.correct_answer, question, thresholds)
    logger.debug(
        "Answer check - type=%s user=%r expected=%r correct=%s",
        question.question_type.value,
        user_answer,
        question.correct_answer,
        correct,
    )
    return correct
