"""Question Validator - Forces a parsed question into the shape its type demands."""

import logging
import random

from quizcore.matching.equivalence import to_true_false
from quizcore.matching.normalizer import normalize
from quizcore.matching.vocabulary import (
    BLANK_MARKERS,
    DISTRACTOR_POOLS,
    FALSE_TOKENS,
    GENERIC_DISTRACTORS,
    MULTIPLE_CHOICE_PHRASES,
    TRUE_TOKENS,
)
from quizcore.models.question import (
    MULTIPLE_CHOICE_OPTION_COUNT,
    OPTION_LETTERS,
    TRUE_FALSE_OPTIONS,
    Question,
    QuestionType,
)

logger = logging.getLogger(__name__)

TRUE_FALSE_ANSWERS = TRUE_TOKENS | FALSE_TOKENS
SHORT_ANSWER_MIN_WORDS = 4


def _is_true_false_pair(options: list[str]) -> bool:
    return bool(options) and all(normalize(option) in TRUE_FALSE_ANSWERS for option in options)


def detect_question_type(question: Question) -> QuestionType:
    """
    Infer the question type from its content.

    Checked in order: multiple choice phrasing, a true/false style answer,
    a blank marker, two or more options, then an answer of four or more
    words with no options. When nothing matches the declared type stands.

    Args:
        question: Parsed question

    Returns:
        The detected type
    """
    lowered = question.question_text.lower()
    answer = normalize(question.correct_answer)
    options = question.options

    if any(phrase in lowered for phrase in MULTIPLE_CHOICE_PHRASES):
        return QuestionType.MULTIPLE_CHOICE
    # Numeric options like 0/1/2/3 keep a pick out of true/false.
    if answer in TRUE_FALSE_ANSWERS and (not options or _is_true_false_pair(options)):
        return QuestionType.TRUE_FALSE
    if any(marker in question.question_text for marker in BLANK_MARKERS):
        return QuestionType.FILL_IN_BLANK
    if len(options) >= 2 and not _is_true_false_pair(options):
        return QuestionType.MULTIPLE_CHOICE
    if not options and len(question.correct_answer.split()) >= SHORT_ANSWER_MIN_WORDS:
        return QuestionType.SHORT_ANSWER
    return question.question_type


def _answer_text(question: Question) -> str:
    """The answer as option text, resolving a letter against the options."""
    index = question.correct_option_index
    if index is not None:
        return question.options[index]
    return question.correct_answer


def _stored_as_letter(question: Question) -> bool:
    answer = question.correct_answer.strip().lower()
    lowered = [option.strip().lower() for option in question.options]
    return len(answer) == 1 and answer in OPTION_LETTERS and answer not in lowered


def contextual_distractors(question_text: str, correct_answer: str) -> list[str]:
    """
    Pick wrong answers that fit the question's subject matter.

    The first distractor pool whose cue words appear in the question wins;
    the correct answer is never among the results.
    """
    lowered = question_text.lower()
    answer = correct_answer.strip().lower()
    for cues, pool in DISTRACTOR_POOLS:
        if any(cue in lowered for cue in cues):
            return [option for option in pool if option.lower() != answer][:3]
    return [option for option in GENERIC_DISTRACTORS if option.lower() != answer]


def _unique(options: list[str]) -> list[str]:
    """Drop blank options and case-insensitive repeats, keeping the first spelling."""
    seen: set[str] = set()
    kept = []
    for option in options:
        key = option.strip().lower()
        if key and key not in seen:
            seen.add(key)
            kept.append(option)
    return kept


def _pad_options(options: list[str]) -> list[str]:
    padded = _unique(options)
    for letter in OPTION_LETTERS.upper():
        if len(padded) >= MULTIPLE_CHOICE_OPTION_COUNT:
            break
        placeholder = f"Option {letter}"
        if placeholder.lower() not in {option.strip().lower() for option in padded}:
            padded.append(placeholder)
    return padded


def fix_multiple_choice(question: Question, rng: random.Random) -> Question:
    """
    Make sure a multiple choice question has exactly four options, one correct.

    Args:
        question: Question declared or detected as multiple choice
        rng: Random source for shuffling

    Returns:
        Repaired question; unchanged when it was already well formed
    """
    options = _unique(question.options)
    as_letter = _stored_as_letter(question) and question.correct_option_index is not None
    answer = _answer_text(question).strip() or question.correct_answer
    # The spelling of the answer that survived de-duplication.
    kept_answer = next((option for option in options if option.strip().lower() == answer.lower()), None)
    has_answer = question.correct_option_index is not None and kept_answer is not None
    if has_answer:
        answer = kept_answer

    if len(options) == len(question.options) == MULTIPLE_CHOICE_OPTION_COUNT and has_answer:
        return question

    if not options:
        logger.debug("Synthesizing distractors for %r", question.question_text[:50])
        options = _pad_options([answer] + contextual_distractors(question.question_text, answer))
    elif len(options) < MULTIPLE_CHOICE_OPTION_COUNT:
        if not has_answer:
            options.append(answer)
        options = _pad_options(options)
    elif len(options) > MULTIPLE_CHOICE_OPTION_COUNT:
        kept = options[:MULTIPLE_CHOICE_OPTION_COUNT]
        if answer not in kept:
            kept = kept[: MULTIPLE_CHOICE_OPTION_COUNT - 1] + [answer]
        options = kept
    elif not has_answer:
        options = [answer] + options[: MULTIPLE_CHOICE_OPTION_COUNT - 1]

    rng.shuffle(options)
    correct = OPTION_LETTERS[options.index(answer)] if as_letter else answer
    return question.model_copy(update={"options": options, "correct_answer": correct})


def fix_true_false(question: Question) -> Question:
    """Force True/False options and map the answer onto one of them."""
    mapped = to_true_false(normalize(question.correct_answer))
    if mapped == "true":
        answer = "True"
    elif mapped == "false":
        answer = "False"
    else:
        logger.warning(
            "Unrecognized true/false answer %r for %r, defaulting to True",
            question.correct_answer,
            question.question_text[:50],
        )
        answer = "True"
    return question.model_copy(update={"options": list(TRUE_FALSE_OPTIONS), "correct_answer": answer})


def fix_free_text(question: Question) -> Question:
    """Drop options from fill-in-blank and short answer questions."""
    if not question.options:
        return question
    return question.model_copy(update={"options": [], "correct_answer": _answer_text(question)})


def validate_question(question: Question, rng: random.Random | None = None) -> Question:
    """
    Repair a question so its type, options and answer agree.

    Never fails: whatever comes in, a presentable question goes out.

    Args:
        question: Parsed or canned question
        rng: Random source for option shuffling

    Returns:
        Structurally valid question
    """
    rng = rng or random.Random()

    detected = detect_question_type(question)
    if detected != question.question_type:
        logger.warning(
            "Recategorized question from %s to %s: %r",
            question.question_type.value,
            detected.value,
            question.question_text[:50],
        )
        question = question.model_copy(update={"question_type": detected})

    if detected == QuestionType.MULTIPLE_CHOICE:
        return fix_multiple_choice(question, rng)
    if detected == QuestionType.TRUE_FALSE:
        return fix_true_false(question)
    return fix_free_text(question)
