"""Question type selection weighted by grade level and recent history."""

import random
from collections.abc import Sequence

from quizcore.models.question import QuestionType

RECENT_WINDOW = 3
ABSENT_BONUS = 10

EARLY_GRADE_WEIGHTS = {
    QuestionType.MULTIPLE_CHOICE: 60,
    QuestionType.TRUE_FALSE: 40,
}
MIDDLE_GRADE_WEIGHTS = {
    QuestionType.MULTIPLE_CHOICE: 50,
    QuestionType.TRUE_FALSE: 30,
    QuestionType.FILL_IN_BLANK: 20,
}
UPPER_GRADE_WEIGHTS = {
    QuestionType.MULTIPLE_CHOICE: 40,
    QuestionType.TRUE_FALSE: 25,
    QuestionType.FILL_IN_BLANK: 20,
    QuestionType.SHORT_ANSWER: 15,
}


def base_weights(grade_level: int | None) -> dict[QuestionType, int]:
    """Type weights for a grade band; no grade uses the upper band."""
    if grade_level is not None and grade_level <= 2:
        return dict(EARLY_GRADE_WEIGHTS)
    if grade_level is not None and grade_level <= 5:
        return dict(MIDDLE_GRADE_WEIGHTS)
    return dict(UPPER_GRADE_WEIGHTS)


def type_weights(
    grade_level: int | None, recent_types: Sequence[QuestionType] = ()
) -> dict[QuestionType, int]:
    """
    Weight table for the next question type.

    Types missing from the last three picks get a bonus; types picked twice
    are halved and three times quartered. No weight drops below 1.

    Args:
        grade_level: Student grade, or None
        recent_types: Previously picked types, oldest first

    Returns:
        Mapping of question type to integer weight
    """
    recent = list(recent_types)[-RECENT_WINDOW:]
    weights = {}
    for question_type, weight in base_weights(grade_level).items():
        count = recent.count(question_type)
        if count == 0:
            weight += ABSENT_BONUS
        elif count == 2:
            weight //= 2
        elif count >= 3:
            weight //= 4
        weights[question_type] = max(1, weight)
    return weights


def select_question_type(
    grade_level: int | None,
    recent_types: Sequence[QuestionType] = (),
    rng: random.Random | None = None,
) -> QuestionType:
    """Draw a question type from the weight table."""
    rng = rng or random.Random()
    weights = type_weights(grade_level, recent_types)
    return rng.choices(list(weights), weights=list(weights.values()), k=1)[0]


def plan_question_types(
    count: int,
    grade_level: int | None,
    fixed_type: QuestionType | None = None,
    rng: random.Random | None = None,
) -> list[QuestionType]:
    """One type per batch slot, picked in slot order."""
    if fixed_type is not None:
        return [fixed_type] * count
    rng = rng or random.Random()
    picked: list[QuestionType] = []
    for _ in range(count):
        picked.append(select_question_type(grade_level, picked, rng))
    return picked
