"""State carried through one question's generation graph."""

from typing import TypedDict

from quizcore.config.settings import Settings
from quizcore.models.question import (
    AttemptOutcome,
    GenerationAttempt,
    GenerationRequest,
    Question,
    QuestionType,
)


class QuestionState(TypedDict):
    """State for generating the question of one batch slot."""

    # Input
    request: GenerationRequest
    question_type: QuestionType
    slot: int

    # Retry bookkeeping
    attempt: int
    max_attempts: int
    variation: int
    temperature: float

    # Current attempt
    current: GenerationAttempt | None
    outcomes: list[AttemptOutcome]

    # Output
    question: Question | None
    used_fallback: bool


def create_initial_state(
    request: GenerationRequest,
    question_type: QuestionType,
    slot: int,
    settings: Settings,
) -> QuestionState:
    """
    Create the starting state for one slot.

    Args:
        request: The batch request
        question_type: Type picked for this slot
        slot: Zero-based slot index
        settings: Retry and sampling settings

    Returns:
        QuestionState before the first attempt
    """
    return QuestionState(
        request=request,
        question_type=question_type,
        slot=slot,
        attempt=0,
        max_attempts=settings.max_attempts_per_question,
        variation=request.variation + slot,
        temperature=settings.base_temperature,
        current=None,
        outcomes=[],
        question=None,
        used_fallback=False,
    )
