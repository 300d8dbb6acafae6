"""Data models for question generation and answer checking."""

from .question import (
    MULTIPLE_CHOICE_OPTION_COUNT,
    OPTION_LETTERS,
    TRUE_FALSE_OPTIONS,
    AttemptOutcome,
    BatchReport,
    Difficulty,
    GenerationAttempt,
    GenerationConfig,
    GenerationRequest,
    Question,
    QuestionType,
    SlotResult,
    Subject,
)

__all__ = [
    "Question",
    "QuestionType",
    "Difficulty",
    "Subject",
    "GenerationRequest",
    "GenerationConfig",
    "GenerationAttempt",
    "AttemptOutcome",
    "SlotResult",
    "BatchReport",
    "TRUE_FALSE_OPTIONS",
    "MULTIPLE_CHOICE_OPTION_COUNT",
    "OPTION_LETTERS",
]
