"""Pydantic models for generated questions and generation requests."""

import uuid
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class QuestionType(str, Enum):
    """Kinds of question the pipeline can produce."""

    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    FILL_IN_BLANK = "fill_in_blank"
    SHORT_ANSWER = "short_answer"

    @classmethod
    def parse(cls, value: str) -> "QuestionType":
        """Accept 'multiple_choice', 'MULTIPLE_CHOICE', 'multiple-choice', 'MultipleChoice'."""
        key = value.strip().replace("-", "_").replace(" ", "_")
        if "_" not in key:
            # CamelCase from some models: MultipleChoice -> multiple_choice
            key = "".join(
                f"_{ch}" if ch.isupper() and i else ch for i, ch in enumerate(key)
            )
        return cls(key.lower())


class Difficulty(str, Enum):
    """Question difficulty levels."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    ADAPTIVE = "adaptive"


class Subject(str, Enum):
    """School subjects used to pick prompt context and fallback pools."""

    MATHEMATICS = "mathematics"
    SCIENCE = "science"
    HISTORY = "history"
    GEOGRAPHY = "geography"
    LANGUAGE_ARTS = "language_arts"
    ECONOMICS = "economics"
    GENERAL = "general"


TRUE_FALSE_OPTIONS = ["True", "False"]
MULTIPLE_CHOICE_OPTION_COUNT = 4
OPTION_LETTERS = "abcd"


class Question(BaseModel):
    """A generated or canned quiz question."""

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        description="Unique identifier for the question",
    )
    question_text: str = Field(..., description="The prompt shown to the student")
    question_type: QuestionType = Field(..., description="Kind of question")
    options: list[str] = Field(
        default_factory=list,
        description="Ordered choices; empty for free-text types",
    )
    correct_answer: str = Field(
        ...,
        description="Canonical answer: an option letter (a-d) or literal text",
    )
    explanation: str | None = Field(None, description="Why the answer is correct")
    hint: str | None = Field(None, description="Optional hint for the student")
    concepts_covered: list[str] = Field(
        default_factory=list,
        description="Topic tags used for coverage bookkeeping",
    )
    difficulty: Difficulty = Field(
        default=Difficulty.MEDIUM,
        description="Question difficulty level",
    )

    @field_validator("question_text", "correct_answer")
    @classmethod
    def strip_text(cls, v: str) -> str:
        """Trim surrounding whitespace from free text fields."""
        return v.strip()

    @property
    def correct_option_index(self) -> int | None:
        """Index of the correct option, whether the answer is stored as a letter or as text."""
        answer = self.correct_answer.strip().lower()
        lowered = [option.strip().lower() for option in self.options]
        if answer in lowered:
            return lowered.index(answer)
        if len(answer) == 1 and answer in OPTION_LETTERS and len(self.options) > OPTION_LETTERS.index(answer):
            return OPTION_LETTERS.index(answer)
        return None

    def is_consistent(self) -> bool:
        """Check that type, options and answer shape agree."""
        if self.question_type == QuestionType.MULTIPLE_CHOICE:
            return (
                len(self.options) == MULTIPLE_CHOICE_OPTION_COUNT
                and self.correct_option_index is not None
            )
        if self.question_type == QuestionType.TRUE_FALSE:
            return (
                self.options == TRUE_FALSE_OPTIONS
                and self.correct_answer in TRUE_FALSE_OPTIONS
            )
        return self.options == [] and bool(self.correct_answer)

    model_config = {
        "json_schema_extra": {
            "example": {
                "question_text": "Which organelle releases energy from food?",
                "question_type": "multiple_choice",
                "options": ["Nucleus", "Mitochondria", "Ribosome", "Vacuole"],
                "correct_answer": "b",
                "explanation": "Mitochondria carry out cellular respiration.",
                "concepts_covered": ["cells"],
                "difficulty": "medium",
            }
        }
    }


class GenerationRequest(BaseModel):
    """What the caller wants generated."""

    subject: Subject = Field(default=Subject.GENERAL, description="School subject")
    topic: str = Field(..., min_length=1, description="Topic within the subject")
    difficulty: Difficulty = Field(
        default=Difficulty.MEDIUM,
        description="Requested difficulty",
    )
    question_type: QuestionType | None = Field(
        None,
        description="Fixed question type; None mixes types per slot",
    )
    previous_questions: list[str] = Field(
        default_factory=list,
        description="Question texts already seen, used for novelty rejection",
    )
    variation: int = Field(
        default=0,
        ge=0,
        description="Starting prompt variation index",
    )
    grade_level: int | None = Field(
        None,
        ge=0,
        le=12,
        description="Student grade, drives the question type mix",
    )

    @field_validator("topic")
    @classmethod
    def validate_topic(cls, v: str) -> str:
        """Clean and validate the topic."""
        cleaned = v.strip()
        if not cleaned:
            raise ValueError("Topic cannot be blank")
        return cleaned

    @field_validator("previous_questions")
    @classmethod
    def drop_blank_history(cls, v: list[str]) -> list[str]:
        """Ignore empty history entries."""
        return [text for text in v if text and text.strip()]


class GenerationConfig(BaseModel):
    """Sampling parameters handed to the text generator for one attempt."""

    temperature: float = Field(default=0.7, ge=0.0, le=1.0)
    max_tokens: int = Field(default=400, ge=1)
    top_k: int = Field(default=40, ge=1)
    seed: int | None = Field(None, description="Optional sampling seed")


class AttemptOutcome(str, Enum):
    """How one generation attempt ended."""

    ACCEPTED = "accepted"
    TIMEOUT = "timeout"
    GENERATOR_ERROR = "generator_error"
    PARSE_FAILED = "parse_failed"
    LOW_QUALITY = "low_quality"
    TOO_SIMILAR = "too_similar"
    BUDGET_EXHAUSTED = "budget_exhausted"


class GenerationAttempt(BaseModel):
    """One retry cycle for a slot; discarded once the slot finishes."""

    number: int = Field(..., ge=0, description="Zero-based attempt number")
    variation: int = Field(..., ge=0, description="Prompt variation used")
    temperature: float = Field(..., ge=0.0, le=1.0)
    raw_response: str | None = None
    question: Question | None = None
    outcome: AttemptOutcome | None = None
    reason: str | None = None
    max_similarity: float = 0.0


class SlotResult(BaseModel):
    """Final result of one batch slot."""

    slot: int = Field(..., ge=0)
    question: Question
    attempts: int = Field(default=0, ge=0)
    used_fallback: bool = False
    outcomes: list[AttemptOutcome] = Field(default_factory=list)


class BatchReport(BaseModel):
    """Everything a batch run produced, in slot order."""

    slots: list[SlotResult] = Field(default_factory=list)

    @property
    def questions(self) -> list[Question]:
        """The questions, one per slot, in slot order."""
        return [slot.question for slot in self.slots]

    @property
    def fallback_count(self) -> int:
        """Number of slots that fell back to a canned question."""
        return sum(1 for slot in self.slots if slot.used_fallback)

    @property
    def total_attempts(self) -> int:
        """Generator calls made across all slots."""
        return sum(slot.attempts for slot in self.slots)
