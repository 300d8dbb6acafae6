"""Quiz question generation with novelty filtering, and lenient answer checking."""

from .graph.orchestrator import (
    agenerate_batch,
    agenerate_questions,
    generate_question,
    generate_questions,
)
from .llm.generator import ChatModelGenerator, TextGenerator
from .matching.equivalence import MatchingThresholds, check_answer, is_equivalent
from .models.question import (
    BatchReport,
    Difficulty,
    GenerationConfig,
    GenerationRequest,
    Question,
    QuestionType,
    Subject,
)

__version__ = "0.1.0"

__all__ = [
    "generate_questions",
    "generate_question",
    "agenerate_questions",
    "agenerate_batch",
    "check_answer",
    "is_equivalent",
    "MatchingThresholds",
    "TextGenerator",
    "ChatModelGenerator",
    "Question",
    "QuestionType",
    "Difficulty",
    "Subject",
    "GenerationRequest",
    "GenerationConfig",
    "BatchReport",
]
