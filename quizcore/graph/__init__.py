"""LangGraph per-question workflow and the batch orchestrator."""

from .orchestrator import (
    agenerate_batch,
    agenerate_questions,
    generate_question,
    generate_questions,
)
from .shared import AttemptBudget, NoveltySet
from .state import QuestionState, create_initial_state

__all__ = [
    "agenerate_batch",
    "agenerate_questions",
    "generate_questions",
    "generate_question",
    "NoveltySet",
    "AttemptBudget",
    "QuestionState",
    "create_initial_state",
]
