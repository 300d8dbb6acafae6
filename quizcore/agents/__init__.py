"""Pipeline stages that act on one candidate question."""

from .fallback import fallback_question
from .parser import ensure_quality, parse_question, parse_response
from .prompts import build_prompt
from .type_selector import plan_question_types, select_question_type, type_weights
from .validator import detect_question_type, validate_question

__all__ = [
    "build_prompt",
    "parse_response",
    "parse_question",
    "ensure_quality",
    "validate_question",
    "detect_question_type",
    "fallback_question",
    "type_weights",
    "select_question_type",
    "plan_question_types",
]
