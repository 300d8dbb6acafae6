"""Response Parser - Recovers a structured question from raw model text."""

import json
import logging
import re
from typing import Any

from quizcore.exceptions import LowQualityQuestionError, ResponseParseError
from quizcore.matching.vocabulary import PLACEHOLDER_MARKERS
from quizcore.models.question import Difficulty, Question, QuestionType

logger = logging.getLogger(__name__)

MIN_QUESTION_LENGTH = 10

# Chatty lead-ins models put in front of the payload.
RESPONSE_PREFIXES = (
    "**JSON:**",
    "Here's the question:",
    "Here is the question:",
    "Here are the questions:",
    "Here's the quiz:",
    "JSON:",
    "Questions:",
    "Quiz:",
)

_CODE_FENCE = re.compile(r"```[a-zA-Z]*")
_TRAILING_COMMA = re.compile(r",\s*([}\]])")
_SMART_APOSTROPHES = str.maketrans({"‘": "'", "’": "'"})

_QUESTION_FIELD = re.compile(r'"question"\s*:\s*"((?:[^"\\]|\\.)+)"')
_ANSWER_FIELD = re.compile(r'"(?:correctAnswer|correct_answer|answer)"\s*:\s*"((?:[^"\\]|\\.)+)"')
_OPTIONS_FIELD = re.compile(r'"options"\s*:\s*\[(.*?)\]', re.DOTALL)
_STRING_LITERAL = re.compile(r'"((?:[^"\\]|\\.)*)"')

_CLOSERS = {"{": "}", "[": "]"}


def clean_response(raw: str) -> str:
    """Remove code fences and known lead-in phrases."""
    cleaned = _CODE_FENCE.sub("", raw)
    for prefix in RESPONSE_PREFIXES:
        cleaned = cleaned.replace(prefix, "")
    return cleaned.translate(_SMART_APOSTROPHES).strip()


def find_json_span(text: str) -> tuple[str, bool] | None:
    """
    Locate the first ``{...}`` or ``[...]`` span in ``text``.

    Braces inside string literals are ignored, including escaped quotes.

    Args:
        text: Cleaned model output

    Returns:
        Tuple of (span, balanced). An unbalanced span runs to the end of the
        text. None when there is no opening brace or bracket at all.
    """
    start = next((i for i, ch in enumerate(text) if ch in "{["), None)
    if start is None:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in "{[":
            depth += 1
        elif ch in "}]":
            depth -= 1
            if depth == 0:
                return text[start : i + 1], True
    return text[start:], False


def _scan_structure(fragment: str) -> tuple[list[str], bool, list[tuple[int, list[str]]]]:
    """Open brackets at the end, whether the text ends inside a string, and the bracket stack at every comma."""
    stack: list[str] = []
    in_string = False
    escaped = False
    cuts: list[tuple[int, list[str]]] = []
    for i, ch in enumerate(fragment):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in _CLOSERS:
            stack.append(ch)
        elif ch in "}]":
            if stack:
                stack.pop()
        elif ch == ",":
            cuts.append((i, list(stack)))
    return stack, in_string, cuts


def _close(stack: list[str]) -> str:
    return "".join(_CLOSERS[opener] for opener in reversed(stack))


def repair_candidates(fragment: str) -> list[str]:
    """
    Candidate repairs for a truncated or sloppy JSON fragment, best first.

    Trailing commas are dropped. A fragment that stops mid-string gets the
    string closed; every candidate gets its open brackets closed. The last
    resort cuts back to the last complete field.
    """
    fragment = _TRAILING_COMMA.sub(r"\1", fragment.strip())
    stack, in_string, cuts = _scan_structure(fragment)

    candidates = []
    if in_string:
        candidates.append(fragment + '"' + _close(stack))
    else:
        candidates.append(fragment.rstrip(",") + _close(stack))
    for index, open_at_cut in reversed(cuts):
        candidates.append(fragment[:index] + _close(open_at_cut))
    return [_TRAILING_COMMA.sub(r"\1", candidate) for candidate in candidates]


def _select_payload(data: Any) -> dict[str, Any] | None:
    """Unwrap arrays and ``{"questions": [...]}`` wrappers down to one question dict."""
    if isinstance(data, dict) and isinstance(data.get("questions"), list):
        data = data["questions"]
    if isinstance(data, list):
        data = next((item for item in data if isinstance(item, dict)), None)
    return data if isinstance(data, dict) else None


_SCALARS = (str, int, float, bool)


def _as_text(value: Any) -> str | None:
    """Text of a JSON scalar; None for null, lists and objects."""
    if isinstance(value, bool):
        return "True" if value else "False"
    if not isinstance(value, _SCALARS):
        return None
    text = str(value).strip()
    return text or None


def _as_options(value: Any) -> list[str]:
    if isinstance(value, dict):
        value = list(value.values())
    if not isinstance(value, list):
        return []
    options = [_as_text(option) for option in value]
    return [option for option in options if option is not None]


def question_from_payload(
    payload: dict[str, Any], expected_type: QuestionType, difficulty: Difficulty
) -> Question:
    """
    Build a Question from a decoded JSON object.

    Args:
        payload: Decoded question object
        expected_type: Type to use when the payload names none or an unknown one
        difficulty: Requested difficulty

    Returns:
        Question (not yet validated)

    Raises:
        ResponseParseError: If the question or answer field is missing
    """
    text = _as_text(payload.get("question") or payload.get("question_text") or payload.get("text"))
    raw_answer = next(
        (payload[key] for key in ("correctAnswer", "correct_answer", "answer") if key in payload),
        None,
    )
    if isinstance(raw_answer, (list, dict)):
        raise ResponseParseError(f"Correct answer must be a single value, got {type(raw_answer).__name__}")
    answer = _as_text(raw_answer)
    if not text or not answer:
        raise ResponseParseError("Payload is missing the question or the correct answer")

    question_type = expected_type
    declared = payload.get("type") or payload.get("question_type")
    if isinstance(declared, str):
        try:
            question_type = QuestionType.parse(declared)
        except ValueError:
            logger.debug("Unknown question type %r, using %s", declared, expected_type.value)

    concepts = payload.get("concepts") or payload.get("concepts_covered") or []
    if not isinstance(concepts, list):
        concepts = [concepts]

    return Question(
        question_text=text,
        question_type=question_type,
        options=_as_options(payload.get("options")),
        correct_answer=answer,
        explanation=_as_text(payload.get("explanation")),
        hint=_as_text(payload.get("hint")),
        concepts_covered=_as_options(concepts),
        difficulty=difficulty,
    )


def _unescape(value: str) -> str:
    try:
        return json.loads(f'"{value}"')
    except json.JSONDecodeError:
        return value


def _has_placeholder(text: str) -> bool:
    lowered = text.lower()
    return any(marker in lowered for marker in PLACEHOLDER_MARKERS)


def extract_fields(
    raw: str, expected_type: QuestionType, difficulty: Difficulty
) -> Question | None:
    """Last-ditch regex pull of the question and answer fields from raw text."""
    question_match = _QUESTION_FIELD.search(raw)
    answer_match = _ANSWER_FIELD.search(raw)
    if not question_match or not answer_match:
        return None

    text = _unescape(question_match.group(1)).strip()
    answer = _unescape(answer_match.group(1)).strip()
    if not text or not answer or _has_placeholder(text) or _has_placeholder(answer):
        return None

    options: list[str] = []
    options_match = _OPTIONS_FIELD.search(raw)
    if options_match:
        options = [
            _unescape(value).strip()
            for value in _STRING_LITERAL.findall(options_match.group(1))
            if value.strip()
        ]

    return Question(
        question_text=text,
        question_type=expected_type,
        options=options,
        correct_answer=answer,
        difficulty=difficulty,
    )


def _decode(candidate: str) -> dict[str, Any] | None:
    try:
        return _select_payload(json.loads(candidate))
    except json.JSONDecodeError:
        return None


def parse_response(
    raw: str,
    expected_type: QuestionType,
    difficulty: Difficulty = Difficulty.MEDIUM,
) -> Question:
    """
    Turn raw generator output into a Question.

    Strategies, most to least strict:
    1. Strict JSON on the first balanced brace span (fences and lead-ins removed)
    2. The same span after repair: trailing commas, truncation, unclosed brackets
    3. Regex extraction of the question and correctAnswer fields

    Args:
        raw: Text returned by the generator
        expected_type: Type requested for this attempt
        difficulty: Requested difficulty

    Returns:
        Parsed Question (not yet validated)

    Raises:
        ResponseParseError: If every strategy failed
    """
    tried: list[str] = []
    if not raw or not raw.strip():
        raise ResponseParseError("Empty response", tried)

    cleaned = clean_response(raw)
    span = find_json_span(cleaned)

    if span is not None:
        fragment, balanced = span
        if balanced:
            tried.append("json")
            payload = _decode(fragment)
            if payload is not None:
                try:
                    question = question_from_payload(payload, expected_type, difficulty)
                    logger.debug("Parsed response with strategy 'json'")
                    return question
                except ResponseParseError as e:
                    logger.debug("Strict JSON decoded but unusable: %s", e)

        tried.append("repaired_json")
        for candidate in repair_candidates(fragment):
            payload = _decode(candidate)
            if payload is None:
                continue
            try:
                question = question_from_payload(payload, expected_type, difficulty)
            except ResponseParseError:
                continue
            logger.debug("Parsed response with strategy 'repaired_json'")
            return question

    tried.append("regex")
    question = extract_fields(cleaned, expected_type, difficulty)
    if question is not None:
        logger.debug("Parsed response with strategy 'regex'")
        return question

    raise ResponseParseError(f"Could not parse response ({len(raw)} chars)", tried)


def ensure_quality(question: Question) -> Question:
    """
    Reject questions that look like an echoed prompt template.

    Raises:
        LowQualityQuestionError: If the question text is under ten characters
            or the question or answer contains the word "sample"
    """
    if len(question.question_text) < MIN_QUESTION_LENGTH:
        raise LowQualityQuestionError(f"Question too short: {question.question_text!r}")
    for field in (question.question_text, question.correct_answer):
        if "sample" in field.lower():
            raise LowQualityQuestionError(f"Template text in question: {field[:50]!r}")
    return question


def parse_question(
    raw: str,
    expected_type: QuestionType,
    difficulty: Difficulty = Difficulty.MEDIUM,
) -> Question:
    """Parse a response and apply the quality gate."""
    return ensure_quality(parse_response(raw, expected_type, difficulty))
