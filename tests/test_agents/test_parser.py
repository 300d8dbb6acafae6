"""Tests for the Response Parser."""

import json

import pytest

from quizcore.agents.parser import (
    ensure_quality,
    find_json_span,
    parse_question,
    parse_response,
    repair_candidates,
)
from quizcore.exceptions import LowQualityQuestionError, ResponseParseError
from quizcore.models.question import Difficulty, Question, QuestionType

MC = QuestionType.MULTIPLE_CHOICE


class TestFindJsonSpan:
    """Test balanced span detection."""

    def test_finds_object(self):
        """Test that the first object is returned."""
        assert find_json_span('noise {"a": 1} more {"b": 2}') == ('{"a": 1}', True)

    def test_ignores_braces_in_strings(self):
        """Test that braces inside strings do not count."""
        text = '{"q": "What does {x} mean?", "a": "set}"} trailing'

        assert find_json_span(text) == ('{"q": "What does {x} mean?", "a": "set}"}', True)

    def test_handles_escaped_quotes(self):
        """Test that escaped quotes do not end a string."""
        text = r'{"q": "Who said \"hi}\"?"}'

        span, balanced = find_json_span(text)

        assert balanced
        assert json.loads(span) == {"q": 'Who said "hi}"?'}

    def test_unbalanced(self):
        """Test that a truncated span runs to the end."""
        assert find_json_span('x {"a": [1, 2') == ('{"a": [1, 2', False)

    def test_no_json(self):
        """Test that text without braces gives None."""
        assert find_json_span("no json here") is None


class TestRepair:
    """Test repair candidates."""

    def test_trailing_comma(self):
        """Test that trailing commas are removed."""
        assert json.loads(repair_candidates('{"a": [1, 2,], "b": 3,}')[0]) == {"a": [1, 2], "b": 3}

    def test_closes_truncated_string(self):
        """Test that a string cut off mid-way is closed."""
        assert json.loads(repair_candidates('{"a": "hel')[0]) == {"a": "hel"}

    def test_cuts_to_last_complete_field(self):
        """Test that a dangling key is dropped."""
        candidates = repair_candidates('{"a": "x", "b":')

        assert json.loads(candidates[-1]) == {"a": "x"}


class TestParseResponse:
    """Test parse_response()."""

    def test_fenced_json(self):
        """Test that code fences are stripped."""
        raw = '```json\n{"question":"Q?","options":["A","B"],"correctAnswer":"A"}\n```'

        question = parse_response(raw, MC)

        assert question.question_text == "Q?"
        assert question.options == ["A", "B"]
        assert question.correct_answer == "A"
        assert question.question_type == MC

    def test_prefix_and_fields(self):
        """Test a chatty prefix and optional fields."""
        raw = (
            "Here's the question: "
            '{"question": "What is the capital of Peru?", "type": "fill_in_blank", '
            '"correctAnswer": "Lima", "explanation": "Lima is the capital.", '
            '"hint": "It starts with L.", "concepts": ["capitals"]}'
        )

        question = parse_response(raw, MC, Difficulty.EASY)

        assert question.question_type == QuestionType.FILL_IN_BLANK
        assert question.explanation == "Lima is the capital."
        assert question.hint == "It starts with L."
        assert question.concepts_covered == ["capitals"]
        assert question.difficulty == Difficulty.EASY

    def test_type_spellings(self):
        """Test that upper-case type names are understood."""
        raw = '{"question": "Water is wet.", "type": "TRUE_FALSE", "correctAnswer": true}'

        question = parse_response(raw, MC)

        assert question.question_type == QuestionType.TRUE_FALSE
        assert question.correct_answer == "True"

    def test_unknown_type_uses_expected(self):
        """Test that an unknown type falls back to the requested one."""
        raw = '{"question": "Describe a cell.", "type": "essay", "correctAnswer": "A unit of life"}'

        assert parse_response(raw, QuestionType.SHORT_ANSWER).question_type == QuestionType.SHORT_ANSWER

    def test_array_takes_first(self):
        """Test that an array of questions yields the first."""
        raw = json.dumps(
            [
                {"question": "First question here?", "correctAnswer": "one"},
                {"question": "Second question here?", "correctAnswer": "two"},
            ]
        )

        assert parse_response(raw, MC).question_text == "First question here?"

    def test_questions_wrapper(self):
        """Test that a {"questions": [...]} wrapper is unwrapped."""
        raw = json.dumps({"questions": [{"question": "Wrapped question?", "correct_answer": "yes"}]})

        question = parse_response(raw, MC)

        assert question.question_text == "Wrapped question?"
        assert question.correct_answer == "yes"

    def test_trailing_comma(self):
        """Test that a trailing comma is repaired."""
        raw = '{"question": "What is the capital of Peru?", "correctAnswer": "Lima",}'

        assert parse_response(raw, MC).correct_answer == "Lima"

    def test_truncated_response(self):
        """Test that a response cut off mid-string is recovered."""
        raw = (
            '{"question": "What is the boiling point of water?", '
            '"correctAnswer": "100 C", "explanation": "At sea le'
        )

        question = parse_response(raw, QuestionType.SHORT_ANSWER)

        assert question.correct_answer == "100 C"
        assert question.explanation == "At sea le"

    def test_truncated_after_key(self):
        """Test that a dangling key is dropped."""
        raw = '{"question": "Which planet is known as the red planet?", "correctAnswer": "Mars", "explanation":'

        assert parse_response(raw, MC).correct_answer == "Mars"

    def test_regex_fallback(self):
        """Test field extraction when the JSON cannot be repaired."""
        raw = (
            '{"question": "What is the largest ocean on Earth?" "correctAnswer": "Pacific" '
            '"options": ["Atlantic", "Pacific", "Indian", "Arctic"]}'
        )

        question = parse_response(raw, MC)

        assert question.question_text == "What is the largest ocean on Earth?"
        assert question.correct_answer == "Pacific"
        assert question.options == ["Atlantic", "Pacific", "Indian", "Arctic"]

    def test_regex_rejects_placeholders(self):
        """Test that template text is not extracted."""
        raw = '"question": "Your question here", "correctAnswer": "answer here"'

        with pytest.raises(ResponseParseError) as exc_info:
            parse_response(raw, MC)

        assert exc_info.value.strategies == ["regex"]

    def test_missing_answer(self):
        """Test that a question without an answer fails every strategy."""
        with pytest.raises(ResponseParseError) as exc_info:
            parse_response('{"question": "What is the largest ocean?"}', MC)

        assert exc_info.value.strategies == ["json", "repaired_json", "regex"]

    def test_null_and_object_entries_dropped(self):
        """Test that null and object entries never become options or concepts."""
        raw = json.dumps(
            {
                "question": "What is the largest ocean on earth?",
                "options": [None, {"a": 1}, "Pacific", ["Indian"], "Atlantic"],
                "correctAnswer": "Pacific",
                "concepts": ["oceans", None, {"x": 1}],
            }
        )

        question = parse_response(raw, MC)

        assert question.options == ["Pacific", "Atlantic"]
        assert question.concepts_covered == ["oceans"]

    def test_scalar_options_become_text(self):
        """Test that numbers and booleans are kept as their text."""
        raw = json.dumps({"question": "How many moons does Mars have?", "options": [1, 2, 2.5, True], "answer": 2})

        question = parse_response(raw, MC)

        assert question.options == ["1", "2", "2.5", "True"]
        assert question.correct_answer == "2"

    @pytest.mark.parametrize("answer", [["Pacific"], {"text": "Pacific"}, None])
    def test_non_scalar_answer_rejected(self, answer):
        """Test that a list, object or null answer fails instead of being stringified."""
        raw = json.dumps(
            {
                "question": "What is the largest ocean on earth?",
                "options": ["Pacific", "Atlantic", "Indian", "Arctic"],
                "correctAnswer": answer,
            }
        )

        with pytest.raises(ResponseParseError) as exc_info:
            parse_response(raw, MC)

        assert exc_info.value.strategies == ["json", "repaired_json", "regex"]

    @pytest.mark.parametrize("raw", ["", "   ", "I cannot help with that."])
    def test_unparseable(self, raw: str):
        """Test that text with no question fails."""
        with pytest.raises(ResponseParseError):
            parse_response(raw, MC)


class TestQualityGate:
    """Test ensure_quality() and parse_question()."""

    def _question(self, text: str, answer: str = "Paris") -> Question:
        return Question(question_text=text, question_type=QuestionType.SHORT_ANSWER, correct_answer=answer)

    def test_good_question_passes(self):
        """Test that a normal question passes."""
        question = self._question("What is the capital of France?")

        assert ensure_quality(question) is question

    def test_short_question_rejected(self):
        """Test that questions under ten characters are rejected."""
        with pytest.raises(LowQualityQuestionError):
            ensure_quality(self._question("Q?"))

    @pytest.mark.parametrize(
        "text, answer",
        [("This is a Sample question about cells?", "cells"), ("What is the capital of France?", "sample answer")],
    )
    def test_template_echo_rejected(self, text: str, answer: str):
        """Test that the word 'sample' in question or answer is rejected."""
        with pytest.raises(LowQualityQuestionError):
            ensure_quality(self._question(text, answer))

    def test_parse_question_applies_gate(self):
        """Test that parse_question rejects what parse_response accepts."""
        raw = '```json\n{"question":"Q?","options":["A","B"],"correctAnswer":"A"}\n```'

        with pytest.raises(LowQualityQuestionError):
            parse_question(raw, MC)

    def test_low_quality_is_a_parse_error(self):
        """Test the exception hierarchy."""
        assert issubclass(LowQualityQuestionError, ResponseParseError)
