"""Tests for the batch orchestrator."""

import asyncio
import json
import random
import re

import pytest

from quizcore.config.settings import Settings
from quizcore.graph.orchestrator import (
    agenerate_batch,
    agenerate_questions,
    generate_question,
    generate_questions,
)
from quizcore.models.question import AttemptOutcome, GenerationConfig, GenerationRequest, QuestionType

FRANCE_A = "What is the capital of France and why is it historically significant to Europe?"
FRANCE_B = "What is the capital city of France, and why has it been historically significant in Europe?"
FRANCE_OPTIONS = ["Lyon", "Paris", "Nice", "Lille"]


class SlotEchoGenerator:
    """Answers slot k with the k-th response; earlier slots answer slower."""

    def __init__(self, responses: list[str]):
        self.responses = responses

    async def generate_text(self, prompt: str, config: GenerationConfig) -> str:
        hint = int(re.search(r"Variation hint #(\d+)", prompt).group(1))
        slot = hint - 1
        await asyncio.sleep(0.01 * (len(self.responses) - slot))
        return self.responses[slot]


def run_batch(request, count, generator, settings, rng=None):
    return asyncio.run(agenerate_batch(request, count, generator, settings=settings, rng=rng or random.Random(1)))


class TestBatchSize:
    """Every batch returns exactly the number of questions asked for."""

    def test_distinct_responses(self, distinct_generator, sample_request, fast_settings):
        """Test the happy path."""
        report = run_batch(sample_request, 5, distinct_generator, fast_settings)

        assert len(report.questions) == 5
        assert report.fallback_count == 0
        assert len({q.question_text for q in report.questions}) == 5

    def test_hanging_generator(self, hanging_generator, sample_request, fast_settings):
        """Test that timeouts still produce a full batch."""
        report = run_batch(sample_request, 2, hanging_generator, fast_settings)

        assert len(report.questions) == 2
        assert report.fallback_count == 2
        for slot in report.slots:
            assert slot.outcomes == [AttemptOutcome.TIMEOUT] * 3
            assert slot.question.question_type == QuestionType.MULTIPLE_CHOICE

    def test_failing_generator(self, failing_generator, sample_request, fast_settings):
        """Test that backend errors still produce a full batch."""
        questions = generate_questions(sample_request, 3, failing_generator, settings=fast_settings)

        assert len(questions) == 3
        assert all(q.is_consistent() for q in questions)
        assert failing_generator.calls == 9

    def test_zero_count(self, distinct_generator, sample_request, fast_settings):
        """Test that an empty batch makes no calls."""
        assert generate_questions(sample_request, 0, distinct_generator, settings=fast_settings) == []
        assert distinct_generator.calls == 0

    def test_negative_count(self, distinct_generator, sample_request, fast_settings):
        """Test that a negative count is an error."""
        with pytest.raises(ValueError):
            generate_questions(sample_request, -1, distinct_generator, settings=fast_settings)

    def test_single_question(self, scripted_generator, distinct_responses, sample_request, fast_settings):
        """Test the single-question helper with a blocking generator."""
        generator = scripted_generator([distinct_responses[1]])

        question = generate_question(sample_request, generator, settings=fast_settings)

        assert question.correct_answer == "1945"
        assert generator.calls == 1


class TestSlotOrder:
    """Test that results come back in slot order."""

    def test_order_survives_out_of_order_completion(self, distinct_responses, sample_request, fast_settings):
        """Test that later slots finishing first does not reorder results."""
        settings = fast_settings.model_copy(update={"max_concurrency": 5})

        report = run_batch(sample_request, 5, SlotEchoGenerator(distinct_responses), settings)

        assert [slot.slot for slot in report.slots] == [0, 1, 2, 3, 4]
        expected = [json.loads(raw)["question"] for raw in distinct_responses]
        assert [q.question_text for q in report.questions] == expected


class TestNovelty:
    """Test near-duplicate rejection."""

    def test_history_duplicate_rejected(
        self, scripted_generator, response_json, distinct_responses, sample_request, fast_settings
    ):
        """Test that a rewording of a previous question is retried."""
        request = sample_request.model_copy(update={"previous_questions": [FRANCE_A]})
        generator = scripted_generator(
            [response_json(FRANCE_B, "Paris", FRANCE_OPTIONS), distinct_responses[0]]
        )

        report = run_batch(request, 1, generator, fast_settings)

        slot = report.slots[0]
        assert slot.outcomes == [AttemptOutcome.TOO_SIMILAR, AttemptOutcome.ACCEPTED]
        assert slot.question.question_text != FRANCE_B

    def test_in_batch_duplicate_rejected(
        self, scripted_generator, response_json, distinct_responses, sample_request, fast_settings
    ):
        """Test that a slot cannot repeat a question accepted by another slot."""
        settings = fast_settings.model_copy(update={"max_concurrency": 1})
        generator = scripted_generator(
            [
                response_json(FRANCE_A, "Paris", FRANCE_OPTIONS),
                response_json(FRANCE_B, "Paris", FRANCE_OPTIONS),
                distinct_responses[2],
            ]
        )

        report = run_batch(sample_request, 2, generator, settings)

        assert report.slots[0].question.question_text == FRANCE_A
        assert report.slots[1].outcomes == [AttemptOutcome.TOO_SIMILAR, AttemptOutcome.ACCEPTED]
        assert report.slots[1].question.correct_answer == "Nile"


class TestRetries:
    """Test retry behaviour across the batch."""

    def test_variation_and_temperature_bumped(
        self, scripted_generator, distinct_responses, sample_request, fast_settings
    ):
        """Test that a retry uses a new prompt variation and a hotter temperature."""
        generator = scripted_generator(["not json at all", distinct_responses[0]])

        report = run_batch(sample_request, 1, generator, fast_settings)

        assert report.slots[0].outcomes == [AttemptOutcome.PARSE_FAILED, AttemptOutcome.ACCEPTED]
        assert "Variation hint #1" in generator.prompts[0]
        assert "Variation hint #2" in generator.prompts[1]
        assert generator.configs[0].temperature == pytest.approx(fast_settings.base_temperature)
        assert generator.configs[1].temperature == pytest.approx(
            fast_settings.base_temperature + fast_settings.temperature_step
        )

    def test_batch_budget_caps_calls(self, failing_generator, sample_request, fast_settings):
        """Test that the shared budget stops retries across slots."""
        settings = fast_settings.model_copy(update={"batch_attempt_multiplier": 1})

        report = run_batch(sample_request, 2, failing_generator, settings)

        assert failing_generator.calls == 2
        assert report.total_attempts == 2
        assert report.fallback_count == 2
        for slot in report.slots:
            assert slot.outcomes[-1] == AttemptOutcome.BUDGET_EXHAUSTED

    def test_crashed_slot_gets_fallback(self, monkeypatch, distinct_generator, sample_request, fast_settings):
        """Test that an unexpected error inside a slot is contained."""

        def boom(question, rng=None):
            raise RuntimeError("validator exploded")

        monkeypatch.setattr("quizcore.graph.workflow.validate_question", boom)

        report = run_batch(sample_request, 2, distinct_generator, fast_settings)

        assert report.fallback_count == 2
        assert all(q.is_consistent() for q in report.questions)


class TestCancellation:
    """Test that cancelling the batch cancels its slots."""

    def test_cancel_propagates(self, hanging_generator, sample_request):
        """Test that a cancelled batch raises CancelledError."""
        settings = Settings(attempt_timeout_seconds=10.0, max_concurrency=2)

        async def main():
            task = asyncio.create_task(agenerate_questions(sample_request, 2, hanging_generator, settings=settings))
            await asyncio.sleep(0.1)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(main())

        assert hanging_generator.calls == 2


@pytest.mark.parametrize("grade", [1, 4, 10])
def test_mixed_types_are_consistent(grade: int, distinct_generator, fast_settings: Settings):
    """Test that mixed-type batches always come back well formed."""
    request = GenerationRequest(topic="Cells", grade_level=grade)

    questions = generate_questions(request, 4, distinct_generator, settings=fast_settings, rng=random.Random(grade))

    assert len(questions) == 4
    assert all(q.is_consistent() for q in questions)
