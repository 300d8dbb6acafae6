"""Shared test fixtures and configuration for pytest."""

import asyncio
import json
import random
from typing import Any

import pytest

from quizcore.config.settings import Settings
from quizcore.models.question import (
    Difficulty,
    GenerationConfig,
    GenerationRequest,
    Question,
    QuestionType,
    Subject,
)


def make_response(
    question: str,
    answer: str,
    options: list[str] | None = None,
    question_type: str = "multiple_choice",
    **extra: Any,
) -> str:
    """Build the JSON text a well-behaved model would return."""
    payload = {
        "question": question,
        "type": question_type,
        "options": options or [],
        "correctAnswer": answer,
        "explanation": "Because it is.",
        **extra,
    }
    return json.dumps(payload)


DISTINCT_RESPONSES = [
    make_response(
        "Which organelle releases energy from food in a cell?",
        "Mitochondria",
        ["Nucleus", "Mitochondria", "Ribosome", "Vacuole"],
    ),
    make_response(
        "In what year did the Second World War come to an end?",
        "1945",
        ["1918", "1939", "1945", "1963"],
    ),
    make_response(
        "Name the longest river flowing through northern Africa.",
        "Nile",
        ["Congo", "Niger", "Nile", "Zambezi"],
    ),
    make_response(
        "How many sides does a regular hexagon have altogether?",
        "6",
        ["5", "6", "7", "8"],
    ),
    make_response(
        "Which gas do green plants absorb from the atmosphere?",
        "Carbon dioxide",
        ["Oxygen", "Nitrogen", "Carbon dioxide", "Helium"],
    ),
]


class ScriptedGenerator:
    """Blocking generator that returns canned responses in order, repeating the last one."""

    def __init__(self, responses: list[str]):
        self.responses = list(responses)
        self.prompts: list[str] = []
        self.configs: list[GenerationConfig] = []

    def generate_text(self, prompt: str, config: GenerationConfig) -> str:
        self.prompts.append(prompt)
        self.configs.append(config)
        index = min(len(self.prompts), len(self.responses)) - 1
        return self.responses[index]

    @property
    def calls(self) -> int:
        return len(self.prompts)


class AsyncScriptedGenerator(ScriptedGenerator):
    """Coroutine version of ScriptedGenerator."""

    async def generate_text(self, prompt: str, config: GenerationConfig) -> str:
        await asyncio.sleep(0)
        return super().generate_text(prompt, config)


class HangingGenerator:
    """Async generator that never answers in time."""

    def __init__(self):
        self.calls = 0

    async def generate_text(self, prompt: str, config: GenerationConfig) -> str:
        self.calls += 1
        await asyncio.sleep(30)
        return "{}"


class FailingGenerator:
    """Generator whose backend always raises."""

    def __init__(self):
        self.calls = 0

    def generate_text(self, prompt: str, config: GenerationConfig) -> str:
        self.calls += 1
        raise RuntimeError("backend unavailable")


@pytest.fixture
def fast_settings() -> Settings:
    """Settings with tiny timeouts and no backoff."""
    return Settings(
        attempt_timeout_seconds=0.25,
        backoff_base_seconds=0.0,
        backoff_max_seconds=0.0,
        max_attempts_per_question=3,
        batch_attempt_multiplier=3,
        max_concurrency=3,
    )


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source."""
    return random.Random(42)


@pytest.fixture
def sample_request() -> GenerationRequest:
    """A fixed-type science request."""
    return GenerationRequest(
        subject=Subject.SCIENCE,
        topic="Cells",
        difficulty=Difficulty.MEDIUM,
        question_type=QuestionType.MULTIPLE_CHOICE,
    )


@pytest.fixture
def mc_question() -> Question:
    """Multiple choice question with the answer stored as a letter."""
    return Question(
        question_text="What is the capital of France?",
        question_type=QuestionType.MULTIPLE_CHOICE,
        options=["London", "Paris", "Berlin", "Madrid"],
        correct_answer="b",
    )


@pytest.fixture
def tf_question() -> Question:
    """True/false question."""
    return Question(
        question_text="The Earth orbits the Sun.",
        question_type=QuestionType.TRUE_FALSE,
        options=["True", "False"],
        correct_answer="True",
    )


@pytest.fixture
def short_answer_question() -> Question:
    """Short answer question with an open-ended expected answer."""
    return Question(
        question_text="What would you do to help your community?",
        question_type=QuestionType.SHORT_ANSWER,
        correct_answer="Answers will vary, for example volunteering",
    )


@pytest.fixture
def distinct_generator() -> AsyncScriptedGenerator:
    """Async generator that returns five unrelated questions."""
    return AsyncScriptedGenerator(DISTINCT_RESPONSES)


@pytest.fixture
def response_json():
    """Factory for well-formed model responses."""
    return make_response


@pytest.fixture
def scripted_generator():
    """Factory for scripted generators; pass use_async=True for the coroutine version."""

    def factory(responses: list[str], use_async: bool = False) -> ScriptedGenerator:
        cls = AsyncScriptedGenerator if use_async else ScriptedGenerator
        return cls(responses)

    return factory


@pytest.fixture
def hanging_generator() -> HangingGenerator:
    """Generator that always times out."""
    return HangingGenerator()


@pytest.fixture
def failing_generator() -> FailingGenerator:
    """Generator that always raises."""
    return FailingGenerator()


@pytest.fixture
def distinct_responses() -> list[str]:
    """Five well-formed, unrelated multiple choice responses."""
    return list(DISTINCT_RESPONSES)
