"""Batch orchestrator - runs one question graph per slot with bounded concurrency."""

import asyncio
import logging
import random
from concurrent.futures import ThreadPoolExecutor

from quizcore.agents.fallback import fallback_question
from quizcore.agents.type_selector import plan_question_types
from quizcore.agents.validator import validate_question
from quizcore.config.settings import Settings, get_settings
from quizcore.graph.shared import AttemptBudget, NoveltySet
from quizcore.graph.state import create_initial_state
from quizcore.graph.workflow import compile_question_graph, recursion_limit
from quizcore.llm.generator import GeneratorLike
from quizcore.models.question import (
    BatchReport,
    GenerationRequest,
    Question,
    QuestionType,
    SlotResult,
)

logger = logging.getLogger(__name__)


async def agenerate_batch(
    request: GenerationRequest,
    count: int,
    generator: GeneratorLike,
    *,
    settings: Settings | None = None,
    rng: random.Random | None = None,
) -> BatchReport:
    """
    Generate ``count`` questions and report how each slot went.

    Slots run concurrently, at most ``settings.max_concurrency`` at a time,
    and share one novelty set and one attempt budget. Every slot ends with
    a question: generated when an attempt is accepted, canned otherwise.
    Cancelling the coroutine cancels every slot.

    Args:
        request: What to generate
        count: Number of questions
        generator: Injected text generator, sync or async
        settings: Settings to use; defaults to get_settings()
        rng: Random source for type selection and option shuffling

    Returns:
        BatchReport with exactly ``count`` slots in slot order

    Raises:
        ValueError: If count is negative
    """
    if count < 0:
        raise ValueError(f"count must be >= 0, got {count}")
    settings = settings or get_settings()
    rng = rng or random.Random()
    if count == 0:
        return BatchReport()

    question_types = plan_question_types(count, request.grade_level, request.question_type, rng)
    novelty = NoveltySet(request.previous_questions)
    budget = AttemptBudget(settings.batch_attempt_budget(count))
    semaphore = asyncio.Semaphore(settings.max_concurrency)
    executor = ThreadPoolExecutor(
        max_workers=settings.max_concurrency * 2,
        thread_name_prefix="quizcore-generator",
    )
    app = compile_question_graph(generator, settings, novelty, budget, rng, executor)
    limit = recursion_limit(settings.max_attempts_per_question)

    logger.info(
        "Generating %d question(s) on %r (%s, %s)",
        count,
        request.topic,
        request.subject.value,
        request.difficulty.value,
    )

    async def run_slot(slot: int, question_type: QuestionType) -> SlotResult:
        async with semaphore:
            state = create_initial_state(request, question_type, slot, settings)
            try:
                final = await app.ainvoke(state, config={"recursion_limit": limit})
            except Exception:
                logger.exception("Slot %d crashed, using fallback question", slot)
                question = fallback_question(question_type, request.difficulty, request.subject, slot)
                return SlotResult(
                    slot=slot,
                    question=validate_question(question, rng),
                    used_fallback=True,
                )
        return SlotResult(
            slot=slot,
            question=final["question"],
            attempts=final["attempt"],
            used_fallback=final["used_fallback"],
            outcomes=final["outcomes"],
        )

    try:
        results = await asyncio.gather(
            *(run_slot(slot, question_type) for slot, question_type in enumerate(question_types))
        )
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    report = BatchReport(slots=list(results))
    logger.info(
        "Batch finished: %d generated, %d fallback, %d generator calls",
        count - report.fallback_count,
        report.fallback_count,
        report.total_attempts,
    )
    return report


async def agenerate_questions(
    request: GenerationRequest,
    count: int,
    generator: GeneratorLike,
    *,
    settings: Settings | None = None,
    rng: random.Random | None = None,
) -> list[Question]:
    """Generate exactly ``count`` questions, in slot order."""
    report = await agenerate_batch(request, count, generator, settings=settings, rng=rng)
    return report.questions


def generate_questions(
    request: GenerationRequest,
    count: int,
    generator: GeneratorLike,
    *,
    settings: Settings | None = None,
    rng: random.Random | None = None,
) -> list[Question]:
    """
    Synchronous entry point for batch generation.

    Runs its own event loop, so it must not be called from inside one; use
    agenerate_questions there.

    Returns:
        Exactly ``count`` questions; some may be canned fallbacks
    """
    return asyncio.run(
        agenerate_questions(request, count, generator, settings=settings, rng=rng)
    )


def generate_question(
    request: GenerationRequest,
    generator: GeneratorLike,
    *,
    settings: Settings | None = None,
    rng: random.Random | None = None,
) -> Question:
    """Generate a single question."""
    return generate_questions(request, 1, generator, settings=settings, rng=rng)[0]
