"""LangGraph workflow that generates the question for one batch slot."""

import asyncio
import logging
import random
from concurrent.futures import Executor
from typing import Any, Literal

from langgraph.graph import END, StateGraph

from quizcore.agents.fallback import fallback_question
from quizcore.agents.parser import parse_question
from quizcore.agents.prompts import build_prompt
from quizcore.agents.validator import validate_question
from quizcore.config.settings import Settings
from quizcore.exceptions import (
    GenerationTimeoutError,
    GeneratorError,
    LowQualityQuestionError,
    ResponseParseError,
)
from quizcore.graph.shared import AttemptBudget, NoveltySet
from quizcore.graph.state import QuestionState
from quizcore.llm.generator import GeneratorLike, call_generator
from quizcore.matching.similarity import is_too_similar, max_similarity
from quizcore.models.question import AttemptOutcome, GenerationAttempt, GenerationConfig

logger = logging.getLogger(__name__)

MAX_TEMPERATURE = 1.0


def backoff_delay(failed_attempt: int, settings: Settings) -> float:
    """Delay after the zero-based ``failed_attempt``: doubles each time, capped."""
    delay = settings.backoff_base_seconds * (2**failed_attempt)
    return min(delay, settings.backoff_max_seconds)


def retry_temperature(retry: int, settings: Settings) -> float:
    """Sampling temperature for the ``retry``-th retry (0 is the first attempt)."""
    return min(MAX_TEMPERATURE, settings.base_temperature + settings.temperature_step * retry)


def recursion_limit(max_attempts: int) -> int:
    """Graph step limit that fits every attempt plus the fallback."""
    return max_attempts * 6 + 10


async def invoke_generator(
    generator: GeneratorLike,
    prompt: str,
    config: GenerationConfig,
    timeout: float,
    executor: Executor | None = None,
) -> str:
    """
    Call the generator under a hard timeout.

    Raises:
        GenerationTimeoutError: If no answer arrived within ``timeout`` seconds
        GeneratorError: If the generator raised anything else
    """
    try:
        return await asyncio.wait_for(
            call_generator(generator, prompt, config, executor), timeout=timeout
        )
    except asyncio.TimeoutError as e:
        raise GenerationTimeoutError(timeout) from e
    except Exception as e:
        raise GeneratorError(f"{type(e).__name__}: {e}") from e


def _fail(
    state: QuestionState,
    current: GenerationAttempt,
    outcome: AttemptOutcome,
    reason: str,
    **updates: Any,
) -> dict[str, Any]:
    logger.warning(
        "Slot %d attempt %d failed (%s): %s",
        state["slot"],
        current.number + 1,
        outcome.value,
        reason,
    )
    return {
        "current": current.model_copy(update={"outcome": outcome, "reason": reason}),
        "outcomes": state["outcomes"] + [outcome],
        **updates,
    }


def retry_or_fallback(state: QuestionState) -> Literal["backoff", "fallback"]:
    """
    Decide whether a failed attempt gets another try.

    Args:
        state: State after a failed attempt

    Returns:
        "fallback" when the batch budget or the slot's attempts are used up,
        "backoff" otherwise
    """
    current = state["current"]
    if current is not None and current.outcome == AttemptOutcome.BUDGET_EXHAUSTED:
        return "fallback"
    if state["attempt"] >= state["max_attempts"]:
        return "fallback"
    return "backoff"


def route_after_generate(state: QuestionState) -> Literal["parse", "backoff", "fallback"]:
    """Parse a response, or retry after a timeout or generator error."""
    if state["current"].outcome is None:
        return "parse"
    return retry_or_fallback(state)


def route_after_parse(state: QuestionState) -> Literal["validate", "backoff", "fallback"]:
    """Validate a parsed question, or retry after a parse failure."""
    if state["current"].outcome is None:
        return "validate"
    return retry_or_fallback(state)


def route_after_novelty(state: QuestionState) -> Literal["end", "backoff", "fallback"]:
    """Finish on acceptance, otherwise retry a near-duplicate."""
    if state["current"].outcome == AttemptOutcome.ACCEPTED:
        return "end"
    return retry_or_fallback(state)


def build_question_graph(
    generator: GeneratorLike,
    settings: Settings,
    novelty: NoveltySet,
    budget: AttemptBudget,
    rng: random.Random | None = None,
    executor: Executor | None = None,
) -> StateGraph:
    """
    Create the per-slot generation graph.

    The graph follows this structure:
    1. Generate - Call the text generator under a timeout
    2. Parse - Recover a question from the raw text
    3. Validate - Repair type, options and answer
    4. Check novelty - Reject near-duplicates of anything already seen
    5. [Conditional] Back off and retry, or fall back to a canned question

    Every slot of a batch runs its own copy of this graph against the same
    novelty set and attempt budget.

    Args:
        generator: Injected text generator
        settings: Retry, timeout and similarity settings
        novelty: Shared texts to avoid; accepted questions are appended
        budget: Shared attempt budget for the batch
        rng: Random source for option shuffling
        executor: Thread pool for blocking generators

    Returns:
        Uncompiled StateGraph
    """
    rng = rng or random.Random()

    async def generate(state: QuestionState) -> dict[str, Any]:
        current = GenerationAttempt(
            number=state["attempt"],
            variation=state["variation"],
            temperature=state["temperature"],
        )
        if not budget.try_spend():
            return _fail(
                state,
                current,
                AttemptOutcome.BUDGET_EXHAUSTED,
                f"batch attempt budget of {budget.total} used up",
            )

        request = state["request"]
        prompt = build_prompt(request, state["question_type"], state["variation"])
        config = GenerationConfig(temperature=state["temperature"], max_tokens=settings.max_tokens)
        logger.debug(
            "Slot %d attempt %d: prompt %d chars, temperature %.2f",
            state["slot"],
            current.number + 1,
            len(prompt),
            config.temperature,
        )

        try:
            raw = await invoke_generator(
                generator, prompt, config, settings.attempt_timeout_seconds, executor
            )
        except GenerationTimeoutError as e:
            return _fail(state, current, AttemptOutcome.TIMEOUT, str(e), attempt=state["attempt"] + 1)
        except GeneratorError as e:
            return _fail(
                state, current, AttemptOutcome.GENERATOR_ERROR, str(e), attempt=state["attempt"] + 1
            )

        logger.debug("Slot %d received %d chars", state["slot"], len(raw))
        return {
            "attempt": state["attempt"] + 1,
            "current": current.model_copy(update={"raw_response": raw}),
        }

    def parse(state: QuestionState) -> dict[str, Any]:
        current = state["current"]
        try:
            question = parse_question(
                current.raw_response, state["question_type"], state["request"].difficulty
            )
        except LowQualityQuestionError as e:
            return _fail(state, current, AttemptOutcome.LOW_QUALITY, str(e))
        except ResponseParseError as e:
            reason = f"{e} (tried: {', '.join(e.strategies) or 'nothing'})"
            return _fail(state, current, AttemptOutcome.PARSE_FAILED, reason)
        return {"current": current.model_copy(update={"question": question})}

    def validate(state: QuestionState) -> dict[str, Any]:
        current = state["current"]
        question = validate_question(current.question, rng)
        return {"current": current.model_copy(update={"question": question})}

    def check_novelty(state: QuestionState) -> dict[str, Any]:
        current = state["current"]
        question = current.question
        score, closest = max_similarity(
            question.question_text, novelty.snapshot(), settings.min_similarity_length
        )
        if is_too_similar(score, settings.similarity_threshold):
            return _fail(
                state,
                current.model_copy(update={"max_similarity": score}),
                AttemptOutcome.TOO_SIMILAR,
                f"similarity {score:.2f} to {closest!r}",
            )

        # Snapshot and append happen with no await in between.
        novelty.add(question.question_text)
        logger.debug(
            "Slot %d accepted %r (max similarity %.2f)",
            state["slot"],
            question.question_text[:60],
            score,
        )
        accepted = current.model_copy(
            update={"outcome": AttemptOutcome.ACCEPTED, "max_similarity": score}
        )
        return {
            "current": accepted,
            "outcomes": state["outcomes"] + [AttemptOutcome.ACCEPTED],
            "question": question,
        }

    async def backoff(state: QuestionState) -> dict[str, Any]:
        delay = backoff_delay(state["attempt"] - 1, settings)
        if delay > 0:
            await asyncio.sleep(delay)
        return {
            "variation": state["variation"] + 1,
            "temperature": retry_temperature(state["attempt"], settings),
        }

    def fallback(state: QuestionState) -> dict[str, Any]:
        request = state["request"]
        question = fallback_question(
            state["question_type"], request.difficulty, request.subject, state["slot"]
        )
        logger.warning(
            "Slot %d using fallback question after %d attempts (%s)",
            state["slot"],
            state["attempt"],
            ", ".join(outcome.value for outcome in state["outcomes"]) or "no attempts",
        )
        return {"question": validate_question(question, rng), "used_fallback": True}

    workflow = StateGraph(QuestionState)

    workflow.add_node("generate", generate)
    workflow.add_node("parse", parse)
    workflow.add_node("validate", validate)
    workflow.add_node("check_novelty", check_novelty)
    workflow.add_node("backoff", backoff)
    workflow.add_node("fallback", fallback)

    workflow.set_entry_point("generate")

    workflow.add_conditional_edges(
        "generate",
        route_after_generate,
        {"parse": "parse", "backoff": "backoff", "fallback": "fallback"},
    )
    workflow.add_conditional_edges(
        "parse",
        route_after_parse,
        {"validate": "validate", "backoff": "backoff", "fallback": "fallback"},
    )
    workflow.add_edge("validate", "check_novelty")
    workflow.add_conditional_edges(
        "check_novelty",
        route_after_novelty,
        {"end": END, "backoff": "backoff", "fallback": "fallback"},
    )
    workflow.add_edge("backoff", "generate")
    workflow.add_edge("fallback", END)

    return workflow


def compile_question_graph(*args: Any, **kwargs: Any):
    """Build and compile the per-slot graph."""
    return build_question_graph(*args, **kwargs).compile()
