"""Text generator capability and the LangChain chat model adapter."""

import asyncio
import functools
import inspect
import logging
from collections.abc import Awaitable, Callable
from concurrent.futures import Executor
from typing import Any, Protocol, Union

from langchain_anthropic import ChatAnthropic
from langchain_aws import ChatBedrock
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from quizcore.agents.prompts import SYSTEM_PROMPT
from quizcore.config.settings import Settings
from quizcore.models.question import GenerationConfig

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    """Anything that turns a prompt into model text."""

    def generate_text(self, prompt: str, config: GenerationConfig) -> Union[str, Awaitable[str]]:
        ...


GeneratorLike = Union[TextGenerator, Callable[[str, GenerationConfig], Any]]


def _resolve(generator: GeneratorLike) -> Callable[[str, GenerationConfig], Any]:
    return getattr(generator, "generate_text", generator)


def is_async_generator(generator: GeneratorLike) -> bool:
    """True when calling the generator returns a coroutine."""
    func = _resolve(generator)
    return inspect.iscoroutinefunction(func) or inspect.iscoroutinefunction(
        getattr(func, "__call__", None)
    )


async def call_generator(
    generator: GeneratorLike,
    prompt: str,
    config: GenerationConfig,
    executor: Executor | None = None,
) -> str:
    """
    Call a sync or async generator from the event loop.

    Plain functions run in ``executor`` so a caller-side timeout can abandon
    them; their late result is discarded.

    Args:
        generator: Object with ``generate_text`` or a plain callable
        prompt: Prompt text
        config: Sampling parameters
        executor: Thread pool for blocking generators; None uses the loop default

    Returns:
        The generated text
    """
    func = _resolve(generator)
    if is_async_generator(generator):
        result = await func(prompt, config)
    else:
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(executor, functools.partial(func, prompt, config))
        if inspect.isawaitable(result):
            result = await result
    if not isinstance(result, str):
        raise TypeError(f"Text generator returned {type(result).__name__}, expected str")
    return result


def message_text(content: Any) -> str:
    """Flatten chat message content, which may be a string or a list of blocks."""
    if isinstance(content, str):
        return content
    parts = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


class ChatModelGenerator:
    """Adapts a LangChain chat model to the text generator interface."""

    def __init__(self, llm: BaseChatModel, system_prompt: str = SYSTEM_PROMPT):
        self.llm = llm
        self.system_prompt = system_prompt

    async def generate_text(self, prompt: str, config: GenerationConfig) -> str:
        """
        Ask the chat model for one question.

        Args:
            prompt: Prompt built for this attempt
            config: Temperature and token limit for this attempt

        Returns:
            Raw model text
        """
        messages = [
            SystemMessage(content=self.system_prompt),
            HumanMessage(content=prompt),
        ]
        model = self.llm.bind(temperature=config.temperature, max_tokens=config.max_tokens)
        response = await model.ainvoke(messages)
        text = message_text(response.content)
        logger.debug("Chat model returned %d chars", len(text))
        return text


def build_chat_model(settings: Settings) -> BaseChatModel:
    """
    Create the chat model named in the settings.

    Args:
        settings: Settings with model_provider and model_name

    Returns:
        ChatAnthropic for the anthropic provider, ChatBedrock otherwise
    """
    if settings.model_provider == "anthropic":
        return ChatAnthropic(
            model=settings.model_name,
            temperature=settings.base_temperature,
            max_tokens=settings.max_tokens,
        )
    return ChatBedrock(
        model=settings.model_name,
        temperature=settings.base_temperature,
    )
