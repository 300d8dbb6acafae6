"""Tests for the text generator adapters."""

import asyncio

import pytest
from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import FakeListChatModel

from quizcore.config.settings import Settings
from quizcore.llm.generator import (
    ChatModelGenerator,
    build_chat_model,
    call_generator,
    is_async_generator,
    message_text,
)
from quizcore.models.question import GenerationConfig


def sync_function(prompt: str, config: GenerationConfig) -> str:
    return f"sync:{prompt}"


async def async_function(prompt: str, config: GenerationConfig) -> str:
    return f"async:{prompt}"


class TestCallGenerator:
    """Test call_generator()."""

    def test_plain_function(self):
        """Test a blocking callable."""
        assert asyncio.run(call_generator(sync_function, "hi", GenerationConfig())) == "sync:hi"

    def test_coroutine_function(self):
        """Test an async callable."""
        assert asyncio.run(call_generator(async_function, "hi", GenerationConfig())) == "async:hi"

    def test_generator_object(self, scripted_generator):
        """Test an object with generate_text."""
        generator = scripted_generator(["text"], use_async=True)

        assert asyncio.run(call_generator(generator, "hi", GenerationConfig())) == "text"
        assert generator.prompts == ["hi"]

    def test_non_string_result(self):
        """Test that a generator must return text."""
        with pytest.raises(TypeError):
            asyncio.run(call_generator(lambda prompt, config: 42, "hi", GenerationConfig()))

    def test_async_detection(self, scripted_generator):
        """Test sync and async detection."""
        assert is_async_generator(async_function)
        assert not is_async_generator(sync_function)
        assert is_async_generator(scripted_generator([], use_async=True))
        assert not is_async_generator(scripted_generator([]))


class TestMessageText:
    """Test message_text()."""

    def test_string(self):
        """Test plain string content."""
        assert message_text("hello") == "hello"

    def test_blocks(self):
        """Test content blocks with non-text parts skipped."""
        content = [{"type": "text", "text": "hel"}, {"type": "image", "source": {}}, "lo"]

        assert message_text(content) == "hello"


class TestChatModelGenerator:
    """Test the LangChain adapter."""

    def test_returns_model_text(self):
        """Test that the chat model reply is returned as text."""
        generator = ChatModelGenerator(FakeListChatModel(responses=['{"question": "Why?"}']))

        result = asyncio.run(generator.generate_text("prompt", GenerationConfig(temperature=0.9)))

        assert result == '{"question": "Why?"}'

    def test_build_anthropic_model(self, monkeypatch: pytest.MonkeyPatch):
        """Test that the anthropic provider builds a ChatAnthropic model."""
        monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
        settings = Settings(model_provider="anthropic", model_name="claude-3-5-haiku-latest")

        assert isinstance(build_chat_model(settings), ChatAnthropic)
