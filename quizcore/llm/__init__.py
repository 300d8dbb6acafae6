"""Text generator capability and chat model adapter."""

from .generator import (
    ChatModelGenerator,
    TextGenerator,
    build_chat_model,
    call_generator,
    message_text,
)

__all__ = [
    "TextGenerator",
    "ChatModelGenerator",
    "build_chat_model",
    "call_generator",
    "message_text",
]
