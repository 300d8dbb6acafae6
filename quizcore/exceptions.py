"""Exceptions raised inside a generation attempt."""


class QuizCoreError(Exception):
    """Base class for quizcore errors."""


class ResponseParseError(QuizCoreError):
    """Raised when no parse strategy could recover a question from model output."""

    def __init__(self, message: str, strategies: list[str] | None = None):
        super().__init__(message)
        self.strategies = strategies or []


class LowQualityQuestionError(ResponseParseError):
    """Raised when the model echoed a prompt template instead of writing a question."""


class GenerationTimeoutError(QuizCoreError):
    """Raised when the text generator did not answer within the attempt timeout."""

    def __init__(self, timeout: float):
        super().__init__(f"Text generation timed out after {timeout:.2f}s")
        self.timeout = timeout


class GeneratorError(QuizCoreError):
    """Wraps any exception raised by the injected text generator."""
