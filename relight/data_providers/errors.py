"""Errors raised while compiling or executing a pattern."""


class PatternError(Exception):
    """Base class for recoverable, user-facing pattern failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class InvalidSyntax(PatternError):
    """The engine rejected the pattern. ``message`` is the engine's diagnostic."""


class CatastrophicTimeout(PatternError):
    """Matching exceeded the time budget (usually runaway backtracking)."""

    def __init__(self, seconds: float):
        super().__init__(
            f"Pattern too expensive: matching did not finish within {seconds:g}s"
        )
        self.seconds = seconds
