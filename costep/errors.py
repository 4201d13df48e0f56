from __future__ import annotations

from typing import Any


class CostepError(Exception):
    """Base exception for all costep errors."""


class NotATaskError(CostepError, TypeError):
    """Raised when a value handed to spawn or a combinator cannot be driven."""

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(
            f"Expected a generator, a generator function or an awaitable, "
            f"got {type(value).__name__}: {value!r}\n"
            f"Hint: decorate the function with @suspendable or make sure it contains `yield`"
        )


class CallbackError(CostepError):
    """Raised when a callback-style function reports its error as a string."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


__all__ = ["CallbackError", "CostepError", "NotATaskError"]
