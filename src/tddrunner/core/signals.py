"""Failure signals raised by test bodies and the boundary that classifies them.

Bodies and hooks fail by raising. ``invoke`` is the only place those
exceptions are caught; it hands the runner a tagged ``Signal`` instead, so
the runner decides outcomes by looking at ``Signal.kind``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional


UNEXPECTED_EXCEPTION_REASON = "Unexpected exception thrown."


class ConfirmError(AssertionError):
    """Raised when a confirm comparison does not hold."""

    def __init__(self, line: int):
        self.line = line
        self.reason = ""
        super().__init__(self.reason)

    def __str__(self) -> str:
        return self.reason


class BoolConfirmError(ConfirmError):
    """Boolean confirm failure. Only the expected value is rendered."""

    def __init__(self, expected: bool, line: int):
        super().__init__(line)
        self.expected = expected
        self.reason = "    Expected: " + ("true" if expected else "false")


class ValueConfirmError(ConfirmError):
    """Value confirm failure with both renderings."""

    def __init__(self, expected: Any, actual: Any, line: int):
        super().__init__(line)
        self.expected = expected
        self.actual = actual
        self.reason = f"    Expected: {expected}\n    Actual  : {actual}"


class MissingExceptionError(Exception):
    """Raised when a body declared to raise a kind of exception did not."""

    def __init__(self, kind_name: str):
        self.kind_name = kind_name
        super().__init__(self.reason)

    @property
    def reason(self) -> str:
        return f"Expected exception type {self.kind_name} was not thrown."


class SignalKind(str, Enum):
    """Classification of a failure that escaped a body or hook."""

    COMPARISON = "comparison"
    CONTRACT = "contract"
    UNCLASSIFIED = "unclassified"


@dataclass(frozen=True)
class Signal:
    """A classified failure handed from ``invoke`` to the runner."""

    kind: SignalKind
    reason: str
    line: Optional[int] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "kind": self.kind.value,
            "reason": self.reason,
            "line": self.line,
        }


def classify(error: Exception) -> Signal:
    """Turn an escaped exception into a Signal."""
    if isinstance(error, ConfirmError):
        return Signal(SignalKind.COMPARISON, error.reason, error.line)
    if isinstance(error, MissingExceptionError):
        return Signal(SignalKind.CONTRACT, error.reason)
    return Signal(SignalKind.UNCLASSIFIED, UNEXPECTED_EXCEPTION_REASON)


def invoke(fn: Callable[..., Any], *args: Any) -> Optional[Signal]:
    """Call ``fn`` and return the Signal for anything it raised.

    Returns None when the call completed normally.
    """
    try:
        fn(*args)
    except Exception as e:
        return classify(e)
    return None
