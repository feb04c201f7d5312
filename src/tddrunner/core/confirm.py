"""Confirm functions used inside test bodies.

Each function compares an expected value with an actual one and raises a
``ConfirmError`` carrying the line of the call site when they differ.
"""

import inspect
from enum import Enum
from typing import Any

from tddrunner.core.signals import BoolConfirmError, ValueConfirmError


SINGLE_TOLERANCE = 0.0001
DOUBLE_TOLERANCE = 0.000001


class Precision(float, Enum):
    """Floating point precision and its comparison tolerance."""

    SINGLE = SINGLE_TOLERANCE
    DOUBLE = DOUBLE_TOLERANCE

    @property
    def tolerance(self) -> float:
        return float(self.value)


def _caller_line(stacklevel: int) -> int:
    """Line number ``stacklevel`` frames above the public confirm function."""
    frame = inspect.currentframe()
    try:
        # one hop for this helper, one for the confirm function itself
        for _ in range(stacklevel + 1):
            if frame is None or frame.f_back is None:
                break
            frame = frame.f_back
        return frame.f_lineno if frame is not None else -1
    finally:
        del frame


def confirm(expected: Any, actual: Any, *, stacklevel: int = 1) -> None:
    """Confirm that ``actual`` equals ``expected``.

    Booleans compare exactly and report only the expected value. Floats
    compare within the double precision tolerance. Everything else uses
    ``!=``.

    Raises:
        BoolConfirmError: If a boolean comparison fails
        ValueConfirmError: If any other comparison fails
    """
    if isinstance(expected, bool):
        if actual != expected:
            raise BoolConfirmError(expected, _caller_line(stacklevel))
    elif isinstance(expected, float):
        if abs(actual - expected) > Precision.DOUBLE.tolerance:
            raise ValueConfirmError(expected, actual, _caller_line(stacklevel))
    elif actual != expected:
        raise ValueConfirmError(expected, actual, _caller_line(stacklevel))


def confirm_true(actual: Any, *, stacklevel: int = 1) -> None:
    """Confirm that ``actual`` is true."""
    if actual != True:  # noqa: E712
        raise BoolConfirmError(True, _caller_line(stacklevel))


def confirm_false(actual: Any, *, stacklevel: int = 1) -> None:
    """Confirm that ``actual`` is false."""
    if actual != False:  # noqa: E712
        raise BoolConfirmError(False, _caller_line(stacklevel))


def confirm_close(
    expected: float,
    actual: float,
    precision: Precision = Precision.DOUBLE,
    *,
    stacklevel: int = 1,
) -> None:
    """Confirm two floating point values within the precision's tolerance.

    ``Precision.SINGLE`` allows a difference up to 0.0001 and
    ``Precision.DOUBLE`` up to 0.000001.
    """
    if abs(actual - expected) > precision.tolerance:
        raise ValueConfirmError(expected, actual, _caller_line(stacklevel))
