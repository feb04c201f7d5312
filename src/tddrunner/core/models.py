"""Data models for registered test cases and suite hooks."""

from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generator, Optional, Protocol

from tddrunner.core.signals import MissingExceptionError


class TestStatus(str, Enum):
    """Status of a test case."""

    __test__ = False

    PENDING = "pending"
    PASSED = "passed"
    FAILED = "failed"
    EXPECTED_FAILURE = "expected_failure"
    MISSED_EXPECTED_FAILURE = "missed_expected_failure"
    SKIPPED = "skipped"

    @property
    def is_terminal(self) -> bool:
        return self is not TestStatus.PENDING


class SetupTeardown(Protocol):
    """Anything with ``setup()`` and ``teardown()`` methods."""

    def setup(self) -> Any: ...

    def teardown(self) -> Any: ...


def _noop() -> None:
    return None


@dataclass
class Hooks:
    """A setup/teardown pair built from two plain callables."""

    setup: Callable[[], Any] = _noop
    teardown: Callable[[], Any] = _noop


class _Outcome:
    """Pass/fail state shared by test cases and suite hooks."""

    def __init__(self, name: str, suite_name: str = ""):
        self.name = name
        self.suite_name = suite_name
        self.passed = True
        self.failure_reason = ""
        self.confirm_location: Optional[int] = None

    def set_failed(self, reason: str, line: Optional[int] = None) -> None:
        """Record a failure. A failed entry always has a reason."""
        if not reason:
            raise ValueError("Failure reason cannot be empty")
        self.passed = False
        self.failure_reason = reason
        self.confirm_location = line


class TestCase(_Outcome):
    """A single registered test.

    The body is called with the test case itself, so it can declare an
    expected failure reason while it runs.
    """

    __test__ = False

    def __init__(
        self,
        name: str,
        body: Callable[["TestCase"], Any],
        suite_name: str = "",
        expected_exception: Optional[type[BaseException]] = None,
        expected_failure_reason: str = "",
    ):
        super().__init__(name, suite_name)
        if expected_exception is not None and not (
            isinstance(expected_exception, type)
            and issubclass(expected_exception, Exception)
        ):
            raise TypeError(
                f"Expected exception must be an Exception subclass, got {expected_exception!r}"
            )
        self.body = body
        self.expected_exception = expected_exception
        self.expected_failure_reason = expected_failure_reason
        self.status = TestStatus.PENDING
        self.duration_ms = 0

    def set_expected_failure_reason(self, reason: str) -> None:
        """Declare that this test should fail with exactly ``reason``."""
        self.expected_failure_reason = reason

    def run(self) -> None:
        """Run the body, enforcing the expected exception contract if any.

        Raises:
            MissingExceptionError: If the declared exception was not raised
        """
        if self.expected_exception is None:
            self.body(self)
            return

        try:
            self.body(self)
        except self.expected_exception:
            return
        raise MissingExceptionError(self.expected_exception.__name__)

    def finish(self, status: TestStatus) -> None:
        """Move to a terminal status. A test is only ever finished once."""
        if self.status.is_terminal:
            raise RuntimeError(
                f"Test '{self.name}' already finished as {self.status.value}"
            )
        if not status.is_terminal:
            raise ValueError("Cannot finish a test as pending")
        self.status = status

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "suite_name": self.suite_name,
            "status": self.status.value,
            "passed": self.passed,
            "failure_reason": self.failure_reason,
            "confirm_location": self.confirm_location,
            "expected_failure_reason": self.expected_failure_reason,
            "expected_exception": (
                self.expected_exception.__name__ if self.expected_exception else None
            ),
            "duration_ms": self.duration_ms,
        }

    def __repr__(self) -> str:
        return f"TestCase(name={self.name!r}, suite_name={self.suite_name!r}, status={self.status.value!r})"


class TestSuite(_Outcome):
    """Setup/teardown hooks registered under a suite name.

    The hooks object is held, not inherited from. Later hook objects in the
    same suite may read the state of earlier ones through ``hooks``.
    """

    __test__ = False

    def __init__(self, name: str, suite_name: str, hooks: SetupTeardown):
        super().__init__(name, suite_name)
        if not suite_name:
            raise ValueError("Suite hooks need a non-empty suite name")
        for method in ("setup", "teardown"):
            if not callable(getattr(hooks, method, None)):
                raise TypeError(f"Suite hooks object has no callable {method}()")
        self.hooks = hooks

    def suite_setup(self) -> None:
        self.hooks.setup()

    def suite_teardown(self) -> None:
        self.hooks.teardown()

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "suite_name": self.suite_name,
            "passed": self.passed,
            "failure_reason": self.failure_reason,
            "confirm_location": self.confirm_location,
        }

    def __repr__(self) -> str:
        return f"TestSuite(name={self.name!r}, suite_name={self.suite_name!r})"


@contextmanager
def fixture(hooks: SetupTeardown) -> Generator[Any, None, None]:
    """Scope ``hooks.setup()``/``hooks.teardown()`` around part of a test body.

    Teardown runs even when the body fails. If setup itself raises,
    teardown is not called.
    """
    hooks.setup()
    try:
        yield hooks
    finally:
        hooks.teardown()
