"""Test execution and reporting."""

import sys
import time
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, TextIO

from tddrunner.core.models import TestCase, TestStatus, TestSuite
from tddrunner.core.registry import Registry
from tddrunner.core.signals import Signal, SignalKind, invoke


SINGLE_TESTS_NAME = "Single Tests"
MISSED_FAILURE_TEXT = "Test passed but was expected to fail."
SUMMARY_SEPARATOR = "-----------------------------------"


@dataclass
class HookResult:
    """Outcome of one suite setup or teardown call."""

    name: str
    suite_name: str
    phase: str
    passed: bool = True
    failure_reason: str = ""
    confirm_location: Optional[int] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "suite_name": self.suite_name,
            "phase": self.phase,
            "passed": self.passed,
            "failure_reason": self.failure_reason,
            "confirm_location": self.confirm_location,
        }


@dataclass
class RunResult:
    """Everything a single run produced.

    Unpacks as ``(report_text, failed)`` so callers that only need the
    report and the error signal can write ``text, failed = runner.run_all(r)``.
    """

    report_text: str = ""
    total: int = 0
    passed: int = 0
    failed: int = 0
    missed: int = 0
    skipped: int = 0
    duration_ms: int = 0
    aborted: bool = False
    tests: list[TestCase] = field(default_factory=list)
    hooks: list[HookResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.failed == 0

    def __iter__(self) -> Iterator[Any]:
        yield self.report_text
        yield self.failed

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "missed": self.missed,
            "skipped": self.skipped,
            "duration_ms": self.duration_ms,
            "aborted": self.aborted,
            "tests": [t.to_dict() for t in self.tests],
            "hooks": [h.to_dict() for h in self.hooks],
            "report_text": self.report_text,
        }


class Runner:
    """Runs every registered suite and test once, in registration order."""

    def __init__(
        self,
        output: Optional[TextIO] = None,
        verbose: bool = False,
    ):
        """Initialize the runner.

        Args:
            output: Stream the report is written to (default: stdout)
            verbose: Print timing details after the summary
        """
        self.output = output
        self.verbose = verbose
        self._lines: list[str] = []

    def run_all(self, registry: Registry) -> RunResult:
        """Run the registry and return the report and counters.

        Test and hook failures are recorded, never raised. The only thing
        that ends a run early is a suite with tests but no registered hooks.

        Raises:
            RuntimeError: If any test in the registry has already finished
        """
        finished = [
            case.name
            for suite_name in registry.suite_names()
            for case in registry.tests_for(suite_name)
            if case.status is not TestStatus.PENDING
        ]
        if finished:
            raise RuntimeError(
                f"Registry has already been run ({len(finished)} finished tests)"
            )

        self._lines = []
        start_time = time.time()
        result = RunResult(total=registry.test_count)

        self._emit(f"Running {registry.test_count} tests")

        for suite_name in registry.suite_names():
            cases = registry.tests_for(suite_name)
            self._emit(f"---------------- Suite: {suite_name or SINGLE_TESTS_NAME}")

            if suite_name:
                hook_suites = registry.suites_for(suite_name)
                if not hook_suites:
                    self._emit("Test suite is not found. Exiting test application.")
                    result.failed += 1
                    result.aborted = True
                    break

                if not self._run_setups(hook_suites, result):
                    self._emit("Test suite setup failed. Skipping tests in suite.")
                    self._skip(cases, result)
                    continue

            for case in cases:
                self._run_test(case, result)

            if suite_name and not self._run_teardowns(hook_suites, result):
                self._emit("Test suite teardown failed.")

        if result.aborted:
            for suite_name in registry.suite_names():
                self._skip(
                    [c for c in registry.tests_for(suite_name) if c.status is TestStatus.PENDING],
                    result,
                )

        self._emit(SUMMARY_SEPARATOR)
        summary = f"Tests passed: {result.passed}\nTests failed: {result.failed}"
        if result.missed:
            summary += f"\nTests failures missed: {result.missed}"
        self._emit(summary)

        result.duration_ms = int((time.time() - start_time) * 1000)
        result.report_text = "\n".join(self._lines) + "\n"

        if self.verbose:
            self._write(
                f"Ran {result.total} tests in {result.duration_ms}ms "
                f"({result.skipped} skipped)"
            )

        return result

    def _emit(self, text: str) -> None:
        self._lines.append(text)
        self._write(text)

    def _write(self, text: str) -> None:
        # Written unchanged; report values may hold tabs or control characters.
        stream = self.output if self.output is not None else sys.stdout
        stream.write(text + "\n")

    def _skip(self, cases: Any, result: RunResult) -> None:
        for case in cases:
            case.finish(TestStatus.SKIPPED)
            result.skipped += 1
            result.tests.append(case)

    def _run_test(self, case: TestCase, result: RunResult) -> None:
        self._emit(f"------- Test: {case.name}")

        start_time = time.perf_counter()
        signal = invoke(case.run)
        case.duration_ms = int((time.perf_counter() - start_time) * 1000)

        if signal is not None:
            self._record_failure(case, signal)

        status = self._classify(case)
        case.finish(status)
        result.tests.append(case)

        if status is TestStatus.PASSED:
            result.passed += 1
            self._emit("Passed")
        elif status is TestStatus.MISSED_EXPECTED_FAILURE:
            result.missed += 1
            self._emit(f"Missed expected failure\n{MISSED_FAILURE_TEXT}")
        elif status is TestStatus.EXPECTED_FAILURE:
            result.passed += 1
            self._emit(f"Expected failure\n{case.failure_reason}")
        else:
            result.failed += 1
            self._emit_failure(case.failure_reason, case.confirm_location)

    @staticmethod
    def _classify(case: TestCase) -> TestStatus:
        """Pick the terminal status for a case that has just run."""
        expected = case.expected_failure_reason
        if case.passed:
            return TestStatus.MISSED_EXPECTED_FAILURE if expected else TestStatus.PASSED
        if expected and expected == case.failure_reason:
            return TestStatus.EXPECTED_FAILURE
        return TestStatus.FAILED

    @staticmethod
    def _record_failure(target: Any, signal: Signal) -> None:
        if signal.kind is SignalKind.COMPARISON:
            target.set_failed(signal.reason, signal.line)
        else:
            target.set_failed(signal.reason)

    def _emit_failure(self, reason: str, line: Optional[int]) -> None:
        if line is not None:
            self._emit(f"Failed confirm on line {line}\n{reason}")
        else:
            self._emit(f"Failed\n{reason}")

    def _run_hook(self, hook_suite: TestSuite, phase: str, result: RunResult) -> bool:
        label = "Setup" if phase == "setup" else "Teardown"
        self._emit(f"------- {label}: {hook_suite.name}")

        call = hook_suite.suite_setup if phase == "setup" else hook_suite.suite_teardown
        signal = invoke(call)

        record = HookResult(
            name=hook_suite.name,
            suite_name=hook_suite.suite_name,
            phase=phase,
        )
        result.hooks.append(record)

        if signal is None:
            self._emit("Passed")
            return True

        # Hooks have no expected-failure concept; any signal is a failure.
        self._record_failure(hook_suite, signal)
        record.passed = False
        record.failure_reason = hook_suite.failure_reason
        record.confirm_location = hook_suite.confirm_location
        result.failed += 1
        self._emit_failure(hook_suite.failure_reason, hook_suite.confirm_location)
        return False

    def _run_setups(self, hook_suites: tuple[TestSuite, ...], result: RunResult) -> bool:
        """Run setups in order, stopping at the first failure."""
        for hook_suite in hook_suites:
            if not self._run_hook(hook_suite, "setup", result):
                return False
        return True

    def _run_teardowns(self, hook_suites: tuple[TestSuite, ...], result: RunResult) -> bool:
        """Run every teardown in order. Returns False if any failed."""
        ok = True
        for hook_suite in hook_suites:
            if not self._run_hook(hook_suite, "teardown", result):
                ok = False
        return ok
