"""Tests for the runner and its report."""

import io
import inspect

import pytest

from tddrunner.core.confirm import confirm
from tddrunner.core.models import TestStatus
from tddrunner.core.registry import RegistryBuilder
from tddrunner.core.runner import Runner, RunResult


def multiply_by_2(value):
    return value * 2


class TempTable:
    """Suite hooks object that records what ran."""

    def __init__(self, log, name="table", fail_setup=False, fail_teardown=False):
        self.log = log
        self.name = name
        self.table_name = ""
        self.fail_setup = fail_setup
        self.fail_teardown = fail_teardown

    def setup(self):
        self.log.append(f"setup {self.name}")
        if self.fail_setup:
            raise RuntimeError("no database")
        self.table_name = "test_data_01"

    def teardown(self):
        self.log.append(f"teardown {self.name}")
        if self.fail_teardown:
            confirm("dropped", "still there")


@pytest.fixture
def builder():
    """Create an empty registry builder."""
    return RegistryBuilder()


@pytest.fixture
def output():
    """Create an in-memory report sink."""
    return io.StringIO()


def run(builder, output=None):
    return Runner(output=output or io.StringIO()).run_all(builder.build())


class TestOutcomes:
    """Tests for per-test outcome classification."""

    def test_passed(self, builder):
        """Test a body without signal passes."""
        case = builder.add_test("ok", lambda c: None)

        result = run(builder)

        assert case.status is TestStatus.PASSED
        assert result.passed == 1
        assert result.failed == 0
        assert "------- Test: ok\nPassed\n" in result.report_text

    def test_confirm_failure(self, builder):
        """Test a failed confirm reports its line."""

        def body(case):
            confirm(0, multiply_by_2(1))

        line = inspect.getsourcelines(body)[1] + 1
        case = builder.add_test("bad", body)

        result = run(builder)

        assert case.status is TestStatus.FAILED
        assert case.confirm_location == line
        assert result.failed == 1
        assert (
            f"Failed confirm on line {line}\n    Expected: 0\n    Actual  : 2\n"
            in result.report_text
        )

    def test_unexpected_exception(self, builder):
        """Test an arbitrary exception becomes a generic failure."""

        def body(case):
            raise RuntimeError("boom")

        case = builder.add_test("boom", body)

        result = run(builder)

        assert case.status is TestStatus.FAILED
        assert case.failure_reason == "Unexpected exception thrown."
        assert case.confirm_location is None
        assert "Failed\nUnexpected exception thrown.\n" in result.report_text

    def test_expected_failure_matches(self, builder):
        """Test a matching failure reason counts as a pass."""

        def body(case):
            case.set_expected_failure_reason("Unexpected exception thrown.")
            raise RuntimeError("boom")

        case = builder.add_test("expected", body)

        result = run(builder)

        assert case.status is TestStatus.EXPECTED_FAILURE
        assert result.passed == 1
        assert result.failed == 0
        assert "Expected failure\nUnexpected exception thrown.\n" in result.report_text

    def test_expected_failure_declared_at_registration(self, builder):
        """Test declaring the expected reason when registering."""

        def body(case):
            confirm(1, 2)

        case = builder.add_test(
            "expected", body, expected_failure="    Expected: 1\n    Actual  : 2"
        )

        result = run(builder)

        assert case.status is TestStatus.EXPECTED_FAILURE
        assert result.passed == 1

    def test_expected_failure_reason_must_match_exactly(self, builder):
        """Test that a near-miss reason is a real failure."""

        def body(case):
            case.set_expected_failure_reason("Unexpected exception thrown")
            raise RuntimeError("boom")

        case = builder.add_test("near miss", body)

        result = run(builder)

        assert case.status is TestStatus.FAILED
        assert result.failed == 1

    def test_missed_expected_failure(self, builder):
        """Test a test expected to fail that passes is missed, not failed."""

        def body(case):
            case.set_expected_failure_reason("Unexpected exception thrown.")

        case = builder.add_test("missed", body)

        result = run(builder)

        assert case.status is TestStatus.MISSED_EXPECTED_FAILURE
        assert result.passed == 0
        assert result.failed == 0
        assert result.missed == 1
        assert (
            "Missed expected failure\nTest passed but was expected to fail.\n"
            in result.report_text
        )
        assert result.report_text.endswith(
            "Tests passed: 0\nTests failed: 0\nTests failures missed: 1\n"
        )

    def test_exception_contract_satisfied(self, builder):
        """Test a body raising the declared kind passes."""

        def body(case):
            raise ValueError("expected")

        case = builder.add_test("raises", body, raises=ValueError)

        run(builder)

        assert case.status is TestStatus.PASSED

    def test_exception_contract_violation(self, builder):
        """Test a body that never raises the declared kind."""
        case = builder.add_test("never raises", lambda c: None, raises=ValueError)

        result = run(builder)

        assert case.status is TestStatus.FAILED
        assert case.failure_reason == "Expected exception type ValueError was not thrown."
        assert case.confirm_location is None
        assert (
            "Failed\nExpected exception type ValueError was not thrown.\n"
            in result.report_text
        )

    def test_exception_contract_wrong_kind(self, builder):
        """Test a different exception is an unexpected failure."""

        def body(case):
            case.set_expected_failure_reason("Unexpected exception thrown.")
            raise KeyError("wrong type")

        case = builder.add_test("wrong kind", body, raises=ValueError)

        run(builder)

        assert case.status is TestStatus.EXPECTED_FAILURE

    def test_exception_contract_violation_expected(self, builder):
        """Test a contract violation can itself be the expected failure."""

        def body(case):
            case.set_expected_failure_reason(
                "Expected exception type ValueError was not thrown."
            )

        case = builder.add_test("never raises", body, raises=ValueError)

        result = run(builder)

        assert case.status is TestStatus.EXPECTED_FAILURE
        assert result.passed == 1


class TestReport:
    """Tests for the textual report."""

    def test_header_and_banners(self, builder):
        """Test the header, suite banners and summary."""
        builder.add_test("t1", lambda c: None)
        builder.add_suite("hooks", "S", setup=lambda: None)
        builder.add_test("t2", lambda c: None, suite="S")

        text, failed = run(builder)

        assert failed == 0
        assert text.startswith("Running 2 tests\n---------------- Suite: Single Tests\n")
        assert "---------------- Suite: S\n------- Setup: hooks\nPassed\n" in text
        assert "------- Teardown: hooks\nPassed\n" in text
        assert text.endswith("-----------------------------------\nTests passed: 2\nTests failed: 0\n")

    def test_report_written_to_stream(self, builder, output):
        """Test the report is written to the output sink."""
        builder.add_test("t1", lambda c: None)

        result = run(builder, output)

        assert output.getvalue() == result.report_text

    def test_control_characters_written_unchanged(self, builder, output):
        """Test tabs and carriage returns reach the stream exactly as reported."""
        builder.add_test("tab\tname", lambda case: confirm("a\tb", "a\r\nb"))

        result = run(builder, output)

        assert output.getvalue() == result.report_text
        assert "------- Test: tab\tname\n" in output.getvalue()
        assert "    Expected: a\tb\n    Actual  : a\r\nb\n" in output.getvalue()

    def test_empty_registry(self, output):
        """Test running nothing still produces a report."""
        result = Runner(output=output).run_all(RegistryBuilder().build())

        assert result.report_text == (
            "Running 0 tests\n-----------------------------------\n"
            "Tests passed: 0\nTests failed: 0\n"
        )
        assert result.failed == 0

    def test_verbose_timing_not_in_report(self, builder, output):
        """Test verbose timing goes to the sink but not the report text."""
        builder.add_test("t1", lambda c: None)

        result = Runner(output=output, verbose=True).run_all(builder.build())

        assert "Ran 1 tests in" in output.getvalue()
        assert "Ran 1 tests in" not in result.report_text

    def test_result_to_dict(self, builder):
        """Test converting a run result to a dictionary."""
        builder.add_test("t1", lambda c: None)

        d = run(builder).to_dict()

        assert d["total"] == 1
        assert d["passed"] == 1
        assert d["tests"][0]["status"] == "passed"

    def test_unpacks_as_text_and_failed(self):
        """Test RunResult unpacking."""
        text, failed = RunResult(report_text="x", failed=3)
        assert text == "x"
        assert failed == 3


class TestSuites:
    """Tests for suite setup/teardown handling."""

    def test_hooks_run_in_order_around_tests(self, builder):
        """Test setups, tests and teardowns run in registration order."""
        log = []
        builder.add_suite("hooks 1", "S", TempTable(log, "1"))
        builder.add_suite("hooks 2", "S", TempTable(log, "2"))
        builder.add_test("t1", lambda c: log.append("t1"), suite="S")
        builder.add_test("t2", lambda c: log.append("t2"), suite="S")

        result = run(builder)

        assert log == ["setup 1", "setup 2", "t1", "t2", "teardown 1", "teardown 2"]
        assert result.passed == 2
        assert [h.phase for h in result.hooks] == ["setup", "setup", "teardown", "teardown"]

    def test_tests_can_read_hook_state(self, builder):
        """Test a test body can use state prepared by suite setup."""
        table1 = TempTable([])
        table2 = TempTable([])
        builder.add_suite("hooks 1", "S", table1)
        builder.add_suite("hooks 2", "S", table2)

        def body(case):
            confirm("test_data_01", table1.table_name)
            confirm("test_data_01", table2.table_name)

        builder.add_test("uses tables", body, suite="S")

        assert run(builder).passed == 1

    def test_setup_failure_skips_suite(self, builder):
        """Test a failed setup skips remaining setups, tests and teardowns."""
        log = []
        builder.add_suite("hooks 1", "S", TempTable(log, "1", fail_setup=True))
        builder.add_suite("hooks 2", "S", TempTable(log, "2"))
        case = builder.add_test("t1", lambda c: log.append("t1"), suite="S")
        builder.add_test("after", lambda c: log.append("after"), suite="T")
        builder.add_suite("hooks T", "T", TempTable(log, "T"))

        result = run(builder)

        assert log == ["setup 1", "setup T", "after", "teardown T"]
        assert case.status is TestStatus.SKIPPED
        assert result.passed == 1
        assert result.failed == 1
        assert result.skipped == 1
        assert (
            "------- Setup: hooks 1\nFailed\nUnexpected exception thrown.\n"
            "Test suite setup failed. Skipping tests in suite.\n"
        ) in result.report_text
        assert "------- Test: t1" not in result.report_text

    def test_teardown_failure_reported(self, builder):
        """Test a failed teardown is reported without changing test outcomes."""
        log = []
        builder.add_suite("hooks 1", "S", TempTable(log, "1", fail_teardown=True))
        builder.add_suite("hooks 2", "S", TempTable(log, "2"))
        case = builder.add_test("t1", lambda c: None, suite="S")
        builder.add_test("next", lambda c: None, suite="T")
        builder.add_suite("hooks T", "T", TempTable(log, "T"))

        result = run(builder)

        assert case.status is TestStatus.PASSED
        assert log[-2:] == ["setup T", "teardown T"]
        assert "teardown 2" in log
        assert result.passed == 2
        assert result.failed == 1
        assert "------- Teardown: hooks 1\nFailed confirm on line " in result.report_text
        assert "    Expected: dropped\n    Actual  : still there\n" in result.report_text
        assert "Test suite teardown failed.\n" in result.report_text

    def test_hooks_run_without_tests(self, builder):
        """Test hooks registered for a suite with no tests still run."""
        log = []
        builder.add_suite("hooks", "S", TempTable(log))

        result = run(builder)

        assert log == ["setup table", "teardown table"]
        assert result.failed == 0
        assert "---------------- Suite: S\n" in result.report_text

    def test_missing_suite_aborts_run(self, builder):
        """Test tests under a suite without hooks stop the whole run."""
        x_case = builder.add_test("x1", lambda c: None, suite="X")
        builder.add_suite("hooks", "Y", setup=lambda: None)
        y_case = builder.add_test("y1", lambda c: None, suite="Y")

        result = run(builder)

        assert result.aborted is True
        assert result.failed == 1
        assert result.passed == 0
        assert x_case.status is TestStatus.SKIPPED
        assert y_case.status is TestStatus.SKIPPED
        assert "Test suite is not found. Exiting test application.\n" in result.report_text
        assert "Suite: Y" not in result.report_text
        assert result.report_text.endswith("Tests passed: 0\nTests failed: 1\n")


class TestEndToEnd:
    """End-to-end runs."""

    def test_suite_with_pass_and_fail(self, builder, output):
        """Test one suite with a passing and a failing confirm."""
        builder.add_suite("G setup", "G", setup=lambda: None)

        def t1(case):
            confirm(2, multiply_by_2(1))

        def t2(case):
            confirm(0, multiply_by_2(1))

        builder.add_test("t1", t1, suite="G")
        builder.add_test("t2", t2, suite="G")

        text, failed = Runner(output=output).run_all(builder.build())

        assert failed == 1
        assert "    Expected: 0\n    Actual  : 2" in text
        assert text.endswith("Tests passed: 1\nTests failed: 1\n")

    def test_registry_runs_once(self, builder):
        """Test a registry cannot be run a second time, and no body reruns."""
        calls = []
        builder.add_test("t1", lambda c: calls.append("t1"))
        registry = builder.build()
        Runner(output=io.StringIO()).run_all(registry)
        second_output = io.StringIO()

        with pytest.raises(RuntimeError):
            Runner(output=second_output).run_all(registry)

        assert calls == ["t1"]
        assert second_output.getvalue() == ""
