"""Registration of test cases and suite hooks.

Registration is an explicit phase: callers add tests and hooks to a
``RegistryBuilder`` and then ``build()`` an immutable ``Registry`` that is
handed to the runner.
"""

from types import MappingProxyType
from typing import Any, Callable, Iterator, Mapping, Optional

from tddrunner.core.models import Hooks, SetupTeardown, TestCase, TestSuite


class Registry:
    """Read-only snapshot of registered tests and suite hooks.

    Both mappings keep the order in which suite names were first seen, and
    each bucket keeps registration order. The empty suite name holds tests
    that do not belong to a suite.
    """

    def __init__(
        self,
        tests: Mapping[str, tuple[TestCase, ...]],
        suites: Mapping[str, tuple[TestSuite, ...]],
        order: Optional[list[str]] = None,
    ):
        self._tests = MappingProxyType(dict(tests))
        self._suites = MappingProxyType(dict(suites))
        if order is None:
            order = list(tests) + [key for key in suites if key not in tests]
        self._order = tuple(order)

    @property
    def tests(self) -> Mapping[str, tuple[TestCase, ...]]:
        return self._tests

    @property
    def suites(self) -> Mapping[str, tuple[TestSuite, ...]]:
        return self._suites

    @property
    def test_count(self) -> int:
        """Total number of test cases across all suite buckets."""
        return sum(len(bucket) for bucket in self._tests.values())

    def suite_names(self) -> list[str]:
        """Suite names in the order they were first registered.

        Includes suites that only have hooks and no tests.
        """
        return list(self._order)

    def tests_for(self, suite_name: str) -> tuple[TestCase, ...]:
        return self._tests.get(suite_name, ())

    def suites_for(self, suite_name: str) -> tuple[TestSuite, ...]:
        return self._suites.get(suite_name, ())

    def has_suite(self, suite_name: str) -> bool:
        """Check whether any hooks were registered for a suite name."""
        return bool(self._suites.get(suite_name))

    def __iter__(self) -> Iterator[tuple[str, tuple[TestCase, ...]]]:
        for key in self._order:
            yield key, self.tests_for(key)

    def __len__(self) -> int:
        return self.test_count


class RegistryBuilder:
    """Collects test cases and suite hooks before a run."""

    def __init__(self):
        self._tests: dict[str, list[TestCase]] = {}
        self._suites: dict[str, list[TestSuite]] = {}
        self._order: list[str] = []

    def _touch(self, suite_name: str) -> None:
        if suite_name not in self._order:
            self._order.append(suite_name)

    def add_test(
        self,
        name: str,
        body: Callable[[TestCase], Any],
        suite: str = "",
        raises: Optional[type[BaseException]] = None,
        expected_failure: str = "",
    ) -> TestCase:
        """Register a test case.

        Args:
            name: Test name shown in the report
            body: Callable taking the TestCase
            suite: Suite name, empty for a standalone test
            raises: Exception class the body must raise
            expected_failure: Reason the test is expected to fail with

        Returns:
            The registered TestCase
        """
        if not name:
            raise ValueError("Test name cannot be empty")
        if not callable(body):
            raise TypeError(f"Test body for '{name}' is not callable")

        case = TestCase(
            name=name,
            body=body,
            suite_name=suite,
            expected_exception=raises,
            expected_failure_reason=expected_failure,
        )
        self._touch(suite)
        self._tests_bucket(suite).append(case)
        return case

    def add_suite(
        self,
        name: str,
        suite: str,
        hooks: Optional[SetupTeardown] = None,
        *,
        setup: Optional[Callable[[], Any]] = None,
        teardown: Optional[Callable[[], Any]] = None,
    ) -> TestSuite:
        """Register setup/teardown hooks for a suite.

        Pass either a ``hooks`` object with ``setup()``/``teardown()``
        methods or the two callables separately.
        """
        if hooks is None:
            hooks = Hooks()
            if setup is not None:
                hooks.setup = setup
            if teardown is not None:
                hooks.teardown = teardown
        elif setup is not None or teardown is not None:
            raise ValueError("Pass either a hooks object or setup/teardown callables, not both")

        hook_suite = TestSuite(name=name, suite_name=suite, hooks=hooks)
        self._touch(suite)
        self._suites_bucket(suite).append(hook_suite)
        return hook_suite

    def test(
        self,
        name: str,
        suite: str = "",
        raises: Optional[type[BaseException]] = None,
        expected_failure: str = "",
    ) -> Callable[[Callable[[TestCase], Any]], Callable[[TestCase], Any]]:
        """Decorator form of ``add_test``. The function is returned unchanged."""

        def decorator(func: Callable[[TestCase], Any]) -> Callable[[TestCase], Any]:
            self.add_test(name, func, suite=suite, raises=raises, expected_failure=expected_failure)
            return func

        return decorator

    def merge(self, other: "RegistryBuilder") -> None:
        """Append everything registered on ``other``, keeping its order."""
        for suite_name in other._order:
            self._touch(suite_name)
            if suite_name in other._tests:
                self._tests_bucket(suite_name).extend(other._tests[suite_name])
            if suite_name in other._suites:
                self._suites_bucket(suite_name).extend(other._suites[suite_name])

    def _tests_bucket(self, suite_name: str) -> list[TestCase]:
        return self._tests.setdefault(suite_name, [])

    def _suites_bucket(self, suite_name: str) -> list[TestSuite]:
        return self._suites.setdefault(suite_name, [])

    def build(self) -> Registry:
        """Snapshot everything registered so far."""
        return Registry(
            tests={key: tuple(bucket) for key, bucket in self._tests.items()},
            suites={key: tuple(bucket) for key, bucket in self._suites.items()},
            order=list(self._order),
        )
