"""
TDDRunner - a small self-registering test engine.

This package provides tools to:
- Register test cases and suite setup/teardown hooks explicitly
- Confirm expected values with type-aware comparison rules
- Run everything once and report passed, failed and missed results
- Generate static HTML reports
"""

__version__ = "0.1.0"
__author__ = "TDDRunner Team"

from tddrunner.core.confirm import (
    Precision,
    confirm,
    confirm_close,
    confirm_false,
    confirm_true,
)
from tddrunner.core.models import TestCase, TestStatus, TestSuite, fixture
from tddrunner.core.registry import Registry, RegistryBuilder
from tddrunner.core.runner import Runner, RunResult

__all__ = [
    "Precision",
    "confirm",
    "confirm_close",
    "confirm_false",
    "confirm_true",
    "TestCase",
    "TestStatus",
    "TestSuite",
    "fixture",
    "Registry",
    "RegistryBuilder",
    "Runner",
    "RunResult",
]
