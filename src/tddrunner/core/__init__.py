"""Core registration and execution functionality."""

from tddrunner.core.registry import Registry, RegistryBuilder
from tddrunner.core.runner import Runner, RunResult

__all__ = ["Registry", "RegistryBuilder", "Runner", "RunResult"]
