"""Discovery and loading of registration modules.

A registration module is an ordinary Python file that defines a
``register(builder)`` function. Loading a module imports the file and calls
that function with the shared ``RegistryBuilder``.
"""

import importlib.util
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import Optional

from tddrunner.config import RunnerConfig
from tddrunner.core.registry import RegistryBuilder


@dataclass
class DiscoveryResult:
    """Result of module discovery."""

    modules: list[Path] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        """Check if discovery was successful."""
        return self.error is None

    @property
    def total_count(self) -> int:
        return len(self.modules)


@dataclass
class LoadResult:
    """Result of importing and registering discovered modules."""

    loaded: list[Path] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.errors


class LoadError(Exception):
    """Raised when a registration module cannot be loaded."""

    pass


class ModuleLoader:
    """Finds registration modules and runs their register functions."""

    def __init__(
        self,
        config: RunnerConfig,
        base_dir: Path,
        paths: Optional[list[str]] = None,
    ):
        """Initialize the loader.

        Args:
            config: TDDRunner configuration
            base_dir: Directory relative paths are resolved against
            paths: Files or directories overriding ``config.discovery.paths``
        """
        self.config = config
        self.base_dir = base_dir
        self.paths = list(paths) if paths else list(config.discovery.paths)

    def discover(self) -> DiscoveryResult:
        """Find registration modules, sorted by path within each directory."""
        modules: list[Path] = []

        for raw in self.paths:
            path = Path(raw)
            if not path.is_absolute():
                path = self.base_dir / path

            if path.is_file():
                found = [path]
            elif path.is_dir():
                found = sorted(
                    {
                        candidate
                        for pattern in self.config.discovery.patterns
                        for candidate in path.rglob(pattern)
                        if candidate.is_file()
                    }
                )
            else:
                return DiscoveryResult(modules=modules, error=f"Path not found: {path}")

            for module_path in found:
                if module_path not in modules:
                    modules.append(module_path)

        return DiscoveryResult(modules=modules)

    def load(self, builder: RegistryBuilder) -> LoadResult:
        """Import every discovered module and call its register function.

        A module that fails is recorded in ``LoadResult.errors`` and none of
        its registrations are kept; the others still load.
        """
        discovery = self.discover()
        result = LoadResult()
        if not discovery.success:
            result.errors[str(self.base_dir)] = discovery.error or "Discovery failed"
            return result

        for module_path in discovery.modules:
            # A module only contributes once its register function completed.
            module_builder = RegistryBuilder()
            try:
                self.load_module(module_path, module_builder)
            except LoadError as e:
                result.errors[str(module_path)] = str(e)
                continue
            builder.merge(module_builder)
            result.loaded.append(module_path)

        return result

    def load_module(self, module_path: Path, builder: RegistryBuilder) -> ModuleType:
        """Import one file and register its tests.

        Raises:
            LoadError: If the file cannot be imported or has no register function
        """
        module_name = "tddrunner_registration_" + re.sub(r"\W", "_", str(module_path.with_suffix("")))
        spec = importlib.util.spec_from_file_location(module_name, module_path)
        if spec is None or spec.loader is None:
            raise LoadError(f"Cannot import {module_path}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            sys.modules.pop(module_name, None)
            raise LoadError(f"Error importing {module_path.name}: {e}") from e

        register = getattr(module, self.config.discovery.register_function, None)
        if not callable(register):
            raise LoadError(
                f"{module_path.name} has no {self.config.discovery.register_function}() function"
            )

        try:
            register(builder)
        except Exception as e:
            raise LoadError(f"Error registering tests from {module_path.name}: {e}") from e

        return module
