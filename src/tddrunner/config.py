"""Configuration management for TDDRunner."""

import json
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


CONFIG_NAMES = ["tddrunner.json", ".tddrunner.json"]


class ProjectConfig(BaseModel):
    """Project identification and metadata."""

    name: str = Field(default="my-project", description="Project name for identification")
    description: str = Field(default="", description="Brief description shown in reports")


class DiscoveryConfig(BaseModel):
    """Where registration modules are found and how they are called."""

    paths: list[str] = Field(default_factory=lambda: ["tests"], description="Files or directories to search")
    patterns: list[str] = Field(
        default_factory=lambda: ["tdd_*.py", "*_tdd.py"],
        description="Glob patterns matching registration modules",
    )
    register_function: str = Field(
        default="register", description="Module-level function called with the registry builder"
    )

    @field_validator("patterns")
    @classmethod
    def validate_patterns(cls, v: list[str]) -> list[str]:
        if not v or not all(p.strip() for p in v):
            raise ValueError("At least one non-empty discovery pattern is required")
        return v

    @field_validator("register_function")
    @classmethod
    def validate_register_function(cls, v: str) -> str:
        if not v.isidentifier():
            raise ValueError(f"Register function must be a valid identifier: {v!r}")
        return v


class ReportConfig(BaseModel):
    """HTML report configuration."""

    enabled: bool = Field(default=False, description="Write an HTML report after each run")
    output_dir: str = Field(default="./reports", description="Directory for report output")
    filename: str = Field(default="tdd_report.html", description="Report filename")
    title: str = Field(default="Test Results", description="Report title")


class RunnerConfig(BaseModel):
    """Main configuration for TDDRunner."""

    project: ProjectConfig = Field(default_factory=ProjectConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
    verbose: bool = Field(default=False, description="Print timing details after the summary")

    @classmethod
    def from_file(cls, path: Path | str) -> "RunnerConfig":
        """Load configuration from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "r") as f:
            data = json.load(f)

        return cls.model_validate(data)

    @classmethod
    def find_and_load(cls, start_dir: Path | str | None = None) -> "RunnerConfig":
        """Find and load configuration file, searching up the directory tree."""
        if start_dir is None:
            start_dir = Path.cwd()
        else:
            start_dir = Path(start_dir)

        current = start_dir.resolve()
        while True:
            for name in CONFIG_NAMES:
                config_path = current / name
                if config_path.exists():
                    return cls.from_file(config_path)
            if current == current.parent:
                break
            current = current.parent

        raise FileNotFoundError(
            "No configuration file found. Create tddrunner.json or run 'tddrunner init'"
        )

    def to_file(self, path: Path | str) -> None:
        """Save configuration to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)

    def get_absolute_paths(self, base_dir: Path | str | None = None) -> dict[str, Any]:
        """Get absolute paths for various config paths."""
        if base_dir is None:
            base_dir = Path.cwd()
        else:
            base_dir = Path(base_dir)

        return {
            "discovery_paths": [(base_dir / p).resolve() for p in self.discovery.paths],
            "report_output_dir": (base_dir / self.report.output_dir).resolve(),
        }


def get_default_config() -> RunnerConfig:
    """Return a default configuration."""
    return RunnerConfig(
        project=ProjectConfig(name="my-project"),
        discovery=DiscoveryConfig(paths=["tests"]),
    )


def create_example_config(output_path: Path | str, name: Optional[str] = None) -> Path:
    """Create an example configuration file."""
    output_path = Path(output_path)
    config = get_default_config()
    if name:
        config.project.name = name
    config.project.description = "Brief description of your project for the report"
    config.to_file(output_path)
    return output_path
