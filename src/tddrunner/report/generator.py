"""Report generation using Jinja2 templates."""

from datetime import datetime
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from tddrunner.config import RunnerConfig
from tddrunner.core.runner import RunResult


class ReportGenerator:
    """Generates a static HTML report from a run result."""

    def __init__(self, config: RunnerConfig, base_dir: Path):
        """Initialize the report generator.

        Args:
            config: TDDRunner configuration
            base_dir: Base directory of the project
        """
        self.config = config
        self.base_dir = base_dir

        template_dir = Path(__file__).parent / "templates"
        self.env = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "xml"]),
        )

        self.env.filters["duration_format"] = self._format_duration
        self.env.filters["percentage"] = self._format_percentage
        self.env.filters["status_label"] = self._format_status

    def generate(self, result: RunResult) -> Path:
        """Generate an HTML report.

        Returns:
            Path to the generated report file
        """
        context = self._prepare_context(result)

        template = self.env.get_template("report.html")
        html_content = template.render(**context)

        output_dir = self.base_dir / self.config.report.output_dir
        output_dir.mkdir(parents=True, exist_ok=True)

        report_path = output_dir / self.config.report.filename
        report_path.write_text(html_content, encoding="utf-8")

        return report_path

    def _prepare_context(self, result: RunResult) -> dict[str, Any]:
        """Prepare context for template rendering."""
        data = result.to_dict()
        executed = result.passed + result.failed + result.missed
        pass_rate = (result.passed / executed * 100) if executed > 0 else 0

        # Group tests by suite, keeping run order
        suites: dict[str, list[dict]] = {}
        for test in data["tests"]:
            suites.setdefault(test["suite_name"] or "Single Tests", []).append(test)

        return {
            "title": self.config.report.title,
            "project_name": self.config.project.name,
            "description": self.config.project.description,
            "generated_at": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            "total": result.total,
            "passed": result.passed,
            "failed": result.failed,
            "missed": result.missed,
            "skipped": result.skipped,
            "aborted": result.aborted,
            "pass_rate": pass_rate,
            "duration_ms": result.duration_ms,
            "suites": suites,
            "hook_failures": [h for h in data["hooks"] if not h["passed"]],
            "report_text": result.report_text,
        }

    @staticmethod
    def _format_duration(ms: int) -> str:
        """Format duration in milliseconds to human-readable string."""
        if ms < 1000:
            return f"{ms}ms"
        elif ms < 60000:
            return f"{ms / 1000:.2f}s"
        else:
            minutes = ms // 60000
            seconds = (ms % 60000) / 1000
            return f"{minutes}m {seconds:.1f}s"

    @staticmethod
    def _format_percentage(value: float) -> str:
        """Format a value as percentage."""
        return f"{value:.1f}%"

    @staticmethod
    def _format_status(value: str) -> str:
        return value.replace("_", " ").capitalize()
