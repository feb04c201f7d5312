"""HTML report generation."""

from tddrunner.report.generator import ReportGenerator

__all__ = ["ReportGenerator"]
