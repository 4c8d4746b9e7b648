"""
Report Formatters
=================

Render a LintReport as stylish text, JSON, a standalone HTML page or
GitHub Actions workflow annotations.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Type

import jinja2

from html_linter import __version__
from html_linter.config.logging import get_logger
from html_linter.models.schemas import Diagnostic, LintReport, Severity

logger = get_logger(__name__)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def summary_line(report: LintReport) -> str:
    problems = report.error_count + report.warning_count + report.info_count
    if problems == 0:
        return f"No problems found in {_plural(report.files_linted, 'file')}"
    return (
        f"{_plural(problems, 'problem')} ({_plural(report.error_count, 'error')}, "
        f"{_plural(report.warning_count, 'warning')}, {report.info_count} info) "
        f"in {_plural(report.files_linted, 'file')}"
    )


class BaseFormatter(ABC):
    """Abstract base class for report formatters."""

    media_type = "text/plain"

    @abstractmethod
    def format(self, report: LintReport) -> str:
        """Render the report."""
        pass


class TextFormatter(BaseFormatter):
    """Stylish output grouped by file."""

    def format(self, report: LintReport) -> str:
        lines: List[str] = []
        for result in report.results:
            if not result.diagnostics:
                continue
            lines.append(result.filename)
            width = max(len(f"{d.line}:{d.column}") for d in result.diagnostics)
            for d in result.diagnostics:
                location = f"{d.line}:{d.column}".ljust(width)
                lines.append(f"  {location}  {d.severity.value:<7}  {d.message}  {d.rule_id}")
            lines.append("")
        lines.append(summary_line(report))
        return "\n".join(lines) + "\n"


class JSONFormatter(BaseFormatter):
    media_type = "application/json"

    def format(self, report: LintReport) -> str:
        return report.model_dump_json(indent=2)


class HTMLFormatter(BaseFormatter):
    """Standalone HTML report rendered with Jinja2."""

    media_type = "text/html"

    def __init__(self) -> None:
        self.logger: Any = logger.bind(formatter="html")
        self._setup_jinja2_environment()

    def _setup_jinja2_environment(self) -> None:
        """Setup Jinja2 template environment."""
        template_dir = Path(__file__).parent / "templates"
        self.env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            autoescape=jinja2.select_autoescape(["html", "xml", "j2"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["severity_class"] = lambda severity: f"sev-{Severity(severity).value}"

    def format(self, report: LintReport) -> str:
        template = self.env.get_template("report.html.j2")
        html = template.render(report=report, summary=summary_line(report), version=__version__)
        self.logger.debug("HTML report rendered", files=report.files_linted, size=len(html))
        return html


class GitHubFormatter(BaseFormatter):
    """GitHub Actions workflow commands (`::error file=...::message`)."""

    _commands: Dict[Severity, str] = {
        Severity.ERROR: "error",
        Severity.WARNING: "warning",
        Severity.INFO: "notice",
    }

    @staticmethod
    def _escape_data(value: str) -> str:
        return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")

    @classmethod
    def _escape_property(cls, value: str) -> str:
        return cls._escape_data(value).replace(":", "%3A").replace(",", "%2C")

    def _annotation(self, filename: str, d: Diagnostic) -> str:
        properties = ",".join(
            [
                f"file={self._escape_property(filename)}",
                f"line={d.line}",
                f"col={d.column}",
                f"title={self._escape_property(d.rule_id)}",
            ]
        )
        message = d.message if not d.hint else f"{d.message} ({d.hint})"
        return f"::{self._commands[d.severity]} {properties}::{self._escape_data(message)}"

    def format(self, report: LintReport) -> str:
        lines = [self._annotation(r.filename, d) for r in report.results for d in r.diagnostics]
        return "\n".join(lines) + ("\n" if lines else "")


class FormatterFactory:
    """Factory for creating report formatters by name."""

    _formatters: Dict[str, Type[BaseFormatter]] = {
        "text": TextFormatter,
        "json": JSONFormatter,
        "html": HTMLFormatter,
        "github": GitHubFormatter,
    }

    @classmethod
    def create_formatter(cls, name: str) -> BaseFormatter:
        """
        Create a formatter instance.

        Args:
            name: Formatter name ("text", "json", "html", "github")

        Returns:
            Formatter instance

        Raises:
            ValueError: If the formatter is not supported
        """
        if name not in cls._formatters:
            raise ValueError(f"Unsupported format: {name}")
        return cls._formatters[name]()

    @classmethod
    def available_formats(cls) -> List[str]:
        return list(cls._formatters)


def format_report(report: LintReport, name: str = "text") -> str:
    return FormatterFactory.create_formatter(name).format(report)
