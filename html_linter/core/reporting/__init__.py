"""
Reporting Module
================

Formatters turning lint reports into text, JSON, HTML or GitHub annotations.
"""

from .formatters import (
    BaseFormatter,
    FormatterFactory,
    GitHubFormatter,
    HTMLFormatter,
    JSONFormatter,
    TextFormatter,
    format_report,
    summary_line,
)

__all__ = [
    "BaseFormatter",
    "FormatterFactory",
    "GitHubFormatter",
    "HTMLFormatter",
    "JSONFormatter",
    "TextFormatter",
    "format_report",
    "summary_line",
]
