"""
Unit Tests for Report Formatters
================================
"""

import json

import pytest

from html_linter.core.engine.linter import HTMLLinter
from html_linter.core.reporting import (
    FormatterFactory,
    GitHubFormatter,
    HTMLFormatter,
    JSONFormatter,
    TextFormatter,
    format_report,
    summary_line,
)
from html_linter.models.schemas import Diagnostic, FileResult, LintConfig, LintReport, Severity


def make_report() -> LintReport:
    broken = FileResult(
        filename="docs/broken.html",
        diagnostics=[
            Diagnostic(rule_id="img-alt", severity=Severity.ERROR, message="<img> has no alt attribute", line=3, column=5, hint='Use alt=""'),
            Diagnostic(rule_id="img-dimensions", severity=Severity.WARNING, message="<img> is missing height", line=12, column=1),
            Diagnostic(rule_id="table-headers", severity=Severity.INFO, message="Table has data cells but no <th> headers", line=20, column=3),
        ],
        suppressed_count=2,
    )
    clean = FileResult(filename="index.html")
    return LintReport(results=[broken, clean])


class TestSummary:
    def test_problems(self):
        assert summary_line(make_report()) == "3 problems (1 error, 1 warning, 1 info) in 2 files"

    def test_clean(self):
        assert summary_line(LintReport(results=[FileResult(filename="a.html")])) == "No problems found in 1 file"


class TestTextFormatter:
    def test_grouped_output(self):
        output = TextFormatter().format(make_report())
        lines = output.splitlines()
        assert lines[0] == "docs/broken.html"
        assert lines[1] == "  3:5   error    <img> has no alt attribute  img-alt"
        assert lines[2] == "  12:1  warning  <img> is missing height  img-dimensions"
        assert lines[3].startswith("  20:3  info   ")
        assert "index.html" not in output
        assert lines[-1] == "3 problems (1 error, 1 warning, 1 info) in 2 files"
        assert output.endswith("\n")

    def test_clean_report(self):
        assert TextFormatter().format(LintReport()) == "No problems found in 0 files\n"


class TestJSONFormatter:
    def test_round_trips_to_report(self):
        report = make_report()
        output = JSONFormatter().format(report)
        data = json.loads(output)
        assert data["error_count"] == 1
        assert data["files_linted"] == 2
        assert data["results"][0]["diagnostics"][0]["rule_id"] == "img-alt"
        assert LintReport.model_validate_json(output).results[0].suppressed_count == 2


class TestHTMLFormatter:
    """Test the Jinja2 HTML report."""

    def test_renders_results(self):
        html = HTMLFormatter().format(make_report())
        assert html.startswith("<!DOCTYPE html>")
        assert "<h2>docs/broken.html</h2>" in html
        assert 'class="sev-error"' in html
        assert "2 suppressed by inline directives" in html
        assert "No problems" in html

    def test_messages_are_escaped(self):
        html = HTMLFormatter().format(make_report())
        assert "&lt;img&gt; has no alt attribute" in html
        assert "<img> has no alt" not in html
        assert "alt=&#34;&#34;" in html

    def test_report_page_lints_without_errors(self):
        html = HTMLFormatter().format(make_report())
        result = HTMLLinter(LintConfig(extends=["recommended"])).lint_text(html, filename="report.html")
        assert result.error_count == 0, [d.message for d in result.diagnostics]


class TestGitHubFormatter:
    def test_annotations(self):
        lines = GitHubFormatter().format(make_report()).splitlines()
        assert lines[0] == '::error file=docs/broken.html,line=3,col=5,title=img-alt::<img> has no alt attribute (Use alt="")'
        assert lines[1].startswith("::warning ")
        assert lines[2].startswith("::notice ")

    def test_escaping(self):
        result = FileResult(
            filename="C:,odd.html",
            diagnostics=[Diagnostic(rule_id="x", severity=Severity.ERROR, message="100%\nsure", line=1, column=1)],
        )
        output = GitHubFormatter().format(LintReport(results=[result]))
        assert output == "::error file=C%3A%2Codd.html,line=1,col=1,title=x::100%25%0Asure\n"

    def test_empty(self):
        assert GitHubFormatter().format(LintReport()) == ""


class TestFormatterFactory:
    @pytest.mark.parametrize(
        "name,cls,media_type",
        [
            ("text", TextFormatter, "text/plain"),
            ("json", JSONFormatter, "application/json"),
            ("html", HTMLFormatter, "text/html"),
            ("github", GitHubFormatter, "text/plain"),
        ],
    )
    def test_create(self, name, cls, media_type):
        formatter = FormatterFactory.create_formatter(name)
        assert isinstance(formatter, cls)
        assert formatter.media_type == media_type

    def test_unsupported(self):
        with pytest.raises(ValueError, match="Unsupported format: xml"):
            FormatterFactory.create_formatter("xml")

    def test_available_formats(self):
        assert FormatterFactory.available_formats() == ["text", "json", "html", "github"]

    def test_format_report_default_is_text(self):
        assert format_report(make_report()) == TextFormatter().format(make_report())
