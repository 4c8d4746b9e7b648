"""
Command Line Interface
======================

`htmllint [paths...]` lints HTML files, Markdown notes and directories.
Reads stdin when no path (or `-`) is given.

Exit codes: 0 clean, 1 lint errors or too many warnings, 2 usage or
configuration error.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from html_linter import __version__
from html_linter.config.logging import get_logger
from html_linter.config.settings import get_settings
from html_linter.core.engine.config import (
    PRESETS,
    discover_config,
    load_config,
    load_config_file,
    with_rule_overrides,
)
from html_linter.core.engine.linter import lint_html, lint_paths
from html_linter.core.errors import LintConfigError
from html_linter.core.reporting import FormatterFactory
from html_linter.core.rules import registry
from html_linter.models.schemas import FileResult, LintConfig, LintReport, Severity

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_LINT_FAILED = 1
EXIT_USAGE = 2


def parse_rule_override(value: str) -> Tuple[str, str]:
    """argparse type for `--rule ID=SEVERITY`."""
    rule_id, sep, severity = value.partition("=")
    if not sep or not rule_id.strip() or not severity.strip():
        raise argparse.ArgumentTypeError(f"expected ID=SEVERITY, got '{value}'")
    return rule_id.strip(), severity.strip().lower()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="htmllint",
        description="Lint HTML documents and html blocks in Markdown notes",
    )
    parser.add_argument("paths", nargs="*", help="Files or directories to lint ('-' or nothing reads stdin)")
    parser.add_argument("-c", "--config", help="Config file (default: nearest .htmllintrc.*)")
    parser.add_argument("--preset", choices=list(PRESETS), help="Replace the configured presets")
    parser.add_argument(
        "--rule",
        action="append",
        default=[],
        type=parse_rule_override,
        metavar="ID=SEVERITY",
        help="Override a rule severity (error, warning, info, off); repeatable",
    )
    parser.add_argument(
        "-f", "--format", default="text", choices=FormatterFactory.available_formats(), help="Output format"
    )
    parser.add_argument("-o", "--output", help="Write the report to a file instead of stdout")
    parser.add_argument("--max-warnings", type=int, help="Fail when warnings exceed this number")
    parser.add_argument("-q", "--quiet", action="store_true", help="Report errors only")
    parser.add_argument("--no-markdown", action="store_true", help="Skip Markdown files")
    parser.add_argument(
        "--report-unused-disables", action="store_true", help="Warn about directives that suppress nothing"
    )
    parser.add_argument("--list-rules", action="store_true", help="List available rules and exit")
    parser.add_argument("--stdin-filename", help="Filename used for stdin input")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def build_config(args: argparse.Namespace) -> LintConfig:
    """
    Build the effective configuration from the config file and CLI flags.

    Raises:
        LintConfigError: If the config file or a flag is invalid
    """
    if args.config:
        config = load_config_file(args.config)
    else:
        found = discover_config(Path.cwd())
        if found is not None:
            logger.info("Using discovered config", path=str(found))
            config = load_config_file(found)
        else:
            config = LintConfig(extends=[get_settings().default_preset])

    data = config.model_dump(mode="json")
    if args.preset:
        data["extends"] = [args.preset]
    if args.report_unused_disables:
        data["report_unused_disables"] = True
    if args.no_markdown:
        data["markdown"] = False
    if args.max_warnings is not None:
        data["max_warnings"] = args.max_warnings
    config = load_config(data, source="command line")

    if args.rule:
        config = with_rule_overrides(config, dict(args.rule))
    return config


def errors_only(report: LintReport) -> LintReport:
    results = [
        FileResult(
            filename=r.filename,
            source_type=r.source_type,
            diagnostics=[d for d in r.diagnostics if d.severity == Severity.ERROR],
            suppressed_count=r.suppressed_count,
            processing_time=r.processing_time,
        )
        for r in report.results
    ]
    return LintReport(results=results, processing_time=report.processing_time)


def list_rules(output_format: str) -> str:
    infos = registry.info()
    if output_format == "json":
        return json.dumps([info.model_dump(mode="json") for info in infos], indent=2) + "\n"

    width = max(len(info.id) for info in infos)
    lines = []
    for info in infos:
        marker = "*" if info.recommended else " "
        lines.append(
            f"{marker} {info.id:<{width}}  {info.category.value:<13}  {info.default_severity.value:<7}  {info.description}"
        )
    lines.append("")
    lines.append("* = enabled by the recommended preset")
    return "\n".join(lines) + "\n"


async def run(args: argparse.Namespace) -> int:
    config = build_config(args)
    formatter = FormatterFactory.create_formatter(args.format)

    paths: List[str] = args.paths
    if not paths or paths == ["-"]:
        content = sys.stdin.read()
        filename = args.stdin_filename or "<stdin>"
        result = await lint_html(content, config=config, filename=filename)
        report = LintReport(results=[result], processing_time=result.processing_time)
    else:
        report = await lint_paths(paths, config=config)

    # Exit status always reflects warnings, even when they are not printed.
    failed = report.has_errors or report.exceeds_warnings(config.max_warnings)
    shown = errors_only(report) if args.quiet else report

    rendered = formatter.format(shown)
    if args.output:
        Path(args.output).write_text(rendered, encoding="utf-8")
    else:
        sys.stdout.write(rendered)

    if report.exceeds_warnings(config.max_warnings):
        sys.stderr.write(f"Too many warnings ({report.warning_count}, maximum {config.max_warnings})\n")
    return EXIT_LINT_FAILED if failed else EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the htmllint command."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.getLogger().setLevel(logging.INFO if args.verbose else logging.WARNING)

    if args.list_rules:
        sys.stdout.write(list_rules(args.format))
        return EXIT_OK

    try:
        return asyncio.run(run(args))
    except LintConfigError as e:
        for message in e.errors:
            sys.stderr.write(f"htmllint: config error: {message}\n")
        return EXIT_USAGE
    except OSError as e:
        sys.stderr.write(f"htmllint: {e}\n")
        return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
