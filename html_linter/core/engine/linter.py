"""
HTML Linter
===========

Orchestrates a lint run: source detection, DOM building, rule scheduling,
suppression and result assembly. `HTMLLinter` is the synchronous core;
the module-level coroutines wrap it for the CLI, API and MCP server.
"""

import asyncio
import fnmatch
import time
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from html_linter.config.logging import get_logger
from html_linter.config.settings import Settings, get_settings
from html_linter.core.dom import Document, ParseIssue, build_dom
from html_linter.core.errors import LintConfigError
from html_linter.core.rules import registry
from html_linter.core.sources.markdown import detect_source_type, parse_markdown
from html_linter.models.schemas import (
    Diagnostic,
    FileResult,
    LintConfig,
    LintReport,
    Severity,
    SourceType,
)
from .config import ResolvedRule, resolve_rules, with_rule_overrides
from .suppression import DIRECTIVE_RULE, UNUSED_DISABLE_RULE, SuppressionMap
from .visitor import INTERNAL_ERROR, run_rules

logger = get_logger(__name__)

FILE_TOO_LARGE = "file-too-large"
FILE_READ = "file-read"
FRONT_MATTER = "front-matter"

# Diagnostics produced by the engine rather than a registered rule.
ENGINE_RULE_IDS = frozenset({INTERNAL_ERROR, DIRECTIVE_RULE, UNUSED_DISABLE_RULE, FILE_TOO_LARGE, FILE_READ, FRONT_MATTER})

PathLike = Union[str, Path]


def _engine_diagnostic(rule_id: str, message: str, severity: Severity = Severity.ERROR, line: int = 1) -> Diagnostic:
    return Diagnostic(rule_id=rule_id, severity=severity, message=message, line=line, column=1)


class HTMLLinter:
    """Lints HTML documents and Markdown notes with a resolved rule set."""

    def __init__(self, config: Optional[LintConfig] = None, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self.config = config or LintConfig(extends=[self.settings.default_preset])
        self.rules: List[ResolvedRule] = resolve_rules(self.config)
        self.logger: Any = logger.bind(component="linter")
        self.logger.debug("Linter initialized", rules=len(self.rules), extends=self.config.extends)

    @property
    def rule_ids(self) -> List[str]:
        return [r.id for r in self.rules]

    def lint_text(
        self,
        text: str,
        filename: str = "<input>",
        source_type: Optional[Union[SourceType, str]] = None,
        fragment: Optional[bool] = None,
    ) -> FileResult:
        """
        Lint source text.

        Args:
            text: HTML or Markdown source
            filename: Name used in diagnostics and for source type detection
            source_type: Override detection from the filename
            fragment: Force (True) or disable (False) fragment mode

        Returns:
            FileResult with sorted, suppression-filtered diagnostics
        """
        start_time = time.time()
        source_type = SourceType(source_type) if source_type else detect_source_type(filename)
        if text.startswith("\ufeff"):
            text = text[1:]

        size = len(text.encode("utf-8"))
        if size > self.settings.max_source_bytes:
            diagnostics = [
                _engine_diagnostic(
                    FILE_TOO_LARGE,
                    f"Source is {size} bytes; the limit is {self.settings.max_source_bytes}",
                )
            ]
            suppressed = 0
        elif source_type == SourceType.MARKDOWN:
            diagnostics, suppressed = self._lint_markdown(text, filename, fragment)
        else:
            diagnostics, suppressed = self._lint_source(text, filename, fragment, self.rules)

        diagnostics.sort(key=lambda d: d.sort_key)
        processing_time = time.time() - start_time
        result = FileResult(
            filename=filename,
            source_type=source_type,
            diagnostics=diagnostics,
            suppressed_count=suppressed,
            processing_time=processing_time,
        )
        self.logger.debug(
            "Source linted",
            filename=filename,
            errors=result.error_count,
            warnings=result.warning_count,
            suppressed=suppressed,
            processing_time=processing_time,
        )
        return result

    def lint_document(
        self,
        document: Document,
        filename: str = "<input>",
        fragment: Optional[bool] = None,
        rules: Optional[Sequence[ResolvedRule]] = None,
    ) -> List[Diagnostic]:
        """Run the rules over a parsed document; no suppression is applied."""
        return run_rules(document, self.rules if rules is None else rules, filename=filename, fragment=fragment)

    def _lint_source(
        self,
        text: str,
        filename: str,
        fragment: Optional[bool],
        rules: Sequence[ResolvedRule],
        line_offset: int = 0,
        column_offset: Union[int, Sequence[int]] = 0,
    ) -> Tuple[List[Diagnostic], int]:
        document = build_dom(text, line_offset=line_offset, column_offset=column_offset)
        raw = self.lint_document(document, filename, fragment, rules)

        known = set(registry.ids()) | ENGINE_RULE_IDS
        suppressions = SuppressionMap.from_document(document, self.settings.directive_prefix, known)
        diagnostics, suppressed = suppressions.apply(raw)
        diagnostics.extend(suppressions.diagnostics)
        if self.config.report_unused_disables:
            diagnostics.extend(suppressions.unused_diagnostics())
        return diagnostics, suppressed

    def _lint_markdown(self, text: str, filename: str, fragment: Optional[bool]) -> Tuple[List[Diagnostic], int]:
        if not (self.config.markdown and self.settings.markdown_enabled):
            return [], 0

        note = parse_markdown(text)
        diagnostics: List[Diagnostic] = []
        if note.front_matter_error:
            diagnostics.append(_engine_diagnostic(FRONT_MATTER, note.front_matter_error))

        rules = self.rules
        overrides = note.rule_overrides
        if overrides:
            try:
                rules = resolve_rules(with_rule_overrides(self.config, overrides))
            except (LintConfigError, ValidationError) as e:
                diagnostics.append(_engine_diagnostic(FRONT_MATTER, f"Invalid {self.settings.directive_prefix} settings in front-matter: {e}"))

        suppressed_total = 0
        for block in note.blocks:
            block_diagnostics, suppressed = self._lint_source(
                block.content,
                filename,
                fragment,
                rules,
                line_offset=block.line_offset,
                column_offset=block.line_indents,
            )
            diagnostics.extend(block_diagnostics)
            suppressed_total += suppressed
        return diagnostics, suppressed_total

    def lint_file(self, path: PathLike) -> FileResult:
        """Read and lint a file. Read failures become a `file-read` diagnostic."""
        path = Path(path)
        filename = str(path)
        try:
            size = path.stat().st_size
            if size > self.settings.max_source_bytes:
                return FileResult(
                    filename=filename,
                    source_type=detect_source_type(filename),
                    diagnostics=[
                        _engine_diagnostic(
                            FILE_TOO_LARGE,
                            f"File is {size} bytes; the limit is {self.settings.max_source_bytes}",
                        )
                    ],
                )
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            self.logger.warning("Cannot read source", filename=filename, error=str(e))
            return FileResult(
                filename=filename,
                source_type=detect_source_type(filename),
                diagnostics=[_engine_diagnostic(FILE_READ, f"Cannot read file: {e}")],
            )
        return self.lint_text(text, filename=filename)


def is_ignored(path: PathLike, patterns: Iterable[str]) -> bool:
    """Match a path against ignore globs by full path or by file name."""
    posix = Path(path).as_posix()
    name = Path(path).name
    return any(fnmatch.fnmatch(posix, p) or fnmatch.fnmatch(name, p) for p in patterns)


def expand_paths(
    paths: Iterable[PathLike],
    ignore: Iterable[str] = (),
    include_markdown: bool = True,
) -> List[Path]:
    """
    Expand files and directories into the list of files to lint.

    Directories are searched recursively for HTML (and Markdown) files.
    Explicit file arguments are kept whatever their extension.
    """
    settings = get_settings()
    extensions = set(settings.html_extensions)
    if include_markdown:
        extensions |= set(settings.markdown_extensions)
    patterns = list(ignore)

    files: List[Path] = []
    seen = set()
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            candidates = sorted(p for p in path.rglob("*") if p.is_file() and p.suffix.lower() in extensions)
        else:
            candidates = [path]
        for candidate in candidates:
            if candidate in seen or is_ignored(candidate, patterns):
                continue
            seen.add(candidate)
            files.append(candidate)
    return files


async def lint_html(
    content: str,
    config: Optional[LintConfig] = None,
    filename: str = "<input>",
    source_type: Optional[Union[SourceType, str]] = None,
    fragment: Optional[bool] = None,
) -> FileResult:
    """
    Lint HTML or Markdown source text.

    Raises:
        LintConfigError: If the configuration is invalid
    """
    linter = HTMLLinter(config)
    return await asyncio.to_thread(linter.lint_text, content, filename, source_type, fragment)


async def lint_file(path: PathLike, config: Optional[LintConfig] = None, linter: Optional[HTMLLinter] = None) -> FileResult:
    linter = linter or HTMLLinter(config)
    return await asyncio.to_thread(linter.lint_file, path)


async def lint_paths(
    paths: Iterable[PathLike],
    config: Optional[LintConfig] = None,
    max_concurrency: Optional[int] = None,
) -> LintReport:
    """
    Lint files and directories concurrently.

    Args:
        paths: Files and/or directories
        config: Lint configuration (ignore globs are applied to the expansion)
        max_concurrency: Files linted at once; defaults to settings

    Returns:
        LintReport with one FileResult per file, in path order
    """
    start_time = time.time()
    linter = HTMLLinter(config)
    files = expand_paths(paths, linter.config.ignore, include_markdown=linter.config.markdown)
    semaphore = asyncio.Semaphore(max_concurrency or linter.settings.max_concurrency)

    async def _lint_one(path: Path) -> FileResult:
        async with semaphore:
            return await lint_file(path, linter=linter)

    results = await asyncio.gather(*(_lint_one(path) for path in files))
    report = LintReport(results=list(results), processing_time=time.time() - start_time)
    logger.info(
        "Lint run completed",
        files=report.files_linted,
        errors=report.error_count,
        warnings=report.warning_count,
        processing_time=report.processing_time,
    )
    return report


async def validate_html_syntax(content: str) -> List[ParseIssue]:
    """
    Parse HTML and return parse issues only, without running rules.

    Returns:
        Parse issues (unclosed elements, stray end tags); empty if well formed
    """
    if not content or not content.strip():
        return []
    document = await asyncio.to_thread(build_dom, content)
    return list(document.issues)
