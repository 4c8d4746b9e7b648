"""
Markdown Sources
================

Extracts YAML front-matter and ```html fenced blocks from Markdown notes
so the blocks can be linted with their original line/column positions.
"""

import re
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Any, Dict, List, Optional, Tuple

import yaml  # type: ignore[import-untyped]

from html_linter.config.logging import get_logger
from html_linter.config.settings import get_settings
from html_linter.models.schemas import SourceType

logger = get_logger(__name__)

HTML_INFO_STRINGS = frozenset({"html", "htm", "xhtml"})
FRONT_MATTER_KEY = "htmllint"

_FENCE_OPEN = re.compile(r"^( {0,3})(`{3,}|~{3,})[ \t]*([^\s`]*)[^`]*$")
_FRONT_MATTER_END = ("---", "...")


@dataclass
class HtmlBlock:
    """A fenced html block; `start_line` is the first content line (1-based)."""

    content: str
    start_line: int
    indent: int = 0
    info: str = "html"
    # spaces removed from each content line by dedenting
    line_indents: List[int] = field(default_factory=list)

    @property
    def line_offset(self) -> int:
        return self.start_line - 1


@dataclass
class MarkdownNote:
    front_matter: Dict[str, Any] = field(default_factory=dict)
    front_matter_error: Optional[str] = None
    blocks: List[HtmlBlock] = field(default_factory=list)

    @property
    def rule_overrides(self) -> Dict[str, Any]:
        """`htmllint.rules` from the front-matter, if any."""
        section = self.front_matter.get(FRONT_MATTER_KEY)
        if not isinstance(section, dict):
            return {}
        rules = section.get("rules")
        return rules if isinstance(rules, dict) else {}


def detect_source_type(filename: Optional[str]) -> SourceType:
    if filename:
        suffix = PurePath(filename).suffix.lower()
        if suffix in get_settings().markdown_extensions:
            return SourceType.MARKDOWN
    return SourceType.HTML


def split_front_matter(text: str) -> tuple[Optional[str], int]:
    """
    Return (front-matter text, index of the first body line).

    Front-matter must start on the first line with `---` and end with a
    `---` or `...` line. Without a closing line there is no front-matter.
    """
    lines = text.splitlines()
    if not lines or lines[0].strip() != "---":
        return None, 0
    for index in range(1, len(lines)):
        if lines[index].strip() in _FRONT_MATTER_END:
            return "\n".join(lines[1:index]), index + 1
    return None, 0


def extract_html_blocks(lines: List[str], first_line: int = 0) -> List[HtmlBlock]:
    """Collect fenced html blocks from `lines[first_line:]`."""
    blocks: List[HtmlBlock] = []
    index = first_line
    while index < len(lines):
        match = _FENCE_OPEN.match(lines[index])
        if not match:
            index += 1
            continue

        indent, fence, info = len(match.group(1)), match.group(2), match.group(3).lower()
        closing = re.compile(rf"^ {{0,3}}{re.escape(fence[0])}{{{len(fence)},}}[ \t]*$")
        body: List[str] = []
        removed: List[int] = []
        index += 1
        start = index
        while index < len(lines) and not closing.match(lines[index]):
            line, width = _dedent(lines[index], indent)
            body.append(line)
            removed.append(width)
            index += 1
        # Skip the closing fence; an unterminated fence runs to end of file.
        index += 1

        if info in HTML_INFO_STRINGS:
            blocks.append(HtmlBlock("\n".join(body), start_line=start + 1, indent=indent, info=info, line_indents=removed))
    return blocks


def _dedent(line: str, indent: int) -> Tuple[str, int]:
    width = min(indent, len(line) - len(line.lstrip(" ")))
    return line[width:], width


def parse_markdown(text: str) -> MarkdownNote:
    """Parse a Markdown note into front-matter and html blocks."""
    note = MarkdownNote()
    front_matter, body_start = split_front_matter(text)

    if front_matter is not None:
        try:
            data = yaml.safe_load(front_matter)
        except yaml.YAMLError as e:
            note.front_matter_error = f"Invalid YAML front-matter: {e}"
            logger.debug("Front-matter parse failed", error=str(e))
        else:
            if data is None:
                data = {}
            if isinstance(data, dict):
                note.front_matter = data
            else:
                note.front_matter_error = f"Front-matter must be a mapping, got {type(data).__name__}"

    note.blocks = extract_html_blocks(text.splitlines(), body_start)
    return note
