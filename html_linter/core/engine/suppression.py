"""
Inline Suppression
==================

Parses `htmllint-*` comment directives and filters diagnostics they cover.

    <!-- htmllint-disable img-alt, link-name -->
    <!-- htmllint-enable -->
    <img src="a.png"> <!-- htmllint-disable-line img-dimensions -->
    <!-- htmllint-disable-next-line -->

A directive without a rule list applies to every rule. Text after `--`
is a free-form description and is ignored.
"""

import re
from dataclasses import dataclass, field
from typing import Collection, Dict, List, Optional, Tuple

from html_linter.core.dom.nodes import Comment, Document
from html_linter.models.schemas import Diagnostic, Severity

Position = Tuple[int, int]

DIRECTIVE_RULE = "lint-directive"
UNUSED_DISABLE_RULE = "unused-disable"

# Diagnostics about the lint run itself cannot be suppressed.
UNSUPPRESSIBLE = frozenset({"internal-error", DIRECTIVE_RULE, UNUSED_DISABLE_RULE})

_RULE_SPLIT = re.compile(r"[\s,]+")


@dataclass
class Directive:
    kind: str
    rules: Optional[List[str]]  # None = every rule
    line: int
    column: int
    end_line: int
    used: bool = False

    def covers(self, rule_id: str) -> bool:
        return self.rules is None or rule_id in self.rules

    @property
    def position(self) -> Position:
        return (self.line, self.column)


@dataclass
class Region:
    directive: Directive
    rule_id: Optional[str]
    start: Position
    end: Optional[Position] = None

    def contains(self, position: Position) -> bool:
        return self.start <= position and (self.end is None or position < self.end)


@dataclass
class SuppressionMap:
    """Directive state for one document."""

    prefix: str = "htmllint"
    directives: List[Directive] = field(default_factory=list)
    regions: List[Region] = field(default_factory=list)
    line_directives: Dict[int, List[Directive]] = field(default_factory=dict)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @classmethod
    def from_document(
        cls,
        document: Document,
        prefix: str = "htmllint",
        known_rules: Optional[Collection[str]] = None,
    ) -> "SuppressionMap":
        suppressions = cls(prefix=prefix)
        pattern = re.compile(
            rf"^\s*{re.escape(prefix)}-(disable-next-line|disable-line|disable|enable)(?:\s+(.*?))?\s*$",
            re.DOTALL,
        )
        open_regions: Dict[Optional[str], Region] = {}

        for comment in document.comments:
            match = pattern.match(comment.data)
            if not match:
                continue
            directive = suppressions._parse(comment, match.group(1), match.group(2), known_rules)
            suppressions.directives.append(directive)

            if directive.kind == "disable":
                for rule_id in directive.rules if directive.rules is not None else [None]:
                    if rule_id not in open_regions:
                        region = Region(directive, rule_id, directive.position)
                        open_regions[rule_id] = region
                        suppressions.regions.append(region)
            elif directive.kind == "enable":
                keys = list(open_regions) if directive.rules is None else directive.rules
                for key in keys:
                    region = open_regions.pop(key, None)
                    if region is not None:
                        region.end = directive.position
            elif directive.kind == "disable-line":
                suppressions.line_directives.setdefault(directive.line, []).append(directive)
            else:
                suppressions.line_directives.setdefault(directive.end_line + 1, []).append(directive)

        return suppressions

    def _parse(
        self,
        comment: Comment,
        kind: str,
        rule_text: Optional[str],
        known_rules: Optional[Collection[str]],
    ) -> Directive:
        rules: Optional[List[str]] = None
        if rule_text:
            rule_text = rule_text.split("--", 1)[0]
            names = [name for name in _RULE_SPLIT.split(rule_text) if name]
            if names:
                rules = []
                for name in names:
                    if known_rules is not None and name not in known_rules:
                        self.diagnostics.append(
                            Diagnostic(
                                rule_id=DIRECTIVE_RULE,
                                severity=Severity.WARNING,
                                message=f"Unknown rule '{name}' in {self.prefix}-{kind} directive",
                                line=comment.line,
                                column=comment.column,
                            )
                        )
                    elif name not in rules:
                        rules.append(name)
        return Directive(kind, rules, comment.line, comment.column, comment.end_line)

    def is_suppressed(self, diagnostic: Diagnostic) -> bool:
        """True if a directive covers the diagnostic; marks that directive used."""
        if diagnostic.rule_id in UNSUPPRESSIBLE:
            return False

        suppressed = False
        for directive in self.line_directives.get(diagnostic.line, []):
            if directive.covers(diagnostic.rule_id):
                directive.used = True
                suppressed = True

        position = (diagnostic.line, diagnostic.column)
        for region in self.regions:
            if region.rule_id in (None, diagnostic.rule_id) and region.contains(position):
                region.directive.used = True
                suppressed = True
        return suppressed

    def apply(self, diagnostics: List[Diagnostic]) -> Tuple[List[Diagnostic], int]:
        """Split diagnostics into (kept, suppressed count)."""
        kept = [d for d in diagnostics if not self.is_suppressed(d)]
        return kept, len(diagnostics) - len(kept)

    def unused_diagnostics(self) -> List[Diagnostic]:
        """Warnings for disable directives that suppressed nothing."""
        unused: List[Diagnostic] = []
        for directive in self.directives:
            if directive.kind == "enable" or directive.used or directive.rules == []:
                continue
            scope = "" if directive.rules is None else f" for {', '.join(directive.rules)}"
            unused.append(
                Diagnostic(
                    rule_id=UNUSED_DISABLE_RULE,
                    severity=Severity.WARNING,
                    message=f"Unused {self.prefix}-{directive.kind} directive (no problems were reported{scope})",
                    line=directive.line,
                    column=directive.column,
                )
            )
        return unused
