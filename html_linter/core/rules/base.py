"""
Rule Base
=========

Abstract rule interface and the per-run context rules report through.
"""

from abc import ABC
from typing import Any, ClassVar, Dict, FrozenSet, List, Optional, Tuple, Union

from html_linter.core.dom.nodes import Document, Element, Node
from html_linter.models.schemas import Diagnostic, RuleCategory, RuleInfo, Severity

Position = Tuple[int, int]


class Rule(ABC):
    """
    Base class for lint rules.

    Subclasses set the class attributes and override any of the hooks.
    The scheduler creates one instance per lint run, so instance state is
    private to a single document.
    """

    id: ClassVar[str] = ""
    category: ClassVar[RuleCategory] = RuleCategory.MARKUP
    description: ClassVar[str] = ""
    default_severity: ClassVar[Severity] = Severity.WARNING
    # Element names passed to visit(); None visits every element.
    tags: ClassVar[Optional[FrozenSet[str]]] = None
    document_only: ClassVar[bool] = False
    recommended: ClassVar[bool] = True
    default_options: ClassVar[Dict[str, Any]] = {}
    options_schema: ClassVar[Dict[str, Any]] = {}

    def begin(self, ctx: "RuleContext") -> None:
        """Called once before traversal."""

    def visit(self, element: Element, ctx: "RuleContext") -> None:
        """Called for each matching element in document order."""

    def end(self, ctx: "RuleContext") -> None:
        """Called once after traversal."""

    @classmethod
    def info(cls) -> RuleInfo:
        return RuleInfo(
            id=cls.id,
            category=cls.category,
            description=cls.description,
            default_severity=cls.default_severity,
            recommended=cls.recommended,
            document_only=cls.document_only,
            default_options=dict(cls.default_options),
        )


class RuleContext:
    """What a rule sees while running: the document, its options and a report sink."""

    def __init__(
        self,
        rule: Rule,
        document: Document,
        severity: Severity,
        options: Optional[Dict[str, Any]] = None,
        filename: str = "<input>",
    ) -> None:
        self.rule = rule
        self.document = document
        self.severity = severity
        self.options: Dict[str, Any] = options or {}
        self.filename = filename
        self.diagnostics: List[Diagnostic] = []

    def option(self, name: str) -> Any:
        return self.options.get(name, self.rule.default_options.get(name))

    def report(
        self,
        target: Union[Node, Position, None],
        message: str,
        hint: Optional[str] = None,
    ) -> Diagnostic:
        """Record a diagnostic at a node, an explicit (line, column) or the document start."""
        tag = selector = None
        if isinstance(target, Node):
            line, column = target.position
            if isinstance(target, Element):
                tag, selector = target.tag, target.selector
        elif target is None:
            line, column = 1, 1
        else:
            line, column = target

        diagnostic = Diagnostic(
            rule_id=self.rule.id,
            severity=self.severity,
            category=self.rule.category,
            message=message,
            line=max(line, 1),
            column=max(column, 1),
            tag=tag,
            selector=selector,
            hint=hint,
        )
        self.diagnostics.append(diagnostic)
        return diagnostic
