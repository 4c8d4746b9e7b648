"""
Rule Scheduler
==============

Runs every active rule over a document in a single pre-order pass.
"""

from typing import Any, Callable, Dict, List, Optional, Sequence

from html_linter.config.logging import get_logger
from html_linter.core.dom.nodes import Document, Element, Node
from html_linter.core.rules.base import RuleContext
from html_linter.models.schemas import Diagnostic, Severity
from .config import ResolvedRule

logger = get_logger(__name__)

INTERNAL_ERROR = "internal-error"


class RuleScheduler:
    """Dispatches document elements to the rules interested in them."""

    def __init__(
        self,
        document: Document,
        rules: Sequence[ResolvedRule],
        filename: str = "<input>",
        fragment: Optional[bool] = None,
    ) -> None:
        self.document = document
        self.filename = filename
        self.fragment = document.is_fragment if fragment is None else fragment
        self.logger: Any = logger.bind(component="scheduler", filename=filename)

        self.contexts: List[RuleContext] = []
        self._by_tag: Dict[str, List[RuleContext]] = {}
        self._wildcard: List[RuleContext] = []
        self._failed: Dict[str, Diagnostic] = {}

        for resolved in rules:
            if resolved.rule.document_only and self.fragment:
                continue
            ctx = RuleContext(
                resolved.rule(),
                document,
                resolved.severity,
                dict(resolved.options),
                filename,
            )
            self.contexts.append(ctx)
            if ctx.rule.tags is None:
                self._wildcard.append(ctx)
            else:
                for tag in ctx.rule.tags:
                    self._by_tag.setdefault(tag, []).append(ctx)

    @property
    def active_rule_ids(self) -> List[str]:
        return [ctx.rule.id for ctx in self.contexts]

    def run(self) -> List[Diagnostic]:
        """Run begin/visit/end for every rule and return the raw diagnostics."""
        for ctx in self.contexts:
            self._call(ctx, "begin", ctx.rule.begin, None, ctx)

        for element in self.document.iter_elements():
            for ctx in self._handlers(element.tag):
                if ctx.rule.id in self._failed:
                    continue
                self._call(ctx, "visit", ctx.rule.visit, element, element, ctx)

        for ctx in self.contexts:
            self._call(ctx, "end", ctx.rule.end, None, ctx)

        diagnostics: List[Diagnostic] = []
        for ctx in self.contexts:
            diagnostics.extend(ctx.diagnostics)
        diagnostics.extend(self._failed.values())
        return diagnostics

    def _handlers(self, tag: str) -> List[RuleContext]:
        tagged = self._by_tag.get(tag)
        if not tagged:
            return self._wildcard
        return self._wildcard + tagged

    def _call(
        self,
        ctx: RuleContext,
        hook: str,
        func: Callable[..., None],
        node: Optional[Node],
        *args: Any,
    ) -> None:
        if ctx.rule.id in self._failed:
            return
        try:
            func(*args)
        except Exception as e:
            self.logger.error(
                "Rule crashed; disabled for this run",
                rule=ctx.rule.id,
                hook=hook,
                error=str(e),
                exc_info=True,
            )
            line, column = node.position if node is not None else (1, 1)
            self._failed[ctx.rule.id] = Diagnostic(
                rule_id=INTERNAL_ERROR,
                severity=Severity.ERROR,
                message=f"Rule '{ctx.rule.id}' failed in {hook}(): {type(e).__name__}: {e}",
                line=line,
                column=column,
                tag=node.tag if isinstance(node, Element) else None,
            )


def run_rules(
    document: Document,
    rules: Sequence[ResolvedRule],
    filename: str = "<input>",
    fragment: Optional[bool] = None,
) -> List[Diagnostic]:
    """Run rules over a document without applying suppressions."""
    return RuleScheduler(document, rules, filename=filename, fragment=fragment).run()
