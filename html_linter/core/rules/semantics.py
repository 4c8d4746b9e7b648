"""
Semantic Rules
==============

Checks that content uses the element that describes it: heading outline,
list structure, landmarks and semantic layout elements.
"""

import re
from typing import Dict, Optional

from html_linter.core.dom.nodes import Element
from html_linter.models.schemas import RuleCategory, Severity
from .base import Rule, RuleContext
from .registry import register_rule

HEADINGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})

# class/id token -> semantic element it imitates
SEMANTIC_HINTS: Dict[str, str] = {
    "header": "header",
    "masthead": "header",
    "footer": "footer",
    "nav": "nav",
    "navbar": "nav",
    "navigation": "nav",
    "menu": "nav",
    "main": "main",
    "content": "main",
    "sidebar": "aside",
    "aside": "aside",
    "article": "article",
    "post": "article",
}

ROLE_ELEMENTS: Dict[str, str] = {
    "banner": "header",
    "contentinfo": "footer",
    "navigation": "nav",
    "main": "main",
    "complementary": "aside",
    "article": "article",
    "region": "section",
}

LIST_CHILD_ALLOWED = frozenset({"li", "script", "template"})

_TOKEN_SPLIT = re.compile(r"[\s_-]+")


def heading_level(element: Element) -> Optional[int]:
    if element.tag in HEADINGS:
        return int(element.tag[1])
    if "heading" in element.tokens("role"):
        level = element.get_stripped("aria-level")
        return int(level) if level.isdigit() else 2
    return None


@register_rule
class HeadingOrderRule(Rule):
    """Heading levels should only increase one step at a time."""

    id = "heading-order"
    category = RuleCategory.SEMANTICS
    description = "Heading levels must not skip (h2 followed by h4)"
    default_severity = Severity.WARNING

    def begin(self, ctx: RuleContext) -> None:
        self.previous: Optional[int] = None

    def visit(self, element: Element, ctx: RuleContext) -> None:
        level = heading_level(element)
        if level is None:
            return
        if self.previous is not None and level > self.previous + 1:
            ctx.report(
                element,
                f"Heading level skipped: <h{level}> follows <h{self.previous}>",
                hint=f"Use <h{self.previous + 1}> or restructure the outline",
            )
        self.previous = level


@register_rule
class SingleH1Rule(Rule):
    id = "single-h1"
    category = RuleCategory.SEMANTICS
    description = "A page should have a single <h1>"
    default_severity = Severity.WARNING
    tags = frozenset({"h1"})

    def begin(self, ctx: RuleContext) -> None:
        self.first: Optional[Element] = None

    def visit(self, element: Element, ctx: RuleContext) -> None:
        if self.first is None:
            self.first = element
            return
        ctx.report(element, f"Additional <h1> (first <h1> is on line {self.first.line})", hint="Use <h2> for section headings")


@register_rule
class ListChildrenRule(Rule):
    id = "list-children"
    category = RuleCategory.SEMANTICS
    description = "<ul>/<ol> may only contain <li>; <li> must be inside a list"
    default_severity = Severity.ERROR
    tags = frozenset({"ul", "ol", "li"})

    def visit(self, element: Element, ctx: RuleContext) -> None:
        if element.tag == "li":
            parent = element.parent
            if not (isinstance(parent, Element) and parent.tag in ("ul", "ol", "menu")):
                ctx.report(element, "<li> must be a child of <ul>, <ol> or <menu>")
            return
        for child in element.children_elements():
            if child.tag not in LIST_CHILD_ALLOWED:
                ctx.report(child, f"<{child.tag}> is not allowed directly inside <{element.tag}>", hint="Wrap the content in <li>")


@register_rule
class LandmarkMainRule(Rule):
    id = "landmark-main"
    category = RuleCategory.SEMANTICS
    description = "A document must have exactly one <main> landmark"
    default_severity = Severity.WARNING
    document_only = True

    def begin(self, ctx: RuleContext) -> None:
        self.mains = []

    def visit(self, element: Element, ctx: RuleContext) -> None:
        if element.tag == "main" or "main" in element.tokens("role"):
            if not element.has("hidden"):
                self.mains.append(element)

    def end(self, ctx: RuleContext) -> None:
        if not self.mains:
            ctx.report(ctx.document.body or ctx.document.html_element, "Document has no <main> landmark", hint="Wrap the primary content in <main>")
            return
        for extra in self.mains[1:]:
            ctx.report(extra, "Document has more than one visible <main> landmark")


@register_rule
class PreferSemanticElementsRule(Rule):
    id = "prefer-semantic-elements"
    category = RuleCategory.SEMANTICS
    description = "Use semantic elements instead of generic <div>/<span> with landmark names"
    default_severity = Severity.INFO
    tags = frozenset({"div", "span"})

    def visit(self, element: Element, ctx: RuleContext) -> None:
        for role in element.tokens("role"):
            if role in ROLE_ELEMENTS:
                suggestion = ROLE_ELEMENTS[role]
                ctx.report(element, f'<{element.tag} role="{role}"> can be <{suggestion}>')
                return

        names = _TOKEN_SPLIT.split(element.get_stripped("id").lower())
        names += element.tokens("class")
        for name in names:
            suggestion = SEMANTIC_HINTS.get(name)
            if suggestion:
                ctx.report(
                    element,
                    f"<{element.tag}> named '{name}' can be replaced by <{suggestion}>",
                    hint=f"Use <{suggestion}> to expose the landmark",
                )
                return


@register_rule
class ButtonTypeRule(Rule):
    id = "button-type"
    category = RuleCategory.SEMANTICS
    description = "Buttons inside forms need an explicit type"
    default_severity = Severity.WARNING
    tags = frozenset({"button"})

    def visit(self, element: Element, ctx: RuleContext) -> None:
        button_type = element.get_stripped("type").lower()
        if not button_type:
            if element.closest("form") is not None or element.has("form"):
                ctx.report(element, "<button> inside a form has no type (defaults to submit)", hint='Add type="button" or type="submit"')
            return
        if button_type not in ("button", "submit", "reset"):
            ctx.report(element, f"Invalid button type '{button_type}'")
