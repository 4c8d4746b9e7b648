"""
Markup Rules
============

Structural validity: doctype, tag pairing, duplicate attributes and ids,
obsolete elements.
"""

from typing import Dict

from html_linter.core.dom.nodes import Element
from html_linter.models.schemas import RuleCategory, Severity
from .base import Rule, RuleContext
from .registry import register_rule

OBSOLETE_ELEMENTS: Dict[str, str] = {
    "acronym": "Use <abbr> instead",
    "applet": "Use <object> or <embed> instead",
    "basefont": "Use CSS instead",
    "big": "Use CSS instead",
    "blink": "Remove the element or use CSS animations",
    "center": "Use CSS text-align or flexbox instead",
    "dir": "Use <ul> instead",
    "font": "Use CSS instead",
    "frame": "Use <iframe> or CSS layout instead",
    "frameset": "Use <iframe> or CSS layout instead",
    "isindex": "Use a <form> with an <input> instead",
    "listing": "Use <pre> and <code> instead",
    "marquee": "Use CSS animations instead",
    "noframes": "Remove the element",
    "plaintext": "Use the text/plain MIME type instead",
    "strike": "Use <del> or <s> instead",
    "tt": "Use <code> or <kbd> instead",
    "xmp": "Use <pre> and <code> instead",
}

EVENT_HANDLER_PREFIX = "on"


@register_rule
class DoctypeHtmlRule(Rule):
    """Documents must start with the HTML5 doctype."""

    id = "doctype-html"
    category = RuleCategory.MARKUP
    description = "Document must begin with <!DOCTYPE html>"
    default_severity = Severity.ERROR
    tags = frozenset()
    document_only = True

    def end(self, ctx: RuleContext) -> None:
        doctype = ctx.document.doctype
        if doctype is None:
            ctx.report(None, "Missing <!DOCTYPE html> declaration", hint="Add <!DOCTYPE html> as the first line")
            return
        if not doctype.is_html5:
            ctx.report(doctype, f"Legacy doctype '<!{doctype.declaration}>'", hint="Use <!DOCTYPE html>")
        first = ctx.document.first_significant_node()
        if first is not doctype:
            ctx.report(doctype, "Doctype must be the first node in the document")


@register_rule
class TagPairRule(Rule):
    id = "tag-pair"
    category = RuleCategory.MARKUP
    description = "Start and end tags must be balanced"
    default_severity = Severity.ERROR
    tags = frozenset()

    def end(self, ctx: RuleContext) -> None:
        for issue in ctx.document.issues:
            if issue.kind in ("unclosed-element", "stray-end-tag", "parse-error"):
                ctx.report((issue.line, issue.column), issue.message)


@register_rule
class AttrNoDuplicationRule(Rule):
    id = "attr-no-duplication"
    category = RuleCategory.MARKUP
    description = "Elements must not repeat an attribute"
    default_severity = Severity.ERROR

    def visit(self, element: Element, ctx: RuleContext) -> None:
        for name, _ in element.duplicate_attrs:
            ctx.report(element, f"Duplicate attribute '{name}' on <{element.tag}>", hint="Only the first value is used")


@register_rule
class IdUniqueRule(Rule):
    id = "id-unique"
    category = RuleCategory.MARKUP
    description = "Id attribute values must be unique"
    default_severity = Severity.ERROR

    def begin(self, ctx: RuleContext) -> None:
        self.seen: Dict[str, Element] = {}

    def visit(self, element: Element, ctx: RuleContext) -> None:
        if not element.has("id"):
            return
        value = element.get_stripped("id")
        if not value:
            ctx.report(element, "Empty id attribute")
            return
        if any(ch.isspace() for ch in element.get("id") or ""):
            ctx.report(element, f"Id '{element.get('id')}' contains whitespace")
        first = self.seen.get(value)
        if first is not None:
            ctx.report(element, f"Duplicate id '{value}' (first used on line {first.line})")
        else:
            self.seen[value] = element


@register_rule
class NoObsoleteElementsRule(Rule):
    id = "no-obsolete-elements"
    category = RuleCategory.MARKUP
    description = "Obsolete elements must not be used"
    default_severity = Severity.WARNING
    tags = frozenset(OBSOLETE_ELEMENTS)

    def visit(self, element: Element, ctx: RuleContext) -> None:
        ctx.report(element, f"<{element.tag}> is obsolete", hint=OBSOLETE_ELEMENTS[element.tag])


@register_rule
class NoInlineHandlersRule(Rule):
    id = "no-inline-handlers"
    category = RuleCategory.MARKUP
    description = "Event handlers belong in scripts, not on* attributes"
    default_severity = Severity.INFO
    recommended = False

    def visit(self, element: Element, ctx: RuleContext) -> None:
        for name in element.attrs:
            if name.startswith(EVENT_HANDLER_PREFIX) and len(name) > 2:
                ctx.report(
                    element,
                    f"Inline event handler '{name}' on <{element.tag}>",
                    hint="Attach the listener with addEventListener",
                )
