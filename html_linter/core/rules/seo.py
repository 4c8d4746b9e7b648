"""
SEO Rules
=========

Document metadata search engines and link previews depend on: title,
description, viewport, charset, canonical URL, crawlable links and
Open Graph tags.
"""

import re
from typing import List, Optional

from html_linter.core.dom.nodes import Element
from html_linter.models.schemas import RuleCategory, Severity
from .base import Rule, RuleContext
from .registry import register_rule

_LENGTH_SCHEMA = {
    "min_length": {"type": "integer", "min": 0},
    "max_length": {"type": "integer", "min": 1},
}
_ABSOLUTE_URL = re.compile(r"^https?://[^\s/]+", re.IGNORECASE)


def _meta_by_name(ctx: RuleContext, name: str) -> List[Element]:
    return [m for m in ctx.document.find_all("meta") if m.get_stripped("name").lower() == name]


def _head_or_root(ctx: RuleContext) -> Optional[Element]:
    return ctx.document.head or ctx.document.html_element


@register_rule
class TitleRequiredRule(Rule):
    id = "title-required"
    category = RuleCategory.SEO
    description = "Document must have exactly one non-empty <title>"
    default_severity = Severity.ERROR
    tags = frozenset({"title"})
    document_only = True

    def begin(self, ctx: RuleContext) -> None:
        self.titles: List[Element] = []

    def visit(self, element: Element, ctx: RuleContext) -> None:
        if element.closest("svg") is None:
            self.titles.append(element)

    def end(self, ctx: RuleContext) -> None:
        if not self.titles:
            ctx.report(_head_or_root(ctx), "Document has no <title>")
            return
        first = self.titles[0]
        if not first.text:
            ctx.report(first, "<title> is empty")
        for extra in self.titles[1:]:
            ctx.report(extra, "Document has more than one <title>")


@register_rule
class TitleLengthRule(Rule):
    id = "title-length"
    category = RuleCategory.SEO
    description = "<title> length should fit search result snippets"
    default_severity = Severity.WARNING
    tags = frozenset({"title"})
    document_only = True
    default_options = {"min_length": 10, "max_length": 60}
    options_schema = _LENGTH_SCHEMA

    def begin(self, ctx: RuleContext) -> None:
        self.done = False

    def visit(self, element: Element, ctx: RuleContext) -> None:
        if self.done or element.closest("svg") is not None:
            return
        self.done = True
        length = len(element.text)
        if length == 0:
            return  # title-required reports empty titles
        if length < ctx.option("min_length"):
            ctx.report(element, f"<title> is too short ({length} < {ctx.option('min_length')} characters)")
        elif length > ctx.option("max_length"):
            ctx.report(element, f"<title> is too long ({length} > {ctx.option('max_length')} characters)", hint="Search engines truncate long titles")


@register_rule
class MetaDescriptionRule(Rule):
    id = "meta-description"
    category = RuleCategory.SEO
    description = "Document should have one meta description of a useful length"
    default_severity = Severity.WARNING
    tags = frozenset()
    document_only = True
    default_options = {"min_length": 50, "max_length": 160}
    options_schema = _LENGTH_SCHEMA

    def end(self, ctx: RuleContext) -> None:
        metas = _meta_by_name(ctx, "description")
        if not metas:
            ctx.report(_head_or_root(ctx), "Document has no meta description", hint='Add <meta name="description" content="...">')
            return
        for extra in metas[1:]:
            ctx.report(extra, "Duplicate meta description")
        content = " ".join(metas[0].get_stripped("content").split())
        length = len(content)
        if not content:
            ctx.report(metas[0], "Meta description is empty")
        elif length < ctx.option("min_length"):
            ctx.report(metas[0], f"Meta description is too short ({length} < {ctx.option('min_length')} characters)")
        elif length > ctx.option("max_length"):
            ctx.report(metas[0], f"Meta description is too long ({length} > {ctx.option('max_length')} characters)")


@register_rule
class MetaViewportRule(Rule):
    id = "meta-viewport"
    category = RuleCategory.SEO
    description = "Document must declare a responsive viewport that allows zooming"
    default_severity = Severity.WARNING
    tags = frozenset()
    document_only = True

    def end(self, ctx: RuleContext) -> None:
        metas = _meta_by_name(ctx, "viewport")
        if not metas:
            ctx.report(
                _head_or_root(ctx),
                "Document has no viewport meta tag",
                hint='Add <meta name="viewport" content="width=device-width, initial-scale=1">',
            )
            return
        content = metas[0].get_stripped("content").lower().replace(" ", "")
        settings = dict(part.split("=", 1) for part in re.split(r"[,;]", content) if "=" in part)
        if "width" not in settings:
            ctx.report(metas[0], "Viewport does not set width=device-width")
        if settings.get("user-scalable") in ("no", "0"):
            ctx.report(metas[0], "Viewport disables zooming (user-scalable=no)", hint="Users must be able to zoom")
        maximum = settings.get("maximum-scale")
        if maximum:
            try:
                if float(maximum) < 2:
                    ctx.report(metas[0], f"maximum-scale={maximum} prevents zooming to 200%")
            except ValueError:
                ctx.report(metas[0], f"Invalid maximum-scale '{maximum}'")


@register_rule
class MetaCharsetRule(Rule):
    id = "meta-charset"
    category = RuleCategory.SEO
    description = "Document must declare UTF-8 as the first element in <head>"
    default_severity = Severity.ERROR
    tags = frozenset()
    document_only = True

    def end(self, ctx: RuleContext) -> None:
        declarations = [
            m
            for m in ctx.document.find_all("meta")
            if m.has("charset") or m.get_stripped("http-equiv").lower() == "content-type"
        ]
        if not declarations:
            ctx.report(_head_or_root(ctx), "Document has no character encoding declaration", hint='Add <meta charset="utf-8">')
            return
        meta = declarations[0]
        charset = meta.get_stripped("charset").lower()
        if not charset:
            match = re.search(r"charset=([\w-]+)", meta.get_stripped("content"), re.IGNORECASE)
            charset = match.group(1).lower() if match else ""
        if charset not in ("utf-8", "utf8"):
            ctx.report(meta, f"Character encoding '{charset or 'unknown'}' is not UTF-8")
        for extra in declarations[1:]:
            ctx.report(extra, "Duplicate character encoding declaration")
        head = ctx.document.head
        if head is not None:
            first = next(iter(head.children_elements()), None)
            if first is not meta:
                ctx.report(meta, "Charset declaration should be the first element in <head>")


@register_rule
class CanonicalLinkRule(Rule):
    id = "canonical-link"
    category = RuleCategory.SEO
    description = "Canonical link must be unique and absolute"
    default_severity = Severity.WARNING
    tags = frozenset({"link"})
    document_only = True
    default_options = {"required": False}
    options_schema = {"required": {"type": "boolean"}}

    def begin(self, ctx: RuleContext) -> None:
        self.links: List[Element] = []

    def visit(self, element: Element, ctx: RuleContext) -> None:
        if "canonical" in element.tokens("rel"):
            self.links.append(element)

    def end(self, ctx: RuleContext) -> None:
        if not self.links:
            if ctx.option("required"):
                ctx.report(_head_or_root(ctx), "Document has no canonical link")
            return
        for extra in self.links[1:]:
            ctx.report(extra, "Multiple canonical links; search engines ignore all of them")
        href = self.links[0].get_stripped("href")
        if not href:
            ctx.report(self.links[0], "Canonical link has no href")
        elif not _ABSOLUTE_URL.match(href):
            ctx.report(self.links[0], f"Canonical URL '{href}' should be absolute")


@register_rule
class CrawlableLinksRule(Rule):
    id = "crawlable-links"
    category = RuleCategory.SEO
    description = "Links must point to real URLs"
    default_severity = Severity.WARNING
    tags = frozenset({"a"})

    def visit(self, element: Element, ctx: RuleContext) -> None:
        if not element.has("href"):
            acts_like_link = element.has("onclick") or element.has("tabindex")
            if acts_like_link and "button" not in element.tokens("role"):
                ctx.report(element, "<a> without href is not a link", hint="Use <button> for actions")
            return
        href = element.get_stripped("href")
        if not href:
            ctx.report(element, "Empty href")
        elif href == "#":
            ctx.report(element, 'href="#" is not a crawlable destination', hint="Use <button> for actions")
        elif href.lower().startswith("javascript:"):
            ctx.report(element, "javascript: URLs are not crawlable", hint="Use <button> with an event listener")


@register_rule
class OpenGraphRule(Rule):
    id = "open-graph"
    category = RuleCategory.SEO
    description = "Document should declare Open Graph title, description and image"
    default_severity = Severity.INFO
    tags = frozenset()
    document_only = True
    recommended = False
    default_options = {"properties": ["og:title", "og:description", "og:image"]}
    options_schema = {"properties": {"type": "list", "schema": {"type": "string"}}}

    def end(self, ctx: RuleContext) -> None:
        present = {m.get_stripped("property").lower() for m in ctx.document.find_all("meta") if m.get_stripped("content")}
        for prop in ctx.option("properties"):
            if prop.lower() not in present:
                ctx.report(_head_or_root(ctx), f"Missing Open Graph property '{prop}'")
