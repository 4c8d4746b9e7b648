"""
Performance Rules
=================

Markup-level loading hints: layout shift from unsized images, render
blocking scripts and stylesheets, lazy loading and preload declarations.
"""

import re

from html_linter.core.dom.nodes import Element
from html_linter.models.schemas import RuleCategory, Severity
from .base import Rule, RuleContext
from .registry import register_rule

PRELOAD_DESTINATIONS = frozenset(
    {"audio", "document", "embed", "fetch", "font", "image", "object", "script", "style", "track", "video", "worker"}
)

_DOCUMENT_WRITE = re.compile(r"\bdocument\s*\.\s*write(ln)?\s*\(")


def _is_external_script(element: Element) -> bool:
    return element.tag == "script" and bool(element.get_stripped("src"))


@register_rule
class ImgDimensionsRule(Rule):
    id = "img-dimensions"
    category = RuleCategory.PERFORMANCE
    description = "Images should declare width and height to avoid layout shift"
    default_severity = Severity.WARNING
    tags = frozenset({"img"})

    def visit(self, element: Element, ctx: RuleContext) -> None:
        missing = [name for name in ("width", "height") if not element.get_stripped(name)]
        if not missing:
            return
        parent = element.parent
        if isinstance(parent, Element) and parent.tag == "picture":
            # <source> elements may carry the dimensions
            sources = [s for s in parent.children_elements() if s.tag == "source"]
            if sources and all(s.get_stripped("width") and s.get_stripped("height") for s in sources):
                return
        ctx.report(
            element,
            f"<img> is missing {' and '.join(missing)}",
            hint="Intrinsic dimensions let the browser reserve space (CLS)",
        )


@register_rule
class ImgLazyLoadingRule(Rule):
    id = "img-lazy-loading"
    category = RuleCategory.PERFORMANCE
    description = "Offscreen images should use loading=\"lazy\""
    default_severity = Severity.INFO
    tags = frozenset({"img"})
    recommended = False
    default_options = {"skip_first": 1}
    options_schema = {"skip_first": {"type": "integer", "min": 0}}

    def begin(self, ctx: RuleContext) -> None:
        self.count = 0

    def visit(self, element: Element, ctx: RuleContext) -> None:
        self.count += 1
        if self.count <= ctx.option("skip_first"):
            return
        loading = element.get_stripped("loading").lower()
        if not loading:
            ctx.report(element, '<img> has no loading attribute', hint='Use loading="lazy" for images below the fold')
        elif loading not in ("lazy", "eager"):
            ctx.report(element, f"Invalid loading value '{loading}'")


@register_rule
class ScriptBlockingRule(Rule):
    id = "script-blocking"
    category = RuleCategory.PERFORMANCE
    description = "External scripts in <head> should use defer, async or type=module"
    default_severity = Severity.WARNING
    tags = frozenset({"script"})

    def visit(self, element: Element, ctx: RuleContext) -> None:
        if not _is_external_script(element):
            return
        if element.closest("head") is None:
            return
        if element.has("async") or element.has("defer"):
            return
        if element.get_stripped("type").lower() == "module":
            return
        ctx.report(
            element,
            f"Render-blocking script '{element.get_stripped('src')}' in <head>",
            hint="Add defer (or async for independent scripts)",
        )


@register_rule
class StylesheetInBodyRule(Rule):
    id = "stylesheet-in-body"
    category = RuleCategory.PERFORMANCE
    description = "Stylesheets should be linked from <head>"
    default_severity = Severity.WARNING
    tags = frozenset({"link"})

    def visit(self, element: Element, ctx: RuleContext) -> None:
        if "stylesheet" not in element.tokens("rel"):
            return
        if element.closest("body") is not None:
            ctx.report(element, "Stylesheet linked inside <body> delays rendering and causes restyling", hint="Move the <link> into <head>")


@register_rule
class PreloadAsRule(Rule):
    id = "preload-as"
    category = RuleCategory.PERFORMANCE
    description = "<link rel=preload> needs a valid as attribute"
    default_severity = Severity.ERROR
    tags = frozenset({"link"})

    def visit(self, element: Element, ctx: RuleContext) -> None:
        if "preload" not in element.tokens("rel"):
            return
        destination = element.get_stripped("as").lower()
        if not destination:
            ctx.report(element, "Preload without an as attribute is ignored by browsers")
            return
        if destination not in PRELOAD_DESTINATIONS:
            ctx.report(element, f"Unknown preload destination '{destination}'")
        elif destination == "font" and not element.has("crossorigin"):
            ctx.report(element, "Font preloads require the crossorigin attribute", hint="Add crossorigin")


@register_rule
class IframeLazyLoadingRule(Rule):
    id = "iframe-lazy-loading"
    category = RuleCategory.PERFORMANCE
    description = "Embedded iframes should use loading=\"lazy\""
    default_severity = Severity.INFO
    tags = frozenset({"iframe"})
    recommended = False

    def visit(self, element: Element, ctx: RuleContext) -> None:
        if element.get_stripped("loading").lower() != "lazy":
            ctx.report(element, '<iframe> is not lazy-loaded', hint='Add loading="lazy"')


@register_rule
class NoDocumentWriteRule(Rule):
    id = "no-document-write"
    category = RuleCategory.PERFORMANCE
    description = "Inline scripts must not call document.write"
    default_severity = Severity.WARNING
    tags = frozenset({"script"})

    def visit(self, element: Element, ctx: RuleContext) -> None:
        if _is_external_script(element):
            return
        source = "".join(getattr(child, "data", "") for child in element.children)
        if _DOCUMENT_WRITE.search(source):
            ctx.report(element, "document.write() blocks the parser", hint="Insert nodes with DOM APIs instead")
