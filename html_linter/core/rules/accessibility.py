"""
Accessibility Rules
===================

Text alternatives, accessible names, ARIA validity, keyboard order and
captions for media.
"""

import re

from html_linter.core.dom.nodes import Document, Element, Text
from html_linter.models.schemas import RuleCategory, Severity
from .base import Rule, RuleContext
from .registry import register_rule

ARIA_ATTRIBUTES = frozenset(
    {
        "aria-activedescendant", "aria-atomic", "aria-autocomplete", "aria-braillelabel",
        "aria-brailleroledescription", "aria-busy", "aria-checked", "aria-colcount",
        "aria-colindex", "aria-colindextext", "aria-colspan", "aria-controls", "aria-current",
        "aria-describedby", "aria-description", "aria-details", "aria-disabled",
        "aria-dropeffect", "aria-errormessage", "aria-expanded", "aria-flowto", "aria-grabbed",
        "aria-haspopup", "aria-hidden", "aria-invalid", "aria-keyshortcuts", "aria-label",
        "aria-labelledby", "aria-level", "aria-live", "aria-modal", "aria-multiline",
        "aria-multiselectable", "aria-orientation", "aria-owns", "aria-placeholder",
        "aria-posinset", "aria-pressed", "aria-readonly", "aria-relevant", "aria-required",
        "aria-roledescription", "aria-rowcount", "aria-rowindex", "aria-rowindextext",
        "aria-rowspan", "aria-selected", "aria-setsize", "aria-sort", "aria-valuemax",
        "aria-valuemin", "aria-valuenow", "aria-valuetext",
    }
)

ARIA_ROLES = frozenset(
    {
        "alert", "alertdialog", "application", "article", "banner", "blockquote", "button",
        "caption", "cell", "checkbox", "code", "columnheader", "combobox", "complementary",
        "contentinfo", "definition", "deletion", "dialog", "directory", "document", "emphasis",
        "feed", "figure", "form", "generic", "grid", "gridcell", "group", "heading", "img",
        "image", "insertion", "link", "list", "listbox", "listitem", "log", "main", "mark",
        "marquee", "math", "menu", "menubar", "menuitem", "menuitemcheckbox", "menuitemradio",
        "meter", "navigation", "none", "note", "option", "paragraph", "presentation",
        "progressbar", "radio", "radiogroup", "region", "row", "rowgroup", "rowheader",
        "scrollbar", "search", "searchbox", "separator", "slider", "spinbutton", "status",
        "strong", "subscript", "superscript", "switch", "tab", "table", "tablist", "tabpanel",
        "term", "textbox", "time", "timer", "toolbar", "tooltip", "tree", "treegrid",
        "treeitem",
    }
)

UNLABELLED_INPUT_TYPES = frozenset({"hidden", "submit", "reset", "button", "image"})
INTERACTIVE = frozenset({"a", "button", "select", "textarea", "input", "details", "embed", "iframe", "label"})

_FILENAME_ALT = re.compile(r"^[\w\-. ]+\.(png|jpe?g|gif|svg|webp|avif|bmp)$", re.IGNORECASE)
_REDUNDANT_ALT = re.compile(r"^(image|picture|photo|graphic|icon)( of)?\b", re.IGNORECASE)


def is_hidden(element: Element) -> bool:
    """True when the element or an ancestor is removed from the accessibility tree."""
    for node in [element, *element.ancestors()]:
        if node.has("hidden") or node.get_stripped("aria-hidden").lower() == "true":
            return True
    return False


def _text_alternative(node: Element) -> str:
    """Visible text of a subtree, substituting img alt text."""
    parts = []
    for child in node.children:
        if isinstance(child, Text):
            parts.append(child.data)
        elif isinstance(child, Element):
            if child.get_stripped("aria-hidden").lower() == "true":
                continue
            if child.tag == "img":
                parts.append(child.get("alt") or "")
            elif child.tag == "svg":
                title = child.find("title")
                parts.append(child.get("aria-label") or (title.text if title else ""))
            else:
                parts.append(_text_alternative(child))
    return " ".join(" ".join(parts).split())


def accessible_name(element: Element, document: Document) -> str:
    """Simplified accessible name computation (aria-labelledby, aria-label, content, title)."""
    labelledby = element.get_stripped("aria-labelledby")
    if labelledby:
        texts = []
        for ref in labelledby.split():
            target = document.get_element_by_id(ref)
            if target is not None:
                texts.append(target.get("aria-label") or _text_alternative(target))
        name = " ".join(t for t in texts if t).strip()
        if name:
            return name
    label = element.get_stripped("aria-label")
    if label:
        return label
    content = _text_alternative(element)
    if content:
        return content
    return element.get_stripped("title")


def has_associated_label(element: Element, document: Document) -> bool:
    if element.get_stripped("aria-label") or element.get_stripped("title"):
        return True
    if element.get_stripped("aria-labelledby"):
        return bool(accessible_name(element, document))
    label = element.closest("label")
    if label is not None and label.text:
        return True
    element_id = element.get_stripped("id")
    if element_id:
        for candidate in document.find_all("label"):
            if candidate.get("for") == element_id and (candidate.text or candidate.get_stripped("aria-label")):
                return True
    return False


@register_rule
class ImgAltRule(Rule):
    """Images need a text alternative; alt="" marks decorative images."""

    id = "img-alt"
    category = RuleCategory.ACCESSIBILITY
    description = "Images must have an alt attribute"
    default_severity = Severity.ERROR
    tags = frozenset({"img", "area", "input"})
    default_options = {"check_quality": True}
    options_schema = {"check_quality": {"type": "boolean"}}

    def visit(self, element: Element, ctx: RuleContext) -> None:
        if element.tag == "input" and element.get_stripped("type").lower() != "image":
            return
        if element.tag == "area" and not element.has("href"):
            return
        if element.get_stripped("aria-label") or element.get_stripped("aria-labelledby"):
            return

        if not element.has("alt"):
            ctx.report(
                element,
                f"<{element.tag}> has no alt attribute",
                hint='Describe the image, or use alt="" if it is decorative',
            )
            return

        if not ctx.option("check_quality"):
            return
        alt = element.get_stripped("alt")
        if _FILENAME_ALT.match(alt):
            ctx.report(element, f"Alt text '{alt}' looks like a file name")
        elif _REDUNDANT_ALT.match(alt):
            ctx.report(element, f"Alt text '{alt}' should not announce that it is an image")


@register_rule
class HtmlLangRule(Rule):
    id = "html-lang"
    category = RuleCategory.ACCESSIBILITY
    description = "<html> must declare a valid lang attribute"
    default_severity = Severity.ERROR
    tags = frozenset({"html"})
    document_only = True

    LANG_PATTERN = re.compile(r"^[a-zA-Z]{2,3}(-[a-zA-Z0-9]{2,8})*$")

    def begin(self, ctx: RuleContext) -> None:
        self.seen = False

    def visit(self, element: Element, ctx: RuleContext) -> None:
        self.seen = True
        lang = element.get_stripped("lang")
        if not lang:
            ctx.report(element, "<html> has no lang attribute", hint='Add lang, e.g. <html lang="en">')
        elif not self.LANG_PATTERN.match(lang):
            ctx.report(element, f"Invalid language tag '{lang}'")

    def end(self, ctx: RuleContext) -> None:
        if not self.seen:
            ctx.report(None, "Document has no <html> element to declare a language on")


@register_rule
class FormLabelRule(Rule):
    id = "form-label"
    category = RuleCategory.ACCESSIBILITY
    description = "Form controls must have a label"
    default_severity = Severity.ERROR
    tags = frozenset({"input", "select", "textarea"})

    def visit(self, element: Element, ctx: RuleContext) -> None:
        if element.tag == "input" and element.get_stripped("type").lower() in UNLABELLED_INPUT_TYPES:
            return
        if is_hidden(element):
            return
        if has_associated_label(element, ctx.document):
            return
        hint = "Placeholder text is not a label; add <label for> or aria-label" if element.has("placeholder") else "Add <label for> or aria-label"
        ctx.report(element, f"<{element.tag}> has no associated label", hint=hint)


@register_rule
class LinkNameRule(Rule):
    id = "link-name"
    category = RuleCategory.ACCESSIBILITY
    description = "Links must have discernible text"
    default_severity = Severity.ERROR
    tags = frozenset({"a"})

    GENERIC_NAMES = frozenset({"click here", "here", "read more", "more", "link"})

    def visit(self, element: Element, ctx: RuleContext) -> None:
        if not element.has("href") or is_hidden(element):
            return
        name = accessible_name(element, ctx.document)
        if not name:
            ctx.report(element, "Link has no accessible name", hint="Add link text or aria-label")
        elif name.lower() in self.GENERIC_NAMES:
            ctx.report(element, f"Link text '{name}' is not descriptive out of context")


@register_rule
class ButtonNameRule(Rule):
    id = "button-name"
    category = RuleCategory.ACCESSIBILITY
    description = "Buttons must have discernible text"
    default_severity = Severity.ERROR

    def visit(self, element: Element, ctx: RuleContext) -> None:
        if element.tag == "input":
            input_type = element.get_stripped("type").lower()
            if input_type in ("submit", "reset"):
                return  # browsers supply a default label
            if input_type == "button" and not (element.get_stripped("value") or element.get_stripped("aria-label")):
                ctx.report(element, '<input type="button"> has no value or aria-label')
            return
        if element.tag != "button" and "button" not in element.tokens("role"):
            return
        if is_hidden(element):
            return
        if not accessible_name(element, ctx.document):
            ctx.report(element, "Button has no accessible name", hint="Add text content or aria-label")


@register_rule
class AriaAttrValidRule(Rule):
    id = "aria-attr-valid"
    category = RuleCategory.ACCESSIBILITY
    description = "aria-* attributes must be defined by WAI-ARIA"
    default_severity = Severity.ERROR

    def visit(self, element: Element, ctx: RuleContext) -> None:
        for name in element.attrs:
            if name.startswith("aria-") and name not in ARIA_ATTRIBUTES:
                ctx.report(element, f"Unknown ARIA attribute '{name}'")
        hidden = element.get("aria-hidden")
        if hidden is not None and hidden.strip().lower() not in ("true", "false", "undefined"):
            ctx.report(element, f"aria-hidden must be 'true' or 'false', got '{hidden}'")


@register_rule
class AriaRoleValidRule(Rule):
    id = "aria-role-valid"
    category = RuleCategory.ACCESSIBILITY
    description = "role values must be valid WAI-ARIA roles"
    default_severity = Severity.ERROR

    def visit(self, element: Element, ctx: RuleContext) -> None:
        if not element.has("role"):
            return
        roles = element.tokens("role")
        if not roles:
            ctx.report(element, "Empty role attribute")
            return
        for role in roles:
            if role not in ARIA_ROLES:
                ctx.report(element, f"Unknown ARIA role '{role}'")


@register_rule
class TabindexNoPositiveRule(Rule):
    id = "tabindex-no-positive"
    category = RuleCategory.ACCESSIBILITY
    description = "tabindex must not be greater than zero"
    default_severity = Severity.WARNING

    def visit(self, element: Element, ctx: RuleContext) -> None:
        if not element.has("tabindex"):
            return
        value = element.get_stripped("tabindex")
        try:
            index = int(value)
        except ValueError:
            ctx.report(element, f"tabindex '{value}' is not an integer")
            return
        if index > 0:
            ctx.report(element, f"Positive tabindex ({index}) breaks the natural focus order", hint='Use tabindex="0" or "-1"')


@register_rule
class IframeTitleRule(Rule):
    id = "iframe-title"
    category = RuleCategory.ACCESSIBILITY
    description = "<iframe> must have a title"
    default_severity = Severity.ERROR
    tags = frozenset({"iframe", "frame"})

    def visit(self, element: Element, ctx: RuleContext) -> None:
        if is_hidden(element):
            return
        if not (element.get_stripped("title") or element.get_stripped("aria-label")):
            ctx.report(element, f"<{element.tag}> has no title describing its content")


@register_rule
class MediaCaptionsRule(Rule):
    id = "media-captions"
    category = RuleCategory.ACCESSIBILITY
    description = "<video> must provide captions via <track>"
    default_severity = Severity.WARNING
    tags = frozenset({"video"})

    def visit(self, element: Element, ctx: RuleContext) -> None:
        if element.has("muted") and not element.has("controls"):
            return  # background video without audio
        for track in element.find_all("track"):
            if track.get_stripped("kind").lower() in ("captions", "subtitles"):
                return
        ctx.report(element, "<video> has no captions track", hint='Add <track kind="captions" src="...">')


@register_rule
class MediaAutoplayRule(Rule):
    id = "media-autoplay"
    category = RuleCategory.ACCESSIBILITY
    description = "Autoplaying media must be muted or offer controls"
    default_severity = Severity.WARNING
    tags = frozenset({"video", "audio"})

    def visit(self, element: Element, ctx: RuleContext) -> None:
        if not element.has("autoplay"):
            return
        if element.tag == "audio" or not element.has("muted"):
            ctx.report(
                element,
                f"<{element.tag} autoplay> plays sound without user consent",
                hint="Add muted (browsers block unmuted autoplay) and controls",
            )
        elif not element.has("controls"):
            ctx.report(element, "Autoplaying <video> has no controls to pause it")


@register_rule
class NoNestedInteractiveRule(Rule):
    id = "no-nested-interactive"
    category = RuleCategory.ACCESSIBILITY
    description = "Interactive elements must not be nested in links or buttons"
    default_severity = Severity.ERROR

    def visit(self, element: Element, ctx: RuleContext) -> None:
        if not self._interactive(element):
            return
        outer = element.closest("a", "button")
        if outer is None:
            return
        if outer.tag == "a" and not outer.has("href"):
            return
        ctx.report(element, f"<{element.tag}> is nested inside <{outer.tag}> (line {outer.line})")

    @staticmethod
    def _interactive(element: Element) -> bool:
        if element.tag == "a":
            return element.has("href")
        if element.tag == "input":
            return element.get_stripped("type").lower() != "hidden"
        return element.tag in INTERACTIVE


@register_rule
class TableHeadersRule(Rule):
    id = "table-headers"
    category = RuleCategory.ACCESSIBILITY
    description = "Data tables should have header cells"
    default_severity = Severity.INFO
    tags = frozenset({"table"})

    def visit(self, element: Element, ctx: RuleContext) -> None:
        if set(element.tokens("role")) & {"presentation", "none"}:
            return
        cells = element.find_all("td", "th")
        if not cells:
            return
        if not any(cell.tag == "th" for cell in cells):
            ctx.report(element, "Table has data cells but no <th> headers", hint="Mark header cells with <th scope>")
