"""
DOM Builder
===========

Build a positioned node tree from HTML text on top of the standard
library's tokenizer. The builder is forgiving: it never rejects input,
it applies the common implied-end-tag rules and records structural
problems as ParseIssue entries on the resulting Document.
"""

from html.parser import HTMLParser
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple, Union

from html_linter.config.logging import get_logger
from .nodes import Comment, Doctype, Document, Element, Node, ParseIssue, Text

logger = get_logger(__name__)

VOID_ELEMENTS: FrozenSet[str] = frozenset(
    {
        "area", "base", "br", "col", "embed", "hr", "img", "input", "keygen",
        "link", "meta", "param", "source", "track", "wbr",
    }
)

# Elements whose end tag may be omitted; never reported as unclosed.
OPTIONAL_END_TAGS: FrozenSet[str] = frozenset(
    {
        "p", "li", "dt", "dd", "option", "optgroup", "tr", "td", "th", "thead",
        "tbody", "tfoot", "colgroup", "rt", "rp", "html", "head", "body",
    }
)

_P_CLOSERS = frozenset(
    {
        "address", "article", "aside", "blockquote", "details", "div", "dl",
        "fieldset", "figcaption", "figure", "footer", "form", "h1", "h2", "h3",
        "h4", "h5", "h6", "header", "hgroup", "hr", "main", "menu", "nav", "ol",
        "p", "pre", "section", "table", "ul", "li", "dt", "dd",
    }
)

# open element -> start tags that implicitly close it
IMPLIED_END: Dict[str, FrozenSet[str]] = {
    "p": _P_CLOSERS,
    "li": frozenset({"li"}),
    "dt": frozenset({"dt", "dd"}),
    "dd": frozenset({"dt", "dd"}),
    "option": frozenset({"option", "optgroup"}),
    "optgroup": frozenset({"optgroup"}),
    "tr": frozenset({"tr", "tbody", "tfoot"}),
    "td": frozenset({"td", "th", "tr", "tbody", "tfoot"}),
    "th": frozenset({"td", "th", "tr", "tbody", "tfoot"}),
    "thead": frozenset({"tbody", "tfoot"}),
    "tbody": frozenset({"tbody", "tfoot"}),
    "rt": frozenset({"rt", "rp"}),
    "rp": frozenset({"rt", "rp"}),
}


class HTMLTreeBuilder(HTMLParser):
    """HTMLParser subclass assembling a Document."""

    def __init__(self, line_offset: int = 0, column_offset: Union[int, Sequence[int]] = 0) -> None:
        super().__init__(convert_charrefs=True)
        self.line_offset = line_offset
        self.column_offset = column_offset
        self.document = Document()
        self._stack: List[Node] = [self.document]

    # Positions

    def _position(self) -> Tuple[int, int]:
        line, offset = self.getpos()
        return line + self.line_offset, offset + 1 + self._column_shift(line)

    def _column_shift(self, line: int) -> int:
        if isinstance(self.column_offset, int):
            return self.column_offset
        # per-line shifts; lines past the table (EOF) take none
        return self.column_offset[line - 1] if 0 < line <= len(self.column_offset) else 0

    def _issue(self, kind: str, message: str, line: int, column: int, tag: Optional[str] = None) -> None:
        self.document.issues.append(ParseIssue(kind, message, line, column, tag))

    @property
    def _current(self) -> Node:
        return self._stack[-1]

    # Tree operations

    def _apply_implied_end_tags(self, tag: str) -> None:
        while len(self._stack) > 1:
            top = self._current
            if not isinstance(top, Element):
                break
            closers = IMPLIED_END.get(top.tag)
            if closers is None or tag not in closers:
                break
            self._stack.pop()

    def _open(self, tag: str, attrs: List[Tuple[str, Optional[str]]], self_closing: bool) -> None:
        line, column = self._position()
        self._apply_implied_end_tags(tag)
        element = Element(tag, attrs, line, column)
        self._current.append(element)
        if self_closing or tag in VOID_ELEMENTS:
            element.self_closing = self_closing
            element.end_line, element.end_column = line, column
            return
        self._stack.append(element)

    def _close(self, tag: str) -> None:
        line, column = self._position()

        if tag in VOID_ELEMENTS:
            self._issue(
                "stray-end-tag", f"Void element <{tag}> must not have an end tag", line, column, tag
            )
            return

        for index in range(len(self._stack) - 1, 0, -1):
            node = self._stack[index]
            if isinstance(node, Element) and node.tag == tag:
                break
        else:
            self._issue(
                "stray-end-tag", f"End tag </{tag}> has no matching start tag", line, column, tag
            )
            return

        for node in self._stack[index + 1:]:
            if isinstance(node, Element) and node.tag not in OPTIONAL_END_TAGS:
                self._issue(
                    "unclosed-element",
                    f"Element <{node.tag}> is not closed before </{tag}>",
                    node.line,
                    node.column,
                    node.tag,
                )
        closed = self._stack[index]
        if isinstance(closed, Element):
            closed.end_line, closed.end_column = line, column
        del self._stack[index:]

    # HTMLParser callbacks

    def handle_starttag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        self._open(tag, attrs, self_closing=False)

    def handle_startendtag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        self._open(tag, attrs, self_closing=True)

    def handle_endtag(self, tag: str) -> None:
        self._close(tag)

    def handle_data(self, data: str) -> None:
        line, column = self._position()
        self._current.append(Text(data, line, column))

    def handle_comment(self, data: str) -> None:
        line, column = self._position()
        self._current.append(Comment(data, line, column))

    def handle_decl(self, decl: str) -> None:
        line, column = self._position()
        if decl.lower().startswith("doctype"):
            self._current.append(Doctype(decl, line, column))

    def unknown_decl(self, data: str) -> None:
        # CDATA sections and other SGML leftovers are ignored.
        pass

    # Finalisation

    def finish(self, text: str) -> Document:
        for node in self._stack[1:]:
            if isinstance(node, Element) and node.tag not in OPTIONAL_END_TAGS:
                self._issue(
                    "unclosed-element",
                    f"Element <{node.tag}> is never closed",
                    node.line,
                    node.column,
                    node.tag,
                )
        self._stack = [self.document]
        self.document.line_count = text.count("\n") + 1
        return self.document


def build_dom(text: str, line_offset: int = 0, column_offset: Union[int, Sequence[int]] = 0) -> Document:
    """
    Parse HTML text into a Document.

    Args:
        text: HTML source
        line_offset: Added to every reported line (embedded sources)
        column_offset: Added to every reported column (indented sources),
            or one value per source line

    Returns:
        Document with nodes and parse issues
    """
    builder = HTMLTreeBuilder(line_offset=line_offset, column_offset=column_offset)
    try:
        builder.feed(text)
        builder.close()
    except AssertionError as e:
        # The stdlib tokenizer still asserts on a few malformed constructs.
        line, column = builder._position()
        builder._issue("parse-error", f"Unable to tokenize markup: {e}", line, column)
        logger.warning("HTML tokenizer aborted", error=str(e), line=line)
    document = builder.finish(text)
    logger.debug(
        "DOM built",
        nodes=sum(1 for _ in document.iter()),
        issues=len(document.issues),
    )
    return document
