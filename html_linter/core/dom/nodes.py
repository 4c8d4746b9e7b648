"""
DOM Nodes
=========

Lightweight node tree produced by the builder. Every node carries the
1-based line and column where it starts in the original source.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

_WHITESPACE = re.compile(r"\s+")


@dataclass
class ParseIssue:
    """Structural problem noticed while building the tree."""

    kind: str
    message: str
    line: int
    column: int
    tag: Optional[str] = None


class Node:
    """Base node."""

    def __init__(self, line: int = 1, column: int = 1) -> None:
        self.line = line
        self.column = column
        self.parent: Optional["Node"] = None
        self.children: List["Node"] = []

    @property
    def position(self) -> Tuple[int, int]:
        return self.line, self.column

    def append(self, child: "Node") -> None:
        child.parent = self
        self.children.append(child)

    def iter(self) -> Iterator["Node"]:
        """Yield descendants in document (pre-order) order."""
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def iter_elements(self) -> Iterator["Element"]:
        for node in self.iter():
            if isinstance(node, Element):
                yield node

    def find_all(self, *tags: str) -> List["Element"]:
        wanted = {t.lower() for t in tags}
        return [el for el in self.iter_elements() if not wanted or el.tag in wanted]

    def find(self, *tags: str) -> Optional["Element"]:
        wanted = {t.lower() for t in tags}
        for el in self.iter_elements():
            if el.tag in wanted:
                return el
        return None

    def children_elements(self) -> List["Element"]:
        return [c for c in self.children if isinstance(c, Element)]

    def ancestors(self) -> Iterator["Element"]:
        node = self.parent
        while node is not None:
            if isinstance(node, Element):
                yield node
            node = node.parent

    def closest(self, *tags: str) -> Optional["Element"]:
        wanted = {t.lower() for t in tags}
        for ancestor in self.ancestors():
            if ancestor.tag in wanted:
                return ancestor
        return None

    @property
    def text(self) -> str:
        """Whitespace-normalised text content."""
        parts = [n.data for n in self.iter() if isinstance(n, Text)]
        return _WHITESPACE.sub(" ", "".join(parts)).strip()


class Text(Node):
    def __init__(self, data: str, line: int = 1, column: int = 1) -> None:
        super().__init__(line, column)
        self.data = data

    def __repr__(self) -> str:
        return f"Text({self.data[:20]!r} @{self.line}:{self.column})"


class Comment(Node):
    def __init__(self, data: str, line: int = 1, column: int = 1) -> None:
        super().__init__(line, column)
        self.data = data

    @property
    def end_line(self) -> int:
        # "<!--" and "-->" never contain newlines
        return self.line + self.data.count("\n")

    def __repr__(self) -> str:
        return f"Comment({self.data.strip()[:30]!r} @{self.line}:{self.column})"


class Doctype(Node):
    def __init__(self, declaration: str, line: int = 1, column: int = 1) -> None:
        super().__init__(line, column)
        self.declaration = declaration

    @property
    def is_html5(self) -> bool:
        return self.declaration.strip().lower() == "doctype html"

    def __repr__(self) -> str:
        return f"Doctype({self.declaration!r})"


class Element(Node):
    """An HTML element with attributes."""

    def __init__(
        self,
        tag: str,
        attr_list: Optional[List[Tuple[str, Optional[str]]]] = None,
        line: int = 1,
        column: int = 1,
    ) -> None:
        super().__init__(line, column)
        self.tag = tag
        self.attr_list = list(attr_list or [])
        self.attrs: Dict[str, Optional[str]] = {}
        self.duplicate_attrs: List[Tuple[str, Optional[str]]] = []
        for name, value in self.attr_list:
            if name in self.attrs:
                self.duplicate_attrs.append((name, value))
            else:
                self.attrs[name] = value
        self.end_line: Optional[int] = None
        self.end_column: Optional[int] = None
        self.self_closing = False

    def __repr__(self) -> str:
        return f"<{self.tag} @{self.line}:{self.column}>"

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Attribute value; boolean attributes yield an empty string."""
        if name not in self.attrs:
            return default
        value = self.attrs[name]
        return "" if value is None else value

    def has(self, name: str) -> bool:
        return name in self.attrs

    def get_stripped(self, name: str) -> str:
        return (self.get(name) or "").strip()

    def tokens(self, name: str) -> List[str]:
        """Whitespace separated token list (class, rel, role...)."""
        return (self.get(name) or "").lower().split()

    @property
    def id(self) -> Optional[str]:
        return self.get("id")

    @property
    def selector(self) -> str:
        """CSS-like path from the outermost element to this one."""
        path: List[str] = []
        node: Optional[Node] = self
        while isinstance(node, Element):
            if node.get_stripped("id"):
                path.append(f"{node.tag}#{node.get_stripped('id')}")
                break
            part = node.tag
            parent = node.parent
            if parent is not None:
                same = [c for c in parent.children_elements() if c.tag == node.tag]
                if len(same) > 1:
                    part += f":nth-of-type({same.index(node) + 1})"
            path.append(part)
            node = parent
        return " > ".join(reversed(path))


class Document(Node):
    """Root of a parsed source."""

    def __init__(self) -> None:
        super().__init__(1, 1)
        self.issues: List[ParseIssue] = []
        self.line_count = 0

    def __repr__(self) -> str:
        return f"Document({len(self.children)} children, {len(self.issues)} issues)"

    @property
    def doctype(self) -> Optional[Doctype]:
        for node in self.children:
            if isinstance(node, Doctype):
                return node
        return None

    @property
    def comments(self) -> List[Comment]:
        return [n for n in self.iter() if isinstance(n, Comment)]

    @property
    def html_element(self) -> Optional[Element]:
        return self.find("html")

    @property
    def head(self) -> Optional[Element]:
        return self.find("head")

    @property
    def body(self) -> Optional[Element]:
        return self.find("body")

    @property
    def is_fragment(self) -> bool:
        """True for snippets with no doctype and no html/head/body element."""
        if self.doctype is not None:
            return False
        return self.find("html", "head", "body") is None

    def get_element_by_id(self, element_id: str) -> Optional[Element]:
        for el in self.iter_elements():
            if el.get("id") == element_id:
                return el
        return None

    def first_significant_node(self) -> Optional[Node]:
        """First child that is not whitespace or a comment."""
        for node in self.children:
            if isinstance(node, Comment):
                continue
            if isinstance(node, Text) and not node.data.strip():
                continue
            return node
        return None
