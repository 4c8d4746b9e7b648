"""
DOM Module
==========

Components:
- nodes: Document, Element, Text, Comment and Doctype nodes with query helpers
- builder: HTMLParser-driven tree builder recording parse issues
"""

from .nodes import Node, Element, Text, Comment, Doctype, Document, ParseIssue
from .builder import HTMLTreeBuilder, build_dom

__all__ = [
    "Node",
    "Element",
    "Text",
    "Comment",
    "Doctype",
    "Document",
    "ParseIssue",
    "HTMLTreeBuilder",
    "build_dom",
]
