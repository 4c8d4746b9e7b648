"""
Source Module
=============

Input handling for HTML files and Markdown notes with embedded html blocks.
"""

from .markdown import HtmlBlock, MarkdownNote, detect_source_type, parse_markdown

__all__ = ["HtmlBlock", "MarkdownNote", "detect_source_type", "parse_markdown"]
