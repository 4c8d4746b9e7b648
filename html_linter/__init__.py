"""
HTML Lint Engine
================

Static analysis for HTML documents: semantic element usage, accessibility
attributes, performance hints and SEO metadata.

This package provides:
- DOM builder with source positions and parse issues
- Pluggable rule registry and single-pass visitor scheduler
- Inline suppression directives and preset-based configuration
- Text, JSON, HTML and GitHub report formatters
- CLI, FastAPI REST endpoints and an MCP tool server
"""

__version__ = "1.0.0"
__author__ = "HTML Lint Team"
