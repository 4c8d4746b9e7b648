"""
Core Business Logic
==================

Core modules for HTML analysis.

Modules:
- dom: HTML parsing into a positioned node tree
- rules: Rule base class, registry and built-in checks
- engine: Traversal scheduler, suppression, configuration and orchestration
- sources: HTML and Markdown input handling
- reporting: Diagnostic formatters
"""
