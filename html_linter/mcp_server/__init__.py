"""
MCP Server Implementation
========================

Model Context Protocol server exposing the lint engine as tools.

Tools provided:
- lint_html: Lint HTML or Markdown source
- list_rules: List available rules
- explain_rule: Describe a single rule
"""
