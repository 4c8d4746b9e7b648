"""
Test Helpers
============

Helper functions for running single rules and building linters.
"""

from typing import Any, Dict, List, Optional

from html_linter.core.engine.linter import HTMLLinter
from html_linter.core.rules import registry
from html_linter.models.schemas import Diagnostic, LintConfig, RuleSetting


def only_rule_config(rule_id: str, options: Optional[Dict[str, Any]] = None) -> LintConfig:
    """Config enabling a single rule at its default severity."""
    severity = registry.get(rule_id).default_severity
    setting = RuleSetting(severity=severity, options=options or {})
    return LintConfig(extends=["none"], rules={rule_id: setting})


def run_rule(
    html: str,
    rule_id: str,
    options: Optional[Dict[str, Any]] = None,
    fragment: Optional[bool] = None,
) -> List[Diagnostic]:
    """Lint `html` with only `rule_id` enabled and return its diagnostics."""
    result = HTMLLinter(only_rule_config(rule_id, options)).lint_text(html, fragment=fragment)
    return [d for d in result.diagnostics if d.rule_id == rule_id]
