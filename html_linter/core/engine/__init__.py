"""
Engine Module
=============

Configuration resolution, the rule scheduler, inline suppression and the
linter that ties them together.
"""

from .config import (
    PRESETS,
    ConfigValidator,
    ResolvedRule,
    discover_config,
    load_config,
    load_config_file,
    load_config_text,
    resolve_rules,
)
from .linter import HTMLLinter, lint_file, lint_html, lint_paths, validate_html_syntax
from .suppression import SuppressionMap
from .visitor import RuleScheduler, run_rules

__all__ = [
    "PRESETS",
    "ConfigValidator",
    "ResolvedRule",
    "discover_config",
    "load_config",
    "load_config_file",
    "load_config_text",
    "resolve_rules",
    "HTMLLinter",
    "lint_file",
    "lint_html",
    "lint_paths",
    "validate_html_syntax",
    "SuppressionMap",
    "RuleScheduler",
    "run_rules",
]
