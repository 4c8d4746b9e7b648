"""
Rules Module
============

Rule base class, registry and the built-in rule sets.

Components:
- base: Rule interface and RuleContext
- registry: RuleRegistry and the global registry instance
- markup, semantics, accessibility, performance, seo: built-in rules
"""

from .base import Rule, RuleContext
from .registry import RuleRegistry, register_rule, registry

# Importing the rule modules registers their rules.
from . import markup, semantics, accessibility, performance, seo  # noqa: E402,F401

__all__ = ["Rule", "RuleContext", "RuleRegistry", "register_rule", "registry"]
