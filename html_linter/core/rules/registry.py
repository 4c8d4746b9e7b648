"""
Rule Registry
=============

Registry of rule classes keyed by id. Rule modules register themselves
with the `register_rule` decorator when `html_linter.core.rules` is imported.
"""

from typing import Dict, Iterator, List, Optional, Type

from html_linter.config.logging import get_logger
from html_linter.core.errors import UnknownRuleError
from html_linter.models.schemas import RuleCategory, RuleInfo
from .base import Rule

logger = get_logger(__name__)


class RuleRegistry:
    """Registry for rule classes."""

    def __init__(self) -> None:
        self._rules: Dict[str, Type[Rule]] = {}

    def register(self, rule_cls: Type[Rule]) -> Type[Rule]:
        """
        Register a rule class. Usable as a class decorator.

        Raises:
            ValueError: If the id is empty or already registered
        """
        if not rule_cls.id:
            raise ValueError(f"Rule {rule_cls.__name__} has no id")
        existing = self._rules.get(rule_cls.id)
        if existing is not None and existing is not rule_cls:
            raise ValueError(f"Duplicate rule id: {rule_cls.id}")
        self._rules[rule_cls.id] = rule_cls
        logger.debug("Rule registered", rule=rule_cls.id, category=rule_cls.category.value)
        return rule_cls

    def unregister(self, rule_id: str) -> None:
        self._rules.pop(rule_id, None)

    def get(self, rule_id: str) -> Type[Rule]:
        try:
            return self._rules[rule_id]
        except KeyError:
            raise UnknownRuleError(rule_id) from None

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def __iter__(self) -> Iterator[Type[Rule]]:
        return iter(self.all())

    def __len__(self) -> int:
        return len(self._rules)

    def all(self) -> List[Type[Rule]]:
        return [self._rules[rule_id] for rule_id in sorted(self._rules)]

    def ids(self) -> List[str]:
        return sorted(self._rules)

    def by_category(self, category: Optional[RuleCategory]) -> List[Type[Rule]]:
        if category is None:
            return self.all()
        return [rule for rule in self.all() if rule.category == category]

    def info(self, category: Optional[RuleCategory] = None) -> List[RuleInfo]:
        return [rule.info() for rule in self.by_category(category)]


registry = RuleRegistry()


def register_rule(rule_cls: Type[Rule]) -> Type[Rule]:
    """Class decorator registering a rule with the global registry."""
    return registry.register(rule_cls)
