"""
Lint Errors
===========

Exception hierarchy shared by the engine, configuration loader and surfaces.
"""

from typing import Iterable, List


class LintError(Exception):
    """Base class for lint engine errors."""

    pass


class LintConfigError(LintError):
    """Raised when a lint configuration is invalid. Carries every message found."""

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid lint configuration")


class UnknownRuleError(LintError, KeyError):
    """Raised when a rule id is not registered."""

    def __init__(self, rule_id: str) -> None:
        self.rule_id = rule_id
        super().__init__(f"Unknown rule: {rule_id}")

    def __str__(self) -> str:
        return f"Unknown rule: {self.rule_id}"


class SourceError(LintError):
    """Raised when a source cannot be read or decoded."""

    pass


class SourceTooLargeError(SourceError):
    """Raised by surfaces that reject oversized sources before linting."""

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(f"Source is {size} bytes; the limit is {limit}")
