"""
Lint Configuration
==================

Presets, rule resolution and config file loading. Raw configuration is
validated with Cerberus before it becomes a LintConfig; rule options are
validated against each rule's own Cerberus schema.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, Union

import yaml  # type: ignore[import-untyped]
from cerberus import Validator  # type: ignore[import-untyped]
from pydantic import ValidationError

from html_linter.config.logging import get_logger
from html_linter.config.settings import get_settings
from html_linter.core.errors import LintConfigError
from html_linter.core.rules import Rule, RuleRegistry, registry
from html_linter.models.schemas import OFF, LintConfig, RuleSetting, Severity

logger = get_logger(__name__)

PRESETS: Dict[str, str] = {
    "recommended": "Recommended rules at their default severity",
    "all": "Every rule at its default severity",
    "strict": "Every rule; warnings are promoted to errors",
    "none": "No rules; clears everything enabled so far",
}

SEVERITY_VALUES = [s.value for s in Severity] + [OFF]


@dataclass(frozen=True)
class ResolvedRule:
    """A rule enabled for a run with its effective severity and options."""

    rule: Type[Rule]
    severity: Severity
    options: Dict[str, Any] = field(default_factory=dict)

    @property
    def id(self) -> str:
        return self.rule.id


def _as_severity(value: Any) -> Any:
    # YAML 1.1 reads a bare `off` as false
    return OFF if value is False else value


def _as_list(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return value


class ConfigValidator:
    """Configuration validation using Cerberus schemas."""

    def __init__(self, rule_registry: RuleRegistry = registry) -> None:
        self.logger: Any = logger.bind(component="config_validator")
        self.registry = rule_registry
        self._setup_schemas()

    def _setup_schemas(self) -> None:
        """Setup validation schemas."""
        self.rule_setting_schema = {
            "severity": {"type": "string", "required": True, "allowed": SEVERITY_VALUES, "coerce": _as_severity},
            "options": {"type": "dict", "default": {}},
        }

        self.config_schema: Dict[str, Any] = {
            "extends": {
                "type": "list",
                "coerce": _as_list,
                "schema": {"type": "string"},
                "default": ["recommended"],
            },
            "rules": {
                "type": "dict",
                "keysrules": {"type": "string"},
                "valuesrules": {"type": ["string", "dict"], "coerce": _as_severity},
                "default": {},
            },
            "ignore": {"type": "list", "coerce": _as_list, "schema": {"type": "string"}, "default": []},
            "report_unused_disables": {"type": "boolean", "default": False},
            "max_warnings": {"type": "integer", "min": 0, "nullable": True},
            "markdown": {"type": "boolean", "default": True},
        }

    def validate_config(self, data: Mapping[str, Any]) -> Tuple[bool, List[str], Dict[str, Any]]:
        """
        Validate raw configuration data.

        Args:
            data: Parsed YAML/JSON configuration

        Returns:
            Tuple of (is_valid, errors, normalized data)
        """
        validator = Validator(self.config_schema)  # type: ignore[misc]
        is_valid = validator.validate(dict(data))  # type: ignore[misc]
        errors: List[str] = []

        if not is_valid:
            errors.extend(self._format_validation_errors(validator.errors))  # type: ignore[attr-defined]
            return False, errors, dict(data)

        normalized: Dict[str, Any] = validator.document  # type: ignore[attr-defined]
        rules = normalized.get("rules", {})
        for rule_id, value in rules.items():
            if isinstance(value, dict):
                setting_validator = Validator(self.rule_setting_schema)  # type: ignore[misc]
                rules[rule_id] = setting_validator.normalized(value, always_return_document=True)  # type: ignore[misc]
        errors.extend(self.validate_references(normalized))
        return not errors, errors, normalized

    def validate_options(self, rule: Type[Rule], options: Mapping[str, Any], path: str) -> List[str]:
        """Validate rule options against the rule's options schema."""
        validator = Validator(rule.options_schema)  # type: ignore[misc]
        if validator.validate(dict(options)):  # type: ignore[misc]
            return []
        return self._format_validation_errors(validator.errors, path)  # type: ignore[attr-defined]

    def _format_validation_errors(self, errors: Any, path: str = "") -> List[str]:
        """Format Cerberus validation errors into readable messages."""
        formatted_errors: List[str] = []

        for name, error_info in errors.items():
            current_path = f"{path}.{name}" if path else str(name)

            if isinstance(error_info, dict):
                formatted_errors.extend(self._format_validation_errors(error_info, current_path))
                continue
            for error in error_info:
                if isinstance(error, dict):
                    formatted_errors.extend(self._format_validation_errors(error, current_path))
                else:
                    formatted_errors.append(f"{current_path}: {error}")

        return formatted_errors

    def validate_references(self, data: Mapping[str, Any]) -> List[str]:
        """Check preset names, rule ids, severities and rule options."""
        errors: List[str] = []

        for preset in data.get("extends", []):
            if preset not in PRESETS:
                errors.append(f"extends: unknown preset '{preset}' (expected one of {', '.join(PRESETS)})")

        for rule_id, value in data.get("rules", {}).items():
            path = f"rules.{rule_id}"
            if rule_id not in self.registry:
                errors.append(f"{path}: unknown rule '{rule_id}'")
                continue
            if isinstance(value, str):
                if value not in SEVERITY_VALUES:
                    errors.append(f"{path}: invalid severity '{value}' (expected {', '.join(SEVERITY_VALUES)})")
                continue

            validator = Validator(self.rule_setting_schema)  # type: ignore[misc]
            if not validator.validate(value):  # type: ignore[misc]
                errors.extend(self._format_validation_errors(validator.errors, path))  # type: ignore[attr-defined]
                continue
            rule = self.registry.get(rule_id)
            merged = {**rule.default_options, **validator.document.get("options", {})}  # type: ignore[attr-defined]
            errors.extend(self.validate_options(rule, merged, f"{path}.options"))

        return errors


def load_config(data: Optional[Mapping[str, Any]], source: str = "<config>") -> LintConfig:
    """
    Validate raw configuration data and build a LintConfig.

    Raises:
        LintConfigError: With every problem found
    """
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise LintConfigError([f"{source}: configuration must be a mapping, got {type(data).__name__}"])

    is_valid, errors, normalized = ConfigValidator().validate_config(data)
    if not is_valid:
        logger.warning("Invalid lint configuration", source=source, errors=errors)
        raise LintConfigError(errors)

    try:
        return LintConfig.model_validate(normalized)
    except ValidationError as e:
        raise LintConfigError(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        ) from e


def detect_config_format(text: str, filename: Optional[str] = None) -> str:
    """Detect "json" or "yaml" from the file extension or the content."""
    if filename:
        suffix = Path(filename).suffix.lower()
        if suffix == ".json":
            return "json"
        if suffix in (".yaml", ".yml"):
            return "yaml"
    return "json" if text.lstrip().startswith("{") else "yaml"


def parse_config_text(text: str, config_format: Optional[str] = None, source: str = "<config>") -> Any:
    """Parse configuration text as JSON or YAML."""
    config_format = config_format or detect_config_format(text)
    try:
        if config_format == "json":
            return json.loads(text) if text.strip() else {}
        if config_format == "yaml":
            return yaml.safe_load(text)
    except json.JSONDecodeError as e:
        raise LintConfigError([f"{source}: invalid JSON at line {e.lineno}: {e.msg}"]) from e
    except yaml.YAMLError as e:
        raise LintConfigError([f"{source}: invalid YAML: {e}"]) from e
    raise ValueError(f"Unsupported config format: {config_format}")


def load_config_text(text: str, filename: Optional[str] = None) -> LintConfig:
    source = filename or "<config>"
    data = parse_config_text(text, detect_config_format(text, filename), source=source)
    return load_config(data, source=source)


def load_config_file(path: Union[str, Path]) -> LintConfig:
    """Load and validate a YAML or JSON configuration file."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise LintConfigError([f"{path}: cannot read config file: {e}"]) from e
    logger.debug("Loading lint configuration", path=str(path))
    return load_config_text(text, filename=str(path))


def discover_config(start: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """Find the nearest config file from `start` (default: cwd) upward."""
    directory = Path(start or Path.cwd()).resolve()
    if directory.is_file():
        directory = directory.parent
    filenames = get_settings().config_filenames
    for candidate_dir in [directory, *directory.parents]:
        for name in filenames:
            candidate = candidate_dir / name
            if candidate.is_file():
                return candidate
    return None


def with_rule_overrides(config: LintConfig, overrides: Mapping[str, Any]) -> LintConfig:
    """Return a copy of `config` with extra rule settings layered on top."""
    data = config.model_dump(mode="json")
    data["rules"] = {**data.get("rules", {}), **overrides}
    return load_config(data)


def _apply_preset(name: str, resolved: Dict[str, Tuple[Severity, Dict[str, Any]]], rule_registry: RuleRegistry) -> None:
    if name == "none":
        resolved.clear()
        return
    for rule in rule_registry.all():
        if name == "recommended" and not rule.recommended:
            continue
        severity = rule.default_severity
        if name == "strict" and severity == Severity.WARNING:
            severity = Severity.ERROR
        resolved[rule.id] = (severity, dict(rule.default_options))


def resolve_rules(config: Optional[LintConfig] = None, rule_registry: RuleRegistry = registry) -> List[ResolvedRule]:
    """
    Resolve a configuration into the rules to run.

    Presets apply in `extends` order, then per-rule overrides. A bare
    severity keeps options set so far; a RuleSetting merges its options
    over the rule defaults.

    Raises:
        LintConfigError: On unknown presets or rules, or invalid options
    """
    if config is None:
        config = LintConfig(extends=[get_settings().default_preset])

    validator = ConfigValidator(rule_registry)
    errors = validator.validate_references(config.model_dump(mode="json"))
    if errors:
        raise LintConfigError(errors)

    resolved: Dict[str, Tuple[Severity, Dict[str, Any]]] = {}
    for preset in config.extends:
        _apply_preset(preset, resolved, rule_registry)

    for rule_id, value in config.rules.items():
        rule = rule_registry.get(rule_id)
        if isinstance(value, RuleSetting):
            if value.severity == OFF:
                resolved.pop(rule_id, None)
            else:
                resolved[rule_id] = (Severity(value.severity), {**rule.default_options, **value.options})
        elif value == OFF:
            resolved.pop(rule_id, None)
        else:
            previous = resolved.get(rule_id)
            options = previous[1] if previous else dict(rule.default_options)
            resolved[rule_id] = (Severity(value), options)

    return [
        ResolvedRule(rule_registry.get(rule_id), severity, options)
        for rule_id, (severity, options) in sorted(resolved.items())
    ]
