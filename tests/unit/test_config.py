"""
Unit Tests for Lint Configuration
=================================

Cerberus validation, presets, rule resolution and config file loading.
"""

import json

import pytest

from html_linter.core.engine.config import (
    PRESETS,
    ConfigValidator,
    detect_config_format,
    discover_config,
    load_config,
    load_config_file,
    load_config_text,
    parse_config_text,
    resolve_rules,
    with_rule_overrides,
)
from html_linter.core.errors import LintConfigError
from html_linter.core.rules import registry
from html_linter.models.schemas import LintConfig, RuleSetting, Severity


def resolved_map(config):
    return {r.id: r for r in resolve_rules(config)}


class TestConfigValidator:
    """Test raw configuration validation."""

    def setup_method(self):
        self.validator = ConfigValidator()

    def test_defaults_filled_in(self):
        ok, errors, normalized = self.validator.validate_config({})
        assert ok, errors
        assert normalized["extends"] == ["recommended"]
        assert normalized["rules"] == {}
        assert normalized["markdown"] is True

    def test_string_extends_coerced_to_list(self):
        ok, _, normalized = self.validator.validate_config({"extends": "strict", "ignore": "vendor/**"})
        assert ok
        assert normalized["extends"] == ["strict"]
        assert normalized["ignore"] == ["vendor/**"]

    def test_unknown_top_level_key(self):
        ok, errors, _ = self.validator.validate_config({"rulez": {}})
        assert not ok
        assert errors == ["rulez: unknown field"]

    def test_wrong_types(self):
        ok, errors, _ = self.validator.validate_config({"max_warnings": -1, "markdown": "yes"})
        assert not ok
        assert any(e.startswith("max_warnings:") for e in errors)
        assert any(e.startswith("markdown:") for e in errors)

    def test_unknown_preset_and_rule(self):
        errors = self.validator.validate_references({"extends": ["loose"], "rules": {"no-such-rule": "error"}})
        assert errors[0].startswith("extends: unknown preset 'loose'")
        assert errors[1] == "rules.no-such-rule: unknown rule 'no-such-rule'"

    def test_invalid_severity(self):
        errors = self.validator.validate_references({"rules": {"img-alt": "fatal"}})
        assert errors == ["rules.img-alt: invalid severity 'fatal' (expected error, warning, info, off)"]

    def test_rule_setting_requires_severity(self):
        errors = self.validator.validate_references({"rules": {"img-alt": {"options": {}}}})
        assert errors == ["rules.img-alt.severity: required field"]

    def test_invalid_rule_options(self):
        errors = self.validator.validate_references(
            {"rules": {"title-length": {"severity": "warning", "options": {"max_length": 0, "colour": "red"}}}}
        )
        assert "rules.title-length.options.max_length: min value is 1" in errors
        assert "rules.title-length.options.colour: unknown field" in errors

    def test_list_option_items_validated(self):
        errors = self.validator.validate_references(
            {"rules": {"open-graph": {"severity": "info", "options": {"properties": ["og:title", 3]}}}}
        )
        assert errors == ["rules.open-graph.options.properties.1: must be of string type"]


class TestLoadConfig:
    def test_valid_mapping(self):
        config = load_config(
            {
                "extends": ["recommended"],
                "rules": {"img-alt": "warning", "title-length": {"severity": "error", "options": {"max_length": 70}}},
                "max_warnings": 5,
            }
        )
        assert config.rules["img-alt"] == Severity.WARNING
        assert isinstance(config.rules["title-length"], RuleSetting)
        assert config.max_warnings == 5

    def test_none_is_default_config(self):
        assert load_config(None) == LintConfig()

    def test_non_mapping_rejected(self):
        with pytest.raises(LintConfigError, match="must be a mapping, got list"):
            load_config(["recommended"], source=".htmllintrc")

    def test_error_collects_every_problem(self):
        with pytest.raises(LintConfigError) as exc_info:
            load_config({"extends": ["nope"], "rules": {"img-alt": "loud", "made-up": "error"}})
        assert len(exc_info.value.errors) == 3


class TestConfigText:
    """Test JSON and YAML parsing and file discovery."""

    @pytest.mark.parametrize(
        "text,filename,expected",
        [
            ("{}", None, "json"),
            ("extends: all", None, "yaml"),
            ("{}", "lint.yaml", "yaml"),
            ("extends: all", "lint.json", "json"),
            ("a: 1", ".htmllintrc.yml", "yaml"),
        ],
    )
    def test_detect_format(self, text, filename, expected):
        assert detect_config_format(text, filename) == expected

    def test_yaml_text(self):
        config = load_config_text("extends: strict\nrules:\n  single-h1: off\n")
        assert config.extends == ["strict"]
        assert config.rules["single-h1"] == "off"

    def test_yaml_off_in_rule_setting(self):
        config = load_config_text("rules:\n  img-alt:\n    severity: off\n", filename=".htmllintrc.yaml")
        assert config.rules["img-alt"].severity == "off"
        assert "img-alt" not in resolved_map(config)

    def test_empty_json_text(self):
        assert parse_config_text("  ", "json") == {}

    def test_invalid_json(self):
        with pytest.raises(LintConfigError, match="invalid JSON at line 1"):
            load_config_text("{extends: }", filename="lint.json")

    def test_invalid_yaml(self):
        with pytest.raises(LintConfigError, match="invalid YAML"):
            parse_config_text("rules: [unclosed", "yaml")

    def test_unsupported_format(self):
        with pytest.raises(ValueError, match="Unsupported config format: toml"):
            parse_config_text("a = 1", "toml")

    def test_load_file(self, tmp_path):
        path = tmp_path / ".htmllintrc.json"
        path.write_text(json.dumps({"extends": "all", "report_unused_disables": True}), encoding="utf-8")
        config = load_config_file(path)
        assert config.extends == ["all"]
        assert config.report_unused_disables

    def test_missing_file(self, tmp_path):
        with pytest.raises(LintConfigError, match="cannot read config file"):
            load_config_file(tmp_path / "missing.yaml")

    def test_discover_walks_upward(self, tmp_path, settings):
        config_path = tmp_path / settings.config_filenames[0]
        config_path.write_text("extends: all\n", encoding="utf-8")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert discover_config(nested) == config_path
        assert discover_config(nested / "page.html") == config_path

    def test_discover_nothing(self, tmp_path, monkeypatch, settings):
        monkeypatch.setattr(settings, "config_filenames", ["unlikely-config-name.yml"])
        assert discover_config(tmp_path) is None


class TestResolveRules:
    """Test preset application and per-rule overrides."""

    def test_recommended_excludes_opt_in_rules(self):
        rules = resolved_map(LintConfig(extends=["recommended"]))
        assert "img-alt" in rules
        assert "open-graph" not in rules
        assert "img-lazy-loading" not in rules

    def test_all_enables_every_rule(self):
        assert sorted(resolved_map(LintConfig(extends=["all"]))) == registry.ids()

    def test_strict_promotes_warnings(self):
        rules = resolved_map(LintConfig(extends=["strict"]))
        assert rules["heading-order"].severity == Severity.ERROR
        assert rules["table-headers"].severity == Severity.INFO

    def test_none_preset_clears_earlier_presets(self):
        assert resolve_rules(LintConfig(extends=["all", "none"])) == []

    def test_presets_apply_in_order(self):
        rules = resolved_map(LintConfig(extends=["strict", "recommended"]))
        assert rules["heading-order"].severity == Severity.WARNING
        assert "open-graph" in rules

    def test_default_config_uses_default_preset(self, settings):
        assert [r.id for r in resolve_rules()] == [r.id for r in resolve_rules(LintConfig(extends=[settings.default_preset]))]

    def test_result_sorted_by_id(self):
        ids = [r.id for r in resolve_rules(LintConfig(extends=["all"]))]
        assert ids == sorted(ids)

    def test_off_disables_rule(self):
        rules = resolved_map(LintConfig(rules={"img-alt": "off", "heading-order": RuleSetting(severity="off")}))
        assert "img-alt" not in rules
        assert "heading-order" not in rules

    def test_bare_severity_enables_opt_in_rule_with_defaults(self):
        rules = resolved_map(LintConfig(rules={"open-graph": "warning"}))
        assert rules["open-graph"].severity == Severity.WARNING
        assert rules["open-graph"].options == {"properties": ["og:title", "og:description", "og:image"]}

    def test_setting_options_merge_over_defaults(self):
        config = LintConfig(rules={"title-length": RuleSetting(severity="error", options={"max_length": 70})})
        rule = resolved_map(config)["title-length"]
        assert rule.severity == Severity.ERROR
        assert rule.options == {"min_length": 10, "max_length": 70}

    def test_bare_severity_keeps_preset_options(self):
        rule = resolved_map(LintConfig(extends=["all"], rules={"title-length": "error"}))["title-length"]
        assert rule.severity == Severity.ERROR
        assert rule.options == {"min_length": 10, "max_length": 60}

    def test_invalid_reference_raises(self):
        with pytest.raises(LintConfigError, match="unknown rule 'nope'"):
            resolve_rules(LintConfig(rules={"nope": "error"}))

    def test_presets_documented(self):
        assert set(PRESETS) == {"recommended", "all", "strict", "none"}


class TestRuleOverrides:
    def test_with_rule_overrides_layers_on_top(self):
        base = LintConfig(extends=["recommended"], rules={"img-alt": "warning"}, ignore=["dist/**"])
        merged = with_rule_overrides(base, {"single-h1": "off"})
        assert merged.rules == {"img-alt": Severity.WARNING, "single-h1": "off"}
        assert merged.ignore == ["dist/**"]
        assert base.rules == {"img-alt": Severity.WARNING}

    def test_invalid_override_rejected(self):
        with pytest.raises(LintConfigError):
            with_rule_overrides(LintConfig(), {"img-alt": "loud"})
