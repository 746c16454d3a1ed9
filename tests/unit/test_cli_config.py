"""
Unit tests for CLI configuration management.
"""

import json
import os

import pytest
import yaml

from cli.config import DEFAULT_CONFIG, ConfigurationManager, get_config_manager


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep real config files and TXGATE_* variables out of the tests."""
    monkeypatch.setattr("cli.config.CONFIG_SEARCH_PATHS", [tmp_path / ".txgate.yml"])
    for key in list(os.environ):
        if key.startswith("TXGATE_"):
            monkeypatch.delenv(key)
    return tmp_path


class TestConfigurationManager:
    """Hierarchical configuration loading."""

    def test_defaults(self):
        manager = ConfigurationManager()

        assert manager.get("validator.signing_version") == 1
        assert manager.get("validator.enforce_owner_match") is False
        assert manager.get("cli.report_format") == "text"
        assert manager.get_sources() == ["defaults"]
        assert manager.validate() == []

    def test_defaults_not_mutated(self):
        manager = ConfigurationManager()
        manager.set("validator.signing_version", 7)

        assert DEFAULT_CONFIG["validator"]["signing_version"] == 1
        assert ConfigurationManager().get("validator.signing_version") == 1

    def test_get_missing_key(self):
        manager = ConfigurationManager()

        assert manager.get("validator.nope") is None
        assert manager.get("validator.nope", "fallback") == "fallback"
        assert manager.get("cli.report_format.deeper") is None

    def test_set_creates_sections(self):
        manager = ConfigurationManager()
        manager.set("extra.nested.value", 3)

        assert manager.get("extra.nested.value") == 3

    def test_profile(self):
        manager = get_config_manager(profile="development")

        assert manager.get("validator.enforce_owner_match") is False
        assert manager.get("cli.include_suggestions") is True
        assert manager.get_sources() == ["defaults", "profile:development"]

    def test_strict_profile_expands_paths(self):
        manager = ConfigurationManager(profile="strict")

        assert manager.get("validator.enforce_owner_match") is True
        assert manager.get("validator.audit_enabled") is True
        assert not manager.get("validator.audit_log_file").startswith("~")

    def test_unknown_profile(self):
        with pytest.raises(ValueError, match="Unknown configuration profile"):
            ConfigurationManager(profile="nope").load()

    def test_explicit_yaml_file(self, tmp_path):
        config_file = tmp_path / "custom.yml"
        config_file.write_text(yaml.safe_dump({"cli": {"report_format": "markdown"}}))

        manager = ConfigurationManager(str(config_file))

        assert manager.get("cli.report_format") == "markdown"
        assert manager.get("cli.output_format") == "table"
        assert manager.get_sources() == ["defaults", f"file:{config_file}"]

    def test_explicit_json_file(self, tmp_path):
        config_file = tmp_path / "custom.json"
        config_file.write_text(json.dumps({"validator": {"validator_id": "node-7"}}))

        assert ConfigurationManager(str(config_file)).get("validator.validator_id") == "node-7"

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigurationManager(str(tmp_path / "absent.yml")).load()

    def test_search_path_file(self, isolated_config):
        (isolated_config / ".txgate.yml").write_text("validator:\n  audit_enabled: true\n")

        manager = ConfigurationManager()

        assert manager.get("validator.audit_enabled") is True
        assert manager.get_sources()[-1].startswith("file:")

    def test_empty_file(self, tmp_path):
        config_file = tmp_path / "empty.yml"
        config_file.write_text("")

        assert ConfigurationManager(str(config_file)).get("validator.signing_version") == 1

    def test_environment_overrides(self, monkeypatch, tmp_path):
        config_file = tmp_path / "custom.yml"
        config_file.write_text("validator:\n  signing_version: 3\n")
        monkeypatch.setenv("TXGATE_VALIDATOR__SIGNING_VERSION", "1")
        monkeypatch.setenv("TXGATE_VALIDATOR__AUDIT_ENABLED", "yes")
        monkeypatch.setenv("TXGATE_CLI__REPORT_FORMAT", "json")

        manager = ConfigurationManager(str(config_file))

        assert manager.get("validator.signing_version") == 1
        assert manager.get("validator.audit_enabled") is True
        assert manager.get("cli.report_format") == "json"
        assert manager.get_sources()[-1] == "environment"

    def test_scalar_env_does_not_replace_section(self, monkeypatch):
        monkeypatch.setenv("TXGATE_VALIDATOR", "x")
        monkeypatch.setenv("TXGATE_VALIDATOR__SIGNING_VERSION", "1")

        manager = ConfigurationManager()

        assert isinstance(manager.get("validator"), dict)
        assert manager.get("validator.signing_version") == 1
        assert manager.get("validator.validator_id") == "txgate_validator"
        assert manager.validate() == []

    def test_scalar_env_alone_is_ignored(self, monkeypatch, caplog):
        monkeypatch.setenv("TXGATE_CLI", "json")

        manager = ConfigurationManager()

        assert manager.get("cli.output_format") == "table"
        assert "Ignoring TXGATE_CLI" in caplog.text

    def test_env_below_scalar_is_ignored(self, monkeypatch):
        monkeypatch.setenv("TXGATE_CLI__OUTPUT_FORMAT", "json")
        monkeypatch.setenv("TXGATE_CLI__OUTPUT_FORMAT__DEEPER", "1")

        assert ConfigurationManager().get("cli.output_format") == "json"

    def test_scalar_section_in_file_keeps_defaults(self, tmp_path, caplog):
        config_file = tmp_path / "custom.yml"
        config_file.write_text("validator: 3\ncli:\n  report_format: json\n")

        manager = ConfigurationManager(str(config_file))

        assert manager.get("validator.signing_version") == 1
        assert manager.get("cli.report_format") == "json"
        assert "non-mapping value for section 'validator'" in caplog.text

    def test_validate_reports_problems(self, tmp_path):
        config_file = tmp_path / "bad.yml"
        config_file.write_text(yaml.safe_dump({
            "validator": {"signing_version": 9, "audit_enabled": "maybe"},
            "cli": {"output_format": "xml", "report_format": "html"},
        }))

        errors = ConfigurationManager(str(config_file)).validate()

        assert "Unsupported signing version: 9" in errors
        assert "validator.audit_enabled must be true or false" in errors
        assert "Invalid output format: xml" in errors
        assert "Invalid report format: html" in errors
