"""Tests for configuration validation."""

import logging

import toml

from timew_timer.config import default_config, load_custom_config
from timew_timer.config_validation import validate_and_warn, validate_config


class TestConfigValidator:
    def test_empty_config_is_valid(self) -> None:
        errors, warnings = validate_config({})
        assert errors == []
        assert warnings == []

    def test_default_config_is_valid(self) -> None:
        errors, warnings = validate_config(toml.loads(default_config))
        assert errors == []
        assert warnings == []

    def test_unknown_top_level_key_warns(self) -> None:
        errors, warnings = validate_config({"unknown_key": "value"})
        assert errors == []
        assert any("unknown_key" in w for w in warnings)

    def test_unknown_parameter_warns(self) -> None:
        errors, warnings = validate_config({"tracker": {"colour": "red"}})
        assert errors == []
        assert any("tracker.colour" in w for w in warnings)

    def test_section_must_be_table(self) -> None:
        errors, _ = validate_config({"tracker": "timew"})
        assert any("'tracker' section must be a dictionary" in e for e in errors)


class TestParameterValidation:
    def test_valid_values(self) -> None:
        config = {
            "tracker": {"binary": "/usr/bin/timew", "timeout": 5, "probe_interval": 60.0},
            "reconciler": {"poll_interval": 0.5},
            "history": {"size": 20, "persist": False, "file": "/tmp/history.json"},
        }
        errors, warnings = validate_config(config)
        assert errors == []
        assert warnings == []

    def test_wrong_type(self) -> None:
        errors, _ = validate_config({"reconciler": {"poll_interval": "fast"}})
        assert any("reconciler.poll_interval must be int or float, got str" in e for e in errors)

    def test_below_minimum(self) -> None:
        errors, _ = validate_config({"history": {"size": 0}})
        assert any("history.size must be >= 1" in e for e in errors)

    def test_bool_is_not_a_number(self) -> None:
        errors, _ = validate_config({"history": {"size": True}})
        assert any("history.size must be int, got bool" in e for e in errors)

    def test_persist_must_be_bool(self) -> None:
        errors, _ = validate_config({"history": {"persist": "yes"}})
        assert any("history.persist must be bool" in e for e in errors)

    def test_empty_binary(self) -> None:
        errors, _ = validate_config({"tracker": {"binary": "  "}})
        assert any("tracker.binary must not be empty" in e for e in errors)


class TestValidateAndWarn:
    def test_logs_and_reports(self, caplog) -> None:
        caplog.set_level(logging.WARNING)

        assert validate_and_warn({"history": {"size": -1}, "extra": 1}) is False
        assert "Config error" in caplog.text
        assert "Config warning" in caplog.text

    def test_valid(self) -> None:
        assert validate_and_warn({}) is True


class TestLoadCustomConfig:
    def test_custom_values_merged_over_defaults(self, tmp_path) -> None:
        path = tmp_path / "custom.toml"
        path.write_text('[reconciler]\npoll_interval = 5.0\n')

        cfg = load_custom_config(path)

        assert cfg["reconciler"]["poll_interval"] == 5.0
        assert cfg["tracker"]["binary"] == "timew"

    def test_missing_file(self, tmp_path) -> None:
        import pytest

        with pytest.raises(FileNotFoundError):
            load_custom_config(tmp_path / "missing.toml")
