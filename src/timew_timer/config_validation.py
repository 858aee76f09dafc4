"""Configuration validation for timew-timer.

Validates the loaded TOML configuration and warns about potential issues.
"""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class ConfigValidationError(Exception):
    """Raised when configuration has critical errors."""

    pass


class ConfigValidator:
    """Validates configuration dictionaries."""

    # Known sections and their parameters, with types and optional ranges
    SECTIONS = {
        "tracker": {
            "binary": {"type": str},
            "timeout": {"type": (int, float), "min": 0.1},
            "probe_interval": {"type": (int, float), "min": 0},
            "database": {"type": str},
        },
        "reconciler": {
            "poll_interval": {"type": (int, float), "min": 0.1},
        },
        "history": {
            "size": {"type": int, "min": 1},
            "persist": {"type": bool},
            "file": {"type": str},
        },
    }

    def __init__(self):
        self.errors: list[str] = []
        self.warnings: list[str] = []

    def validate(self, config: dict[str, Any]) -> tuple[list[str], list[str]]:
        """Validate the configuration.

        Args:
            config: The configuration dictionary to validate

        Returns:
            Tuple of (errors, warnings) lists
        """
        self.errors = []
        self.warnings = []

        for key, value in config.items():
            if key not in self.SECTIONS:
                self.warnings.append(f"Unknown top-level config key: '{key}'")
                continue
            if not isinstance(value, dict):
                self.errors.append(f"'{key}' section must be a dictionary")
                continue
            self._validate_section(key, value)

        return self.errors, self.warnings

    def _validate_section(self, section: str, values: dict) -> None:
        params = self.SECTIONS[section]
        for key, value in values.items():
            if key not in params:
                self.warnings.append(f"Unknown parameter: '{section}.{key}'")
                continue

            rule = params[key]

            # bool is an int subclass, but `size = true` is not a size
            if isinstance(value, bool) and rule["type"] is not bool:
                self.errors.append(f"{section}.{key} must be {self._type_name(rule)}, got bool")
                continue

            # Type check
            if not isinstance(value, rule["type"]):
                self.errors.append(
                    f"{section}.{key} must be {self._type_name(rule)}, got {type(value).__name__}"
                )
                continue

            # Range check
            if "min" in rule and value < rule["min"]:
                self.errors.append(f"{section}.{key} must be >= {rule['min']}, got {value}")
            if "max" in rule and value > rule["max"]:
                self.errors.append(f"{section}.{key} must be <= {rule['max']}, got {value}")

        if section == "tracker" and "binary" in values and not str(values["binary"]).strip():
            self.errors.append("tracker.binary must not be empty")

    @staticmethod
    def _type_name(rule: dict) -> str:
        return (
            " or ".join(t.__name__ for t in rule["type"])
            if isinstance(rule["type"], tuple)
            else rule["type"].__name__
        )


def validate_config(config: dict[str, Any]) -> tuple[list[str], list[str]]:
    """Validate configuration and return errors and warnings.

    Args:
        config: The configuration dictionary to validate

    Returns:
        Tuple of (errors, warnings) lists
    """
    validator = ConfigValidator()
    return validator.validate(config)


def log_validation_results(errors: list[str], warnings: list[str]) -> None:
    """Log validation results.

    Args:
        errors: List of error messages
        warnings: List of warning messages
    """
    for warning in warnings:
        logger.warning(f"Config warning: {warning}")
    for error in errors:
        logger.error(f"Config error: {error}")


def validate_and_warn(config: dict[str, Any]) -> bool:
    """Validate configuration and log warnings/errors.

    Args:
        config: The configuration dictionary to validate

    Returns:
        True if configuration is valid (no errors), False otherwise
    """
    errors, warnings = validate_config(config)
    log_validation_results(errors, warnings)
    return len(errors) == 0
