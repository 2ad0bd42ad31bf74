"""Configuration error definitions."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when configuration values are invalid."""


class MissingConfigurationError(ConfigurationError):
    """Raised when required configuration values are absent or blank."""


class InvalidOptionError(ConfigurationError):
    """Raised when a task option holds a value the ref-name template cannot use."""

    def __init__(self, option: str, value: str, reason: str) -> None:
        super().__init__(f"Invalid value for {option!r}: {value!r} ({reason})")
        self.option = option
        self.value = value
