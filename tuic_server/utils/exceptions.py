"""Exception hierarchy for tuic-server.

Every failure while resolving the startup configuration is raised as a
subclass of :class:`ConfigError`, so the entry point can report it with one
``except`` clause and choose the exit code from the exception itself.
"""

from __future__ import annotations

from typing import Any


class TuicServerError(Exception):
    """Base exception for all tuic-server errors."""

    exit_code: int = 1

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize tuic-server error."""
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message


class ConfigError(TuicServerError):
    """Errors raised while resolving the server configuration."""


class InformationalExit(ConfigError):
    """Terminal outcome that is not a failure (help or version output)."""

    exit_code = 0


class HelpRequested(InformationalExit):
    """``--help`` was given; carries the full usage text."""

    def __init__(self, usage: str):
        """Initialize with the rendered usage text."""
        super().__init__(usage)
        self.usage = usage


class VersionRequested(InformationalExit):
    """``--version`` was given; carries the version string."""

    def __init__(self, version: str):
        """Initialize with the version string."""
        super().__init__(version)
        self.version = version


class ConfigIOError(ConfigError):
    """A config file, certificate or key path could not be read."""

    def __init__(self, path: str, cause: BaseException):
        """Initialize with the offending path and the underlying error."""
        super().__init__(
            f"Failed to read '{path}': {cause}",
            {"path": path},
        )
        self.path = path
        self.cause = cause


class ConfigFileParseError(ConfigError):
    """The config file is not valid JSON or violates the schema."""

    def __init__(self, reason: str):
        """Initialize with a description of what was wrong."""
        super().__init__(f"Failed to parse the config file: {reason}")
        self.reason = reason


class ArgumentParseError(ConfigError):
    """Malformed command line (unknown flag, missing option value)."""


class UnexpectedArgumentsError(ConfigError):
    """Free-standing tokens were left over after option parsing."""

    def __init__(self, tokens: list[str]):
        """Initialize with the leftover tokens."""
        super().__init__(f"Unexpected arguments: {', '.join(tokens)}")
        self.tokens = list(tokens)


class MissingOptionError(ConfigError):
    """A required option was supplied by neither the CLI nor the file."""

    def __init__(self, option: str):
        """Initialize with the missing option name."""
        super().__init__(f"Missing option: {option}", {"option": option})
        self.option = option


class IntegerParseError(ConfigError):
    """A numeric option did not parse as the expected unsigned integer."""

    def __init__(self, option: str, value: str, reason: str):
        """Initialize with the option name, raw value and reason."""
        super().__init__(
            f"Invalid value '{value}' for --{option}: {reason}",
            {"option": option, "value": value},
        )
        self.option = option
        self.value = value


class InvalidCongestionControllerError(ConfigError):
    """Unrecognized congestion controller name."""

    def __init__(self, value: str):
        """Initialize with the rejected name."""
        super().__init__(
            f"Invalid congestion controller '{value}' "
            '(available: "cubic", "new_reno", "bbr")',
            {"value": value},
        )
        self.value = value


class InvalidLogLevelError(ConfigError):
    """Unrecognized log level name."""

    def __init__(self, value: str):
        """Initialize with the rejected name."""
        super().__init__(
            f"Invalid log level '{value}' "
            '(available: "off", "error", "warn", "info", "debug", "trace")',
            {"value": value},
        )
        self.value = value


class TlsConfigError(ConfigError):
    """Certificate or key material cannot build the TLS configuration."""

    def __init__(self, reason: str):
        """Initialize with the rejection reason."""
        super().__init__(f"Failed to load certificate / private key: {reason}")
        self.reason = reason
