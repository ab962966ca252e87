"""Pydantic models for tuic-server.

Provides the typed enumerations and the raw configuration record shared by the
command line parser and the config file loader.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tuic_server.utils.exceptions import (
    InvalidCongestionControllerError,
    InvalidLogLevelError,
)

U16_MAX = 2**16 - 1
U32_MAX = 2**32 - 1
U64_MAX = 2**64 - 1

TRACE = 5


class CongestionController(str, Enum):
    """Congestion control algorithms."""

    CUBIC = "cubic"
    NEW_RENO = "new_reno"
    BBR = "bbr"

    @classmethod
    def parse(cls, text: str) -> CongestionController:
        """Parse a controller name, ignoring case.

        ``newreno`` is accepted as an alias of ``new_reno``.

        Raises:
            InvalidCongestionControllerError: If the name is not recognized

        """
        name = text.lower()
        if name == "newreno":
            name = "new_reno"
        try:
            return cls(name)
        except ValueError:
            raise InvalidCongestionControllerError(text) from None


class LogLevel(str, Enum):
    """Log verbosity, ordered from quietest to noisiest."""

    OFF = "off"
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"
    TRACE = "trace"

    @classmethod
    def parse(cls, text: str) -> LogLevel:
        """Parse a level name, ignoring case.

        Raises:
            InvalidLogLevelError: If the name is not recognized

        """
        try:
            return cls(text.lower())
        except ValueError:
            raise InvalidLogLevelError(text) from None

    @property
    def rank(self) -> int:
        """Position in the verbosity order (``off`` is 0)."""
        return list(LogLevel).index(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, LogLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, LogLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, LogLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, LogLevel):
            return NotImplemented
        return self.rank >= other.rank

    def to_logging_level(self) -> int:
        """Map onto the numeric levels of the :mod:`logging` module."""
        return _LOGGING_LEVELS[self]


_LOGGING_LEVELS: dict[LogLevel, int] = {
    LogLevel.OFF: logging.CRITICAL + 10,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.WARN: logging.WARNING,
    LogLevel.INFO: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.TRACE: TRACE,
}

DEFAULT_CONGESTION_CONTROLLER = CongestionController.CUBIC
DEFAULT_MAX_IDLE_TIME = 15000
DEFAULT_AUTHENTICATION_TIMEOUT = 1000
DEFAULT_MAX_UDP_PACKET_SIZE = 1536
DEFAULT_ENABLE_IPV6 = False
DEFAULT_LOG_LEVEL = LogLevel.INFO


class RawConfig(BaseModel):
    """Partially populated configuration, as read from the file or CLI.

    ``port``, ``token``, ``certificate`` and ``private_key`` may be absent
    here; they must all be present once the CLI values have been merged in.
    """

    model_config = ConfigDict(extra="forbid", strict=True)

    port: int | None = Field(None, ge=0, le=U16_MAX, description="Listening port")
    token: str | None = Field(None, description="Authentication token")
    certificate: str | None = Field(None, description="Certificate chain path")
    private_key: str | None = Field(None, description="Private key path")

    congestion_controller: CongestionController = Field(
        default=DEFAULT_CONGESTION_CONTROLLER,
        description="Congestion control algorithm",
    )
    max_idle_time: int = Field(
        default=DEFAULT_MAX_IDLE_TIME,
        ge=0,
        le=U32_MAX,
        description="Maximum connection idle time in milliseconds",
    )
    authentication_timeout: int = Field(
        default=DEFAULT_AUTHENTICATION_TIMEOUT,
        ge=0,
        le=U64_MAX,
        description="Authentication deadline in milliseconds",
    )
    max_udp_packet_size: int = Field(
        default=DEFAULT_MAX_UDP_PACKET_SIZE,
        ge=0,
        le=U64_MAX,
        description="Maximum UDP packet size in bytes",
    )
    enable_ipv6: bool = Field(default=DEFAULT_ENABLE_IPV6, description="Enable IPv6")
    log_level: LogLevel = Field(default=DEFAULT_LOG_LEVEL, description="Log level")

    @field_validator("congestion_controller", mode="before")
    @classmethod
    def parse_congestion_controller(cls, v: Any) -> Any:
        """Accept controller names case-insensitively."""
        if isinstance(v, str):
            try:
                return CongestionController.parse(v)
            except InvalidCongestionControllerError as e:
                raise ValueError(e.message) from e
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def parse_log_level(cls, v: Any) -> Any:
        """Accept level names case-insensitively."""
        if isinstance(v, str):
            try:
                return LogLevel.parse(v)
            except InvalidLogLevelError as e:
                raise ValueError(e.message) from e
        return v
