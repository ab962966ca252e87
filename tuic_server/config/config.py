"""Resolved server configuration.

Turns a merged :class:`~tuic_server.models.RawConfig` into the immutable
:class:`Config` the server starts from: certificates and key are loaded, the
TLS and transport parameters are built, and the authentication token is
replaced by its digest.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

import blake3

from tuic_server.config.options import parse_raw_config
from tuic_server.models import LogLevel, RawConfig
from tuic_server.security.certificates import load_certificates, load_private_key
from tuic_server.security.tls import ServerConfig
from tuic_server.transport.congestion import TransportConfig
from tuic_server.utils.exceptions import ConfigIOError, MissingOptionError
from tuic_server.utils.logging_config import get_logger

logger = get_logger(__name__)

TOKEN_DIGEST_SIZE = 32

_ONE_MS = timedelta(milliseconds=1)


def hash_token(token: str) -> bytes:
    """Return the 32-byte BLAKE3 digest of the UTF-8 encoded token."""
    return blake3.blake3(token.encode("utf-8")).digest(length=TOKEN_DIGEST_SIZE)


def millis_to_timedelta(milliseconds: int) -> timedelta:
    """Convert a millisecond count, saturating at ``timedelta.max``."""
    try:
        return timedelta(milliseconds=milliseconds)
    except OverflowError:
        return timedelta.max


@dataclass(frozen=True)
class Config:
    """Fully validated server configuration."""

    server_config: ServerConfig
    port: int
    token_digest: bytes = field(repr=False)
    authentication_timeout: timedelta
    max_udp_packet_size: int
    enable_ipv6: bool
    log_level: LogLevel

    @classmethod
    def parse(cls, args: Sequence[str]) -> Config:
        """Build the configuration from process arguments.

        ``args`` excludes the program name.

        Raises:
            ConfigError: Subclass describing the first problem found,
                including HelpRequested and VersionRequested

        """
        return cls.from_raw(parse_raw_config(args))

    @classmethod
    def from_raw(cls, raw: RawConfig) -> Config:
        """Load the TLS material and assemble the final configuration.

        Raises:
            MissingOptionError: If a required field of ``raw`` is unset
            ConfigIOError: If the certificate or key cannot be loaded
            TlsConfigError: If the certificate and key cannot be used together

        """
        for name, option in (
            ("port", "port"),
            ("token", "token"),
            ("certificate", "certificate"),
            ("private_key", "private-key"),
        ):
            if getattr(raw, name) is None:
                raise MissingOptionError(option)

        try:
            certificates = load_certificates(raw.certificate)
        except (OSError, ValueError) as e:
            raise ConfigIOError(raw.certificate, e) from e

        try:
            private_key = load_private_key(raw.private_key)
        except (OSError, ValueError) as e:
            raise ConfigIOError(raw.private_key, e) from e

        transport = TransportConfig.build(raw.congestion_controller, raw.max_idle_time)
        server_config = ServerConfig.with_single_cert(
            certificates, private_key, transport=transport
        )

        logger.debug(
            "Using %s congestion control, idle timeout %d ms",
            raw.congestion_controller.value,
            raw.max_idle_time,
        )

        return cls(
            server_config=server_config,
            port=raw.port,
            token_digest=hash_token(raw.token),
            authentication_timeout=millis_to_timedelta(raw.authentication_timeout),
            max_udp_packet_size=raw.max_udp_packet_size,
            enable_ipv6=raw.enable_ipv6,
            log_level=raw.log_level,
        )

    def summary(self) -> dict[str, Any]:
        """Non-secret settings, suitable for logging."""
        transport = self.server_config.transport
        idle = transport.max_idle_timeout
        return {
            "port": self.port,
            "congestion_controller": transport.congestion_controller.name,
            "max_idle_time_ms": idle // _ONE_MS if idle is not None else None,
            "authentication_timeout_ms": self.authentication_timeout // _ONE_MS,
            "max_udp_packet_size": self.max_udp_packet_size,
            "enable_ipv6": self.enable_ipv6,
            "log_level": self.log_level.value,
        }
