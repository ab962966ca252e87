"""TLS material loading and server TLS configuration."""

from __future__ import annotations

from tuic_server.security.certificates import load_certificates, load_private_key
from tuic_server.security.tls import ServerConfig

__all__ = ["ServerConfig", "load_certificates", "load_private_key"]
