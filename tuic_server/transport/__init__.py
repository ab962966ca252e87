"""QUIC transport parameters."""

from __future__ import annotations

from tuic_server.transport.congestion import (
    BbrConfig,
    CubicConfig,
    NewRenoConfig,
    TransportConfig,
    congestion_controller_factory,
)

__all__ = [
    "BbrConfig",
    "CubicConfig",
    "NewRenoConfig",
    "TransportConfig",
    "congestion_controller_factory",
]
