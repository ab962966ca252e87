"""Congestion control strategies and QUIC transport parameters.

Each strategy carries its own default tuning; only the choice of strategy is
configurable from the command line.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Union

from tuic_server.models import CongestionController

# Smallest datagram every QUIC path must support (RFC 9000 section 14)
BASE_DATAGRAM_SIZE = 1200
INITIAL_MTU = 1232


@dataclass(frozen=True)
class NewRenoConfig:
    """NewReno tuning."""

    initial_window: int = 14720
    minimum_window: int = 2 * INITIAL_MTU
    loss_reduction_factor: float = 0.5

    @property
    def name(self) -> str:
        return CongestionController.NEW_RENO.value


@dataclass(frozen=True)
class CubicConfig:
    """CUBIC tuning."""

    initial_window: int = 14720
    minimum_window: int = 2 * INITIAL_MTU
    beta: float = 0.7
    c: float = 0.4

    @property
    def name(self) -> str:
        return CongestionController.CUBIC.value


@dataclass(frozen=True)
class BbrConfig:
    """BBR tuning."""

    initial_window: int = 200 * BASE_DATAGRAM_SIZE
    minimum_window: int = 4 * BASE_DATAGRAM_SIZE

    @property
    def name(self) -> str:
        return CongestionController.BBR.value


CongestionConfig = Union[NewRenoConfig, CubicConfig, BbrConfig]

_FACTORIES: dict[CongestionController, type[CongestionConfig]] = {
    CongestionController.CUBIC: CubicConfig,
    CongestionController.NEW_RENO: NewRenoConfig,
    CongestionController.BBR: BbrConfig,
}


def congestion_controller_factory(controller: CongestionController) -> CongestionConfig:
    """Return the default-tuned strategy for the given controller."""
    return _FACTORIES[controller]()


@dataclass(frozen=True)
class TransportConfig:
    """Per-connection QUIC transport parameters.

    ``max_idle_timeout`` of zero is passed through as-is; ``None`` means the
    transport applies no idle timeout at all.
    """

    congestion_controller: CongestionConfig = field(default_factory=CubicConfig)
    max_idle_timeout: timedelta | None = None

    @classmethod
    def build(
        cls, controller: CongestionController, max_idle_time: int
    ) -> TransportConfig:
        """Default-tuned strategy for ``controller`` and an idle timeout in ms."""
        return cls(
            congestion_controller=congestion_controller_factory(controller),
            max_idle_timeout=timedelta(milliseconds=max_idle_time),
        )
