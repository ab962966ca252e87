"""Tests for congestion strategy selection and transport parameters."""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from datetime import timedelta

import pytest

from tuic_server.models import CongestionController
from tuic_server.transport.congestion import (
    BbrConfig,
    CubicConfig,
    NewRenoConfig,
    TransportConfig,
    congestion_controller_factory,
)

pytestmark = [pytest.mark.unit, pytest.mark.transport]


@pytest.mark.parametrize(
    ("controller", "expected"),
    [
        (CongestionController.CUBIC, CubicConfig),
        (CongestionController.NEW_RENO, NewRenoConfig),
        (CongestionController.BBR, BbrConfig),
    ],
)
def test_factory(controller, expected):
    strategy = congestion_controller_factory(controller)
    assert isinstance(strategy, expected)
    assert strategy.name == controller.value


def test_strategies_use_default_tuning():
    assert congestion_controller_factory(CongestionController.CUBIC) == CubicConfig()
    assert CubicConfig().initial_window > CubicConfig().minimum_window
    assert BbrConfig().initial_window > NewRenoConfig().initial_window


def test_transport_defaults():
    transport = TransportConfig()
    assert isinstance(transport.congestion_controller, CubicConfig)
    assert transport.max_idle_timeout is None


def test_build_selects_strategy():
    transport = TransportConfig.build(CongestionController.BBR, 15000)
    assert isinstance(transport.congestion_controller, BbrConfig)


@pytest.mark.parametrize("milliseconds", [0, 1, 15000, 2**32 - 1])
def test_build_idle_timeout(milliseconds):
    transport = TransportConfig.build(CongestionController.CUBIC, milliseconds)
    assert transport.max_idle_timeout == timedelta(milliseconds=milliseconds)


def test_transport_is_immutable():
    transport = TransportConfig()
    with pytest.raises(FrozenInstanceError):
        transport.max_idle_timeout = timedelta(seconds=1)
    with pytest.raises(FrozenInstanceError):
        transport.congestion_controller = BbrConfig()
