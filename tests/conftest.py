"""Pytest configuration for uci-gateway tests."""

import os

import pytest

from tests.fakes import SimulatedEngine
from uci_gateway.core.models import EngineParameters
from uci_gateway.orchestration.engine import Engine


def pytest_configure(config: pytest.Config) -> None:
    """Configure test environment before collection.

    Removes UCI_GATEWAY_* variables inherited from the developer's shell or
    ~/.config/uci-gateway/.env so configuration tests start from defaults,
    and points the config directory at a path that does not exist.
    """
    for key in list(os.environ):
        if key.startswith("UCI_GATEWAY_"):
            os.environ.pop(key)
    os.environ["UCI_GATEWAY_CONFIG_DIR"] = "/tmp/uci-gateway-test-config"


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Default unmarked tests to unit category."""
    for item in items:
        if any(marker in item.keywords for marker in ("unit", "integration")):
            continue
        item.add_marker(pytest.mark.unit)


@pytest.fixture
def sim() -> SimulatedEngine:
    return SimulatedEngine()


@pytest.fixture
def params() -> EngineParameters:
    return EngineParameters(max_threads=4, max_hash=256)


@pytest.fixture
def engine(sim: SimulatedEngine, params: EngineParameters) -> Engine:
    """Gateway wired to the simulated engine, before the handshake."""
    return Engine(sim.input, sim.output, params)
