"""Shared fixtures for timew-timer tests."""

import pytest

from helpers import FakeClock
from timew_timer.coordinator import TimerCoordinator
from timew_timer.events import EventBus
from timew_timer.gateway import DryRunGateway
from timew_timer.history import TagHistory
from timew_timer.reconciler import StateReconciler


@pytest.fixture(autouse=True)
def isolated_data_dir(tmp_path, monkeypatch):
    """Keep history and log files out of the real home directory."""
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def captured() -> list:
    return []


@pytest.fixture
def gateway(clock, captured) -> DryRunGateway:
    return DryRunGateway(clock=clock, capture_commands=captured)


@pytest.fixture
def events() -> EventBus:
    return EventBus()


@pytest.fixture
def received(events) -> list:
    """Every event emitted on the bus, in order."""
    collected = []
    events.subscribe(collected.append)
    return collected


@pytest.fixture
def reconciler(gateway, events, clock) -> StateReconciler:
    return StateReconciler(gateway, events=events, clock=clock)


@pytest.fixture
def history() -> TagHistory:
    return TagHistory()


@pytest.fixture
def coordinator(gateway, reconciler, history, events):
    coordinator = TimerCoordinator(gateway, reconciler, history, events)
    yield coordinator
    coordinator.close(timeout=5)


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo logging reconfiguration done by CLI tests."""
    import logging

    root = logging.getLogger()
    level = root.level
    handlers = list(root.handlers)
    yield
    root.setLevel(level)
    root.handlers[:] = handlers


@pytest.fixture(autouse=True)
def reset_config():
    """Reset the global config after each test.

    load_custom_config() replaces the module-level config, which would
    otherwise leak into later tests.
    """
    from timew_timer import config as config_module

    original = config_module.config
    yield
    config_module.config = original
