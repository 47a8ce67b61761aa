# tests/conftest.py
"""Shared pytest fixtures for motor simulator tests.

This file provides common fixtures used across all test modules,
following the bottom-up testing strategy where foundation components
are tested with real dependencies wherever possible.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Generator

import pytest
import yaml

from components.telemetry.notifier import TelemetryNotifier
from components.telemetry.telemetry_data import MotorTelemetry


# ----------------------------------------------------------------
# Configuration fixtures
# ----------------------------------------------------------------
@pytest.fixture
def temp_config_dir(tmp_path) -> Generator[Path, None, None]:
    """Provide the test's temporary directory for configuration files.

    Shares pytest's ``tmp_path`` so tests using either fixture see the
    same directory.

    Yields:
        Path to temporary configuration directory
    """
    yield tmp_path


@pytest.fixture
def fast_simulation_config() -> dict:
    """Provide a fast driver configuration for testing.

    Returns:
        Dictionary with short poll interval and frequent broadcasts
    """
    return {
        "simulation": {
            "runtime": {
                "poll_interval": 0.01,
                "fixed_dt": 0.1,
                "broadcast_every_n_ticks": 2,
                "log_dir": None,
            }
        }
    }


@pytest.fixture
def write_config_file(temp_config_dir):
    """Factory fixture for writing YAML configuration files.

    Returns:
        Function that writes config dict to YAML file
    """

    def _write_config(config: dict, filename: str = "simulation.yml") -> Path:
        config_file = temp_config_dir / filename
        with open(config_file, "w") as f:
            yaml.dump(config, f)
        return config_file

    return _write_config


# ----------------------------------------------------------------
# Time fixtures
# ----------------------------------------------------------------
class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime):
        self._now = start

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: float) -> datetime:
        self._now += timedelta(seconds=seconds)
        return self._now


@pytest.fixture
def clock() -> FakeClock:
    """Provide a controllable clock starting at a fixed instant."""
    return FakeClock(datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc))


# ----------------------------------------------------------------
# Notifier doubles
# ----------------------------------------------------------------
class RecordingNotifier(TelemetryNotifier):
    """Notifier that records everything it is given."""

    def __init__(self):
        self.telemetry: list[MotorTelemetry] = []
        self.alerts: list[str] = []

    async def broadcast_telemetry(self, telemetry: MotorTelemetry) -> None:
        self.telemetry.append(telemetry)

    async def send_alert(self, message: str) -> None:
        self.alerts.append(message)


class LockCheckingNotifier(RecordingNotifier):
    """Recording notifier that notes whether the store lock was held."""

    def __init__(self, store):
        super().__init__()
        self.store = store
        self.lock_held: list[bool] = []

    async def broadcast_telemetry(self, telemetry: MotorTelemetry) -> None:
        self.lock_held.append(self.store._lock.locked())
        await super().broadcast_telemetry(telemetry)

    async def send_alert(self, message: str) -> None:
        self.lock_held.append(self.store._lock.locked())
        await super().send_alert(message)


class FailingNotifier(TelemetryNotifier):
    """Notifier whose every call raises."""

    def __init__(self):
        self.calls = 0

    async def broadcast_telemetry(self, telemetry: MotorTelemetry) -> None:
        self.calls += 1
        raise ConnectionError("subscriber hub unreachable")

    async def send_alert(self, message: str) -> None:
        self.calls += 1
        raise ConnectionError("subscriber hub unreachable")


@pytest.fixture
def recording_notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def failing_notifier() -> FailingNotifier:
    return FailingNotifier()


@pytest.fixture
def lock_checking_notifier():
    """Factory fixture: LockCheckingNotifier bound to the given store."""
    return LockCheckingNotifier



# ----------------------------------------------------------------
# Assertion helpers
# ----------------------------------------------------------------
@pytest.fixture
def assert_approximately():
    """Provide a helper for approximate float assertions."""

    def _assert_approx(actual: float, expected: float, tolerance: float = 1e-6):
        diff = abs(actual - expected)
        assert diff <= tolerance, (
            f"Values not within tolerance: actual={actual}, "
            f"expected={expected}, diff={diff}, tolerance={tolerance}"
        )

    return _assert_approx


# ----------------------------------------------------------------
# Async utilities
# ----------------------------------------------------------------
@pytest.fixture
async def wait_for_condition():
    """Provide utility for waiting on async conditions.

    Returns:
        Async function that polls a condition until true or timeout
    """

    async def _wait(
        condition_fn,
        timeout: float = 2.0,
        poll_interval: float = 0.01,
        error_msg: str = "Condition not met within timeout",
    ):
        loop = asyncio.get_running_loop()
        start = loop.time()
        while loop.time() - start < timeout:
            if condition_fn():
                return
            await asyncio.sleep(poll_interval)

        raise AssertionError(error_msg)

    return _wait
