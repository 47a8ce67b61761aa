# components/simulation/motor_driver.py
"""
Background driver for the motor simulation.

Runs the simulator at a fixed cadence, derives telemetry from each tick,
broadcasts it every N cycles and raises overheating alerts. A failed cycle
is logged and the loop carries on; only cancellation ends it.
"""

import asyncio
from dataclasses import dataclass
from typing import Any

from components.monitoring.logging_system import AlarmPriority, get_logger
from components.physics.motor_simulator import MotorSimulator
from components.physics.motor_state import SimulationResult
from components.telemetry.notifier import TelemetryNotifier
from components.telemetry.telemetry_data import MotorTelemetry

__all__ = ["DriverStatistics", "MotorDriver"]


@dataclass
class DriverStatistics:
    """Counters for driver activity."""

    cycles: int = 0
    failed_cycles: int = 0
    broadcasts: int = 0
    alerts: int = 0
    notifier_failures: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "cycles": self.cycles,
            "failed_cycles": self.failed_cycles,
            "broadcasts": self.broadcasts,
            "alerts": self.alerts,
            "notifier_failures": self.notifier_failures,
        }


class MotorDriver:
    """
    Long-lived task advancing the motor and publishing telemetry.

    The driver borrows the simulator and notifier; it never holds the
    store lock while talking to the notifier.

    Example:
        >>> driver = MotorDriver(simulator, notifier)
        >>> driver.start()
        >>> # Simulation runs...
        >>> await driver.stop()
    """

    def __init__(
        self,
        simulator: MotorSimulator,
        notifier: TelemetryNotifier,
        poll_interval: float = 0.1,
        broadcast_every_n_ticks: int = 20,
    ):
        """Initialise driver.

        Args:
            simulator: Initialised motor simulator
            notifier: Receives telemetry and alerts
            poll_interval: Wall-clock seconds to sleep between cycles
            broadcast_every_n_ticks: Broadcast telemetry once every N cycles

        Raises:
            ValueError: If poll_interval or broadcast_every_n_ticks is invalid
        """
        if poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {poll_interval}")
        if broadcast_every_n_ticks < 1:
            raise ValueError(
                f"broadcast_every_n_ticks must be >= 1, got {broadcast_every_n_ticks}"
            )

        self.simulator = simulator
        self.notifier = notifier
        self.poll_interval = poll_interval
        self.broadcast_every_n_ticks = broadcast_every_n_ticks

        self.stats = DriverStatistics()
        self.last_telemetry: MotorTelemetry | None = None

        self._running = False
        self._task: asyncio.Task | None = None
        self.logger = get_logger(self.__class__.__name__, device="motor")

    # ----------------------------------------------------------------
    # Lifecycle
    # ----------------------------------------------------------------

    def start(self) -> asyncio.Task:
        """Start the driver loop as a background task.

        Raises:
            RuntimeError: If already running
        """
        if self.is_running():
            raise RuntimeError("Motor driver already running")

        self._running = True
        self._task = asyncio.create_task(self.run(), name="motor-driver")
        return self._task

    async def stop(self) -> None:
        """Cancel the driver loop and wait for it to exit."""
        self._running = False

        if self._task is None:
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    # ----------------------------------------------------------------
    # Main loop
    # ----------------------------------------------------------------

    async def run(self) -> None:
        """Run cycles until cancelled."""
        self._running = True
        self.logger.info(
            f"Motor simulation driver started (poll={self.poll_interval}s, "
            f"dt={self.simulator.fixed_dt}s, "
            f"broadcast every {self.broadcast_every_n_ticks} ticks)"
        )

        try:
            while self._running:
                await self.run_cycle()
                await asyncio.sleep(self.poll_interval)
        except asyncio.CancelledError:
            self.logger.info("Motor simulation driver cancelled")
            raise
        finally:
            self._running = False
            self.logger.info(
                f"Motor simulation driver stopped after {self.stats.cycles} cycles "
                f"({self.stats.failed_cycles} failed)"
            )

    async def run_cycle(self) -> SimulationResult | None:
        """Run a single driver cycle.

        Returns:
            The tick result, or None if the tick failed
        """
        cycle = self.stats.cycles
        self.stats.cycles += 1

        try:
            result = await self.simulator.tick()
        except Exception:
            self.stats.failed_cycles += 1
            self.logger.exception("Error in motor simulation cycle")
            return None

        # The tick result already carries a detached snapshot
        telemetry = MotorTelemetry.from_motor(result.motor)
        self.last_telemetry = telemetry

        if cycle % self.broadcast_every_n_ticks == 0:
            if await self._notify(self.notifier.broadcast_telemetry, telemetry):
                self.stats.broadcasts += 1

        if result.warning is not None:
            await self.logger.log_alarm(
                result.warning.message, priority=AlarmPriority.HIGH
            )
            await self._send_alert(result.warning.message)
        elif telemetry.is_overheating:
            await self._send_alert(
                "CRITICAL: Motor overheating detected! "
                f"Temperature: {telemetry.temperature:.1f}°C"
            )

        return result

    async def _send_alert(self, message: str) -> None:
        if await self._notify(self.notifier.send_alert, message):
            self.stats.alerts += 1

    async def _notify(self, send, payload: Any) -> bool:
        try:
            await send(payload)
            return True
        except Exception as e:
            self.stats.notifier_failures += 1
            self.logger.error(f"Notifier failed: {e}", exc_info=True)
            return False

    # ----------------------------------------------------------------
    # Status
    # ----------------------------------------------------------------

    def get_status(self) -> dict[str, Any]:
        return {
            "running": self.is_running(),
            "poll_interval": self.poll_interval,
            "fixed_dt": self.simulator.fixed_dt,
            "broadcast_every_n_ticks": self.broadcast_every_n_ticks,
            "statistics": self.stats.to_dict(),
        }
