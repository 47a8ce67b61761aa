#!/usr/bin/env python3
# tools/simulator_manager.py
"""
Motor Simulator Manager - Main Orchestrator

Wires the simulation components together:
- MotorStore holding the single motor
- MotorSimulator advancing physics by a fixed step
- MotorDriver running the background loop
- MotorControlService accepting operator commands
- Telemetry notifiers

Integrates:
- ConfigLoader for configuration
- Structured logging system
"""

import asyncio
import logging
import signal
from pathlib import Path
from typing import Any

from components.monitoring.logging_system import configure_logging
from components.physics.motor_simulator import MotorSimulator
from components.services.motor_control_service import MotorControlService
from components.simulation.motor_driver import MotorDriver
from components.state.motor_store import MotorStore
from components.telemetry.notifier import (
    BroadcastNotifier,
    CompositeNotifier,
    LoggingNotifier,
    TelemetryNotifier,
)
from config.config_loader import ConfigLoader

logger = logging.getLogger(__name__)


class SimulatorManager:
    """
    Main orchestrator for the motor simulation.

    Manages the lifecycle from initialisation through execution to shutdown.

    Example:
        >>> manager = SimulatorManager()
        >>> await manager.initialise()
        >>> await manager.start()
        >>> await manager.control.set_speed(60)
        >>> await manager.stop()
    """

    def __init__(self, config_dir: str = "config"):
        """Initialise simulator manager.

        Args:
            config_dir: Directory containing configuration files
        """
        self.config_dir = Path(config_dir)
        self.config_loader = ConfigLoader(config_dir=str(self.config_dir))
        self.config: dict[str, Any] = {}

        self.store: MotorStore | None = None
        self.simulator: MotorSimulator | None = None
        self.notifier: TelemetryNotifier | None = None
        self.broadcast: BroadcastNotifier | None = None
        self.control: MotorControlService | None = None
        self.driver: MotorDriver | None = None

        self._initialised = False
        self._running = False
        self._shutdown_event = asyncio.Event()

        logger.info("SimulatorManager created")

    # ----------------------------------------------------------------
    # Initialisation
    # ----------------------------------------------------------------

    async def initialise(self) -> None:
        """Load configuration and build all components.

        Raises:
            RuntimeError: If initialisation fails
        """
        if self._initialised:
            logger.warning("Simulator already initialised")
            return

        try:
            self.config = self.config_loader.load_all()
            runtime = self.config["simulation"]["runtime"]

            log_dir = runtime.get("log_dir")
            configure_logging(log_dir=log_dir)

            params = self.config_loader.motor_parameters(self.config)
            self.store = MotorStore(params=params)

            self.simulator = MotorSimulator(
                self.store, fixed_dt=float(runtime["fixed_dt"])
            )
            await self.simulator.initialise()

            self.notifier = self._create_notifier(self.config["notifier"])
            self.control = MotorControlService(self.store, self.notifier)

            self.driver = MotorDriver(
                self.simulator,
                self.notifier,
                poll_interval=float(runtime["poll_interval"]),
                broadcast_every_n_ticks=int(runtime["broadcast_every_n_ticks"]),
            )
        except Exception as e:
            logger.error(f"Failed to initialise simulator: {e}", exc_info=True)
            raise RuntimeError(f"Simulator initialisation failed: {e}") from e

        self._initialised = True
        logger.info("Simulator initialised")

    def _create_notifier(self, notifier_cfg: dict[str, Any]) -> TelemetryNotifier:
        """Build the notifier chain from configuration.

        Raises:
            ValueError: If the notifier type is unknown
        """
        notifier_type = notifier_cfg.get("type", "broadcast")
        logging_notifier = LoggingNotifier()

        if notifier_type == "logging":
            return logging_notifier

        if notifier_type == "broadcast":
            self.broadcast = BroadcastNotifier(
                group=notifier_cfg.get("group", "MotorClients"),
                queue_size=int(notifier_cfg.get("queue_size", 100)),
            )
            return CompositeNotifier([self.broadcast, logging_notifier])

        raise ValueError(f"Unknown notifier type: {notifier_type}")

    # ----------------------------------------------------------------
    # Lifecycle
    # ----------------------------------------------------------------

    async def start(self) -> None:
        """Start the background driver.

        Raises:
            RuntimeError: If not initialised
        """
        if not self._initialised:
            raise RuntimeError("Cannot start: simulator not initialised")

        if self._running:
            logger.warning("Simulator already running")
            return

        logger.info("=== Starting Motor Simulation ===")
        self.driver.start()
        self._running = True

    async def stop(self) -> None:
        """Stop the simulation gracefully."""
        if not self._running:
            logger.warning("Simulator not running")
            return

        logger.info("=== Stopping Motor Simulation ===")
        self._running = False

        await self.driver.stop()
        self._log_final_statistics()

        logger.info("Simulation stopped")

    # ----------------------------------------------------------------
    # Status and monitoring
    # ----------------------------------------------------------------

    async def get_status(self) -> dict[str, Any]:
        """Get simulation status.

        Raises:
            RuntimeError: If not initialised
        """
        if not self._initialised:
            raise RuntimeError("Simulator not initialised")

        return {
            "running": self._running,
            "initialised": self._initialised,
            "driver": self.driver.get_status(),
            "motor": await self.simulator.get_telemetry(),
        }

    def _log_final_statistics(self) -> None:
        stats = self.driver.stats
        logger.info("--- Final Statistics ---")
        logger.info(f"Driver cycles: {stats.cycles} ({stats.failed_cycles} failed)")
        logger.info(f"Simulated time: {self.simulator.simulated_seconds:.1f}s")
        logger.info(f"Telemetry broadcasts: {stats.broadcasts}")
        logger.info(f"Alerts sent: {stats.alerts}")
        logger.info("------------------------")

    # ----------------------------------------------------------------
    # Signal handling
    # ----------------------------------------------------------------

    def setup_signal_handlers(self) -> None:
        """Set up signal handlers for graceful shutdown."""

        def signal_handler(signum, frame):
            logger.info(f"Received signal {signum}")
            self._shutdown_event.set()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    def request_shutdown(self) -> None:
        self._shutdown_event.set()

    async def wait_for_shutdown(self) -> None:
        """Wait for shutdown signal."""
        await self._shutdown_event.wait()

    # ----------------------------------------------------------------
    # Main run method
    # ----------------------------------------------------------------

    async def run(self) -> None:
        """Run complete simulation lifecycle.

        Initialises, starts, and runs until interrupted.
        """
        try:
            self.setup_signal_handlers()
            await self.initialise()
            await self.start()

            logger.info("Simulation running. Press Ctrl+C to stop.")
            await self.wait_for_shutdown()

        except KeyboardInterrupt:
            logger.info("KeyboardInterrupt received")
        except Exception as e:
            logger.error(f"Fatal error: {e}", exc_info=True)
        finally:
            if self._running:
                await self.stop()


# ----------------------------------------------------------------
# Command-line interface
# ----------------------------------------------------------------


async def main():
    """Main entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info("=== Motor Simulator ===")

    manager = SimulatorManager()
    await manager.run()


def cli():
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    cli()
