# components/physics/motor_simulator.py
"""
Motor physics simulation engine.

Advances the stored motor by a fixed simulated time step per tick.
The step size is independent of how often the driver polls, so physics
stays reproducible regardless of wall-clock cadence.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from components.physics.base_physics_engine import BasePhysicsEngine
from components.physics.motor_state import Motor, SimulationResult

if TYPE_CHECKING:
    from components.state.motor_store import MotorStore

__all__ = ["MotorSimulator", "DEFAULT_FIXED_DT"]

# Simulated seconds per tick
DEFAULT_FIXED_DT = 0.1


class MotorSimulator(BasePhysicsEngine):
    """
    Simulates the motor held in a MotorStore.

    Example:
        >>> simulator = MotorSimulator(store)
        >>> await simulator.initialise()
        >>> result = await simulator.tick()
        >>> if result.overheated:
        ...     print(result.warning.message)
    """

    def __init__(self, store: MotorStore, fixed_dt: float = DEFAULT_FIXED_DT):
        """Initialise motor simulator.

        Args:
            store: Store holding the motor
            fixed_dt: Simulated seconds per tick

        Raises:
            ValueError: If fixed_dt is not positive
        """
        if fixed_dt <= 0:
            raise ValueError(f"fixed_dt must be positive, got {fixed_dt}")

        super().__init__(store)
        self.fixed_dt = fixed_dt

    async def tick(self) -> SimulationResult:
        """Advance the motor by one fixed time step.

        Returns:
            SimulationResult carrying the updated motor and any overheating warning

        Raises:
            RuntimeError: If not initialised
            StoreUnavailableError: If the store cannot be accessed
        """
        return await self.update(self.fixed_dt)

    async def update(self, dt: float) -> SimulationResult:
        """Advance the motor by dt simulated seconds.

        Fetch, advance and persist happen under the store lock, so no
        command can land between the read and the write.
        """
        self._validate_update(dt)

        motor, result = await self.store.modify(lambda m: m.advance_simulation(dt))

        self._update_count += 1
        self._simulated_seconds += dt

        self.logger.debug(
            f"Tick {self._update_count}: speed={motor.current_speed:.1f}/"
            f"{motor.target_speed:.1f}, temp={motor.temperature:.1f}°C, "
            f"status={motor.status.value}"
        )

        # Hand back the snapshot copy, not the motor mutated inside the lock
        return SimulationResult(motor=motor, warning=result.warning)

    async def get_state(self) -> Motor:
        """Get a copy of the current motor state."""
        return await self.store.get()

    async def get_telemetry(self) -> dict[str, Any]:
        """Get motor telemetry with simulation counters."""
        motor = await self.store.get()
        telemetry = motor.get_telemetry()
        telemetry["ticks"] = self._update_count
        telemetry["simulated_seconds"] = round(self._simulated_seconds, 3)
        return telemetry
