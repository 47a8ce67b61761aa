# components/state/motor_store.py
"""
Async store holding the single motor record.

The store is the only owner of the Motor aggregate. Readers receive a
private copy; writers replace the stored snapshot. A single asyncio lock
serialises every access so command handling and simulation ticks never
interleave a partial update.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import TypeVar

from components.physics.motor_state import Motor, MotorParameters

__all__ = ["MotorStore", "StoreUnavailableError"]

# Configure logging
logger = logging.getLogger(__name__)

T = TypeVar("T")


class StoreUnavailableError(RuntimeError):
    """Raised when the store can no longer serve reads or writes."""


class MotorStore:
    """
    Single-slot, lock-guarded holder of the motor snapshot.

    Example:
        >>> store = MotorStore()
        >>> motor = await store.get()
        >>> motor.set_speed(50)
        >>> await store.put(motor)

        >>> # Atomic read-modify-write
        >>> await store.modify(lambda m: m.set_speed(50))
    """

    def __init__(
        self,
        motor: Motor | None = None,
        params: MotorParameters | None = None,
    ):
        """Initialise store.

        Args:
            motor: Initial motor (a default motor is created if None)
            params: Parameters for the default motor
        """
        self._motor = motor.copy() if motor else Motor.create(params)
        self._lock = asyncio.Lock()
        self._closed = False
        self._writes = 0

        logger.info(f"Motor store created for motor {self._motor.id}")

    # ----------------------------------------------------------------
    # Access
    # ----------------------------------------------------------------

    async def get(self) -> Motor:
        """Return a private copy of the current motor.

        Raises:
            StoreUnavailableError: If the store has been closed
        """
        async with self._lock:
            self._check_available()
            return self._motor.copy()

    async def put(self, motor: Motor) -> None:
        """Replace the stored motor. Last write wins.

        Raises:
            StoreUnavailableError: If the store has been closed
            ValueError: If motor is None
        """
        if motor is None:
            raise ValueError("motor cannot be None")

        async with self._lock:
            self._check_available()
            self._motor = motor.copy()
            self._writes += 1

    async def modify(self, operation: Callable[[Motor], T]) -> tuple[Motor, T]:
        """Run a read-modify-write under the store lock.

        The operation receives a private copy. The copy is written back only
        if the operation returns normally, so a rejected command leaves the
        stored state untouched.

        Args:
            operation: Callable mutating the motor; its return value is passed back

        Returns:
            Tuple of (copy of the updated motor, operation result)

        Raises:
            StoreUnavailableError: If the store has been closed
        """
        async with self._lock:
            self._check_available()
            motor = self._motor.copy()
            result = operation(motor)
            self._motor = motor
            self._writes += 1
            return motor.copy(), result

    # ----------------------------------------------------------------
    # Lifecycle
    # ----------------------------------------------------------------

    async def close(self) -> None:
        """Mark the store unavailable. Subsequent operations raise."""
        async with self._lock:
            self._closed = True
        logger.info("Motor store closed")

    def is_closed(self) -> bool:
        return self._closed

    @property
    def write_count(self) -> int:
        """Number of successful writes since creation."""
        return self._writes

    def _check_available(self) -> None:
        if self._closed:
            raise StoreUnavailableError("Motor store is unavailable")
