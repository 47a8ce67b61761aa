# components/physics/base_physics_engine.py
"""
Base class for physics simulation engines.

Provides common infrastructure for:
- Initialisation and lifecycle management
- Store integration
- Time step validation
- State access interface

Engines advance state held in a store by a fixed simulated time step.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from components.monitoring.logging_system import SimLogger, get_logger

if TYPE_CHECKING:
    from components.state.motor_store import MotorStore

__all__ = ["BasePhysicsEngine"]


class BasePhysicsEngine(ABC):
    """
    Abstract base class for physics simulation engines.

    Subclasses must implement:
    - update(dt): Advance physics for one timestep
    - get_state(): Return current state object
    - get_telemetry(): Return telemetry dictionary
    """

    def __init__(
        self,
        store: MotorStore,
        params: Any | None = None,
    ):
        """Initialise base physics engine.

        Args:
            store: Store holding the simulated state
            params: Engine-specific parameters (typed in subclass)
        """
        self.store = store
        self.params = params

        # Lifecycle tracking
        self._initialised = False
        self._update_count = 0
        self._simulated_seconds = 0.0

        self.logger: SimLogger = get_logger(self.__class__.__name__)

    # ----------------------------------------------------------------
    # Lifecycle
    # ----------------------------------------------------------------

    async def initialise(self) -> None:
        """Initialise engine against its store.

        Verifies the store can be read and sets the initialisation flag.

        Raises:
            RuntimeError: If the store cannot be read
        """
        try:
            await self.store.get()
        except Exception as e:
            raise RuntimeError(
                f"Cannot initialise {self.__class__.__name__}: store unreadable ({e})"
            ) from e

        self._initialised = True
        self.logger.info(f"{self.__class__.__name__} initialised")

    # ----------------------------------------------------------------
    # Physics update
    # ----------------------------------------------------------------

    def _validate_update(self, dt: float) -> None:
        """Validate update parameters before running physics.

        Args:
            dt: Time delta in seconds

        Raises:
            RuntimeError: If engine not initialised
            ValueError: If dt is not positive
        """
        if not self._initialised:
            raise RuntimeError(
                f"{self.__class__.__name__} not initialised. Call initialise() first."
            )

        if dt <= 0:
            raise ValueError(
                f"Invalid time delta {dt} for {self.__class__.__name__}"
            )

    @abstractmethod
    async def update(self, dt: float) -> Any:
        """Advance physics state for one simulation timestep.

        Subclasses must call self._validate_update(dt) first.

        Args:
            dt: Time delta in simulated seconds
        """

    # ----------------------------------------------------------------
    # State access
    # ----------------------------------------------------------------

    @abstractmethod
    async def get_state(self) -> Any:
        """Get current physics state object."""

    @abstractmethod
    async def get_telemetry(self) -> dict[str, Any]:
        """Get current telemetry in dictionary format."""

    # ----------------------------------------------------------------
    # Status
    # ----------------------------------------------------------------

    def is_initialised(self) -> bool:
        """Check if engine has been initialised."""
        return self._initialised

    @property
    def update_count(self) -> int:
        """Number of completed updates."""
        return self._update_count

    @property
    def simulated_seconds(self) -> float:
        """Total simulated time advanced."""
        return self._simulated_seconds
