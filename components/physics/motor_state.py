# components/physics/motor_state.py
"""
Motor state and physics.

Models a single motor including:
- Speed ramp toward a commanded target
- RPM and power output derived from speed and driving mode
- Thermal lag between speed change and temperature response
- Overheating protection (speed clamp)
- Emergency stop with a cooldown window

The Motor is a plain aggregate with no I/O. It is owned by the MotorStore
and advanced by the MotorSimulator.
"""

import copy
import logging
import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

__all__ = [
    "DrivingMode",
    "MotorStatus",
    "MotorParameters",
    "MotorError",
    "InvalidSpeedError",
    "CooldownActiveError",
    "OverheatingWarning",
    "SimulationResult",
    "Motor",
    "utc_now",
]

# Configure logging
logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Return the current UTC time."""
    return datetime.now(timezone.utc)


# ----------------------------------------------------------------
# Enumerations
# ----------------------------------------------------------------


class DrivingMode(Enum):
    """Driving modes. Affect acceleration, heating and power."""

    ECO = "Eco"
    NORMAL = "Normal"
    SPORT = "Sport"

    @classmethod
    def parse(cls, value: "str | DrivingMode") -> "DrivingMode":
        """Parse a mode name case-insensitively.

        Raises:
            ValueError: If the name is not a known mode
        """
        if isinstance(value, cls):
            return value
        name = str(value).strip().lower()
        for mode in cls:
            if mode.value.lower() == name:
                return mode
        raise ValueError(
            f"Invalid driving mode: {value}. Valid modes are: "
            + ", ".join(m.value for m in cls)
        )


class MotorStatus(Enum):
    """Operational status of the motor."""

    STOPPED = "Stopped"
    STARTING = "Starting"
    RUNNING = "Running"
    STOPPING = "Stopping"
    EMERGENCY = "Emergency"
    OVERHEATING = "Overheating"


# Acceleration / power multiplier per mode
MODE_MULTIPLIERS = {
    DrivingMode.ECO: 0.7,
    DrivingMode.NORMAL: 1.0,
    DrivingMode.SPORT: 1.4,
}

# Target temperature offset per mode (°C)
MODE_TEMPERATURE_OFFSETS = {
    DrivingMode.ECO: 0.0,
    DrivingMode.NORMAL: 5.0,
    DrivingMode.SPORT: 12.0,
}


@dataclass
class MotorParameters:
    """Motor design parameters.

    Attributes:
        max_speed: Upper bound for current and target speed
        max_temperature: Overheating threshold in Celsius
        acceleration_rate: Base acceleration in speed units/second
        base_temperature: Ambient/idle temperature in Celsius
        rpm_per_speed_unit: RPM produced per unit of speed
        power_factor: Power output per unit of speed (before mode multiplier)
        temperature_per_speed_unit: Steady-state heating per unit of speed
        thermal_smoothing: Fraction of the temperature gap closed per tick
        speed_epsilon: Gap below which speed snaps to target
        overheat_speed_factor: Fraction of speed kept after an overheat trip
        cooldown_seconds: Wait after emergency stop before accepting speed
    """

    max_speed: float = 100.0
    max_temperature: float = 90.0
    acceleration_rate: float = 2.0
    base_temperature: float = 25.0
    rpm_per_speed_unit: float = 50.0
    power_factor: float = 1.2
    temperature_per_speed_unit: float = 0.6
    thermal_smoothing: float = 0.1
    speed_epsilon: float = 0.1
    overheat_speed_factor: float = 0.25
    cooldown_seconds: float = 5.0


# ----------------------------------------------------------------
# Errors and results
# ----------------------------------------------------------------


class MotorError(Exception):
    """Base class for motor command failures."""

    kind = "MotorError"


class InvalidSpeedError(MotorError, ValueError):
    """Requested speed outside the allowed range."""

    kind = "InvalidSpeed"

    def __init__(self, speed: Any, max_speed: float = 100.0):
        self.speed = speed
        super().__init__(
            f"Invalid speed value: {speed}. "
            f"Speed must be between 0 and {max_speed:g}."
        )


class CooldownActiveError(MotorError):
    """Speed command issued during the post-emergency cooldown."""

    kind = "CooldownActive"

    def __init__(self, remaining_seconds: int):
        self.remaining_seconds = remaining_seconds
        super().__init__(
            f"Motor in emergency cooldown. Wait {remaining_seconds} more seconds."
        )


@dataclass(frozen=True)
class OverheatingWarning:
    """Raised alongside a completed tick when the motor crossed its thermal limit."""

    temperature: float
    max_temperature: float = 90.0
    kind: str = "Overheating"

    @property
    def message(self) -> str:
        return (
            f"Motor overheating detected: {self.temperature:.1f}°C. "
            f"Maximum safe temperature is {self.max_temperature:g}°C."
        )

    def __str__(self) -> str:
        return self.message


@dataclass
class SimulationResult:
    """Outcome of one physics tick.

    The tick is always applied to ``motor``; ``warning`` is set when the
    overheating protection fired during that tick.
    """

    motor: "Motor"
    warning: OverheatingWarning | None = None

    @property
    def overheated(self) -> bool:
        return self.warning is not None


# ----------------------------------------------------------------
# Motor aggregate
# ----------------------------------------------------------------


@dataclass
class Motor:
    """Current physical and operational state of the motor.

    Example:
        >>> motor = Motor()
        >>> motor.set_speed(60)
        >>> result = motor.advance_simulation(0.1)
        >>> motor.status
        <MotorStatus.STARTING: 'Starting'>
    """

    id: uuid.UUID = field(default_factory=uuid.uuid4)
    current_speed: float = 0.0
    target_speed: float = 0.0
    mode: DrivingMode = DrivingMode.NORMAL
    temperature: float = 25.0
    rpm: float = 0.0
    power_output: float = 0.0
    status: MotorStatus = MotorStatus.STOPPED
    last_updated: datetime = field(default_factory=utc_now)
    emergency_stop_time: datetime | None = None
    params: MotorParameters = field(default_factory=MotorParameters, repr=False)

    @classmethod
    def create(cls, params: MotorParameters | None = None) -> "Motor":
        """Create a motor at rest using the given parameters."""
        params = params or MotorParameters()
        return cls(temperature=params.base_temperature, params=params)

    def copy(self) -> "Motor":
        """Return an independent copy of this motor."""
        return copy.deepcopy(self)

    # ----------------------------------------------------------------
    # Commands
    # ----------------------------------------------------------------

    def set_speed(self, speed: float, now: datetime | None = None) -> None:
        """Set the target speed.

        Actual speed only moves on simulation ticks.

        Args:
            speed: Target speed in [0, max_speed]
            now: Command time (defaults to current UTC time)

        Raises:
            InvalidSpeedError: If speed is outside the allowed range
            CooldownActiveError: If an emergency cooldown is still running
        """
        now = now or utc_now()

        if (
            isinstance(speed, bool)
            or not isinstance(speed, (int, float))
            or not math.isfinite(speed)
            or speed < 0
            or speed > self.params.max_speed
        ):
            raise InvalidSpeedError(speed, self.params.max_speed)

        if self.is_emergency_cooldown_active(now):
            raise CooldownActiveError(self.cooldown_seconds_remaining(now))

        # Cooldown has lapsed, clear the emergency
        if self.status == MotorStatus.EMERGENCY and self.emergency_stop_time:
            self.status = MotorStatus.STOPPED
            self.emergency_stop_time = None
            logger.info("Emergency cleared after cooldown")

        self.target_speed = float(speed)

        if speed > 0 and self.status == MotorStatus.STOPPED:
            self.status = MotorStatus.STARTING
        elif speed == 0 and self.status == MotorStatus.RUNNING:
            self.status = MotorStatus.STOPPING

        self.last_updated = now

    def set_mode(self, mode: DrivingMode, now: datetime | None = None) -> bool:
        """Change driving mode.

        Ignored while in emergency.

        Returns:
            True if the mode was applied, False if ignored
        """
        if self.status == MotorStatus.EMERGENCY:
            logger.debug(f"Mode change to {mode.value} ignored during emergency")
            return False

        self.mode = mode
        self.last_updated = now or utc_now()
        return True

    def emergency_stop(self, now: datetime | None = None) -> None:
        """Stop immediately and enter the emergency state."""
        now = now or utc_now()
        self.current_speed = 0.0
        self.target_speed = 0.0
        self.status = MotorStatus.EMERGENCY
        self.emergency_stop_time = now
        self.last_updated = now

    # ----------------------------------------------------------------
    # Physics simulation
    # ----------------------------------------------------------------

    def advance_simulation(
        self, dt: float, now: datetime | None = None
    ) -> SimulationResult:
        """Advance physics by one step.

        Order matters: speed, RPM, temperature, power, overheating check,
        status. The tick is applied even when overheating fires; the caller
        learns about it from the returned warning.

        Args:
            dt: Time step in simulated seconds

        Returns:
            SimulationResult with this motor and an optional overheating warning

        Raises:
            ValueError: If dt is not positive
        """
        if dt <= 0:
            raise ValueError(f"Time step must be positive, got {dt}")

        self._update_speed(dt)
        self._update_rpm()
        self._update_temperature()
        self._update_power_output()
        warning = self._check_overheating()
        # An overheat trip keeps OVERHEATING for this tick
        if warning is None:
            self._update_status()

        self.last_updated = now or utc_now()
        return SimulationResult(motor=self, warning=warning)

    def _update_speed(self, dt: float) -> None:
        if self.status == MotorStatus.EMERGENCY:
            self.current_speed = 0.0
            return

        speed_difference = self.target_speed - self.current_speed

        if abs(speed_difference) < self.params.speed_epsilon:
            self.current_speed = self.target_speed
            return

        max_change = self.acceleration_rate() * dt

        if speed_difference > 0:
            self.current_speed += min(max_change, speed_difference)
        else:
            self.current_speed += max(-max_change, speed_difference)

        self.current_speed = max(0.0, min(self.params.max_speed, self.current_speed))

    def _update_rpm(self) -> None:
        self.rpm = self.current_speed * self.params.rpm_per_speed_unit

    def _update_temperature(self) -> None:
        # First-order thermal lag toward the speed/mode dependent target
        target_temperature = (
            self.params.base_temperature
            + self.current_speed * self.params.temperature_per_speed_unit
            + self.mode_temperature_offset()
        )
        temperature_error = target_temperature - self.temperature
        self.temperature += temperature_error * self.params.thermal_smoothing

    def _update_power_output(self) -> None:
        self.power_output = (
            self.current_speed * self.mode_multiplier() * self.params.power_factor
        )

    def _check_overheating(self) -> OverheatingWarning | None:
        if not self.is_overheating() or self.status == MotorStatus.EMERGENCY:
            return None

        reduced_speed = self.current_speed * self.params.overheat_speed_factor
        self.target_speed = reduced_speed
        self.current_speed = reduced_speed
        self.status = MotorStatus.OVERHEATING

        logger.warning(
            f"Overheating at {self.temperature:.1f}°C, "
            f"speed reduced to {reduced_speed:.1f}"
        )
        return OverheatingWarning(
            temperature=self.temperature,
            max_temperature=self.params.max_temperature,
        )

    def _update_status(self) -> None:
        if self.status == MotorStatus.EMERGENCY:
            return

        epsilon = self.params.speed_epsilon
        if self.current_speed == 0 and self.target_speed == 0:
            self.status = MotorStatus.STOPPED
        elif (
            self.current_speed > 0
            and abs(self.current_speed - self.target_speed) < epsilon
        ):
            self.status = MotorStatus.RUNNING
        elif self.target_speed > self.current_speed:
            self.status = MotorStatus.STARTING
        elif self.target_speed < self.current_speed:
            self.status = MotorStatus.STOPPING

    # ----------------------------------------------------------------
    # Queries
    # ----------------------------------------------------------------

    def mode_multiplier(self) -> float:
        return MODE_MULTIPLIERS.get(self.mode, 1.0)

    def mode_temperature_offset(self) -> float:
        return MODE_TEMPERATURE_OFFSETS.get(self.mode, 5.0)

    def acceleration_rate(self) -> float:
        """Speed units per second for the current mode."""
        return self.params.acceleration_rate * self.mode_multiplier()

    def is_overheating(self) -> bool:
        return self.temperature > self.params.max_temperature

    def can_accept_commands(self) -> bool:
        return self.status != MotorStatus.EMERGENCY

    def is_emergency_cooldown_active(self, now: datetime | None = None) -> bool:
        """Check whether the post-emergency cooldown window is running."""
        if self.status != MotorStatus.EMERGENCY or self.emergency_stop_time is None:
            return False
        elapsed = ((now or utc_now()) - self.emergency_stop_time).total_seconds()
        return elapsed < self.params.cooldown_seconds

    def cooldown_seconds_remaining(self, now: datetime | None = None) -> int:
        """Whole seconds left in the cooldown window (0 when inactive)."""
        now = now or utc_now()
        if not self.is_emergency_cooldown_active(now):
            return 0
        elapsed = (now - self.emergency_stop_time).total_seconds()
        return max(0, int(self.params.cooldown_seconds) - int(elapsed))

    def get_telemetry(self) -> dict[str, Any]:
        """Get telemetry in dictionary format.

        Returns:
            Dictionary with current telemetry values
        """
        return {
            "current_speed": round(self.current_speed, 2),
            "target_speed": round(self.target_speed, 2),
            "mode": self.mode.value,
            "temperature": round(self.temperature, 2),
            "rpm": round(self.rpm, 1),
            "power_output": round(self.power_output, 2),
            "status": self.status.value,
            "overheating": self.is_overheating(),
        }
