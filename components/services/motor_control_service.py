# components/services/motor_control_service.py
"""
Motor control service.

Command surface for operators and API layers. Every command runs as a
single read-modify-write against the MotorStore and reports its outcome
as a MotorResponse; domain failures never escape as exceptions.
"""

from dataclasses import dataclass
from typing import Any

from components.monitoring.logging_system import AlarmPriority, get_logger
from components.physics.motor_state import (
    CooldownActiveError,
    DrivingMode,
    Motor,
    MotorError,
)
from components.state.motor_store import MotorStore
from components.telemetry.notifier import TelemetryNotifier
from components.telemetry.telemetry_data import MotorStatusResponse

__all__ = ["MotorResponse", "MotorControlService"]


@dataclass(frozen=True)
class MotorResponse:
    """Outcome of a motor command.

    Attributes:
        success: Whether the command was applied
        message: Human-readable outcome or failure reason
        data: Status projection after the command (None on failure)
        error: Failure kind (InvalidSpeed, CooldownActive, InvalidMode, Error)
        details: Extra failure detail, e.g. remaining cooldown seconds
    """

    success: bool
    message: str
    data: MotorStatusResponse | None = None
    error: str | None = None
    details: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"success": self.success, "message": self.message}
        if self.data is not None:
            result["data"] = self.data.to_dict()
        if self.error:
            result["error"] = self.error
        if self.details:
            result["details"] = self.details
        return result


class MotorControlService:
    """
    Applies operator commands to the motor.

    Example:
        >>> service = MotorControlService(store, notifier)
        >>> response = await service.set_speed(60)
        >>> response.success, response.data.status
        (True, 'Starting')
    """

    def __init__(self, store: MotorStore, notifier: TelemetryNotifier | None = None):
        """Initialise control service.

        Args:
            store: Store holding the motor
            notifier: Receives the emergency stop alert (optional)
        """
        self.store = store
        self.notifier = notifier
        self.logger = get_logger(self.__class__.__name__, device="motor")

    # ----------------------------------------------------------------
    # Commands
    # ----------------------------------------------------------------

    async def set_speed(self, speed: float, user: str = "") -> MotorResponse:
        """Set the target speed (0-100)."""
        try:
            motor, _ = await self.store.modify(lambda m: m.set_speed(speed))
        except MotorError as e:
            details = None
            if isinstance(e, CooldownActiveError):
                details = {"remaining_seconds": e.remaining_seconds}
            await self.logger.log_audit(
                f"Speed command rejected: {e}",
                user=user,
                action="set_speed",
                result="REJECTED",
                data={"speed": speed},
            )
            return MotorResponse(
                success=False, message=str(e), error=e.kind, details=details
            )
        except Exception as e:
            self.logger.exception(f"Error setting speed to {speed}")
            return MotorResponse(
                success=False, message=f"Error setting speed: {e}", error="Error"
            )

        await self.logger.log_audit(
            f"Speed set to {speed}",
            user=user,
            action="set_speed",
            result="ACCEPTED",
            data={"speed": speed},
        )
        return MotorResponse(
            success=True,
            message=f"Speed set to {speed}",
            data=MotorStatusResponse.from_motor(motor),
        )

    async def change_mode(
        self, mode: "DrivingMode | str", user: str = ""
    ) -> MotorResponse:
        """Change the driving mode (Eco, Normal, Sport).

        Ignored while the motor is in emergency; that is reported as a
        success carrying the unchanged state.
        """
        try:
            driving_mode = DrivingMode.parse(mode)
        except ValueError as e:
            return MotorResponse(success=False, message=str(e), error="InvalidMode")

        try:
            motor, applied = await self.store.modify(
                lambda m: m.set_mode(driving_mode)
            )
        except Exception as e:
            self.logger.exception(f"Error changing mode to {driving_mode.value}")
            return MotorResponse(
                success=False, message=f"Error changing mode: {e}", error="Error"
            )

        if applied:
            message = f"Driving mode changed to {driving_mode.value}"
        else:
            message = (
                f"Driving mode change to {driving_mode.value} ignored: "
                "motor in emergency stop"
            )

        await self.logger.log_audit(
            message,
            user=user,
            action="change_mode",
            result="ACCEPTED" if applied else "IGNORED",
            data={"mode": driving_mode.value},
        )
        return MotorResponse(
            success=True,
            message=message,
            data=MotorStatusResponse.from_motor(motor),
        )

    async def emergency_stop(self, user: str = "") -> MotorResponse:
        """Stop the motor immediately and start the cooldown window."""
        try:
            motor, _ = await self.store.modify(lambda m: m.emergency_stop())
        except Exception as e:
            self.logger.exception("Error during emergency stop")
            return MotorResponse(
                success=False,
                message=f"Error during emergency stop: {e}",
                error="Error",
            )

        await self.logger.log_alarm(
            "Emergency stop activated",
            priority=AlarmPriority.CRITICAL,
            user=user,
        )

        # Store lock is released by now
        if self.notifier is not None:
            try:
                await self.notifier.send_alert("Emergency stop activated")
            except Exception as e:
                self.logger.warning(f"Failed to send emergency stop alert: {e}")

        return MotorResponse(
            success=True,
            message="Emergency stop activated",
            data=MotorStatusResponse.from_motor(motor),
        )

    # ----------------------------------------------------------------
    # Queries
    # ----------------------------------------------------------------

    async def get_status(self) -> MotorStatusResponse:
        """Return the current status projection.

        Raises:
            StoreUnavailableError: If the store cannot be read
        """
        try:
            motor: Motor = await self.store.get()
        except Exception:
            self.logger.exception("Error reading motor status")
            raise
        return MotorStatusResponse.from_motor(motor)
