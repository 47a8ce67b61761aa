# components/telemetry/telemetry_data.py
"""
Telemetry and status records derived from the motor.
"""

import uuid
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from components.physics.motor_state import Motor, utc_now

__all__ = ["MotorTelemetry", "MotorStatusResponse"]


@dataclass(frozen=True)
class MotorTelemetry:
    """Telemetry record pushed to subscribers."""

    current_speed: float
    target_speed: float
    mode: str
    temperature: float
    rpm: float
    power_output: float
    status: str
    timestamp: datetime
    is_overheating: bool

    @classmethod
    def from_motor(cls, motor: Motor, timestamp: datetime | None = None) -> "MotorTelemetry":
        return cls(
            current_speed=motor.current_speed,
            target_speed=motor.target_speed,
            mode=motor.mode.value,
            temperature=motor.temperature,
            rpm=motor.rpm,
            power_output=motor.power_output,
            status=motor.status.value,
            timestamp=timestamp or utc_now(),
            is_overheating=motor.is_overheating(),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data


@dataclass(frozen=True)
class MotorStatusResponse:
    """Status projection returned to command callers."""

    id: uuid.UUID
    current_speed: float
    target_speed: float
    mode: str
    temperature: float
    rpm: float
    power_output: float
    status: str
    last_updated: datetime

    @classmethod
    def from_motor(cls, motor: Motor) -> "MotorStatusResponse":
        return cls(
            id=motor.id,
            current_speed=motor.current_speed,
            target_speed=motor.target_speed,
            mode=motor.mode.value,
            temperature=motor.temperature,
            rpm=motor.rpm,
            power_output=motor.power_output,
            status=motor.status.value,
            last_updated=motor.last_updated,
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["id"] = str(self.id)
        data["last_updated"] = self.last_updated.isoformat()
        return data
