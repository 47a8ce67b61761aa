# components/physics/__init__.py
"""
Physics simulation for the motor.

This module provides:
- Motor state and physics (speed ramp, thermal lag, RPM and power)
- Overheating and emergency stop safety logic
- The fixed-step motor simulator
"""

from components.physics.motor_simulator import DEFAULT_FIXED_DT, MotorSimulator
from components.physics.motor_state import (
    CooldownActiveError,
    DrivingMode,
    InvalidSpeedError,
    Motor,
    MotorError,
    MotorParameters,
    MotorStatus,
    OverheatingWarning,
    SimulationResult,
)

__all__ = [
    # Motor
    "Motor",
    "MotorParameters",
    "MotorStatus",
    "DrivingMode",
    "SimulationResult",
    # Errors
    "MotorError",
    "InvalidSpeedError",
    "CooldownActiveError",
    "OverheatingWarning",
    # Simulator
    "MotorSimulator",
    "DEFAULT_FIXED_DT",
]
