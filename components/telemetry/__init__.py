# components/telemetry/__init__.py
"""
Telemetry records and notifiers for publishing motor state.
"""

from components.telemetry.notifier import (
    BroadcastNotifier,
    CompositeNotifier,
    LoggingNotifier,
    Subscription,
    TelemetryNotifier,
)
from components.telemetry.telemetry_data import MotorStatusResponse, MotorTelemetry

__all__ = [
    "MotorTelemetry",
    "MotorStatusResponse",
    "TelemetryNotifier",
    "Subscription",
    "BroadcastNotifier",
    "LoggingNotifier",
    "CompositeNotifier",
]
