# components/monitoring/logging_system.py
"""
Structured logging system for the motor simulator.

Provides:
- Structured logging (JSON and plain text formats)
- Alarm and event classification
- In-memory audit trail for commands and alarms
- Log rotation for file output

Motor-specific usage:
- Operator commands are recorded as audit events
- Overheating and emergency stops are recorded as alarms
"""

import asyncio
import json
import logging
import logging.handlers
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

__all__ = [
    "EventSeverity",
    "EventCategory",
    "AlarmPriority",
    "LogEntry",
    "JSONFormatter",
    "SimLogger",
    "configure_logging",
    "get_logger",
]

# ----------------------------------------------------------------
# Event Classification
# ----------------------------------------------------------------


class EventSeverity(Enum):
    """
    Event severity levels.

    Lower number = higher severity
    """

    CRITICAL = 1  # Safety trip, motor stopped
    ALERT = 2  # Immediate action required
    ERROR = 3  # Error conditions, degraded operation
    WARNING = 4  # Warning conditions, potential issues
    NOTICE = 5  # Normal but significant events
    INFO = 6  # Informational messages
    DEBUG = 7  # Debug/diagnostic information


class EventCategory(Enum):
    """Event categories."""

    SAFETY = "safety"  # Emergency stop, overheating protection
    PROCESS = "process"  # Speed/mode/status changes
    ALARM = "alarm"  # Alarm conditions
    AUDIT = "audit"  # Operator commands
    SYSTEM = "system"  # Lifecycle and infrastructure
    TELEMETRY = "telemetry"  # Telemetry publication


class AlarmPriority(Enum):
    """Alarm priority levels."""

    CRITICAL = 1
    HIGH = 2
    MEDIUM = 3
    LOW = 4


# Map Python logging levels to severity
LOGGING_TO_SEVERITY = {
    logging.CRITICAL: EventSeverity.CRITICAL,
    logging.ERROR: EventSeverity.ERROR,
    logging.WARNING: EventSeverity.WARNING,
    logging.INFO: EventSeverity.INFO,
    logging.DEBUG: EventSeverity.DEBUG,
}

SEVERITY_TO_LOGGING = {
    EventSeverity.CRITICAL: logging.CRITICAL,
    EventSeverity.ALERT: logging.CRITICAL,
    EventSeverity.ERROR: logging.ERROR,
    EventSeverity.WARNING: logging.WARNING,
    EventSeverity.NOTICE: logging.INFO,
    EventSeverity.INFO: logging.INFO,
    EventSeverity.DEBUG: logging.DEBUG,
}

# Overheating is raised at HIGH, emergency stops at CRITICAL
ALARM_TO_SEVERITY = {
    AlarmPriority.CRITICAL: EventSeverity.CRITICAL,
    AlarmPriority.HIGH: EventSeverity.ALERT,
    AlarmPriority.MEDIUM: EventSeverity.WARNING,
    AlarmPriority.LOW: EventSeverity.NOTICE,
}


# ----------------------------------------------------------------
# Structured Log Entry
# ----------------------------------------------------------------


@dataclass
class LogEntry:
    """Structured log entry."""

    wall_time: float
    severity: EventSeverity
    category: EventCategory
    message: str

    # Context
    device: str = ""
    component: str = ""
    user: str = ""

    # Additional data
    data: dict[str, Any] = field(default_factory=dict)

    alarm_priority: AlarmPriority | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialisation."""
        entry_dict = {
            "wall_time": self.wall_time,
            "severity": self.severity.name,
            "category": self.category.value,
            "message": self.message,
        }

        if self.device:
            entry_dict["device"] = self.device
        if self.component:
            entry_dict["component"] = self.component
        if self.user:
            entry_dict["user"] = self.user
        if self.data:
            entry_dict["data"] = json.dumps(self.data, default=str)
        if self.alarm_priority:
            entry_dict["alarm_priority"] = self.alarm_priority.name

        return entry_dict

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict())

    def to_human_readable(self) -> str:
        """Convert to human-readable format."""
        severity_str = f"[{self.severity.name:8s}]"
        device_str = f"{self.device}:" if self.device else ""
        component_str = f"{self.component}:" if self.component else ""

        return f"{severity_str} {device_str}{component_str} {self.message}"


# ----------------------------------------------------------------
# JSON Formatter for Python logging
# ----------------------------------------------------------------


class JSONFormatter(logging.Formatter):
    """Format log records as JSON."""

    def __init__(self, device: str = ""):
        super().__init__()
        self.device = device

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        severity = LOGGING_TO_SEVERITY.get(record.levelno, EventSeverity.INFO)

        log_entry = LogEntry(
            wall_time=record.created,
            severity=severity,
            category=EventCategory.SYSTEM,
            message=record.getMessage(),
            device=self.device,
            component=record.name,
        )

        if record.exc_info:
            log_entry.data["exception"] = self.formatException(record.exc_info)

        return log_entry.to_json()


# ----------------------------------------------------------------
# SimLogger - logging with structured output
# ----------------------------------------------------------------


class SimLogger:
    """
    Logger for simulator components.

    Wraps Python's logging with:
    - Structured logging (JSON file output)
    - Event classification
    - Audit trail support
    - Alarm logging
    """

    def __init__(
        self,
        name: str,
        device: str = "",
        log_dir: Path | None = None,
        enable_json: bool = True,
        enable_console: bool = True,
        max_audit_entries: int = 10000,
    ):
        """
        Initialise logger.

        Args:
            name: Logger name (typically module name)
            device: Device name for context
            log_dir: Directory for log files (None = no file logging)
            enable_json: Enable JSON formatted logs (requires log_dir)
            enable_console: Enable console output
            max_audit_entries: Maximum audit trail entries to retain
        """
        self.name = name
        self.device = device
        self.log_dir = log_dir
        self.enable_json = enable_json

        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False

        self.logger.handlers.clear()

        if enable_console:
            self._add_console_handler()

        if enable_json and log_dir:
            self._add_json_handler()

        # Audit trail storage (in-memory)
        self.audit_trail: list[LogEntry] = []
        self._audit_lock = asyncio.Lock()
        self._max_audit_entries = max_audit_entries

    def _add_console_handler(self) -> None:
        handler = logging.StreamHandler()
        handler.setLevel(logging.INFO)
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)8s] %(name)s: %(message)s")
        )
        self.logger.addHandler(handler)

    def _add_json_handler(self) -> None:
        """Add JSON file handler with rotation."""
        if not self.log_dir:
            return

        self.log_dir.mkdir(parents=True, exist_ok=True)
        log_file = self.log_dir / f"{self.device or 'system'}.json.log"

        # Rotating file handler (10MB max, 5 backups)
        handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
        )
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(JSONFormatter(device=self.device))
        self.logger.addHandler(handler)

    # ----------------------------------------------------------------
    # Standard logging methods
    # ----------------------------------------------------------------

    def debug(self, message: str, **kwargs) -> None:
        self.logger.debug(message, **kwargs)

    def info(self, message: str, **kwargs) -> None:
        self.logger.info(message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self.logger.warning(message, **kwargs)

    def error(self, message: str, **kwargs) -> None:
        self.logger.error(message, **kwargs)

    def critical(self, message: str, **kwargs) -> None:
        self.logger.critical(message, **kwargs)

    def exception(self, message: str, **kwargs) -> None:
        """Log exception with traceback."""
        self.logger.exception(message, **kwargs)

    # ----------------------------------------------------------------
    # Structured logging methods
    # ----------------------------------------------------------------

    async def log_event(
        self,
        severity: EventSeverity,
        category: EventCategory,
        message: str,
        **kwargs,
    ) -> LogEntry:
        """
        Log structured event.

        Args:
            severity: Event severity level
            category: Event category
            message: Event message
            **kwargs: Additional context (user, component, data, etc.)

        Returns:
            LogEntry that was created
        """
        device = kwargs.pop("device", self.device)

        entry = LogEntry(
            wall_time=time.time(),
            severity=severity,
            category=category,
            message=message,
            device=device,
            **kwargs,
        )

        log_level = SEVERITY_TO_LOGGING.get(severity, logging.INFO)
        self.logger.log(log_level, entry.to_human_readable())

        # Keep audit, alarm and safety events
        if category in (
            EventCategory.AUDIT,
            EventCategory.ALARM,
            EventCategory.SAFETY,
        ):
            async with self._audit_lock:
                self.audit_trail.append(entry)
                if len(self.audit_trail) > self._max_audit_entries:
                    self.audit_trail = self.audit_trail[-self._max_audit_entries :]

        return entry

    async def log_audit(
        self, message: str, user: str = "", action: str = "", result: str = "", **kwargs
    ) -> LogEntry:
        """
        Log audit trail event.

        Args:
            message: Audit message
            user: User who performed action
            action: Action performed
            result: Result of action (ACCEPTED, REJECTED, etc.)
            **kwargs: Additional context

        Returns:
            LogEntry that was created
        """
        data = kwargs.get("data", {})
        data.update(
            {
                "action": action,
                "result": result,
            }
        )
        kwargs["data"] = data

        return await self.log_event(
            severity=EventSeverity.NOTICE,
            category=EventCategory.AUDIT,
            message=message,
            user=user,
            **kwargs,
        )

    async def log_alarm(
        self,
        message: str,
        priority: AlarmPriority,
        **kwargs,
    ) -> LogEntry:
        """
        Log alarm event.

        Args:
            message: Alarm message
            priority: Alarm priority
            **kwargs: Additional context

        Returns:
            LogEntry that was created
        """
        severity = ALARM_TO_SEVERITY.get(priority, EventSeverity.WARNING)

        return await self.log_event(
            severity=severity,
            category=EventCategory.ALARM,
            message=message,
            alarm_priority=priority,
            **kwargs,
        )

    # ----------------------------------------------------------------
    # Audit trail access
    # ----------------------------------------------------------------

    async def get_audit_trail(
        self,
        limit: int = 100,
        severity: EventSeverity | None = None,
        category: EventCategory | None = None,
    ) -> list[LogEntry]:
        """
        Get audit trail entries.

        Args:
            limit: Maximum number of entries to return
            severity: Filter by severity
            category: Filter by category

        Returns:
            List of log entries (most recent last)
        """
        async with self._audit_lock:
            entries = self.audit_trail

            if severity:
                entries = [e for e in entries if e.severity == severity]
            if category:
                entries = [e for e in entries if e.category == category]

            return entries[-limit:]

    async def clear_audit_trail(self) -> int:
        """
        Clear audit trail.

        Returns:
            Number of entries cleared
        """
        async with self._audit_lock:
            count = len(self.audit_trail)
            self.audit_trail.clear()
            return count


# ----------------------------------------------------------------
# Global logger factory
# ----------------------------------------------------------------

_loggers: dict[str, SimLogger] = {}
_loggers_lock = threading.Lock()
_default_log_dir: Path | None = None


def configure_logging(log_dir: Path | str | None = None) -> None:
    """
    Configure global logging settings.

    Loggers already handed out without a directory start writing JSON
    files there too.

    Args:
        log_dir: Directory for log files
    """
    global _default_log_dir

    if not log_dir:
        _default_log_dir = None
        return

    _default_log_dir = Path(log_dir)
    _default_log_dir.mkdir(parents=True, exist_ok=True)

    # Module-level loggers are created at import, before configuration runs
    with _loggers_lock:
        for logger in _loggers.values():
            if logger.enable_json and logger.log_dir is None:
                logger.log_dir = _default_log_dir
                logger._add_json_handler()


def get_logger(name: str, device: str = "", **kwargs) -> SimLogger:
    """
    Get or create a logger.

    Thread-safe logger factory.

    Args:
        name: Logger name (typically __name__)
        device: Device name for context
        **kwargs: Additional SimLogger arguments

    Returns:
        SimLogger instance
    """
    logger_key = f"{name}:{device}"

    with _loggers_lock:
        if logger_key not in _loggers:
            if "log_dir" not in kwargs and _default_log_dir:
                kwargs["log_dir"] = _default_log_dir

            _loggers[logger_key] = SimLogger(name, device, **kwargs)

        return _loggers[logger_key]
