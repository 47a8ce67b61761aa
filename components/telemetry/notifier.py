# components/telemetry/notifier.py
"""
Telemetry notifiers.

Delivers motor telemetry and alerts to subscribers. Delivery is
best-effort: a slow or failing subscriber never blocks or breaks the
simulation driver.

Provides:
- TelemetryNotifier: the notifier contract
- BroadcastNotifier: in-process hub with per-group subscriber queues
- LoggingNotifier: writes telemetry and alerts to the structured log
- CompositeNotifier: fans out to several notifiers, isolating failures
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from components.monitoring.logging_system import (
    AlarmPriority,
    EventCategory,
    EventSeverity,
    get_logger,
)
from components.telemetry.telemetry_data import MotorTelemetry

__all__ = [
    "TelemetryNotifier",
    "Subscription",
    "BroadcastNotifier",
    "LoggingNotifier",
    "CompositeNotifier",
    "TELEMETRY_EVENT",
    "ALERT_EVENT",
    "DEFAULT_GROUP",
]

logger = get_logger(__name__)

# Event names seen by subscribers
TELEMETRY_EVENT = "MotorData"
ALERT_EVENT = "overheatingalert"

DEFAULT_GROUP = "MotorClients"


class TelemetryNotifier(ABC):
    """Contract for publishing telemetry and alerts."""

    @abstractmethod
    async def broadcast_telemetry(self, telemetry: MotorTelemetry) -> None:
        """Publish a telemetry record."""

    @abstractmethod
    async def send_alert(self, message: str) -> None:
        """Publish an alert message."""


# ----------------------------------------------------------------
# In-process broadcast hub
# ----------------------------------------------------------------


@dataclass
class Subscription:
    """A subscriber's mailbox in a broadcast group."""

    group: str
    queue: asyncio.Queue = field(repr=False)
    dropped: int = 0

    async def receive(self, timeout: float | None = None) -> tuple[str, Any]:
        """Wait for the next (event, payload) message.

        Raises:
            asyncio.TimeoutError: If timeout elapses first
        """
        if timeout is None:
            return await self.queue.get()
        return await asyncio.wait_for(self.queue.get(), timeout)

    def pending(self) -> int:
        return self.queue.qsize()


class BroadcastNotifier(TelemetryNotifier):
    """
    Broadcast hub delivering to every subscriber of a group.

    Each subscriber owns a bounded queue. When a queue is full the oldest
    message is discarded so producers never wait on consumers.

    Example:
        >>> hub = BroadcastNotifier()
        >>> sub = hub.subscribe()
        >>> await hub.send_alert("Emergency stop activated")
        >>> await sub.receive()
        ('overheatingalert', 'Emergency stop activated')
    """

    def __init__(self, group: str = DEFAULT_GROUP, queue_size: int = 100):
        """Initialise hub.

        Args:
            group: Group that broadcasts are addressed to
            queue_size: Maximum pending messages per subscriber

        Raises:
            ValueError: If queue_size is not positive
        """
        if queue_size <= 0:
            raise ValueError("queue_size must be positive")

        self.group = group
        self.queue_size = queue_size
        self._groups: dict[str, list[Subscription]] = {}

        # Statistics
        self.telemetry_sent = 0
        self.alerts_sent = 0

    def subscribe(self, group: str | None = None) -> Subscription:
        """Add a subscriber to a group (defaults to the hub's group)."""
        group = group or self.group
        subscription = Subscription(
            group=group, queue=asyncio.Queue(maxsize=self.queue_size)
        )
        self._groups.setdefault(group, []).append(subscription)
        logger.info(f"Subscriber added to group '{group}'")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> bool:
        """Remove a subscriber.

        Returns:
            True if removed, False if it was not subscribed
        """
        members = self._groups.get(subscription.group, [])
        if subscription not in members:
            return False
        members.remove(subscription)
        if not members:
            del self._groups[subscription.group]
        logger.info(f"Subscriber removed from group '{subscription.group}'")
        return True

    def subscriber_count(self, group: str | None = None) -> int:
        return len(self._groups.get(group or self.group, []))

    async def broadcast_telemetry(self, telemetry: MotorTelemetry) -> None:
        self._publish(TELEMETRY_EVENT, telemetry.to_dict())
        self.telemetry_sent += 1

    async def send_alert(self, message: str) -> None:
        self._publish(ALERT_EVENT, message)
        self.alerts_sent += 1

    def _publish(self, event: str, payload: Any) -> None:
        for subscription in self._groups.get(self.group, []):
            queue = subscription.queue
            if queue.full():
                queue.get_nowait()
                subscription.dropped += 1
            queue.put_nowait((event, payload))


# ----------------------------------------------------------------
# Logging notifier
# ----------------------------------------------------------------


class LoggingNotifier(TelemetryNotifier):
    """Publishes telemetry to the debug log and alerts as alarms."""

    def __init__(self, device: str = "motor"):
        self.logger = get_logger(self.__class__.__name__, device=device)

    async def broadcast_telemetry(self, telemetry: MotorTelemetry) -> None:
        await self.logger.log_event(
            EventSeverity.DEBUG,
            EventCategory.TELEMETRY,
            f"speed={telemetry.current_speed:.1f}/{telemetry.target_speed:.1f} "
            f"rpm={telemetry.rpm:.0f} temp={telemetry.temperature:.1f}°C "
            f"power={telemetry.power_output:.1f} status={telemetry.status}",
        )

    async def send_alert(self, message: str) -> None:
        await self.logger.log_alarm(message, priority=AlarmPriority.HIGH)


# ----------------------------------------------------------------
# Fan-out
# ----------------------------------------------------------------


class CompositeNotifier(TelemetryNotifier):
    """Delivers to several notifiers; one failing target does not stop the rest."""

    def __init__(self, notifiers: list[TelemetryNotifier]):
        self.notifiers = list(notifiers)

    async def broadcast_telemetry(self, telemetry: MotorTelemetry) -> None:
        for notifier in self.notifiers:
            try:
                await notifier.broadcast_telemetry(telemetry)
            except Exception as e:
                logger.warning(
                    f"{notifier.__class__.__name__} failed to broadcast telemetry: {e}"
                )

    async def send_alert(self, message: str) -> None:
        for notifier in self.notifiers:
            try:
                await notifier.send_alert(message)
            except Exception as e:
                logger.warning(
                    f"{notifier.__class__.__name__} failed to send alert: {e}"
                )
