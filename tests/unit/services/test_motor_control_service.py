# tests/unit/services/test_motor_control_service.py
"""Tests for MotorControlService.

Level 3 in our dependency tree - depends on MotorStore, the telemetry
projections and a notifier. Uses a real store and a recording notifier.

Test Coverage:
- set_speed success and rejection reasons
- change_mode success, invalid names, emergency no-op
- emergency_stop, alerting and notifier failures
- get_status and store failures
- Notifier calls made outside the store lock
- Audit trail entries for every command
"""

from datetime import timedelta
from unittest.mock import patch

import pytest

from components.monitoring.logging_system import AlarmPriority, EventCategory
from components.physics.motor_state import DrivingMode, Motor, MotorStatus, utc_now
from components.services.motor_control_service import (
    MotorControlService,
    MotorResponse,
)
from components.state.motor_store import MotorStore, StoreUnavailableError


# ================================================================
# FIXTURES
# ================================================================
@pytest.fixture
def store():
    return MotorStore()


@pytest.fixture
async def service(store, recording_notifier):
    """Service wired to a recording notifier, with a clean audit trail."""
    svc = MotorControlService(store, recording_notifier)
    await svc.logger.clear_audit_trail()
    return svc


async def put_emergency(store, seconds_ago: float) -> None:
    """Store a motor that entered emergency `seconds_ago` seconds ago."""
    await store.put(
        Motor(
            status=MotorStatus.EMERGENCY,
            emergency_stop_time=utc_now() - timedelta(seconds=seconds_ago),
        )
    )


# ================================================================
# SET SPEED TESTS
# ================================================================
class TestSetSpeed:
    """Test speed commands."""

    @pytest.mark.asyncio
    async def test_accepted(self, service, store):
        """Test a valid speed is applied and reported.

        WHY: Happy path for the most common command.
        """
        response = await service.set_speed(60)

        assert response.success
        assert response.message == "Speed set to 60"
        assert response.error is None
        assert response.data.target_speed == 60.0
        assert response.data.status == "Starting"
        assert (await store.get()).target_speed == 60.0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("speed", [-1, 100.5, 250])
    async def test_invalid_speed(self, service, store, speed):
        """Test out-of-range speeds are rejected with InvalidSpeed.

        WHY: Callers map the error kind to a client error.
        """
        response = await service.set_speed(speed)

        assert not response.success
        assert response.error == "InvalidSpeed"
        assert "Speed must be between 0 and 100" in response.message
        assert response.data is None
        assert (await store.get()).target_speed == 0.0

    @pytest.mark.asyncio
    async def test_rejected_during_cooldown(self, service, store):
        """Test speed during cooldown reports remaining seconds.

        WHY: The operator needs to know how long to wait.
        """
        await put_emergency(store, seconds_ago=0)

        response = await service.set_speed(10)

        assert not response.success
        assert response.error == "CooldownActive"
        assert response.details["remaining_seconds"] in (4, 5)
        assert "emergency cooldown" in response.message
        motor = await store.get()
        assert motor.status == MotorStatus.EMERGENCY
        assert motor.target_speed == 0.0

    @pytest.mark.asyncio
    async def test_accepted_after_cooldown(self, service, store):
        """Test speed clears the emergency once the window has passed.

        WHY: Recovery path after an emergency stop.
        """
        await put_emergency(store, seconds_ago=10)

        response = await service.set_speed(10)

        assert response.success
        assert response.data.status == "Starting"

    @pytest.mark.asyncio
    async def test_store_failure(self, service, store):
        """Test infrastructure failures become a generic error response.

        WHY: No exception should escape the command surface.
        """
        await store.close()

        response = await service.set_speed(10)

        assert not response.success
        assert response.error == "Error"
        assert response.message.startswith("Error setting speed:")

    @pytest.mark.asyncio
    async def test_audited(self, service):
        """Test accepted and rejected commands both reach the audit trail.

        WHY: Every operator action must be traceable.
        """
        await service.set_speed(40, user="operator1")
        await service.set_speed(400, user="operator1")

        trail = await service.logger.get_audit_trail(category=EventCategory.AUDIT)
        results = [entry.data["result"] for entry in trail]

        assert results == ["ACCEPTED", "REJECTED"]
        assert all(entry.user == "operator1" for entry in trail)
        assert trail[0].data["action"] == "set_speed"


# ================================================================
# CHANGE MODE TESTS
# ================================================================
class TestChangeMode:
    """Test driving mode commands."""

    @pytest.mark.asyncio
    async def test_accepted(self, service, store):
        """Test a mode change by enum.

        WHY: Happy path.
        """
        response = await service.change_mode(DrivingMode.SPORT)

        assert response.success
        assert response.message == "Driving mode changed to Sport"
        assert response.data.mode == "Sport"
        assert (await store.get()).mode == DrivingMode.SPORT

    @pytest.mark.asyncio
    async def test_accepts_name(self, service):
        """Test a mode change by case-insensitive name.

        WHY: API payloads carry mode names as strings.
        """
        response = await service.change_mode("eco")

        assert response.success
        assert response.data.mode == "Eco"

    @pytest.mark.asyncio
    async def test_invalid_mode(self, service, store):
        """Test unknown modes are rejected.

        WHY: Only Eco, Normal and Sport exist.
        """
        response = await service.change_mode("Turbo")

        assert not response.success
        assert response.error == "InvalidMode"
        assert "Valid modes are" in response.message
        assert (await store.get()).mode == DrivingMode.NORMAL

    @pytest.mark.asyncio
    async def test_ignored_during_emergency(self, service, store):
        """Test mode change during emergency succeeds without applying.

        WHY: Emergency locks configuration but is not an error.
        """
        await put_emergency(store, seconds_ago=1)

        response = await service.change_mode(DrivingMode.SPORT)

        assert response.success
        assert "ignored" in response.message
        assert response.data.mode == "Normal"
        trail = await service.logger.get_audit_trail(category=EventCategory.AUDIT)
        assert trail[-1].data["result"] == "IGNORED"


# ================================================================
# EMERGENCY STOP TESTS
# ================================================================
class TestEmergencyStop:
    """Test emergency stop."""

    @pytest.mark.asyncio
    async def test_stops_motor(self, service, store):
        """Test the motor is stopped and in emergency.

        WHY: Core safety function.
        """
        await service.set_speed(80)

        response = await service.emergency_stop()

        assert response.success
        assert response.message == "Emergency stop activated"
        assert response.data.status == "Emergency"
        motor = await store.get()
        assert motor.target_speed == 0.0
        assert motor.current_speed == 0.0
        assert motor.emergency_stop_time is not None

    @pytest.mark.asyncio
    async def test_sends_alert(self, service, recording_notifier):
        """Test subscribers are told about the emergency stop.

        WHY: Operators must see the stop on every client.
        """
        await service.emergency_stop()

        assert recording_notifier.alerts == ["Emergency stop activated"]

    @pytest.mark.asyncio
    async def test_logs_critical_alarm(self, service):
        """Test the stop is recorded as a critical alarm.

        WHY: Emergency stops are safety events.
        """
        await service.emergency_stop(user="operator1")

        alarms = await service.logger.get_audit_trail(category=EventCategory.ALARM)
        assert alarms[-1].alarm_priority == AlarmPriority.CRITICAL
        assert alarms[-1].user == "operator1"

    @pytest.mark.asyncio
    async def test_notifier_failure_does_not_fail_command(self, store, failing_notifier):
        """Test a broken notifier doesn't undo the emergency stop.

        WHY: Safety action takes precedence over alert delivery.
        """
        svc = MotorControlService(store, failing_notifier)

        response = await svc.emergency_stop()

        assert response.success
        assert failing_notifier.calls == 1
        assert (await store.get()).status == MotorStatus.EMERGENCY

    @pytest.mark.asyncio
    async def test_alert_sent_outside_store_lock(self, store, lock_checking_notifier):
        """Test the alert goes out after the store lock is released.

        WHY: A slow notifier must not block the driver or other commands.
        """
        notifier = lock_checking_notifier(store)
        svc = MotorControlService(store, notifier)

        response = await svc.emergency_stop()

        assert response.success
        assert notifier.alerts == ["Emergency stop activated"]
        assert notifier.lock_held == [False]

    @pytest.mark.asyncio
    async def test_without_notifier(self, store):
        """Test the service works with no notifier configured.

        WHY: Notifier is optional.
        """
        svc = MotorControlService(store)
        response = await svc.emergency_stop()
        assert response.success

    @pytest.mark.asyncio
    async def test_repeated_stop_restarts_cooldown(self, service, store):
        """Test a second stop refreshes the stop time.

        WHY: Emergency stop is always accepted.
        """
        await put_emergency(store, seconds_ago=4)

        response = await service.emergency_stop()

        assert response.success
        motor = await store.get()
        assert motor.cooldown_seconds_remaining() in (4, 5)


# ================================================================
# STATUS TESTS
# ================================================================
class TestStatus:
    """Test status queries and response serialisation."""

    @pytest.mark.asyncio
    async def test_get_status(self, service, store):
        """Test the status projection reflects the stored motor.

        WHY: Read model for API clients.
        """
        motor = await store.get()
        status = await service.get_status()

        assert status.id == motor.id
        assert status.status == "Stopped"
        assert status.mode == "Normal"
        assert status.temperature == 25.0

    @pytest.mark.asyncio
    async def test_get_status_store_failure_logged(self, service, store):
        """Test a failed status read is logged and re-raised.

        WHY: Queries have no response envelope to carry the error.
        """
        await store.close()

        with patch.object(service.logger, "exception") as mock_exception:
            with pytest.raises(StoreUnavailableError):
                await service.get_status()

        mock_exception.assert_called_once_with("Error reading motor status")

    @pytest.mark.asyncio
    async def test_response_to_dict(self, service):
        """Test responses serialise for transport.

        WHY: API layers return these as JSON.
        """
        ok = (await service.set_speed(20)).to_dict()
        failed = (await service.set_speed(-5)).to_dict()

        assert ok["success"] is True
        assert ok["data"]["target_speed"] == 20.0
        assert "error" not in ok
        assert failed == {
            "success": False,
            "message": failed["message"],
            "error": "InvalidSpeed",
        }

    def test_response_defaults(self):
        response = MotorResponse(success=True, message="ok")
        assert response.to_dict() == {"success": True, "message": "ok"}
