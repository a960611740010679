"""Tests for wiring the loop from settings."""

from chargectl.core.config import Settings
from chargectl.drivers.actuator_homeassistant import HomeAssistantSwitch
from chargectl.domain.models import ActuatorCommand
from chargectl.drivers.actuators_sim import DryRunSwitch
from chargectl.sensors.adb_battery import AdbBatteryProvider
from chargectl.sensors.local_power import LocalPowerProvider
from chargectl.services.factory import build_actuator, build_loop, build_notifier, build_provider
from chargectl.services.notifier import DesktopNotifier, LogNotifier


def test_defaults_from_fixture(settings: Settings) -> None:
    assert isinstance(build_provider(settings), LocalPowerProvider)
    assert isinstance(build_actuator(settings), DryRunSwitch)
    assert isinstance(build_notifier(settings), LogNotifier)


def test_adb_and_homeassistant(settings: Settings) -> None:
    s = settings.model_copy(
        update={"telemetry_source": "adb", "actuator_mode": "homeassistant", "notifications_enabled": True}
    )

    assert isinstance(build_provider(s), AdbBatteryProvider)
    switch = build_actuator(s)
    assert isinstance(switch, HomeAssistantSwitch)
    assert switch.service_url(ActuatorCommand.TURN_ON) == (
        "http://ha.test:8123/api/services/switch/turn_on"
    )
    assert isinstance(build_notifier(s), DesktopNotifier)


def test_build_loop_uses_thresholds(settings: Settings) -> None:
    s = settings.model_copy(update={"high_battery_threshold": 79.0, "tick_interval_seconds": 120.0})

    loop = build_loop(s)

    assert loop.thresholds.low == 20.0
    assert loop.thresholds.high == 79.0
    assert loop.tick_interval_s == 120.0
    assert loop.recovery_interval_s == 60.0
    assert loop.live.source == "local"
