from __future__ import annotations

import logging

from ..core.config import Settings
from ..domain.interfaces import Actuator, Notifier
from ..domain.models import Thresholds
from ..drivers.actuator_homeassistant import HomeAssistantSwitch
from ..drivers.actuators_sim import DryRunSwitch
from ..sensors.adb_battery import AdbBatteryProvider
from ..sensors.base import PowerSensor
from ..sensors.local_power import LocalPowerProvider
from .charge_loop import ChargeLoop
from .notifier import DesktopNotifier, LogNotifier

logger = logging.getLogger(__name__)


def build_provider(settings: Settings) -> PowerSensor:
    if settings.telemetry_source == "adb":
        return AdbBatteryProvider(
            adb_path=settings.adb_path,
            serial=settings.adb_serial,
            device_model=settings.adb_device_model,
            timeout_s=settings.bridge_timeout_seconds,
        )
    return LocalPowerProvider(
        power_supply_dir=settings.power_supply_dir,
        thermal_zone_path=settings.thermal_zone_path,
    )


def build_actuator(settings: Settings) -> Actuator:
    if settings.actuator_mode == "dry_run":
        return DryRunSwitch()
    return HomeAssistantSwitch(
        base_url=settings.homeassistant_url,
        token=settings.homeassistant_token,
        entity_id=settings.switch_entity_id,
        timeout=settings.http_timeout_seconds,
    )


def build_notifier(settings: Settings) -> Notifier:
    if not settings.notifications_enabled:
        return LogNotifier()
    return DesktopNotifier(settings.notify_send_path, timeout_s=settings.notify_timeout_seconds)


def build_loop(settings: Settings) -> ChargeLoop:
    provider = build_provider(settings)
    actuator = build_actuator(settings)
    logger.info("Using telemetry source=%s actuator=%s", provider.source_id, actuator.actuator_id)
    return ChargeLoop(
        provider=provider,
        actuator=actuator,
        notifier=build_notifier(settings),
        thresholds=Thresholds(low=settings.low_battery_threshold, high=settings.high_battery_threshold),
        tick_interval_s=settings.tick_interval_seconds,
        recovery_interval_s=settings.recovery_interval_seconds,
    )
