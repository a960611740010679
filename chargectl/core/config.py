from typing import Literal, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_SWITCH_ENTITY_ID = "switch.smart_power_strip_socket_4"


class SensorSettings(BaseSettings):
    """Local sensor surface; loadable without the Home Assistant variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    power_supply_dir: str = "/sys/class/power_supply/BAT0"
    thermal_zone_path: str = "/sys/class/thermal/thermal_zone0/temp"


class Settings(SensorSettings):
    app_name: str = "Charge Controller"

    # Home Assistant (required)
    homeassistant_url: str
    homeassistant_token: str
    switch_entity_id: str = DEFAULT_SWITCH_ENTITY_ID
    http_timeout_seconds: float = 10.0

    # "homeassistant" for the real switch, "dry_run" to only log commands
    actuator_mode: Literal["homeassistant", "dry_run"] = "homeassistant"

    # "local" reads sysfs on this host, "adb" reads the phone on the bridge
    telemetry_source: Literal["local", "adb"] = "local"

    # Thresholds: ON if level < low, OFF if level > high
    low_battery_threshold: float = Field(default=20.0, ge=0, le=100)
    high_battery_threshold: float = Field(default=80.0, ge=0, le=100)

    # Loop timing
    tick_interval_seconds: float = 300.0
    recovery_interval_seconds: float = 60.0

    # ADB bridge
    adb_path: str = "adb"
    adb_serial: Optional[str] = None
    adb_device_model: Optional[str] = None  # e.g. "2201117TY"
    bridge_timeout_seconds: float = 15.0

    # Notifications
    notifications_enabled: bool = True
    notify_send_path: str = "notify-send"
    notify_timeout_seconds: float = 5.0

    # Logging
    log_file: str = "chargectl.log"
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _check_thresholds(self) -> "Settings":
        if self.low_battery_threshold >= self.high_battery_threshold:
            raise ValueError(
                f"low_battery_threshold ({self.low_battery_threshold}) must be below "
                f"high_battery_threshold ({self.high_battery_threshold})"
            )
        return self


def load_settings(**overrides) -> Settings:
    """Read settings from the environment and .env.

    Raises pydantic.ValidationError when HOMEASSISTANT_URL or
    HOMEASSISTANT_TOKEN is missing.
    """
    return Settings(**overrides)
