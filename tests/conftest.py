import pytest

from chargectl.core.config import Settings


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        homeassistant_url="http://ha.test:8123/api",
        homeassistant_token="secret-token",
        actuator_mode="dry_run",
        notifications_enabled=False,
        power_supply_dir=str(tmp_path / "BAT0"),
        thermal_zone_path=str(tmp_path / "thermal_zone0" / "temp"),
        log_file=str(tmp_path / "chargectl.log"),
    )
