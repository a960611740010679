from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

import psutil

from .base import PowerSensor
from ..domain.errors import ProbeUnavailable
from ..domain.models import SystemReading

logger = logging.getLogger(__name__)


class PowerProbe:
    """
    Handle on the host's hardware thermal components.
    Owned by one LocalPowerProvider; refreshed in place before every sample.
    """

    def __init__(self) -> None:
        # psutil only exposes temperatures on Linux/FreeBSD
        self._supported = hasattr(psutil, "sensors_temperatures")
        self.component_temps: list[float] = []

    def refresh(self) -> None:
        if not self._supported:
            self.component_temps = []
            return
        try:
            groups = psutil.sensors_temperatures()
        except (OSError, RuntimeError) as e:
            raise ProbeUnavailable(f"psutil.sensors_temperatures() failed: {e}") from e

        temps: list[float] = []
        for entries in groups.values():
            for entry in entries:
                if entry.current is not None:
                    temps.append(float(entry.current))
        self.component_temps = temps


def _read_text(path: Path) -> Optional[str]:
    try:
        return path.read_text().strip()
    except OSError as e:
        logger.debug("Cannot read %s: %s", path, e)
        return None
    except UnicodeDecodeError as e:
        logger.warning("Undecodable contents in %s: %s", path, e)
        return None


class LocalPowerProvider(PowerSensor):
    def __init__(
        self,
        power_supply_dir: str = "/sys/class/power_supply/BAT0",
        thermal_zone_path: str = "/sys/class/thermal/thermal_zone0/temp",
        probe_factory: Callable[[], PowerProbe] = PowerProbe,
        source_id: str = "local",
    ):
        self._power_supply_dir = Path(power_supply_dir)
        self._thermal_zone_path = Path(thermal_zone_path)
        self._probe_factory = probe_factory
        self._probe: Optional[PowerProbe] = None
        self._source_id = source_id

    @property
    def source_id(self) -> str:
        return self._source_id

    def _refreshed_probe(self) -> PowerProbe:
        if self._probe is None:
            try:
                self._probe = self._probe_factory()
            except (OSError, RuntimeError) as e:
                raise ProbeUnavailable(f"Cannot construct power probe: {e}") from e
        self._probe.refresh()
        return self._probe

    def sample(self) -> Optional[SystemReading]:
        try:
            probe = self._refreshed_probe()
        except ProbeUnavailable as e:
            logger.warning("Power probe unavailable: %s", e)
            return None

        reading = SystemReading(
            cpu_temp=self._cpu_temp(probe),
            battery_percentage=self.read_capacity(),
            battery_status=self.read_status(),
            source=self._source_id,
        )
        logger.debug("Local sample: %s", reading)
        return reading

    def _cpu_temp(self, probe: PowerProbe) -> float:
        if probe.component_temps:
            return sum(probe.component_temps) / len(probe.component_temps)

        raw = _read_text(self._thermal_zone_path)
        if raw is None:
            return 0.0
        try:
            return float(raw) / 1000.0
        except ValueError:
            logger.warning("Unparseable thermal zone value in %s: %r", self._thermal_zone_path, raw)
            return 0.0

    def read_capacity(self) -> Optional[float]:
        path = self._power_supply_dir / "capacity"
        raw = _read_text(path)
        if raw is None:
            return None
        try:
            return float(raw)
        except ValueError:
            logger.warning("Unparseable battery capacity in %s: %r", path, raw)
            return None

    def read_status(self) -> Optional[str]:
        return _read_text(self._power_supply_dir / "status")
