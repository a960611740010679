from __future__ import annotations

import logging
import math
import re
import subprocess
from typing import Optional

from .base import PowerSensor
from ..domain.errors import BridgeUnavailable, ParseFailure
from ..domain.models import SystemReading

logger = logging.getLogger(__name__)


# android.os.BatteryManager.BATTERY_STATUS_* -> sysfs wording
ANDROID_BATTERY_STATUS = {
    2: "Charging",
    3: "Discharging",
    4: "Not charging",
    5: "Full",
}


def _text(data) -> str:
    # TimeoutExpired carries bytes even when run with text=True
    if data is None:
        return ""
    return data if isinstance(data, str) else data.decode(errors="replace")


def _field(output: str, name: str) -> Optional[str]:
    """First value of a `name: value` line in dumpsys output."""
    prefix = f"{name}:"
    for line in output.splitlines():
        trimmed = line.strip()
        if not trimmed.startswith(prefix):
            continue
        parts = trimmed.split(":")
        if len(parts) == 2:
            return parts[1].strip()
    return None


LEVEL_RE = re.compile(r"\blevel:\s*([^\s:]+)")


def parse_level(output: str) -> float:
    for line in output.splitlines():
        for match in LEVEL_RE.finditer(line):
            level_str = match.group(1)
            try:
                level = float(level_str)
            except ValueError:
                logger.warning("Failed to parse level string %r", level_str)
                continue
            if math.isfinite(level):
                return level
            logger.warning("Ignoring non-finite level %r", level_str)

    raise ParseFailure(
        f"No parseable 'level:' line in battery dump. Full output:\n{output}",
        raw_output=output,
    )


def parse_status(output: str) -> Optional[str]:
    raw = _field(output, "status")
    if raw is None:
        return None
    try:
        return ANDROID_BATTERY_STATUS.get(int(raw))
    except ValueError:
        return None


def parse_temperature(output: str) -> Optional[float]:
    raw = _field(output, "temperature")
    if raw is None:
        return None
    try:
        # dumpsys reports tenths of a degree
        return float(raw) / 10.0
    except ValueError:
        return None


class AdbBatteryProvider(PowerSensor):
    """
    Battery telemetry from a separate Android device over `adb`.
    Stateless: every call runs the bridge again.
    """

    def __init__(
        self,
        adb_path: str = "adb",
        serial: Optional[str] = None,
        device_model: Optional[str] = None,
        timeout_s: float = 15.0,
        source_id: str = "adb",
    ):
        self._adb_path = adb_path
        self._serial = serial
        self._device_model = device_model
        self._timeout_s = timeout_s
        self._source_id = source_id

    @property
    def source_id(self) -> str:
        return self._source_id

    def _run(self, args: list[str]) -> str:
        cmd = [self._adb_path, *args]
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self._timeout_s,
                check=False,
            )
        except FileNotFoundError as e:
            raise BridgeUnavailable(f"adb executable not found ({self._adb_path}): {e}") from e
        except subprocess.TimeoutExpired as e:
            output = "\n".join(s.strip() for s in (_text(e.stderr), _text(e.stdout)) if s.strip())
            raise BridgeUnavailable(
                f"`{' '.join(cmd)}` timed out after {self._timeout_s:.0f}s. Output: {output}",
                output=output,
            ) from e
        except OSError as e:
            raise BridgeUnavailable(f"Cannot run adb ({self._adb_path}): {e}") from e

        if proc.returncode != 0:
            diag = "\n".join(s.strip() for s in (proc.stderr, proc.stdout) if s and s.strip())
            raise BridgeUnavailable(
                f"`{' '.join(cmd)}` exited with {proc.returncode}: {diag}",
                returncode=proc.returncode,
                output=diag,
            )
        return proc.stdout

    def resolve_serial(self) -> Optional[str]:
        if self._serial or not self._device_model:
            return self._serial

        listing = self._run(["devices", "-l"])
        needle = f"model:{self._device_model}"
        for line in listing.splitlines():
            if needle in line:
                fields = line.split()
                if fields:
                    logger.info("Found device %s with serial %s", self._device_model, fields[0])
                    return fields[0]

        raise BridgeUnavailable(
            f"Device model {self._device_model} not found. adb devices output: {listing}",
            output=listing,
        )

    def dump_battery(self) -> str:
        serial = self.resolve_serial()
        args = ["-s", serial] if serial else []
        return self._run([*args, "shell", "dumpsys", "battery"])

    def sample_remote_battery(self) -> float:
        output = self.dump_battery()
        level = parse_level(output)
        logger.info("Remote battery level: %.1f%%", level)
        return level

    def sample(self) -> Optional[SystemReading]:
        output = self.dump_battery()
        return SystemReading(
            cpu_temp=parse_temperature(output),
            battery_percentage=parse_level(output),
            battery_status=parse_status(output),
            source=self._source_id,
        )
