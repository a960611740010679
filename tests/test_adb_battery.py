"""Tests for the adb bridge provider."""

from __future__ import annotations

import subprocess
from types import SimpleNamespace
from typing import Any

import pytest

from chargectl.domain.errors import BridgeUnavailable, ParseFailure
from chargectl.sensors import adb_battery
from chargectl.sensors.adb_battery import AdbBatteryProvider, parse_level, parse_status

DUMPSYS = """Current Battery Service state:
  AC powered: false
  USB powered: true
  Wireless powered: false
  Max charging current: 500000
  status: 2
  health: 2
  present: true
  level: 85
  scale: 100
  voltage: 4213
  temperature: 312
  technology: Li-poly
"""

DEVICES = """List of devices attached
emulator-5554          device product:sdk model:Pixel_7 transport_id:1
4f1b2c3d               device usb:1-1 product:veux model:2201117TY device:veux transport_id:2

"""


class _FakeSubprocess:
    """Replays canned results for subprocess.run and records the commands."""

    TimeoutExpired = subprocess.TimeoutExpired

    def __init__(self, *results: Any) -> None:
        self._results = list(results)
        self.calls: list[list[str]] = []

    def run(self, cmd: list[str], **kwargs: Any):
        self.calls.append(cmd)
        self.kwargs = kwargs
        result = self._results.pop(0)
        if isinstance(result, BaseException):
            raise result
        return result


def _done(stdout: str = "", stderr: str = "", returncode: int = 0) -> SimpleNamespace:
    return SimpleNamespace(stdout=stdout, stderr=stderr, returncode=returncode)


def test_parse_level_from_dump() -> None:
    assert parse_level("... level: 85\n") == 85.0
    assert parse_level(DUMPSYS) == 85.0


def test_parse_level_skips_unparseable_lines() -> None:
    assert parse_level("  level: abc\n  level: 42\n") == 42.0


def test_parse_level_failure_carries_raw_output() -> None:
    raw = "Current Battery Service state:\n  scale: 100\n"
    with pytest.raises(ParseFailure) as excinfo:
        parse_level(raw)
    assert raw in str(excinfo.value)
    assert excinfo.value.raw_output == raw


def test_parse_status_maps_android_codes() -> None:
    assert parse_status("  status: 3") == "Discharging"
    assert parse_status("  status: 5") == "Full"
    assert parse_status("  status: 1") is None
    assert parse_status("no status here") is None


def test_sample_remote_battery(monkeypatch: pytest.MonkeyPatch) -> None:
    fake = _FakeSubprocess(_done(DUMPSYS))
    monkeypatch.setattr(adb_battery, "subprocess", fake)

    level = AdbBatteryProvider(adb_path="adb", timeout_s=3).sample_remote_battery()

    assert level == 85.0
    assert fake.calls == [["adb", "shell", "dumpsys", "battery"]]
    assert fake.kwargs["timeout"] == 3


def test_sample_builds_reading(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(adb_battery, "subprocess", _FakeSubprocess(_done(DUMPSYS)))

    reading = AdbBatteryProvider().sample()

    assert reading is not None
    assert reading.battery_percentage == 85.0
    assert reading.battery_status == "Charging"
    assert reading.cpu_temp == pytest.approx(31.2)
    assert reading.source == "adb"


def test_nonzero_exit_includes_bridge_stderr(monkeypatch: pytest.MonkeyPatch) -> None:
    stderr = "error: device unauthorized.\nThis adb server's $ADB_VENDOR_KEYS is not set\n"
    monkeypatch.setattr(adb_battery, "subprocess", _FakeSubprocess(_done(stderr=stderr, returncode=1)))

    with pytest.raises(BridgeUnavailable) as excinfo:
        AdbBatteryProvider().sample_remote_battery()

    assert "error: device unauthorized." in str(excinfo.value)
    assert "$ADB_VENDOR_KEYS is not set" in str(excinfo.value)
    assert excinfo.value.returncode == 1


def test_missing_adb_binary(monkeypatch: pytest.MonkeyPatch) -> None:
    fake = _FakeSubprocess(FileNotFoundError(2, "No such file or directory", "adb"))
    monkeypatch.setattr(adb_battery, "subprocess", fake)

    with pytest.raises(BridgeUnavailable, match="not found"):
        AdbBatteryProvider().sample_remote_battery()


def test_bridge_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    fake = _FakeSubprocess(subprocess.TimeoutExpired(["adb"], 15, output=b"waiting for device"))
    monkeypatch.setattr(adb_battery, "subprocess", fake)

    with pytest.raises(BridgeUnavailable, match="waiting for device"):
        AdbBatteryProvider().sample_remote_battery()


def test_device_model_resolves_serial(monkeypatch: pytest.MonkeyPatch) -> None:
    fake = _FakeSubprocess(_done(DEVICES), _done(DUMPSYS))
    monkeypatch.setattr(adb_battery, "subprocess", fake)

    level = AdbBatteryProvider(device_model="2201117TY").sample_remote_battery()

    assert level == 85.0
    assert fake.calls == [
        ["adb", "devices", "-l"],
        ["adb", "-s", "4f1b2c3d", "shell", "dumpsys", "battery"],
    ]


def test_unknown_device_model(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(adb_battery, "subprocess", _FakeSubprocess(_done(DEVICES)))

    with pytest.raises(BridgeUnavailable) as excinfo:
        AdbBatteryProvider(device_model="SM-S936B").sample_remote_battery()

    assert "SM-S936B not found" in str(excinfo.value)
    assert "emulator-5554" in str(excinfo.value)


def test_explicit_serial_skips_device_listing(monkeypatch: pytest.MonkeyPatch) -> None:
    fake = _FakeSubprocess(_done(DUMPSYS))
    monkeypatch.setattr(adb_battery, "subprocess", fake)

    AdbBatteryProvider(serial="abc123", device_model="2201117TY").sample_remote_battery()

    assert fake.calls == [["adb", "-s", "abc123", "shell", "dumpsys", "battery"]]


def test_parse_level_anywhere_on_line() -> None:
    assert parse_level("Battery: level: 85\n") == 85.0
    assert parse_level("  Max charging voltage: 5000000\n  level: 7\n") == 7.0


@pytest.mark.parametrize("bad", ["nan", "inf", "-inf"])
def test_parse_level_rejects_non_finite(bad: str) -> None:
    with pytest.raises(ParseFailure):
        parse_level(f"  level: {bad}\n")
    assert parse_level(f"  level: {bad}\n  level: 64\n") == 64.0


def test_permission_denied_is_bridge_unavailable(monkeypatch: pytest.MonkeyPatch) -> None:
    fake = _FakeSubprocess(PermissionError(13, "Permission denied", "adb"))
    monkeypatch.setattr(adb_battery, "subprocess", fake)

    with pytest.raises(BridgeUnavailable, match="Permission denied"):
        AdbBatteryProvider().sample_remote_battery()


def test_bridge_timeout_includes_stderr(monkeypatch: pytest.MonkeyPatch) -> None:
    err = subprocess.TimeoutExpired(["adb"], 15, output=b"", stderr=b"* daemon not running; starting now")
    monkeypatch.setattr(adb_battery, "subprocess", _FakeSubprocess(err))

    with pytest.raises(BridgeUnavailable) as excinfo:
        AdbBatteryProvider().sample_remote_battery()

    assert "daemon not running" in str(excinfo.value)
    assert "daemon not running" in excinfo.value.output
