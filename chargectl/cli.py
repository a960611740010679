"""
chargectl command line.

Usage:
    chargectl info                 # temperature, battery level and status
    chargectl info temp            # "47.5°C"
    chargectl info battery         # "85% (Charging)"
    chargectl run                  # headless control loop
    chargectl run --source adb     # decide from the phone on the adb bridge
    chargectl serve --port 8080    # control loop + status API

`run` and `serve` need HOMEASSISTANT_URL and HOMEASSISTANT_TOKEN
(environment or .env).
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from typing import Optional

from pydantic import ValidationError

from .core.config import SensorSettings, load_settings
from .core.log import configure_logging
from .domain.models import SystemReading
from .sensors.local_power import LocalPowerProvider
from .services.factory import build_loop

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# info
# ---------------------------------------------------------------------------

def format_reading(reading: Optional[SystemReading], what: str = "all") -> str:
    temp = reading.cpu_temp if reading else None
    pct = reading.battery_percentage if reading else None
    status = (reading.battery_status if reading else None) or "Unknown"

    temp_s = f"{temp:.1f}°C" if temp is not None else "N/A"
    pct_s = f"{pct:.0f}%" if pct is not None else "N/A"

    if what == "temp":
        return temp_s
    if what == "battery":
        return f"{pct_s} ({status})"
    return "\n".join([
        "System Information:",
        f"  CPU Temperature: {temp_s}",
        f"  Battery Level: {pct_s}",
        f"  Battery Status: {status}",
    ])


def cmd_info(args: argparse.Namespace) -> int:
    # POWER_SUPPLY_DIR / THERMAL_ZONE_PATH apply unless overridden on the command line
    paths = SensorSettings()
    provider = LocalPowerProvider(
        power_supply_dir=args.power_supply_dir or paths.power_supply_dir,
        thermal_zone_path=args.thermal_zone or paths.thermal_zone_path,
    )
    print(format_reading(provider.sample(), args.what))
    return 0


# ---------------------------------------------------------------------------
# run / serve
# ---------------------------------------------------------------------------

def _settings_or_exit(args: argparse.Namespace):
    overrides = {}
    if getattr(args, "source", None):
        overrides["telemetry_source"] = args.source
    if getattr(args, "dry_run", False):
        overrides["actuator_mode"] = "dry_run"
    try:
        return load_settings(**overrides)
    except ValidationError as e:
        logging.basicConfig(level=logging.ERROR, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
        logger.error("Invalid configuration, not starting:\n%s", e)
        return None


async def _run_loop(settings) -> None:
    charge_loop = build_loop(settings)
    aio = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            aio.add_signal_handler(sig, charge_loop.request_stop)
        except NotImplementedError:
            pass  # Windows
    await charge_loop.run_forever()


def cmd_run(args: argparse.Namespace) -> int:
    settings = _settings_or_exit(args)
    if settings is None:
        return 2
    configure_logging(settings.log_file, "DEBUG" if args.verbose else settings.log_level)
    asyncio.run(_run_loop(settings))
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    settings = _settings_or_exit(args)
    if settings is None:
        return 2

    import uvicorn

    from .main import create_app

    uvicorn.run(create_app(settings=settings), host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="chargectl", description="Battery-aware charger relay controller")
    sub = p.add_subparsers(dest="command")

    info = sub.add_parser("info", help="Show local temperature and battery information")
    info.add_argument("what", nargs="?", default="all", choices=["all", "temp", "battery"])
    info.add_argument("--power-supply-dir", help="Default: POWER_SUPPLY_DIR or /sys/class/power_supply/BAT0")
    info.add_argument("--thermal-zone", help="Default: THERMAL_ZONE_PATH or /sys/class/thermal/thermal_zone0/temp")
    info.set_defaults(func=cmd_info)

    run = sub.add_parser("run", help="Run the control loop until interrupted")
    run.add_argument("--source", choices=["local", "adb"], help="Override TELEMETRY_SOURCE")
    run.add_argument("--dry-run", action="store_true", help="Log switch commands instead of sending them")
    run.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    run.set_defaults(func=cmd_run)

    serve = sub.add_parser("serve", help="Run the control loop with the status API")
    serve.add_argument("--source", choices=["local", "adb"], help="Override TELEMETRY_SOURCE")
    serve.add_argument("--dry-run", action="store_true", help="Log switch commands instead of sending them")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.set_defaults(func=cmd_serve)

    return p


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command is None:
        args = build_parser().parse_args(["info"])
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
