from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.timeutil import now_utc
from ..domain.controller import decide, ensure_valid
from ..domain.errors import ActuationFailure, InvalidReading, TelemetryError
from ..domain.interfaces import Actuator, Notifier
from ..domain.models import ActuatorCommand, SystemReading, Thresholds, TickOutcome
from ..sensors.base import PowerSensor


logger = logging.getLogger(__name__)


NOTIFICATION_TEXT = {
    ActuatorCommand.TURN_ON: ("Charger on", "Battery at {level:.1f}%, charger switched on."),
    ActuatorCommand.TURN_OFF: ("Charger off", "Battery at {level:.1f}%, charger switched off."),
}


@dataclass
class LiveState:
    source: str
    started_utc: Optional[datetime] = None
    ticks: int = 0
    last_outcome: Optional[TickOutcome] = None
    next_delay_s: Optional[float] = None


class ChargeLoop:
    def __init__(
        self,
        provider: PowerSensor,
        actuator: Actuator,
        notifier: Notifier,
        thresholds: Thresholds,
        tick_interval_s: float = 300.0,
        recovery_interval_s: float = 60.0,
    ) -> None:
        self._provider = provider
        self._actuator = actuator
        self._notifier = notifier
        self.thresholds = thresholds
        self.tick_interval_s = tick_interval_s
        self.recovery_interval_s = recovery_interval_s

        self._task: Optional[asyncio.Task] = None
        self._stop = asyncio.Event()
        # Serializes every use of the provider (and the probe it owns)
        self._sample_lock = asyncio.Lock()

        self.live = LiveState(source=provider.source_id)

    async def start(self) -> None:
        self._stop.clear()
        self._task = asyncio.create_task(self._run(), name="charge_loop")

    def request_stop(self) -> None:
        self._stop.set()

    async def stop(self) -> None:
        self.request_stop()
        if self._task:
            await self._task
            self._task = None

    async def run_forever(self) -> None:
        self._stop.clear()
        await self._run()

    async def sample(self) -> Optional[SystemReading]:
        # Blocking I/O (sysfs, psutil, adb) runs in a worker thread
        async with self._sample_lock:
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(None, self._provider.sample)

    def delay_after(self, outcome: TickOutcome) -> float:
        return self.recovery_interval_s if outcome.recovered else self.tick_interval_s

    async def run_tick(self) -> TickOutcome:
        # 1) Sample
        try:
            reading = await self.sample()
        except TelemetryError as e:
            logger.error(
                "Remote sampling failed: %s. Check ADB setup and device connection/authorization.", e
            )
            return TickOutcome(now_utc(), "SAMPLE_FAILED", error=str(e))

        if reading is None:
            logger.warning("No reading from %s; retrying in %.0fs", self._provider.source_id, self.recovery_interval_s)
            return TickOutcome(now_utc(), "SAMPLE_FAILED", error="probe unavailable")

        logger.info(
            "Reading: battery=%s%% status=%s cpu_temp=%s (source=%s)",
            reading.battery_percentage, reading.battery_status, reading.cpu_temp, reading.source,
        )

        # 2) Validate
        try:
            ensure_valid(reading)
        except InvalidReading as e:
            logger.warning("Skipping tick: %s", e)
            return TickOutcome(now_utc(), "INVALID", reading=reading, error=str(e))

        # 3) Decide
        decision = decide(float(reading.battery_percentage), self.thresholds)
        if decision.command is None:
            return TickOutcome(now_utc(), "NOOP", reading=reading, decision=decision)

        # 4) Actuate (re-issued every tick past a threshold; the switch service is idempotent)
        title, body = NOTIFICATION_TEXT[decision.command]
        body = body.format(level=decision.level)
        try:
            await self._actuator.actuate(decision.command)
        except ActuationFailure as e:
            logger.error("Failed to %s charger: %s", decision.command.value, e)
            await self._notify(f"{title} failed", f"{body} Request failed: {e}", "critical")
            return TickOutcome(now_utc(), "ACTUATION_FAILED", reading=reading, decision=decision, error=str(e))

        logger.info("%s: %s", title, body)
        await self._notify(title, body, "normal")
        return TickOutcome(now_utc(), "ACTUATED", reading=reading, decision=decision)

    async def _notify(self, title: str, body: str, urgency: str) -> None:
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self._notifier.notify, title, body, urgency)
        except Exception:
            logger.warning("Notifier raised for %r", title, exc_info=True)

    async def _wait(self, delay_s: float) -> None:
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=delay_s)
        except asyncio.TimeoutError:
            pass

    async def _run(self) -> None:
        self.live.started_utc = now_utc()
        logger.info(
            "Charge loop started (source=%s low=%.0f high=%.0f tick=%.0fs recovery=%.0fs)",
            self._provider.source_id,
            self.thresholds.low,
            self.thresholds.high,
            self.tick_interval_s,
            self.recovery_interval_s,
        )

        while not self._stop.is_set():
            try:
                outcome = await self.run_tick()
            except Exception as e:
                logger.exception("Charge loop error: %s", e)
                outcome = TickOutcome(now_utc(), "ERROR", error=str(e))

            delay = self.delay_after(outcome)
            self.live.ticks += 1
            self.live.last_outcome = outcome
            self.live.next_delay_s = delay

            logger.info("Tick %d: %s; waiting %.0fs", self.live.ticks, outcome.phase, delay)
            await self._wait(delay)

        logger.info("Charge loop stopped")
