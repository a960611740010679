from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from ..core.config import Settings
from ..domain.controller import validate
from ..domain.errors import TelemetryError
from ..domain.models import SystemReading, TickOutcome
from ..services.charge_loop import ChargeLoop
from .schemas import DecisionOut, LiveOut, OutcomeOut, ReadingOut

logger = logging.getLogger(__name__)

router = APIRouter()


# Overridden in main via app.dependency_overrides
def get_loop() -> ChargeLoop:
    raise RuntimeError("Charge loop dependency not configured")


def get_settings() -> Settings:
    raise RuntimeError("Settings dependency not configured")


def _reading_out(r: SystemReading) -> ReadingOut:
    return ReadingOut(
        cpu_temp=r.cpu_temp,
        battery_percentage=r.battery_percentage,
        battery_status=r.battery_status,
        source=r.source,
        valid=validate(r),
    )


def _outcome_out(o: Optional[TickOutcome]) -> Optional[OutcomeOut]:
    if o is None:
        return None
    decision = None
    if o.decision is not None:
        decision = DecisionOut(
            command=o.decision.command.value if o.decision.command else None,
            reason=o.decision.reason,
            level=o.decision.level,
        )
    return OutcomeOut(
        ts_utc=o.ts_utc.isoformat(),
        phase=o.phase,
        reading=_reading_out(o.reading) if o.reading else None,
        decision=decision,
        error=o.error,
    )


@router.get("/live", response_model=LiveOut)
async def get_live(
    loop: ChargeLoop = Depends(get_loop),
    settings: Settings = Depends(get_settings),
):
    live = loop.live
    return LiveOut(
        app=settings.app_name,
        source=live.source,
        low_threshold=loop.thresholds.low,
        high_threshold=loop.thresholds.high,
        tick_interval_s=loop.tick_interval_s,
        recovery_interval_s=loop.recovery_interval_s,
        started_utc=live.started_utc.isoformat() if live.started_utc else None,
        ticks=live.ticks,
        next_delay_s=live.next_delay_s,
        last_outcome=_outcome_out(live.last_outcome),
    )


@router.get("/reading", response_model=ReadingOut)
async def get_reading(loop: ChargeLoop = Depends(get_loop)):
    """Fresh sample, shared lock with the loop. Never actuates."""
    try:
        reading = await loop.sample()
    except TelemetryError as e:
        raise HTTPException(status_code=502, detail=str(e))
    if reading is None:
        raise HTTPException(status_code=503, detail="Power probe unavailable")
    return _reading_out(reading)
