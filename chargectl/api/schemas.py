from __future__ import annotations
from pydantic import BaseModel
from typing import Optional


class ReadingOut(BaseModel):
    cpu_temp: Optional[float]
    battery_percentage: Optional[float]
    battery_status: Optional[str]
    source: str
    valid: bool


class DecisionOut(BaseModel):
    command: Optional[str]  # "turn_on" | "turn_off" | None
    reason: str
    level: float


class OutcomeOut(BaseModel):
    ts_utc: str
    phase: str
    reading: Optional[ReadingOut] = None
    decision: Optional[DecisionOut] = None
    error: Optional[str] = None


class LiveOut(BaseModel):
    app: str
    source: str
    low_threshold: float
    high_threshold: float
    tick_interval_s: float
    recovery_interval_s: float
    started_utc: Optional[str]
    ticks: int
    next_delay_s: Optional[float]
    last_outcome: Optional[OutcomeOut]
