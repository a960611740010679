from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class SystemReading:
    cpu_temp: Optional[float]
    battery_percentage: Optional[float]
    battery_status: Optional[str]
    source: str = "local"


class ActuatorCommand(str, Enum):
    # Values are the Home Assistant switch service names
    TURN_ON = "turn_on"
    TURN_OFF = "turn_off"


@dataclass(frozen=True)
class Thresholds:
    low: float
    high: float


@dataclass(frozen=True)
class ControlDecision:
    command: Optional[ActuatorCommand]  # None = no actuation
    reason: str
    level: float


@dataclass(frozen=True)
class TickOutcome:
    ts_utc: datetime
    phase: str  # "SAMPLE_FAILED" | "INVALID" | "NOOP" | "ACTUATED" | "ACTUATION_FAILED" | "ERROR"
    reading: Optional[SystemReading] = None
    decision: Optional[ControlDecision] = None
    error: Optional[str] = None

    @property
    def actuated(self) -> bool:
        return self.phase == "ACTUATED"

    @property
    def recovered(self) -> bool:
        """True when the tick was cut short and the loop should retry soon."""
        return self.phase in ("SAMPLE_FAILED", "INVALID", "ERROR")
