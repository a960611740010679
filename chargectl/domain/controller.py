from __future__ import annotations
import logging
from typing import Optional
from .errors import InvalidReading
from .models import ActuatorCommand, ControlDecision, SystemReading, Thresholds

logger = logging.getLogger(__name__)


VALID_BATTERY_STATUSES = frozenset({"Charging", "Discharging", "Full", "Not charging"})


def validate(reading: Optional[SystemReading]) -> bool:
    """All-or-nothing check of the battery fields; cpu_temp is ignored."""
    if reading is None:
        return False
    pct = reading.battery_percentage
    if pct is None or not (0.0 <= pct <= 100.0):
        return False
    if reading.battery_status is None or reading.battery_status not in VALID_BATTERY_STATUSES:
        return False
    return True


def ensure_valid(reading: Optional[SystemReading]) -> SystemReading:
    if not validate(reading):
        raise InvalidReading(f"invalid reading: {reading!r}")
    return reading


def decide(level: float, thresholds: Thresholds) -> ControlDecision:
    # Both boundaries are inside the no-op band.
    if level < thresholds.low:
        decision = ControlDecision(
            ActuatorCommand.TURN_ON,
            f"Battery {level:.1f}% below {thresholds.low:.0f}%",
            level,
        )
    elif level > thresholds.high:
        decision = ControlDecision(
            ActuatorCommand.TURN_OFF,
            f"Battery {level:.1f}% above {thresholds.high:.0f}%",
            level,
        )
    else:
        decision = ControlDecision(
            None,
            f"Battery {level:.1f}% within band ({thresholds.low:.0f}%-{thresholds.high:.0f}%)",
            level,
        )

    logger.info(
        "decision: %s (%s)",
        decision.command.value if decision.command else "NOOP",
        decision.reason,
    )
    return decision
