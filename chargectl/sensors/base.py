from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ..domain.models import SystemReading


class PowerSensor(ABC):
    """Domain-facing source of power telemetry."""

    @property
    @abstractmethod
    def source_id(self) -> str:
        ...

    @abstractmethod
    def sample(self) -> Optional[SystemReading]:
        """Return a fresh reading. Blocking; call from a worker thread."""
        ...
