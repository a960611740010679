from __future__ import annotations
from typing import Protocol, runtime_checkable
from .models import ActuatorCommand


@runtime_checkable
class Actuator(Protocol):
    actuator_id: str

    async def actuate(self, command: ActuatorCommand) -> None:
        ...


@runtime_checkable
class Notifier(Protocol):
    def notify(self, title: str, body: str, urgency: str = "normal") -> None:
        """Fire-and-forget; must not raise."""
        ...
