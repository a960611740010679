from __future__ import annotations
import logging
from typing import Optional

from ..domain.models import ActuatorCommand

logger = logging.getLogger(__name__)


class DryRunSwitch:
    actuator_id = "switch_dry_run"

    def __init__(self) -> None:
        self.last_command: Optional[ActuatorCommand] = None
        self.calls = 0

    async def actuate(self, command: ActuatorCommand) -> None:
        self.last_command = command
        self.calls += 1
        logger.info("SWITCH (dry run) %s", command.value)
