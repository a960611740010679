from __future__ import annotations

import logging
from typing import Optional

import httpx

from ..core.config import DEFAULT_SWITCH_ENTITY_ID
from ..domain.errors import ActuationFailure
from ..domain.models import ActuatorCommand

logger = logging.getLogger(__name__)


class HomeAssistantSwitch:
    """Actuator driver for a Home Assistant `switch` entity over the REST API."""

    actuator_id = "homeassistant_switch"

    def __init__(
        self,
        base_url: str,
        token: str,
        entity_id: str = DEFAULT_SWITCH_ENTITY_ID,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._entity_id = entity_id
        self._timeout = timeout
        self._transport = transport

    def service_url(self, command: ActuatorCommand) -> str:
        return f"{self._base_url}/services/switch/{command.value}"

    async def actuate(self, command: ActuatorCommand) -> None:
        url = self.service_url(command)
        headers = {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.post(url, headers=headers, json={"entity_id": self._entity_id})
        except httpx.HTTPError as e:
            logger.warning("Switch %s request to %s failed: %r", command.value, url, e)
            raise ActuationFailure(status=None, body=f"{type(e).__name__}: {e}") from e

        logger.info("Switch control response: %s %s (%s)", resp.status_code, resp.reason_phrase, command.value)
        if not resp.is_success:
            raise ActuationFailure(status=resp.status_code, body=resp.text)
