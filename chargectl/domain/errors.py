from __future__ import annotations
from typing import Optional


class ChargeControlError(Exception):
    """Base for every recoverable controller error."""


class ProbeUnavailable(ChargeControlError):
    pass


class InvalidReading(ChargeControlError):
    pass


class TelemetryError(ChargeControlError):
    """Remote sampling failed; the tick is aborted without actuation."""


class BridgeUnavailable(TelemetryError):
    def __init__(self, message: str, returncode: Optional[int] = None, output: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.output = output


class ParseFailure(TelemetryError):
    def __init__(self, message: str, raw_output: str = "") -> None:
        super().__init__(message)
        self.raw_output = raw_output


class ActuationFailure(ChargeControlError):
    def __init__(self, status: Optional[int], body: str) -> None:
        super().__init__(f"switch request failed (status={status}): {body}")
        self.status = status
        self.body = body
