"""Gateway report lines: ``$TYPE,BEACON,GATEWAY,RSSI,PAYLOAD[,EPOCH[.FRACTION]]``."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from ibsparse.core.errors import InvalidHexError, MessageFormatError

_MESSAGE_RE = re.compile(r"^\$(.+),([0-9a-fA-F]{12}),([0-9a-fA-F]{12}),(-?\d+),(.*)$")

# GPRP: BLE4.2 general purpose report, RSPR: BLE4.2 scan response,
# LRAD/LRSR: BLE5 long range adv/scan response, 1MAD/1MSR: BLE5 1M adv/scan response
MESSAGE_TYPES = ("GPRP", "RSPR", "LRAD", "LRSR", "1MAD", "1MSR")


def decode_hex(text: str, *, context: str = "payload") -> bytes:
    normalized = text.strip().replace(" ", "")
    if len(normalized) % 2 != 0:
        raise InvalidHexError(f"{context} must have even-length hex")
    try:
        return bytes.fromhex(normalized)
    except ValueError as exc:
        raise InvalidHexError(f"{context} must contain only hex digits: {text!r}") from exc


@dataclass(frozen=True)
class GatewayMessage:
    msg_type: str
    beacon: str
    gateway: str
    rssi: int
    payload: str
    timestamp: datetime | None = None

    @classmethod
    def parse(cls, line: str) -> GatewayMessage:
        text = line.strip()
        match = _MESSAGE_RE.match(text)
        if not match:
            raise MessageFormatError(f"Invalid gateway message: {text!r}")
        msg_type, beacon, gateway, rssi, rest = match.groups()
        parts = rest.split(",")
        return cls(
            msg_type=msg_type,
            beacon=beacon.upper(),
            gateway=gateway.upper(),
            rssi=int(rssi),
            payload=parts[0],
            timestamp=_parse_timestamp(parts[1]) if len(parts) > 1 and parts[1] else None,
        )

    def payload_bytes(self) -> bytes:
        return decode_hex(self.payload, context=f"{self.msg_type} payload")


def _parse_timestamp(text: str) -> datetime:
    try:
        seconds = Decimal(text.strip())
    except InvalidOperation as exc:
        raise MessageFormatError(f"Invalid timestamp in gateway message: {text!r}") from exc
    if not seconds.is_finite():
        raise MessageFormatError(f"Invalid timestamp in gateway message: {text!r}")
    try:
        return datetime.fromtimestamp(float(seconds), tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as exc:
        raise MessageFormatError(f"Timestamp out of range in gateway message: {text!r}") from exc
