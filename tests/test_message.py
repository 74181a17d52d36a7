from __future__ import annotations

from datetime import datetime, timezone

import pytest

from ibsparse.core.errors import InvalidHexError, MessageFormatError
from ibsparse.core.message import GatewayMessage, decode_hex


def test_parse_gateway_line() -> None:
    message = GatewayMessage.parse(
        "$GPRP,0c61cfc14a7e,e3c833a31f5d,-64,02010612FF0D0083BC280100AAAA7200000013090000"
    )
    assert message.msg_type == "GPRP"
    assert message.beacon == "0C61CFC14A7E"
    assert message.gateway == "E3C833A31F5D"
    assert message.rssi == -64
    assert message.timestamp is None
    assert message.payload_bytes()[:3] == bytes.fromhex("020106")


def test_parse_timestamp_with_fraction() -> None:
    message = GatewayMessage.parse("$RSPR,0C61CFC14A7E,E3C833A31F5D,-70,0201,1578646387.25\r\n")
    assert message.timestamp == datetime(2020, 1, 10, 8, 53, 7, 250000, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "line",
    [
        "GPRP,0C61CFC14A7E,E3C833A31F5D,-64,0201",
        "$GPRP,0C61CFC14A7,E3C833A31F5D,-64,0201",
        "$GPRP,0C61CFC14A7E,E3C833A31F5D,abc,0201",
        "$GPRP,0C61CFC14A7E,E3C833A31F5D,-64,0201,notatime",
        "$GPRP,0C61CFC14A7E,E3C833A31F5D,-64,0201,nan",
    ],
)
def test_malformed_lines_rejected(line: str) -> None:
    with pytest.raises(MessageFormatError):
        GatewayMessage.parse(line)


def test_bad_payload_hex() -> None:
    message = GatewayMessage.parse("$GPRP,0C61CFC14A7E,E3C833A31F5D,-64,02G1")
    with pytest.raises(InvalidHexError):
        message.payload_bytes()


def test_decode_hex_ignores_spaces_and_rejects_odd_length() -> None:
    assert decode_hex("02 01 06") == bytes.fromhex("020106")
    with pytest.raises(InvalidHexError):
        decode_hex("020")
