from __future__ import annotations

from ibsparse.api import Client, MessageReport, Payload
from ibsparse.core.model import ScanRecord


class FakeScanTransport:
    def scan(self, *, timeout_s: float = 5.0) -> list[ScanRecord]:
        return [
            ScanRecord(
                mac="0C:61:CF:C1:4A:7E",
                rssi=-60,
                local_name="iBS02IR2",
                manufacturer_data=bytes.fromhex("0D0083BC4D0120AAAA05000000020A0600"),
                service_data=(),
            )
        ]


def test_public_client_list_products() -> None:
    client = Client(scan_transport=FakeScanTransport())
    products = client.list_products()
    assert products
    assert any(p.id == "ibs_common" for p in products)
    assert client.load_warnings == ()


def test_public_client_parses_hex_and_bytes() -> None:
    client = Client(scan_transport=FakeScanTransport())

    from_hex = client.parse_msd("0D0083BC280100AAAA7200000013090000")
    from_bytes = client.parse_msd(bytes.fromhex("0D0083BC280100AAAA7200000013090000"))
    assert isinstance(from_hex, Payload)
    assert from_hex.readings == from_bytes.readings
    assert from_hex.range == 114

    adv = client.parse_advertisement("02010612FF590080BC360101FFFFFFFFFFFFFFFFFFFF")
    assert adv.product_model == "iBS01"
    assert adv.button_pressed is True


def test_public_client_parse_message() -> None:
    client = Client(scan_transport=FakeScanTransport())
    report = client.parse_message(
        "$LRAD,0C61CFC14A7E,E3C833A31F5D,-80,02010612FF0D0083BC4D0120AAAA05000000020A0600"
    )
    assert isinstance(report, MessageReport)
    assert report.message.msg_type == "LRAD"
    assert report.payload.counter == 5


def test_public_client_scan() -> None:
    client = Client(scan_transport=FakeScanTransport())
    results = client.scan(timeout_s=0.5)
    assert len(results) == 1
    assert results[0].record.local_name == "iBS02IR2"
    assert results[0].payload.local_name == "iBS02IR2"
    assert results[0].payload.ir_detected is True
