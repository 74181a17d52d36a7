from __future__ import annotations

import pytest

from ibsparse.core import dispatch, engine
from ibsparse.core.errors import TruncatedPayloadError
from ibsparse.core.payload import parse_msd


def _decode(hex_payload: str):
    buffer = bytes.fromhex(hex_payload)
    resolution = dispatch.resolve(buffer)
    assert resolution is not None
    if resolution.legacy:
        return dispatch.decode_legacy(buffer)
    return engine.decode(resolution.definition, buffer)


def test_legacy_ibs01_with_button() -> None:
    reading = _decode("590080BC360101FFFFFFFFFFFFFFFFFFFF")
    assert reading["model"] == "iBS01"
    assert reading["battery"] == pytest.approx(3.10, abs=0.001)
    assert reading["button"] is True
    assert reading["moving"] is False


def test_legacy_ibs01t() -> None:
    reading = _decode("590080BCFF00007A0D4300FFFFFFFFFFFF")
    assert reading["model"] == "iBS01T"
    assert reading["battery"] == pytest.approx(2.55, abs=0.001)
    assert reading["temperature"] == pytest.approx(34.50, abs=0.001)
    assert reading["humidity"] == 67
    assert "button" not in reading


def test_ibs02ir2_counter_and_ir() -> None:
    reading = _decode("0D0083BC4D0120AAAA05000000020A0600")
    assert reading["model"] == "iBS02IR2"
    assert "battery" in reading
    assert reading["counter"] == 5
    assert reading["ir"] is True


def test_ibs03r_range_without_temperature() -> None:
    reading = _decode("0D0083BC280100AAAA7200000013090000")
    assert reading["model"] == "iBS03R"
    assert reading["range"] == 114
    assert "temperature" not in reading


def test_three_byte_buffer_is_unresolved_but_keeps_vendor() -> None:
    buffer = bytes.fromhex("0D0083")
    assert dispatch.resolve(buffer) is None

    payload = parse_msd(buffer)
    assert not payload.resolved
    assert payload.vendor == "Texas Instruments Inc."
    assert payload.product_model is None


def test_single_byte_buffer_has_no_vendor() -> None:
    payload = parse_msd(b"\x0d")
    assert payload.vendor is None
    assert payload.as_dict() == {}


def test_unknown_subtype_is_unresolved() -> None:
    buffer = bytes.fromhex("0D0083BC280100AAAA72000000EE090000")
    assert dispatch.resolve(buffer) is None
    assert parse_msd(buffer).vendor == "Texas Instruments Inc."


def test_unknown_product_is_unresolved() -> None:
    assert dispatch.resolve(bytes.fromhex("0D0099BC280100AAAA7200000013090000")) is None


def test_subtype_index_beyond_buffer_is_unresolved() -> None:
    assert dispatch.resolve(bytes.fromhex("0D0083BC280100")) is None


def test_vendor_restricted_family_rejects_other_vendor() -> None:
    # 0xBC85 is only registered for Texas Instruments
    assert dispatch.resolve(bytes.fromhex("590085BC3111" + "00" * 20)) is None


def test_wildcard_vendor_family_uses_vendor_model_name() -> None:
    body = "3E110A00F4FF00FF1600F6FF00FF1400F6FF08FF"
    assert _decode("590081BC" + body)["model"] == "iBS01RG"
    assert _decode("0D0081BC" + body)["model"] == "iBS03RG"
    assert _decode("F00881BC" + body)["model"] == "iBSXXRG"


def test_truncated_definition_raises() -> None:
    # accelerometer triple cut off after the first sample
    buffer = bytes.fromhex("0D0081BC3E110A00F4FF00FF")
    resolution = dispatch.resolve(buffer)
    assert resolution is not None
    with pytest.raises(TruncatedPayloadError):
        engine.decode(resolution.definition, buffer)


def test_truncated_payload_reports_error() -> None:
    payload = parse_msd(bytes.fromhex("0D0081BC3E110A00F4FF00FF"))
    assert payload.resolved
    assert payload.error
    assert payload.battery_voltage is None
    assert payload.product_model is None


def test_decoding_is_idempotent() -> None:
    buffer = bytes.fromhex("0D0083BC4D0120AAAA05000000020A0600")
    assert parse_msd(buffer).readings == parse_msd(buffer).readings


def test_third_party_model_for_short_microsoft_frame() -> None:
    assert dispatch.third_party_model(b"\x06\x00\x01") is None
    assert dispatch.third_party_model(bytes.fromhex("0600010920")) == "Windows 10 Desktop"
