from __future__ import annotations

import pytest

from ibsparse.core.adv import Advertisement, normalize_uuid
from ibsparse.core.errors import AdvertisementError


def test_parse_splits_structures() -> None:
    adv = Advertisement.parse(bytes.fromhex("02010612FF590080BC360101FFFFFFFFFFFFFFFFFFFF"))
    assert [s.type for s in adv.structures] == [0x01, 0xFF]
    assert adv.flags == 0x06
    assert adv.manufacturer_data == bytes.fromhex("590080BC360101FFFFFFFFFFFFFFFFFFFF")


def test_zero_length_stops_parsing() -> None:
    adv = Advertisement.parse(bytes.fromhex("0201060000000000"))
    assert len(adv.structures) == 1


def test_overrun_is_rejected() -> None:
    with pytest.raises(AdvertisementError):
        Advertisement.parse(bytes.fromhex("0201060AFF5900"))


def test_tx_power_and_name() -> None:
    adv = Advertisement.parse(bytes.fromhex("020AF8050954657374"))
    assert adv.tx_power == -8
    assert adv.local_name == "Test"


def test_configuration_service_uuid() -> None:
    adv = Advertisement.parse(
        bytes.fromhex("11072B3264B41C6D1A84BD4698B200004E1B0B0969425330352D44384242")
    )
    assert adv.service_uuids == ["1b4e0000-b298-46bd-841a-6d1cb464322b"]
    assert adv.local_name == "iBS05-D8BB"


def test_normalize_short_uuids() -> None:
    assert normalize_uuid(bytes.fromhex("F0FF")) == "0000fff0-0000-1000-8000-00805f9b34fb"
    assert normalize_uuid(bytes.fromhex("78563412")) == "12345678-0000-1000-8000-00805f9b34fb"
    with pytest.raises(AdvertisementError):
        normalize_uuid(b"\x01\x02\x03")
