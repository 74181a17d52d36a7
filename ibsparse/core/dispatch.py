"""Dispatcher: select the decoding strategy for a manufacturer data buffer."""

from __future__ import annotations

import logging
import struct

from ibsparse.core.catalog import ProductCatalog, default_catalog
from ibsparse.core.engine import HEADER_SIZE, MODEL_KEY
from ibsparse.core.fields import SENTINEL_SCALED, decode_field, read_u16, require, to_int16
from ibsparse.core.model import (
    DecodedReading,
    EventName,
    FieldName,
    ProductDefinition,
    ReadingValue,
    Resolution,
)
from ibsparse.core.product_match import best_family_for_codes
from ibsparse.core.vendors import APPLE_VENDOR_CODE, MICROSOFT_DEVICE_TYPES, MICROSOFT_VENDOR_CODE

_CODES = struct.Struct("<HH")
_IBEACON_HEADER = bytes((0x4C, 0x00, 0x02))
_IBEACON_LENGTH = 25
_LEGACY_EVENTS = (EventName.BUTTON, EventName.MOVING, EventName.HALL, EventName.FALL)

LOGGER = logging.getLogger(__name__)


def read_codes(buffer: bytes) -> tuple[int, int] | None:
    if len(buffer) < HEADER_SIZE:
        return None
    vendor_code, product_code = _CODES.unpack_from(buffer)
    return vendor_code, product_code


def resolve(buffer: bytes, catalog: ProductCatalog | None = None) -> Resolution | None:
    """Pick the product definition for ``buffer``; ``None`` means unresolved."""
    codes = read_codes(buffer)
    if codes is None:
        LOGGER.debug("Payload too short for dispatch (%d bytes)", len(buffer))
        return None
    vendor_code, product_code = codes

    catalog = catalog or default_catalog()
    family = best_family_for_codes(vendor_code, product_code, catalog.families)
    if family is None:
        LOGGER.debug("No product family for vendor 0x%04X product 0x%04X", vendor_code, product_code)
        return None

    layout = family.layout
    if isinstance(layout, ProductDefinition):
        return Resolution(family=family, definition=layout)

    if layout.index >= len(buffer):
        LOGGER.debug("Subtype byte %d missing from %d-byte payload (%s)", layout.index, len(buffer), family.id)
        return None
    subtype = buffer[layout.index]
    if subtype in layout.legacy_subtypes:
        return Resolution(family=family, legacy=True)

    definition = layout.rows.get(subtype)
    if definition is None:
        LOGGER.debug("Unknown subtype 0x%02X for %s", subtype, family.id)
        return None
    return Resolution(family=family, definition=definition)


def decode_legacy(buffer: bytes) -> DecodedReading:
    """Decode an iBS01 payload from firmware without a subtype byte.

    Temperature bytes that are not both 0xFF mark an iBS01T; anything else is
    reported as a plain iBS01 with every event flag the family can raise.
    """
    values: dict[str, ReadingValue] = {}
    values.update(decode_field(FieldName.BATTERY, buffer, 4).values)

    require(buffer, 7, 2, what="legacy marker")
    if not (buffer[7] == 0xFF and buffer[8] == 0xFF):
        values[MODEL_KEY] = "iBS01T"
        values.update(decode_field(FieldName.TEMPERATURE, buffer, 7).values)
        humidity = read_u16(buffer, 9, what=FieldName.HUMIDITY.value)
        if humidity != SENTINEL_SCALED:
            values[FieldName.HUMIDITY.value] = float(to_int16(humidity))
    else:
        flags = buffer[6]
        values[MODEL_KEY] = "iBS01"
        values[FieldName.EVENTS.value] = flags
        for event in _LEGACY_EVENTS:
            values[event.key] = bool(flags & (1 << event.default_bit))
    return DecodedReading(values)


def third_party_model(buffer: bytes) -> str | None:
    """Model name for non-INGICS vendors with their own well-known frames."""
    codes = read_codes(buffer)
    if codes is None:
        return None
    vendor_code = codes[0]
    if vendor_code == MICROSOFT_VENDOR_CODE:
        return MICROSOFT_DEVICE_TYPES.get(buffer[3] & 0x3F)
    if vendor_code == APPLE_VENDOR_CODE and is_ibeacon(buffer):
        return "iBeacon"
    return None


def handles_model(vendor_code: int) -> bool:
    return vendor_code in (MICROSOFT_VENDOR_CODE, APPLE_VENDOR_CODE)


def is_ibeacon(buffer: bytes) -> bool:
    return len(buffer) == _IBEACON_LENGTH and buffer[:3] == _IBEACON_HEADER


def decode_ibeacon(buffer: bytes) -> DecodedReading:
    major, minor = struct.unpack_from(">HH", buffer, 20)
    return DecodedReading(
        {
            "uuid": bytes(buffer[4:20]),
            "major": major,
            "minor": minor,
            "ref_tx": struct.unpack_from("b", buffer, 24)[0],
        }
    )
