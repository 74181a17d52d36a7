"""Decoding engine: walks a product definition's field list over a buffer."""

from __future__ import annotations

import logging

from ibsparse.core.fields import decode_field, read_u16
from ibsparse.core.model import DecodedReading, FieldName, ProductDefinition, ReadingValue

HEADER_SIZE = 4
MODEL_KEY = "model"
LOGGER = logging.getLogger(__name__)


def decode(definition: ProductDefinition, buffer: bytes) -> DecodedReading:
    """Decode ``buffer`` following ``definition``.

    Fields are read in order starting right after the vendor and product codes.
    Raises ``TruncatedPayloadError`` if any field runs past the end of the
    buffer; nothing is returned for a partially decoded payload.
    """
    vendor_code = read_u16(buffer, 0, what="vendor code")
    values: dict[str, ReadingValue] = {MODEL_KEY: definition.model.resolve(vendor_code)}

    cursor = HEADER_SIZE
    for name in definition.fields:
        result = decode_field(name, buffer, cursor, accel_scale=definition.accel_scale)
        cursor += result.consumed
        values.update(result.values)

    events = values.get(FieldName.EVENTS.value)
    if isinstance(events, int) and definition.events:
        for bit in definition.events:
            values[bit.event.key] = bool(events & bit.mask)

    LOGGER.debug("Decoded %s: %d readings from %d bytes", values[MODEL_KEY], len(values), cursor)
    return DecodedReading(values)
