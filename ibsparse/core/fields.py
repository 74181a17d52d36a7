"""Field decoder registry.

Every :class:`FieldName` maps to exactly one decoder. A decoder reads its bytes
at ``cursor`` and returns the readings it produced together with the number of
bytes it consumed. All multi-byte values are little-endian. Sentinel-matched
readings are omitted from the result, never reported as zero.
"""

from __future__ import annotations

import struct
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Optional

from ibsparse.core.errors import TruncatedPayloadError
from ibsparse.core.model import AccelSample, EventName, FieldName, ReadingValue

SENTINEL_UNSET = 0xFFFF
SENTINEL_SCALED = 0xAAAA

_U16 = struct.Struct("<H")
_ACCEL = struct.Struct("<hhh")


@dataclass(frozen=True)
class FieldResult:
    consumed: int
    values: dict[str, ReadingValue] = field(default_factory=dict)


Decoder = Callable[[bytes, int, Optional[float]], FieldResult]


def require(buffer: bytes, cursor: int, size: int, *, what: str) -> None:
    if cursor < 0 or cursor + size > len(buffer):
        raise TruncatedPayloadError(
            f"{what} needs bytes {cursor}..{cursor + size - 1} but payload has {len(buffer)} bytes"
        )


def read_u16(buffer: bytes, cursor: int, *, what: str = "field") -> int:
    require(buffer, cursor, 2, what=what)
    return _U16.unpack_from(buffer, cursor)[0]


def to_int16(raw: int) -> int:
    return raw - 0x10000 if raw & 0x8000 else raw


def _scaled(key: str, sentinel: int | None, divisor: float, *, signed: bool = True) -> Decoder:
    def decode(buffer: bytes, cursor: int, accel_scale: float | None) -> FieldResult:
        raw = read_u16(buffer, cursor, what=key)
        if raw == sentinel:
            return FieldResult(2)
        value = to_int16(raw) if signed else raw
        return FieldResult(2, {key: value / divisor})

    return decode


def _whole_float(key: str, sentinel: int) -> Decoder:
    def decode(buffer: bytes, cursor: int, accel_scale: float | None) -> FieldResult:
        raw = read_u16(buffer, cursor, what=key)
        if raw == sentinel:
            return FieldResult(2)
        return FieldResult(2, {key: float(to_int16(raw))})

    return decode


def _int16(key: str, sentinel: int | None) -> Decoder:
    def decode(buffer: bytes, cursor: int, accel_scale: float | None) -> FieldResult:
        raw = read_u16(buffer, cursor, what=key)
        if sentinel is not None and raw == sentinel:
            return FieldResult(2)
        return FieldResult(2, {key: to_int16(raw)})

    return decode


def _uint16(key: str) -> Decoder:
    def decode(buffer: bytes, cursor: int, accel_scale: float | None) -> FieldResult:
        raw = read_u16(buffer, cursor, what=key)
        if raw == SENTINEL_UNSET:
            return FieldResult(2)
        return FieldResult(2, {key: raw})

    return decode


def _uint8(key: str) -> Decoder:
    def decode(buffer: bytes, cursor: int, accel_scale: float | None) -> FieldResult:
        require(buffer, cursor, 1, what=key)
        return FieldResult(1, {key: buffer[cursor]})

    return decode


def _reserved(size: int) -> Decoder:
    def decode(buffer: bytes, cursor: int, accel_scale: float | None) -> FieldResult:
        require(buffer, cursor, size, what="reserved")
        return FieldResult(size)

    return decode


def _sample(buffer: bytes, cursor: int, accel_scale: float | None) -> AccelSample:
    x, y, z = _ACCEL.unpack_from(buffer, cursor)
    if accel_scale is None:
        return AccelSample(x, y, z)
    return AccelSample(x * accel_scale, y * accel_scale, z * accel_scale)


def _accel(buffer: bytes, cursor: int, accel_scale: float | None) -> FieldResult:
    require(buffer, cursor, 6, what=FieldName.ACCEL.value)
    return FieldResult(6, {FieldName.ACCEL.value: _sample(buffer, cursor, accel_scale)})


def _accel_triple(buffer: bytes, cursor: int, accel_scale: float | None) -> FieldResult:
    require(buffer, cursor, 18, what=FieldName.ACCEL_TRIPLE.value)
    samples = tuple(_sample(buffer, cursor + offset, accel_scale) for offset in (0, 6, 12))
    return FieldResult(18, {FieldName.ACCEL_TRIPLE.value: samples})


def _batt_act(buffer: bytes, cursor: int, accel_scale: float | None) -> FieldResult:
    # low 12 bits: battery in 10 mV, high nibble: moving (bit 0) and button (bit 1)
    raw = read_u16(buffer, cursor, what=FieldName.BATT_ACT.value)
    events = (raw & 0xF000) >> 12
    return FieldResult(
        2,
        {
            FieldName.BATTERY.value: (raw & 0x0FFF) / 100,
            FieldName.EVENTS.value: events,
            EventName.BUTTON.key: bool(events & 0x02),
            EventName.MOVING.key: bool(events & 0x01),
        },
    )


def _rs_events(buffer: bytes, cursor: int, accel_scale: float | None) -> FieldResult:
    require(buffer, cursor, 1, what=FieldName.RS_EVENTS.value)
    value = buffer[cursor]
    return FieldResult(
        1,
        {
            FieldName.EVENTS.value: value,
            EventName.DIN.key: bool(value & 0x04),
        },
    )


_HUMIDITY = FieldName.HUMIDITY.value

DECODERS: dict[FieldName, Decoder] = {
    FieldName.BATTERY: _scaled(FieldName.BATTERY.value, SENTINEL_SCALED, 100),
    FieldName.TEMPERATURE: _scaled(FieldName.TEMPERATURE.value, SENTINEL_SCALED, 100),
    FieldName.TEMPERATURE_EXT: _scaled(FieldName.TEMPERATURE_EXT.value, SENTINEL_SCALED, 100),
    FieldName.TEMPERATURE_ENV: _scaled(FieldName.TEMPERATURE_ENV.value, SENTINEL_SCALED, 100),
    FieldName.HUMIDITY: _whole_float(_HUMIDITY, SENTINEL_UNSET),
    FieldName.HUMIDITY_ALT_RES: _scaled(_HUMIDITY, SENTINEL_UNSET, 10),
    FieldName.RANGE: _int16(FieldName.RANGE.value, SENTINEL_SCALED),
    FieldName.VOLTAGE: _int16(FieldName.VOLTAGE.value, SENTINEL_SCALED),
    FieldName.VALUE: _int16(FieldName.VALUE.value, SENTINEL_SCALED),
    FieldName.AUX1: _int16(FieldName.AUX1.value, SENTINEL_SCALED),
    FieldName.AUX2: _int16(FieldName.AUX2.value, SENTINEL_SCALED),
    FieldName.AUX3: _int16(FieldName.AUX3.value, SENTINEL_SCALED),
    FieldName.USER_DATA: _int16(FieldName.USER_DATA.value, None),
    FieldName.COUNTER: _uint16(FieldName.COUNTER.value),
    FieldName.CO2: _uint16(FieldName.CO2.value),
    FieldName.LUX: _uint16(FieldName.LUX.value),
    FieldName.CURRENT: _uint16(FieldName.CURRENT.value),
    FieldName.PM2P5: _scaled(FieldName.PM2P5.value, SENTINEL_UNSET, 10),
    FieldName.PM10P0: _scaled(FieldName.PM10P0.value, SENTINEL_UNSET, 10),
    FieldName.VOC: _scaled(FieldName.VOC.value, SENTINEL_UNSET, 10),
    FieldName.NOX: _scaled(FieldName.NOX.value, SENTINEL_UNSET, 10),
    FieldName.GP: _scaled(FieldName.GP.value, None, 50, signed=False),
    FieldName.EVENTS: _uint8(FieldName.EVENTS.value),
    FieldName.SUBTYPE: _uint8(FieldName.SUBTYPE.value),
    FieldName.BYTE: _uint8(FieldName.BYTE.value),
    FieldName.RS_EVENTS: _rs_events,
    FieldName.BATT_ACT: _batt_act,
    FieldName.ACCEL: _accel,
    FieldName.ACCEL_TRIPLE: _accel_triple,
    FieldName.RESERVED1: _reserved(1),
    FieldName.RESERVED2: _reserved(2),
}

_missing = set(FieldName) - set(DECODERS)
if _missing:
    raise RuntimeError(f"No decoder registered for {sorted(m.value for m in _missing)}")


def decode_field(
    name: FieldName,
    buffer: bytes,
    cursor: int,
    *,
    accel_scale: float | None = None,
) -> FieldResult:
    return DECODERS[name](buffer, cursor, accel_scale)
