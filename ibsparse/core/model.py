"""Core data models shared by the catalog, dispatcher, engine and facade."""

from __future__ import annotations

import enum
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Union

INGICS_VENDOR_CODE = 0x082C


class FieldName(enum.Enum):
    BATTERY = "battery"
    TEMPERATURE = "temperature"
    TEMPERATURE_EXT = "temperature_ext"
    TEMPERATURE_ENV = "temperature_env"
    HUMIDITY = "humidity"
    HUMIDITY_ALT_RES = "humidity_alt_res"
    RANGE = "range"
    GP = "gp"
    COUNTER = "counter"
    CO2 = "co2"
    LUX = "lux"
    ACCEL = "accel"
    ACCEL_TRIPLE = "accels"
    USER_DATA = "user_data"
    EVENTS = "events"
    RS_EVENTS = "rs_events"
    BATT_ACT = "batt_act"
    RESERVED1 = "reserved"
    RESERVED2 = "reserved2"
    BYTE = "byte"
    SUBTYPE = "subtype"
    VALUE = "value"
    VOLTAGE = "voltage"
    CURRENT = "current"
    PM2P5 = "pm2p5"
    PM10P0 = "pm10p0"
    VOC = "voc"
    NOX = "nox"
    AUX1 = "aux1"
    AUX2 = "aux2"
    AUX3 = "aux3"


class EventName(enum.Enum):
    """Event flags packed into the events byte.

    ``default_bit`` is the bit position the event normally occupies. Some
    families reuse a position for a different event; a product definition
    may move an event to another bit.
    """

    BUTTON = ("button", 0)
    MOVING = ("moving", 1)
    HALL = ("hall", 2)
    FALL = ("fall", 3)
    PIR = ("pir", 4)
    IR = ("ir", 5)
    DETECT = ("detect", 5)
    DIN = ("din", 6)
    DIN2 = ("din2", 3)
    FLIP = ("flip", 5)

    def __init__(self, key: str, default_bit: int) -> None:
        self.key = key
        self.default_bit = default_bit

    @classmethod
    def from_key(cls, key: str) -> EventName:
        for member in cls:
            if member.key == key:
                return member
        raise ValueError(f"Unknown event '{key}'")


class ValueShape(enum.Enum):
    FLOAT32 = "float32"
    INT8 = "int8"
    INT16 = "int16"
    UINT16 = "uint16"
    UINT8 = "uint8"
    BOOL = "bool"
    ACCEL = "accel"
    ACCEL_TRIPLE = "accel_triple"
    BYTES = "bytes"


@dataclass(frozen=True)
class AccelSample:
    x: float
    y: float
    z: float

    def __iter__(self) -> Iterator[float]:
        return iter((self.x, self.y, self.z))


ReadingValue = Union[float, int, bool, bytes, AccelSample, tuple[AccelSample, ...]]

# Value shape of every reading key a decode can produce.
SHAPES: Mapping[str, ValueShape] = MappingProxyType(
    {
        FieldName.BATTERY.value: ValueShape.FLOAT32,
        FieldName.TEMPERATURE.value: ValueShape.FLOAT32,
        FieldName.TEMPERATURE_EXT.value: ValueShape.FLOAT32,
        FieldName.TEMPERATURE_ENV.value: ValueShape.FLOAT32,
        FieldName.HUMIDITY.value: ValueShape.FLOAT32,
        FieldName.RANGE.value: ValueShape.INT16,
        FieldName.VOLTAGE.value: ValueShape.INT16,
        FieldName.VALUE.value: ValueShape.INT16,
        FieldName.AUX1.value: ValueShape.INT16,
        FieldName.AUX2.value: ValueShape.INT16,
        FieldName.AUX3.value: ValueShape.INT16,
        FieldName.USER_DATA.value: ValueShape.INT16,
        FieldName.COUNTER.value: ValueShape.UINT16,
        FieldName.CO2.value: ValueShape.UINT16,
        FieldName.LUX.value: ValueShape.UINT16,
        FieldName.CURRENT.value: ValueShape.UINT16,
        FieldName.PM2P5.value: ValueShape.FLOAT32,
        FieldName.PM10P0.value: ValueShape.FLOAT32,
        FieldName.VOC.value: ValueShape.FLOAT32,
        FieldName.NOX.value: ValueShape.FLOAT32,
        FieldName.GP.value: ValueShape.FLOAT32,
        FieldName.EVENTS.value: ValueShape.UINT8,
        FieldName.SUBTYPE.value: ValueShape.UINT8,
        FieldName.BYTE.value: ValueShape.UINT8,
        FieldName.ACCEL.value: ValueShape.ACCEL,
        FieldName.ACCEL_TRIPLE.value: ValueShape.ACCEL_TRIPLE,
        **{event.key: ValueShape.BOOL for event in EventName},
        # iBeacon frame
        "uuid": ValueShape.BYTES,
        "major": ValueShape.UINT16,
        "minor": ValueShape.UINT16,
        "ref_tx": ValueShape.INT8,
    }
)


@dataclass(frozen=True)
class EventBit:
    event: EventName
    mask: int


@dataclass(frozen=True)
class LiteralModel:
    name: str

    def resolve(self, vendor_code: int) -> str:
        return self.name


@dataclass(frozen=True)
class VendorModel:
    """Model name chosen by vendor code, for rebranded products sharing a layout."""

    names: Mapping[int, str]
    default: str

    def resolve(self, vendor_code: int) -> str:
        return self.names.get(vendor_code, self.default)


ModelName = Union[LiteralModel, VendorModel]


@dataclass(frozen=True)
class ProductDefinition:
    model: ModelName
    fields: tuple[FieldName, ...]
    events: tuple[EventBit, ...] = ()
    accel_scale: float | None = None


@dataclass(frozen=True)
class SubtypeTable:
    index: int
    rows: Mapping[int, ProductDefinition]
    legacy_subtypes: frozenset[int] = frozenset()


@dataclass(frozen=True)
class ProductFamily:
    id: str
    name: str
    vendors: tuple[int, ...]
    product: int
    layout: ProductDefinition | SubtypeTable

    @property
    def any_vendor(self) -> bool:
        return not self.vendors


@dataclass(frozen=True)
class Resolution:
    """Outcome of dispatch: either a product definition or the legacy layout."""

    family: ProductFamily
    definition: ProductDefinition | None = None
    legacy: bool = False


class DecodedReading(Mapping[str, ReadingValue]):
    """Read-only reading set keyed by field and event names.

    A key is present only when the reading was available; sentinel-suppressed
    fields are left out rather than stored as zero. The value shape of each
    key is fixed by ``SHAPES``; use ``shape(key)`` to look it up.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, ReadingValue] | None = None) -> None:
        self._values = MappingProxyType(dict(values or {}))

    def __getitem__(self, key: str) -> ReadingValue:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def shape(self, key: str) -> ValueShape | None:
        """Declared shape of ``key`` as listed in ``SHAPES``, or ``None`` if unknown."""
        return SHAPES.get(key)

    def __repr__(self) -> str:
        return f"DecodedReading({dict(self._values)!r})"


@dataclass(frozen=True)
class ServiceData:
    uuid: str
    data: bytes


@dataclass(frozen=True)
class ScanRecord:
    mac: str
    rssi: int | None
    local_name: str | None
    manufacturer_data: bytes | None
    service_data: tuple[ServiceData, ...] = ()
