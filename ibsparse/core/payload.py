"""Read-only facade over a decoded advertisement.

Every accessor returns ``None`` when the reading is absent, which is distinct
from a zero or ``False`` reading.
"""

from __future__ import annotations

import logging
import struct
from collections.abc import Sequence
from typing import Any

from ibsparse.core import dispatch, engine
from ibsparse.core.adv import Advertisement
from ibsparse.core.catalog import ProductCatalog
from ibsparse.core.errors import TruncatedPayloadError
from ibsparse.core.model import (
    INGICS_VENDOR_CODE,
    AccelSample,
    DecodedReading,
    EventName,
    FieldName,
    ReadingValue,
    Resolution,
    ServiceData,
    ValueShape,
)
from ibsparse.core.vendors import vendor_name

LOGGER = logging.getLogger(__name__)


class Payload:
    def __init__(
        self,
        manufacturer_data: bytes | None,
        *,
        advertisement: Advertisement | None = None,
        catalog: ProductCatalog | None = None,
        local_name: str | None = None,
        service_data: Sequence[ServiceData] = (),
    ) -> None:
        self.manufacturer_data = bytes(manufacturer_data) if manufacturer_data is not None else None
        self.advertisement = advertisement
        # scanners hand over name and service data already split out of the AD structures
        self._local_name = local_name
        self._service_data = list(service_data)
        self.resolution: Resolution | None = None
        self.error: str | None = None
        self.readings = DecodedReading()
        if self.manufacturer_data is not None:
            self._decode(self.manufacturer_data, catalog)

    def _decode(self, msd: bytes, catalog: ProductCatalog | None) -> None:
        if dispatch.is_ibeacon(msd):
            self.readings = dispatch.decode_ibeacon(msd)
            return

        resolution = dispatch.resolve(msd, catalog)
        if resolution is None:
            return
        self.resolution = resolution
        try:
            if resolution.legacy:
                self.readings = dispatch.decode_legacy(msd)
            elif resolution.definition is not None:
                self.readings = engine.decode(resolution.definition, msd)
        except TruncatedPayloadError as exc:
            LOGGER.debug("Dropping truncated %s payload: %s", resolution.family.id, exc)
            self.error = str(exc)

    @property
    def resolved(self) -> bool:
        return self.resolution is not None

    # vendor / model

    @property
    def vendor_code(self) -> int | None:
        msd = self.manufacturer_data
        if msd is None or len(msd) < 2:
            return None
        return struct.unpack_from("<H", msd)[0]

    @property
    def vendor(self) -> str | None:
        code = self.vendor_code
        if code is None:
            return None
        # INGICS beacons broadcast under chip vendors' codes
        if self.resolution is not None:
            return vendor_name(INGICS_VENDOR_CODE)
        return vendor_name(code)

    @property
    def product_model(self) -> str | None:
        msd = self.manufacturer_data
        code = self.vendor_code
        if msd is None or code is None:
            return None
        if dispatch.handles_model(code):
            return dispatch.third_party_model(msd)
        model = self.readings.get(engine.MODEL_KEY)
        return model if isinstance(model, str) else None

    # advertisement pass-through

    @property
    def local_name(self) -> str | None:
        if self._local_name is not None:
            return self._local_name
        return self.advertisement.local_name if self.advertisement else None

    @property
    def service_data(self) -> list[ServiceData]:
        if self._service_data:
            return list(self._service_data)
        return self.advertisement.service_data if self.advertisement else []

    # readings

    def reading(self, key: str) -> ReadingValue | None:
        return self.readings.get(key)

    def _float(self, name: FieldName) -> float | None:
        value = self.readings.get(name.value)
        return float(value) if isinstance(value, (int, float)) and not isinstance(value, bool) else None

    def _int(self, name: FieldName) -> int | None:
        value = self.readings.get(name.value)
        return value if isinstance(value, int) and not isinstance(value, bool) else None

    @property
    def battery_voltage(self) -> float | None:
        return self._float(FieldName.BATTERY)

    @property
    def temperature(self) -> float | None:
        return self._float(FieldName.TEMPERATURE)

    @property
    def temperature_ext(self) -> float | None:
        return self._float(FieldName.TEMPERATURE_EXT)

    @property
    def temperature_env(self) -> float | None:
        return self._float(FieldName.TEMPERATURE_ENV)

    @property
    def humidity(self) -> float | None:
        return self._float(FieldName.HUMIDITY)

    @property
    def range(self) -> int | None:
        return self._int(FieldName.RANGE)

    @property
    def gp(self) -> float | None:
        return self._float(FieldName.GP)

    @property
    def counter(self) -> int | None:
        return self._int(FieldName.COUNTER)

    @property
    def co2(self) -> int | None:
        return self._int(FieldName.CO2)

    @property
    def lux(self) -> int | None:
        return self._int(FieldName.LUX)

    @property
    def voltage(self) -> int | None:
        """External voltage in mV."""
        return self._int(FieldName.VOLTAGE)

    @property
    def current(self) -> int | None:
        """External current in uA."""
        return self._int(FieldName.CURRENT)

    @property
    def value(self) -> int | None:
        return self._int(FieldName.VALUE)

    @property
    def user_data(self) -> int | None:
        return self._int(FieldName.USER_DATA)

    @property
    def pm2p5(self) -> float | None:
        return self._float(FieldName.PM2P5)

    @property
    def pm10p0(self) -> float | None:
        return self._float(FieldName.PM10P0)

    @property
    def voc(self) -> float | None:
        return self._float(FieldName.VOC)

    @property
    def nox(self) -> float | None:
        return self._float(FieldName.NOX)

    @property
    def aux1(self) -> int | None:
        return self._int(FieldName.AUX1)

    @property
    def aux2(self) -> int | None:
        return self._int(FieldName.AUX2)

    @property
    def aux3(self) -> int | None:
        return self._int(FieldName.AUX3)

    @property
    def accel(self) -> AccelSample | None:
        value = self.readings.get(FieldName.ACCEL.value)
        return value if isinstance(value, AccelSample) else None

    @property
    def accels(self) -> tuple[AccelSample, ...] | None:
        value = self.readings.get(FieldName.ACCEL_TRIPLE.value)
        return value if isinstance(value, tuple) else None

    # events

    def event(self, name: EventName | str) -> bool | None:
        key = name.key if isinstance(name, EventName) else name
        value = self.readings.get(key)
        return value if isinstance(value, bool) else None

    @property
    def button_pressed(self) -> bool | None:
        return self.event(EventName.BUTTON)

    @property
    def moving(self) -> bool | None:
        return self.event(EventName.MOVING)

    @property
    def hall_detected(self) -> bool | None:
        return self.event(EventName.HALL)

    @property
    def falling(self) -> bool | None:
        return self.event(EventName.FALL)

    @property
    def pir_detected(self) -> bool | None:
        return self.event(EventName.PIR)

    @property
    def ir_detected(self) -> bool | None:
        return self.event(EventName.IR)

    @property
    def detected(self) -> bool | None:
        return self.event(EventName.DETECT)

    @property
    def din_triggered(self) -> bool | None:
        return self.event(EventName.DIN)

    @property
    def din2_triggered(self) -> bool | None:
        return self.event(EventName.DIN2)

    @property
    def flip(self) -> bool | None:
        return self.event(EventName.FLIP)

    # iBeacon

    @property
    def uuid(self) -> bytes | None:
        value = self.readings.get("uuid")
        return value if isinstance(value, bytes) else None

    @property
    def major(self) -> int | None:
        value = self.readings.get("major")
        return value if isinstance(value, int) else None

    @property
    def minor(self) -> int | None:
        value = self.readings.get("minor")
        return value if isinstance(value, int) else None

    @property
    def ref_tx(self) -> int | None:
        value = self.readings.get("ref_tx")
        return value if isinstance(value, int) else None

    def as_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for key, value in (
            ("vendor", self.vendor),
            ("model", self.product_model),
            ("local_name", self.local_name),
        ):
            if value is not None:
                out[key] = value
        for key, value in self.readings.items():
            if key == engine.MODEL_KEY:
                continue
            out[key] = _plain(self.readings.shape(key), value)
        if self.error:
            out["error"] = self.error
        return out

    def __str__(self) -> str:
        return ", ".join(f"{key}: {value}" for key, value in self.as_dict().items())


def _plain(shape: ValueShape | None, value: ReadingValue) -> Any:
    if shape is ValueShape.ACCEL and isinstance(value, AccelSample):
        return list(value)
    if shape is ValueShape.ACCEL_TRIPLE and isinstance(value, tuple):
        return [list(sample) for sample in value]
    if shape is ValueShape.BYTES and isinstance(value, bytes):
        return value.hex()
    return value


def parse_msd(data: bytes, *, catalog: ProductCatalog | None = None) -> Payload:
    """Decode bare manufacturer-specific data (vendor code first)."""
    return Payload(data, catalog=catalog)


def parse_advertisement(raw: bytes, *, catalog: ProductCatalog | None = None) -> Payload:
    """Frame a raw advertisement and decode its manufacturer data, if any."""
    advertisement = Advertisement.parse(raw)
    return Payload(advertisement.manufacturer_data, advertisement=advertisement, catalog=catalog)
