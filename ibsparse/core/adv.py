"""BLE advertising payload framing into AD structures."""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from ibsparse.core.errors import AdvertisementError
from ibsparse.core.model import ServiceData

AD_FLAGS = 0x01
AD_INCOMPLETE_UUID16 = 0x02
AD_COMPLETE_UUID16 = 0x03
AD_INCOMPLETE_UUID32 = 0x04
AD_COMPLETE_UUID32 = 0x05
AD_INCOMPLETE_UUID128 = 0x06
AD_COMPLETE_UUID128 = 0x07
AD_SHORT_NAME = 0x08
AD_COMPLETE_NAME = 0x09
AD_TX_POWER = 0x0A
AD_SERVICE_DATA_UUID16 = 0x16
AD_SERVICE_DATA_UUID32 = 0x20
AD_SERVICE_DATA_UUID128 = 0x21
AD_MANUFACTURER_DATA = 0xFF

_BASE_UUID_SUFFIX = "-0000-1000-8000-00805f9b34fb"


def normalize_uuid(raw: bytes) -> str:
    """Expand a little-endian 16/32/128-bit UUID to its 128-bit string form."""
    if len(raw) == 2 or len(raw) == 4:
        return f"{int.from_bytes(raw, 'little'):08x}{_BASE_UUID_SUFFIX}"
    if len(raw) == 16:
        return str(uuid.UUID(bytes=raw[::-1]))
    raise AdvertisementError(f"UUID must be 2, 4 or 16 bytes, got {len(raw)}")


@dataclass(frozen=True)
class ADStructure:
    type: int
    data: bytes


class Advertisement:
    """A raw advertisement or scan response split into its AD structures."""

    def __init__(self, structures: tuple[ADStructure, ...]) -> None:
        self.structures = structures

    @classmethod
    def parse(cls, raw: bytes) -> Advertisement:
        structures: list[ADStructure] = []
        index = 0
        while index < len(raw):
            length = raw[index]
            if length == 0:
                # zero-length entry marks padding up to the end of the PDU
                break
            end = index + 1 + length
            if end > len(raw):
                raise AdvertisementError(
                    f"AD structure at offset {index} declares {length} bytes but only "
                    f"{len(raw) - index - 1} remain"
                )
            structures.append(ADStructure(type=raw[index + 1], data=bytes(raw[index + 2 : end])))
            index = end
        return cls(tuple(structures))

    def field(self, ad_type: int) -> bytes | None:
        for structure in self.structures:
            if structure.type == ad_type:
                return structure.data
        return None

    @property
    def flags(self) -> int | None:
        data = self.field(AD_FLAGS)
        return data[0] if data else None

    @property
    def manufacturer_data(self) -> bytes | None:
        return self.field(AD_MANUFACTURER_DATA)

    @property
    def local_name(self) -> str | None:
        for ad_type in (AD_SHORT_NAME, AD_COMPLETE_NAME):
            data = self.field(ad_type)
            if data is not None:
                return data.decode("utf-8", errors="replace").rstrip("\x00")
        return None

    @property
    def tx_power(self) -> int | None:
        data = self.field(AD_TX_POWER)
        if not data:
            return None
        return int.from_bytes(data[:1], "little", signed=True)

    @property
    def service_uuids(self) -> list[str]:
        widths = {
            AD_INCOMPLETE_UUID16: 2,
            AD_COMPLETE_UUID16: 2,
            AD_INCOMPLETE_UUID32: 4,
            AD_COMPLETE_UUID32: 4,
            AD_INCOMPLETE_UUID128: 16,
            AD_COMPLETE_UUID128: 16,
        }
        uuids: list[str] = []
        for structure in self.structures:
            width = widths.get(structure.type)
            if width is None:
                continue
            for offset in range(0, len(structure.data) - width + 1, width):
                uuids.append(normalize_uuid(structure.data[offset : offset + width]))
        return uuids

    @property
    def service_data(self) -> list[ServiceData]:
        widths = {
            AD_SERVICE_DATA_UUID16: 2,
            AD_SERVICE_DATA_UUID32: 4,
            AD_SERVICE_DATA_UUID128: 16,
        }
        entries: list[ServiceData] = []
        for structure in self.structures:
            width = widths.get(structure.type)
            if width is None or len(structure.data) < width:
                continue
            entries.append(
                ServiceData(
                    uuid=normalize_uuid(structure.data[:width]),
                    data=structure.data[width:],
                )
            )
        return entries
