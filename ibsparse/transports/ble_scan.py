"""Passive BLE advertisement scanning via bleak."""

from __future__ import annotations

import asyncio
import logging
import struct

from ibsparse.core.errors import ScanError
from ibsparse.core.model import ScanRecord, ServiceData

LOGGER = logging.getLogger(__name__)


def manufacturer_bytes(company_id: int, data: bytes) -> bytes:
    """Rebuild raw manufacturer-specific data from bleak's split form."""
    return struct.pack("<H", company_id) + bytes(data)


class BLEScanTransport:
    def scan(self, *, timeout_s: float = 5.0) -> list[ScanRecord]:
        try:
            from bleak import BleakScanner  # type: ignore
        except Exception as exc:  # pragma: no cover - import failure path
            raise ScanError("BLE scanning requires 'bleak'. Install dependency and retry.") from exc

        records: list[ScanRecord] = []

        def _on_detect(device, advertisement_data) -> None:
            service_data = tuple(
                ServiceData(uuid=str(uuid).lower(), data=bytes(data))
                for uuid, data in advertisement_data.service_data.items()
            )
            manufacturer = advertisement_data.manufacturer_data
            if not manufacturer:
                records.append(
                    ScanRecord(
                        mac=device.address.upper(),
                        rssi=advertisement_data.rssi,
                        local_name=advertisement_data.local_name,
                        manufacturer_data=None,
                        service_data=service_data,
                    )
                )
                return
            for company_id, data in manufacturer.items():
                records.append(
                    ScanRecord(
                        mac=device.address.upper(),
                        rssi=advertisement_data.rssi,
                        local_name=advertisement_data.local_name,
                        manufacturer_data=manufacturer_bytes(company_id, data),
                        service_data=service_data,
                    )
                )

        async def _run() -> None:
            scanner = BleakScanner(detection_callback=_on_detect)
            await scanner.start()
            try:
                await asyncio.sleep(timeout_s)
            finally:
                await scanner.stop()

        try:
            asyncio.run(_run())
        except ScanError:
            raise
        except Exception as exc:
            raise ScanError(f"BLE scan failed: {exc}") from exc

        LOGGER.debug("BLE scan collected %d records in %.1fs", len(records), timeout_s)
        return records
