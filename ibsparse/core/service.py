"""Service layer used by CLI and library callers."""

from __future__ import annotations

from dataclasses import dataclass

from ibsparse.core.catalog import ProductCatalog, default_catalog
from ibsparse.core.message import GatewayMessage, decode_hex
from ibsparse.core.model import ProductFamily, ScanRecord
from ibsparse.core.payload import Payload, parse_advertisement, parse_msd
from ibsparse.transports.base import ScanTransport
from ibsparse.transports.ble_scan import BLEScanTransport


@dataclass(frozen=True)
class MessageReport:
    message: GatewayMessage
    payload: Payload


@dataclass(frozen=True)
class ScanResult:
    record: ScanRecord
    payload: Payload


class BeaconService:
    def __init__(
        self,
        *,
        catalog: ProductCatalog | None = None,
        scan_transport: ScanTransport | None = None,
    ) -> None:
        self.catalog = catalog or default_catalog()
        self.load_warnings = self.catalog.warnings
        self.scan_transport = scan_transport or BLEScanTransport()

    def list_families(self) -> list[ProductFamily]:
        return self.catalog.list_families()

    def parse_msd(self, data: bytes | str) -> Payload:
        if isinstance(data, str):
            data = decode_hex(data, context="manufacturer data")
        return parse_msd(data, catalog=self.catalog)

    def parse_advertisement(self, raw: bytes | str) -> Payload:
        if isinstance(raw, str):
            raw = decode_hex(raw, context="advertisement")
        return parse_advertisement(raw, catalog=self.catalog)

    def parse_message(self, line: str) -> MessageReport:
        message = GatewayMessage.parse(line)
        payload = parse_advertisement(message.payload_bytes(), catalog=self.catalog)
        return MessageReport(message=message, payload=payload)

    def scan(self, *, timeout_s: float = 5.0, resolved_only: bool = False) -> list[ScanResult]:
        results: list[ScanResult] = []
        for record in self.scan_transport.scan(timeout_s=timeout_s):
            payload = Payload(
                record.manufacturer_data,
                catalog=self.catalog,
                local_name=record.local_name,
                service_data=record.service_data,
            )
            if resolved_only and not payload.resolved:
                continue
            results.append(ScanResult(record=record, payload=payload))
        return results
