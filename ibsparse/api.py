"""Stable public API for building tooling on top of ibsparse.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from ibsparse.core.catalog import ProductCatalog, load_catalog
from ibsparse.core.errors import (
    AdvertisementError,
    CatalogLoadError,
    CatalogValidationError,
    IbsparseError,
    InvalidHexError,
    MessageFormatError,
    PayloadError,
    ScanError,
    TruncatedPayloadError,
)
from ibsparse.core.message import GatewayMessage
from ibsparse.core.model import (
    AccelSample,
    DecodedReading,
    EventName,
    FieldName,
    ProductDefinition,
    ProductFamily,
    ScanRecord,
    ServiceData,
    ValueShape,
)
from ibsparse.core.payload import Payload
from ibsparse.core.service import BeaconService, MessageReport, ScanResult
from ibsparse.transports.base import ScanTransport
from ibsparse.transports.ble_scan import BLEScanTransport

__all__ = [
    "IbsparseError",
    "CatalogLoadError",
    "CatalogValidationError",
    "PayloadError",
    "TruncatedPayloadError",
    "InvalidHexError",
    "AdvertisementError",
    "MessageFormatError",
    "ScanError",
    "AccelSample",
    "DecodedReading",
    "EventName",
    "FieldName",
    "ProductDefinition",
    "ProductFamily",
    "ScanRecord",
    "ServiceData",
    "ValueShape",
    "GatewayMessage",
    "Payload",
    "ProductCatalog",
    "load_catalog",
    "MessageReport",
    "ScanResult",
    "ScanTransport",
    "BLEScanTransport",
    "Client",
]


class Client:
    """Public client for decoding INGICS iBS beacon advertisements.

    A `Client` instance wraps the product catalog, payload decoding, gateway
    message parsing and BLE scanning behind a stable API intended for
    third-party tools (dashboards/services/scripts).
    """

    def __init__(
        self,
        *,
        catalog: ProductCatalog | None = None,
        scan_transport: ScanTransport | None = None,
    ) -> None:
        self._service = BeaconService(catalog=catalog, scan_transport=scan_transport)

    @property
    def load_warnings(self) -> tuple[str, ...]:
        return self._service.load_warnings

    def list_products(self) -> list[ProductFamily]:
        return self._service.list_families()

    def parse_msd(self, data: bytes | str) -> Payload:
        return self._service.parse_msd(data)

    def parse_advertisement(self, raw: bytes | str) -> Payload:
        return self._service.parse_advertisement(raw)

    def parse_message(self, line: str) -> MessageReport:
        return self._service.parse_message(line)

    def scan(self, *, timeout_s: float = 5.0, resolved_only: bool = False) -> list[ScanResult]:
        return self._service.scan(timeout_s=timeout_s, resolved_only=resolved_only)
