"""Transport interfaces."""

from __future__ import annotations

from typing import Protocol

from ibsparse.core.model import ScanRecord


class ScanTransport(Protocol):
    def scan(self, *, timeout_s: float = 5.0) -> list[ScanRecord]:
        """Listen for advertisements and return one record per packet seen."""
