"""Adapter interface consumed by the scan, resolver, and session layers."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Protocol

from pinctl.core.model import CharacteristicDescriptor, ScanResult, ServiceDescriptor

DeviceHandle = Any
ScanCallback = Callable[[ScanResult], None]


class Adapter(Protocol):
    async def enable(self) -> None:
        """Make the radio usable or raise AdapterError."""

    async def start_scan(self, on_result: ScanCallback) -> None:
        """Start delivering advertisements to `on_result` or raise ScanError."""

    async def stop_scan(self) -> None:
        """Stop scanning. Calling it when no scan is running is a no-op."""

    async def connect(self, address: str) -> DeviceHandle:
        """Connect to `address` or raise ConnectError."""

    async def discover_services(
        self,
        handle: DeviceHandle,
        uuid_filter: str | None = None,
    ) -> Sequence[ServiceDescriptor]:
        """Return the services of a connected device or raise DiscoveryError."""

    async def discover_characteristics(
        self,
        service: ServiceDescriptor,
        uuid_filter: str | None = None,
    ) -> Sequence[CharacteristicDescriptor]:
        """Return the characteristics of `service` or raise DiscoveryError."""

    async def read(self, characteristic: CharacteristicDescriptor) -> bytes:
        """Read a characteristic value or raise ReadError."""

    async def write(self, characteristic: CharacteristicDescriptor, data: bytes) -> int:
        """Write `data` and return the byte count or raise WriteError."""

    async def disconnect(self, handle: DeviceHandle) -> None:
        """Drop the connection or raise DisconnectError."""
