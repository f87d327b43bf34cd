"""BLE adapter implementation backed by bleak."""

from __future__ import annotations

import logging
from typing import Any

from pinctl.core.errors import (
    AdapterError,
    ConnectError,
    DisconnectError,
    DiscoveryError,
    ReadError,
    ScanError,
    WriteError,
)
from pinctl.core.model import (
    CharacteristicDescriptor,
    ScanResult,
    ServiceDescriptor,
    canonical_uuid,
)
from pinctl.transports.base import ScanCallback

LOGGER = logging.getLogger(__name__)


def _characteristic(char: Any) -> CharacteristicDescriptor:
    return CharacteristicDescriptor(uuid=canonical_uuid(char.uuid), handle=char)


def _target(characteristic: CharacteristicDescriptor) -> Any:
    return characteristic.uuid if characteristic.handle is None else characteristic.handle


def _matches(uuid_filter: str | None, value: str) -> bool:
    return uuid_filter is None or canonical_uuid(uuid_filter) == canonical_uuid(value)


class BleakAdapter:
    """Single-peripheral adapter: one scanner and at most one live client."""

    def __init__(self, *, connect_timeout_s: float = 10.0, write_with_response: bool = True) -> None:
        self.connect_timeout_s = connect_timeout_s
        self.write_with_response = write_with_response
        self._bleak: Any = None
        self._scanner: Any = None
        self._client: Any = None
        self._seen: dict[str, Any] = {}

    async def enable(self) -> None:
        try:
            import bleak  # type: ignore
        except Exception as exc:  # pragma: no cover - import failure path
            raise AdapterError(
                "BLE support requires 'bleak'. Install dependency and retry."
            ) from exc
        self._bleak = bleak

    def _require_enabled(self) -> Any:
        if self._bleak is None:
            raise AdapterError("Bluetooth adapter has not been enabled")
        return self._bleak

    async def start_scan(self, on_result: ScanCallback) -> None:
        bleak = self._require_enabled()

        def _detection(device: Any, advertisement: Any) -> None:
            self._seen[device.address] = device
            on_result(
                ScanResult(
                    name=advertisement.local_name or device.name or "",
                    address=device.address,
                    rssi=advertisement.rssi,
                )
            )

        scanner = bleak.BleakScanner(detection_callback=_detection)
        try:
            await scanner.start()
        except Exception as exc:
            raise ScanError(f"BLE scan failed to start: {exc}") from exc
        self._scanner = scanner

    async def stop_scan(self) -> None:
        scanner, self._scanner = self._scanner, None
        if scanner is None:
            return
        try:
            await scanner.stop()
        except Exception as exc:
            LOGGER.warning("Stopping BLE scan failed: %s", exc)

    async def connect(self, address: str) -> Any:
        bleak = self._require_enabled()
        target = self._seen.get(address, address)
        client = bleak.BleakClient(target, timeout=self.connect_timeout_s)
        try:
            await client.connect()
        except Exception as exc:
            raise ConnectError(f"BLE connect failed for {address}: {exc}") from exc
        if not client.is_connected:
            raise ConnectError(f"BLE connect failed for {address}")
        self._client = client
        return client

    async def discover_services(
        self,
        handle: Any,
        uuid_filter: str | None = None,
    ) -> list[ServiceDescriptor]:
        try:
            services = list(handle.services)
        except Exception as exc:
            raise DiscoveryError(f"Service discovery failed: {exc}") from exc
        return [
            ServiceDescriptor(
                uuid=canonical_uuid(service.uuid),
                characteristics=tuple(_characteristic(c) for c in service.characteristics),
                handle=service,
            )
            for service in services
            if _matches(uuid_filter, service.uuid)
        ]

    async def discover_characteristics(
        self,
        service: ServiceDescriptor,
        uuid_filter: str | None = None,
    ) -> list[CharacteristicDescriptor]:
        if service.handle is None:
            found = list(service.characteristics)
        else:
            try:
                found = [_characteristic(c) for c in service.handle.characteristics]
            except Exception as exc:
                raise DiscoveryError(
                    f"Characteristic discovery failed for service {service.uuid}: {exc}"
                ) from exc
        return [c for c in found if _matches(uuid_filter, c.uuid)]

    async def read(self, characteristic: CharacteristicDescriptor) -> bytes:
        if self._client is None:
            raise ReadError("Cannot read: no connected device")
        try:
            data = await self._client.read_gatt_char(_target(characteristic))
        except Exception as exc:
            raise ReadError(f"BLE read of {characteristic.uuid} failed: {exc}") from exc
        return bytes(data)

    async def write(self, characteristic: CharacteristicDescriptor, data: bytes) -> int:
        if self._client is None:
            raise WriteError("Cannot write: no connected device")
        try:
            await self._client.write_gatt_char(
                _target(characteristic),
                data,
                response=self.write_with_response,
            )
        except Exception as exc:
            raise WriteError(f"BLE write to {characteristic.uuid} failed: {exc}") from exc
        return len(data)

    async def disconnect(self, handle: Any) -> None:
        if handle is self._client:
            self._client = None
        try:
            await handle.disconnect()
        except Exception as exc:
            raise DisconnectError(f"BLE disconnect failed: {exc}") from exc
