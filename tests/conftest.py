from __future__ import annotations

import asyncio

import pytest

from pinctl.core.errors import (
    AdapterError,
    ConnectError,
    DisconnectError,
    DiscoveryError,
    ReadError,
    ScanError,
    WriteError,
)
from pinctl.core.model import CharacteristicDescriptor, ScanResult, ServiceDescriptor, canonical_uuid

WRITE_UUID = "c79b2ca7-f39d-4060-8168-816fa26737b7"
TELEMETRY_UUID = "01037594-1bbb-4490-aa4d-f6d333b42e16"
PIN_STATE_UUID = "13c0ef83-09bd-4767-97cb-ee46224ae6db"
PIN_SERVICE_UUID = "a9c81b72-0f7a-4c59-b0a8-425e3bcf0a0e"
GAP_SERVICE_UUID = "00001800-0000-1000-8000-00805f9b34fb"


def pin_services() -> list[ServiceDescriptor]:
    return [
        ServiceDescriptor(
            uuid=GAP_SERVICE_UUID,
            characteristics=(CharacteristicDescriptor(uuid="00002a00-0000-1000-8000-00805f9b34fb"),),
        ),
        ServiceDescriptor(
            uuid=PIN_SERVICE_UUID,
            characteristics=(
                CharacteristicDescriptor(uuid=PIN_STATE_UUID),
                CharacteristicDescriptor(uuid=TELEMETRY_UUID),
                CharacteristicDescriptor(uuid=WRITE_UUID),
            ),
        ),
    ]


class FakeAdapter:
    """In-memory adapter replaying scheduled advertisements and fixed GATT data."""

    def __init__(
        self,
        *,
        advertisements: list[tuple[float, ScanResult]] | None = None,
        services: list[ServiceDescriptor] | None = None,
        hidden_from_filter: set[str] | None = None,
        failing_services: set[str] | None = None,
        read_data: bytes = b"",
        stop_cancels_delivery: bool = True,
        enable_error: bool = False,
        scan_error: bool = False,
        connect_error: bool = False,
        discover_error: bool = False,
        read_error: bool = False,
        read_hangs: bool = False,
        write_error: bool = False,
        disconnect_error: bool = False,
    ) -> None:
        self.advertisements = advertisements or []
        self.services = pin_services() if services is None else services
        self.hidden_from_filter = hidden_from_filter or set()
        self.failing_services = failing_services or set()
        self.read_data = read_data
        self.stop_cancels_delivery = stop_cancels_delivery
        self.enable_error = enable_error
        self.scan_error = scan_error
        self.connect_error = connect_error
        self.discover_error = discover_error
        self.read_error = read_error
        self.read_hangs = read_hangs
        self.write_error = write_error
        self.disconnect_error = disconnect_error

        self.scanning = False
        self.start_calls = 0
        self.stop_calls = 0
        self.delivered: list[ScanResult] = []
        self.connected: list[str] = []
        self.discovery_calls: list[tuple[str, str | None]] = []
        self.reads: list[str] = []
        self.writes: list[tuple[str, bytes]] = []
        self.disconnects = 0
        self._pending: list[asyncio.TimerHandle] = []

    async def enable(self) -> None:
        if self.enable_error:
            raise AdapterError("radio unavailable")

    async def start_scan(self, on_result) -> None:
        self.start_calls += 1
        if self.scan_error:
            raise ScanError("scan refused")
        loop = asyncio.get_running_loop()
        self.scanning = True
        self._pending = [
            loop.call_later(delay, self._deliver, on_result, result)
            for delay, result in self.advertisements
        ]

    def _deliver(self, on_result, result: ScanResult) -> None:
        self.delivered.append(result)
        on_result(result)

    async def stop_scan(self) -> None:
        self.stop_calls += 1
        self.scanning = False
        if self.stop_cancels_delivery:
            for handle in self._pending:
                handle.cancel()
            self._pending = []

    async def connect(self, address: str):
        if self.connect_error:
            raise ConnectError(f"BLE connect failed for {address}")
        self.connected.append(address)
        return f"handle:{address}"

    async def discover_services(self, handle, uuid_filter=None):
        if self.discover_error:
            raise DiscoveryError("GATT discovery failed")
        return list(self.services)

    async def discover_characteristics(self, service: ServiceDescriptor, uuid_filter=None):
        self.discovery_calls.append((service.uuid, uuid_filter))
        if service.uuid in self.failing_services:
            raise DiscoveryError(f"discovery failed for {service.uuid}")
        if uuid_filter is None:
            return list(service.characteristics)
        if service.uuid in self.hidden_from_filter:
            return []
        wanted = canonical_uuid(uuid_filter)
        return [c for c in service.characteristics if canonical_uuid(c.uuid) == wanted]

    async def read(self, characteristic: CharacteristicDescriptor) -> bytes:
        self.reads.append(characteristic.uuid)
        if self.read_hangs:
            await asyncio.Event().wait()
        if self.read_error:
            raise ReadError("read refused")
        return self.read_data

    async def write(self, characteristic: CharacteristicDescriptor, data: bytes) -> int:
        if self.write_error:
            raise WriteError("write refused")
        self.writes.append((characteristic.uuid, data))
        return len(data)

    async def disconnect(self, handle) -> None:
        self.disconnects += 1
        if self.disconnect_error:
            raise DisconnectError("link already gone")


@pytest.fixture
def make_adapter():
    return FakeAdapter


@pytest.fixture(autouse=True)
def isolated_profiles(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
