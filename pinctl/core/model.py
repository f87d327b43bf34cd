"""Core data models used across codec, scan, session, and CLI."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from pinctl.core.errors import UUIDFormatError

_BASE_UUID_SUFFIX = "-0000-1000-8000-00805f9b34fb"


def canonical_uuid(value: str) -> str:
    """Return the lower-case hyphenated 128-bit form of a UUID string.

    16-bit and 32-bit short forms are expanded against the Bluetooth base UUID.
    Anything else raises UUIDFormatError.
    """
    normalized = value.strip().lower()
    if len(normalized) == 4:
        normalized = f"0000{normalized}{_BASE_UUID_SUFFIX}"
    elif len(normalized) == 8:
        normalized = f"{normalized}{_BASE_UUID_SUFFIX}"
    try:
        return str(uuid.UUID(normalized))
    except ValueError:
        raise UUIDFormatError(
            f"'{value}' is not a 16-bit, 32-bit, or 128-bit UUID"
        ) from None


@dataclass(frozen=True)
class ScanResult:
    name: str
    address: str
    rssi: int


@dataclass(frozen=True)
class CharacteristicDescriptor:
    uuid: str
    handle: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class ServiceDescriptor:
    uuid: str
    characteristics: tuple[CharacteristicDescriptor, ...] = ()
    handle: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class ResolvedCharacteristic:
    characteristic: CharacteristicDescriptor
    service_uuid: str


@dataclass(frozen=True)
class PinReading:
    pin: int
    value: int


@dataclass(frozen=True)
class PinWriteEntry:
    pin_num: int
    state: int


@dataclass(frozen=True)
class Found:
    result: ScanResult


@dataclass(frozen=True)
class TimedOut:
    pass


RaceOutcome = Union[Found, TimedOut]


@dataclass(frozen=True)
class CharacteristicMap:
    write: str
    telemetry: str
    pin_state: str


@dataclass(frozen=True)
class DeviceProfile:
    id: str
    name: str
    device_name: str | None
    scan_timeout_s: float
    characteristics: CharacteristicMap
    write_with_response: bool = True


class SessionState(Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    CONNECTING = "connecting"
    DISCOVERING_SERVICES = "discovering_services"
    RESOLVING_CHARACTERISTIC = "resolving_characteristic"
    READING = "reading"
    WRITING = "writing"
    DISCONNECTING = "disconnecting"
    DONE = "done"
    FAILED = "failed"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").capitalize()


@dataclass(frozen=True)
class SessionFailure:
    phase: SessionState
    error: Exception


@dataclass(frozen=True)
class SessionOutcome:
    state: SessionState
    history: tuple[SessionState, ...]
    device: ScanResult | None = None
    service_uuid: str | None = None
    characteristic_uuid: str | None = None
    readings: tuple[PinReading, ...] = ()
    bytes_written: int | None = None
    failure: SessionFailure | None = None
    disconnect_error: str | None = None

    @property
    def ok(self) -> bool:
        return self.state is SessionState.DONE
