"""Stable public API for building tooling on top of pinctl.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from collections.abc import Sequence

from pinctl.core.codec import decode_pin_states, decode_telemetry, encode_pin_write
from pinctl.core.errors import (
    AdapterError,
    ConnectError,
    DecodeError,
    DeviceSelectionError,
    DisconnectError,
    DiscoveryError,
    EncodeError,
    FrameTooShortError,
    PinctlError,
    ProfileLoadError,
    ProfileValidationError,
    ReadError,
    ResolutionNotFound,
    ScanError,
    ScanFailure,
    ScanTimeout,
    SessionError,
    UUIDFormatError,
    WriteError,
)
from pinctl.core.model import (
    DeviceProfile,
    PinReading,
    PinWriteEntry,
    ScanResult,
    SessionOutcome,
    SessionState,
)
from pinctl.core.scan import ScanObserver
from pinctl.core.service import AdapterFactory, PinctlService
from pinctl.transports.base import Adapter
from pinctl.transports.bleak_adapter import BleakAdapter

__all__ = [
    "PinctlError",
    "AdapterError",
    "ConnectError",
    "DecodeError",
    "DeviceSelectionError",
    "DisconnectError",
    "DiscoveryError",
    "EncodeError",
    "FrameTooShortError",
    "ProfileLoadError",
    "ProfileValidationError",
    "ReadError",
    "ResolutionNotFound",
    "ScanError",
    "ScanFailure",
    "ScanTimeout",
    "SessionError",
    "UUIDFormatError",
    "WriteError",
    "DeviceProfile",
    "PinReading",
    "PinWriteEntry",
    "ScanResult",
    "SessionOutcome",
    "SessionState",
    "Adapter",
    "BleakAdapter",
    "decode_pin_states",
    "decode_telemetry",
    "encode_pin_write",
    "Client",
]


class Client:
    """Public client for interacting with pinctl core capabilities.

    A `Client` instance wraps profile loading, scanning, and single-shot pin
    read/write sessions behind a stable API intended for third-party tools
    (GUI/TUI/services/scripts). Each call runs one complete session and
    raises `SessionError` when it ends in the failed state.
    """

    def __init__(self, *, adapter_factory: AdapterFactory | None = None) -> None:
        self._service = PinctlService(adapter_factory=adapter_factory)

    @property
    def load_warnings(self) -> tuple[str, ...]:
        return self._service.load_warnings

    def list_profiles(self) -> list[DeviceProfile]:
        return self._service.list_profiles()

    def get_profile(self, profile_id: str | None = None) -> DeviceProfile:
        return self._service.resolve_profile(profile_id)

    def scan(self, timeout_s: float = 5.0, *, profile_id: str | None = None) -> list[ScanResult]:
        return self._service.scan_devices(timeout_s, profile_id=profile_id)

    def read_telemetry(
        self,
        device_name: str | None = None,
        *,
        profile_id: str | None = None,
        timeout_s: float | None = None,
        observer: ScanObserver | None = None,
    ) -> list[PinReading]:
        outcome = self._service.read_pins(
            device_name,
            frame="telemetry",
            profile_id=profile_id,
            timeout_s=timeout_s,
            observer=observer,
        )
        return list(outcome.readings)

    def read_pin_states(
        self,
        device_name: str | None = None,
        *,
        profile_id: str | None = None,
        timeout_s: float | None = None,
        observer: ScanObserver | None = None,
    ) -> list[PinReading]:
        outcome = self._service.read_pins(
            device_name,
            frame="pins",
            profile_id=profile_id,
            timeout_s=timeout_s,
            observer=observer,
        )
        return list(outcome.readings)

    def write_pins(
        self,
        entries: Sequence[PinWriteEntry],
        device_name: str | None = None,
        *,
        profile_id: str | None = None,
        timeout_s: float | None = None,
        observer: ScanObserver | None = None,
    ) -> SessionOutcome:
        return self._service.write_pins(
            entries,
            device_name,
            profile_id=profile_id,
            timeout_s=timeout_s,
            observer=observer,
        )
