"""Service layer used by CLI and the public API."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence

from pinctl.core.codec import decode_pin_states, decode_telemetry
from pinctl.core.errors import DeviceSelectionError, EncodeError, ProfileLoadError, SessionError
from pinctl.core.model import (
    DeviceProfile,
    PinWriteEntry,
    ScanResult,
    SessionOutcome,
    canonical_uuid,
)
from pinctl.core.profile_loader import DEFAULT_PROFILE_ID, load_profiles
from pinctl.core.scan import ScanObserver, survey
from pinctl.core.session import Decoder, PinSession
from pinctl.transports.base import Adapter
from pinctl.transports.bleak_adapter import BleakAdapter

AdapterFactory = Callable[[DeviceProfile], Adapter]

FRAMES: dict[str, tuple[str, Decoder]] = {
    "telemetry": ("telemetry", decode_telemetry),
    "pins": ("pin_state", decode_pin_states),
}


def _bleak_adapter(profile: DeviceProfile) -> Adapter:
    return BleakAdapter(write_with_response=profile.write_with_response)


class PinctlService:
    def __init__(self, *, adapter_factory: AdapterFactory | None = None) -> None:
        loaded = load_profiles()
        self.profiles = loaded.profiles
        self.load_warnings = loaded.warnings
        self.adapter_factory = adapter_factory or _bleak_adapter

    def list_profiles(self) -> list[DeviceProfile]:
        return sorted(self.profiles.values(), key=lambda p: p.id)

    def resolve_profile(self, profile_id: str | None = None) -> DeviceProfile:
        wanted = profile_id or DEFAULT_PROFILE_ID
        profile = self.profiles.get(wanted)
        if profile is None:
            available = ", ".join(sorted(self.profiles)) or "<none>"
            raise ProfileLoadError(f"Unknown profile '{wanted}'. Available: {available}")
        return profile

    def scan_devices(self, timeout_s: float, *, profile_id: str | None = None) -> list[ScanResult]:
        adapter = self.adapter_factory(self.resolve_profile(profile_id))
        return asyncio.run(survey(adapter, timeout_s))

    def read_pins(
        self,
        device_name: str | None = None,
        *,
        frame: str = "telemetry",
        profile_id: str | None = None,
        timeout_s: float | None = None,
        characteristic_uuid: str | None = None,
        observer: ScanObserver | None = None,
    ) -> SessionOutcome:
        if frame not in FRAMES:
            raise ValueError(f"Unknown frame '{frame}'. Expected one of: {', '.join(FRAMES)}")
        profile = self.resolve_profile(profile_id)
        role, decoder = FRAMES[frame]
        session = PinSession(self.adapter_factory(profile), observer=observer)
        outcome = asyncio.run(
            session.read(
                _target_name(device_name, profile),
                canonical_uuid(characteristic_uuid or getattr(profile.characteristics, role)),
                profile.scan_timeout_s if timeout_s is None else timeout_s,
                decoder=decoder,
            )
        )
        return _checked(outcome)

    def write_pins(
        self,
        entries: Sequence[PinWriteEntry],
        device_name: str | None = None,
        *,
        profile_id: str | None = None,
        timeout_s: float | None = None,
        characteristic_uuid: str | None = None,
        observer: ScanObserver | None = None,
    ) -> SessionOutcome:
        if not entries:
            raise EncodeError("At least one pin write is required")
        profile = self.resolve_profile(profile_id)
        session = PinSession(self.adapter_factory(profile), observer=observer)
        outcome = asyncio.run(
            session.write(
                _target_name(device_name, profile),
                canonical_uuid(characteristic_uuid or profile.characteristics.write),
                entries,
                profile.scan_timeout_s if timeout_s is None else timeout_s,
            )
        )
        return _checked(outcome)


def _target_name(device_name: str | None, profile: DeviceProfile) -> str:
    name = (device_name or profile.device_name or "").strip()
    if not name:
        raise DeviceSelectionError(
            f"No device name given and profile '{profile.id}' does not define device_name."
        )
    return name


def _checked(outcome: SessionOutcome) -> SessionOutcome:
    if outcome.failure is not None:
        raise SessionError(outcome.failure)
    return outcome
