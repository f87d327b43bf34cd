"""Domain-specific errors for pinctl."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pinctl.core.model import SessionFailure


class PinctlError(Exception):
    """Base error for pinctl."""


class ProfileValidationError(PinctlError):
    """Raised when a profile file does not conform to schema or semantics."""


class ProfileLoadError(PinctlError):
    """Raised when loading profile sources fails."""


class UUIDFormatError(PinctlError, ValueError):
    """Raised when a string is not a 16-bit, 32-bit, or 128-bit UUID."""


class DeviceSelectionError(PinctlError):
    """Raised when no target device name can be determined."""


class ScanFailure(PinctlError):
    """Raised when scanning cannot be started at all."""


class AdapterError(ScanFailure):
    """Raised when the Bluetooth adapter cannot be enabled."""


class ScanError(ScanFailure):
    """Raised when the adapter refuses to start a scan."""


class ScanTimeout(PinctlError):
    """Raised when no advertisement matched before the scan timeout."""


class ConnectError(PinctlError):
    """Raised on BLE connect failures."""


class DiscoveryError(PinctlError):
    """Raised when service or characteristic discovery fails."""


class ResolutionNotFound(PinctlError):
    """Raised when no service exposes the requested characteristic."""


class DecodeError(PinctlError):
    """Raised when a device payload cannot be decoded."""

    reason = "malformed"


class FrameTooShortError(DecodeError):
    """Raised when a frame holds fewer bytes than its header announces."""

    reason = "too_short"


class EncodeError(PinctlError):
    """Raised when a pin command cannot be encoded."""


class ReadError(PinctlError):
    """Raised when a characteristic read fails."""


class WriteError(PinctlError):
    """Raised when a characteristic write fails."""


class DisconnectError(PinctlError):
    """Raised when tearing down a connection fails."""


class SessionError(PinctlError):
    """Raised when a session ends in the failed state."""

    def __init__(self, failure: SessionFailure) -> None:
        super().__init__(f"{failure.phase.label} failed: {failure.error}")
        self.failure = failure
