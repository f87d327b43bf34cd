"""Wire formats spoken by the ESP32 pin controller firmware.

Two frame layouts are published by the device:

* telemetry (ADC) frames: ``num_pins, (pin, value_hi, value_lo) * num_pins``
* pin-state frames: ``num_pins, (pin, value) * num_pins``

The firmware writes both into a fixed, zero-padded characteristic buffer, so
bytes after the announced entries are ignored. Commands travel the other way
as compact UTF-8 JSON.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable

from pinctl.core.errors import EncodeError, FrameTooShortError
from pinctl.core.model import PinReading, PinWriteEntry

_ASSIGNMENT_RE = re.compile(r"^\s*(\d+)\s*[=:]\s*(\d+)\s*$")
_BYTE_MAX = 0xFF


def _decode_entries(raw: bytes, entry_size: int, *, frame: str) -> list[tuple[int, ...]]:
    if not raw:
        raise FrameTooShortError(f"Empty {frame} frame: missing pin count byte")
    num_pins = raw[0]
    needed = 1 + entry_size * num_pins
    if len(raw) < needed:
        raise FrameTooShortError(
            f"{frame.capitalize()} frame announces {num_pins} pin(s) and needs "
            f"{needed} bytes, got {len(raw)}"
        )
    return [
        tuple(raw[offset : offset + entry_size])
        for offset in range(1, needed, entry_size)
    ]


def decode_telemetry(raw: bytes) -> list[PinReading]:
    """Decode an ADC telemetry frame into readings with 16-bit values."""
    return [
        PinReading(pin=pin, value=(high << 8) | low)
        for pin, high, low in _decode_entries(bytes(raw), 3, frame="telemetry")
    ]


def decode_pin_states(raw: bytes) -> list[PinReading]:
    """Decode a pin-state frame into readings with 8-bit values."""
    return [
        PinReading(pin=pin, value=value)
        for pin, value in _decode_entries(bytes(raw), 2, frame="pin-state")
    ]


def encode_pin_write(entries: Iterable[PinWriteEntry]) -> bytes:
    writes = []
    for entry in entries:
        for field_name, value in (("pin_num", entry.pin_num), ("state", entry.state)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise EncodeError(f"{field_name} must be an integer, got {value!r}")
            if not 0 <= value <= _BYTE_MAX:
                raise EncodeError(f"{field_name} must be within 0-{_BYTE_MAX}, got {value}")
        writes.append({"pin_num": entry.pin_num, "state": entry.state})
    return json.dumps({"pin_writes": writes}, separators=(",", ":")).encode("utf-8")


def parse_pin_assignment(text: str) -> PinWriteEntry:
    """Parse ``PIN=STATE`` (or ``PIN:STATE``) as typed on the command line."""
    match = _ASSIGNMENT_RE.match(text)
    if not match:
        raise EncodeError(f"Invalid pin assignment '{text}'. Expected PIN=STATE, e.g. 14=100")
    return PinWriteEntry(pin_num=int(match.group(1)), state=int(match.group(2)))
