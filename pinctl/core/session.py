"""One scan -> connect -> resolve -> read/write -> disconnect session."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from pinctl.core.codec import decode_telemetry, encode_pin_write
from pinctl.core.errors import PinctlError, ScanTimeout
from pinctl.core.model import (
    CharacteristicDescriptor,
    Found,
    PinReading,
    PinWriteEntry,
    ScanResult,
    SessionFailure,
    SessionOutcome,
    SessionState,
)
from pinctl.core.resolver import resolve_characteristic
from pinctl.core.scan import ScanObserver, race_scan_for_name
from pinctl.transports.base import Adapter

LOGGER = logging.getLogger(__name__)

Decoder = Callable[[bytes], Sequence[PinReading]]


class PinSession:
    """Drives a single peripheral through one read or one write.

    Every step runs at most once. The first error moves the session to
    FAILED with the phase it happened in; a connection that was opened is
    always closed again, and a failing disconnect is only recorded.
    """

    def __init__(self, adapter: Adapter, *, observer: ScanObserver | None = None) -> None:
        self.adapter = adapter
        self.observer = observer
        self.state = SessionState.IDLE
        self._history: list[SessionState] = [SessionState.IDLE]
        self._details: dict[str, Any] = {}

    def _enter(self, state: SessionState) -> None:
        LOGGER.debug("Session %s -> %s", self.state.value, state.value)
        self.state = state
        self._history.append(state)

    async def read(
        self,
        target_name: str,
        characteristic_uuid: str,
        timeout: float,
        *,
        decoder: Decoder = decode_telemetry,
    ) -> SessionOutcome:
        async def _read(characteristic: CharacteristicDescriptor) -> None:
            self._enter(SessionState.READING)
            raw = await self.adapter.read(characteristic)
            LOGGER.debug("Read %d byte(s): %s", len(raw), raw.hex())
            self._details["readings"] = tuple(decoder(raw))

        return await self._run(target_name, characteristic_uuid, timeout, _read)

    async def write(
        self,
        target_name: str,
        characteristic_uuid: str,
        entries: Sequence[PinWriteEntry],
        timeout: float,
    ) -> SessionOutcome:
        payload = encode_pin_write(entries)

        async def _write(characteristic: CharacteristicDescriptor) -> None:
            self._enter(SessionState.WRITING)
            LOGGER.debug("Writing %d byte(s): %s", len(payload), payload.decode("utf-8"))
            self._details["bytes_written"] = await self.adapter.write(characteristic, payload)

        return await self._run(target_name, characteristic_uuid, timeout, _write)

    async def _disconnect(self, handle: Any) -> str | None:
        self._enter(SessionState.DISCONNECTING)
        try:
            await self.adapter.disconnect(handle)
        except PinctlError as exc:
            LOGGER.warning("Disconnect warning: %s", exc)
            return str(exc)
        return None

    async def _run(
        self,
        target_name: str,
        characteristic_uuid: str,
        timeout: float,
        operation: Callable[[CharacteristicDescriptor], Awaitable[None]],
    ) -> SessionOutcome:
        if self.state is not SessionState.IDLE:
            raise RuntimeError("PinSession instances run a single session")

        failure: SessionFailure | None = None
        disconnect_error: str | None = None
        handle: Any = None
        try:
            self._enter(SessionState.SCANNING)
            outcome = await race_scan_for_name(
                self.adapter,
                target_name,
                timeout,
                observer=self.observer,
            )
            if not isinstance(outcome, Found):
                raise ScanTimeout(f"Device '{target_name}' not found after {timeout:g} seconds")
            device: ScanResult = outcome.result
            self._details["device"] = device

            self._enter(SessionState.CONNECTING)
            handle = await self.adapter.connect(device.address)

            self._enter(SessionState.DISCOVERING_SERVICES)
            services = await self.adapter.discover_services(handle)
            LOGGER.debug("Discovered %d service(s)", len(services))

            self._enter(SessionState.RESOLVING_CHARACTERISTIC)
            resolved = await resolve_characteristic(self.adapter, services, characteristic_uuid)
            self._details["service_uuid"] = resolved.service_uuid
            self._details["characteristic_uuid"] = resolved.characteristic.uuid

            await operation(resolved.characteristic)
        except PinctlError as exc:
            LOGGER.debug("Session failed while %s: %s", self.state.value, exc)
            failure = SessionFailure(phase=self.state, error=exc)
        finally:
            if handle is not None:
                disconnect_error = await self._disconnect(handle)

        self._enter(SessionState.FAILED if failure else SessionState.DONE)
        return SessionOutcome(
            state=self.state,
            history=tuple(self._history),
            failure=failure,
            disconnect_error=disconnect_error,
            **self._details,
        )
