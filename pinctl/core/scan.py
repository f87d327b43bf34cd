"""Name-matching scan race and fixed-duration device survey."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from pinctl.core.model import Found, RaceOutcome, ScanResult, TimedOut
from pinctl.transports.base import Adapter

LOGGER = logging.getLogger(__name__)

ScanObserver = Callable[[ScanResult], None]


async def race_scan_for_name(
    adapter: Adapter,
    target_name: str,
    timeout: float,
    *,
    observer: ScanObserver | None = None,
) -> RaceOutcome:
    """Scan until a device advertises `target_name` or `timeout` seconds pass.

    The advertisement callback and the timeout timer both write to one
    future; whichever lands first decides the outcome and the other write is
    dropped. The scan is stopped exactly once before returning, on every path.

    Raises AdapterError or ScanError (both ScanFailure) when the radio cannot
    be enabled or the scan cannot be started.
    """
    if timeout <= 0:
        raise ValueError(f"timeout must be positive, got {timeout}")

    await adapter.enable()

    loop = asyncio.get_running_loop()
    outcome: asyncio.Future[RaceOutcome] = loop.create_future()
    wanted = target_name.casefold()

    def _on_result(result: ScanResult) -> None:
        if outcome.done():
            return
        if result.name.casefold() == wanted:
            LOGGER.debug("Matched %s at %s (%d dBm)", result.name, result.address, result.rssi)
            outcome.set_result(Found(result))
            return
        if observer is not None:
            try:
                observer(result)
            except Exception:
                LOGGER.exception("Scan observer raised for %s", result.address)

    def _on_timeout() -> None:
        if not outcome.done():
            LOGGER.debug("Scan for '%s' timed out after %ss", target_name, timeout)
            outcome.set_result(TimedOut())

    await adapter.start_scan(_on_result)
    timer = loop.call_later(timeout, _on_timeout)
    try:
        return await outcome
    finally:
        timer.cancel()
        if not outcome.done():
            outcome.cancel()
        await adapter.stop_scan()


async def survey(adapter: Adapter, duration: float) -> list[ScanResult]:
    """Collect advertisements for `duration` seconds, one entry per address."""
    if duration <= 0:
        raise ValueError(f"duration must be positive, got {duration}")

    await adapter.enable()
    latest: dict[str, ScanResult] = {}

    def _on_result(result: ScanResult) -> None:
        latest[result.address] = result

    await adapter.start_scan(_on_result)
    try:
        await asyncio.sleep(duration)
    finally:
        await adapter.stop_scan()
    return sorted(latest.values(), key=lambda r: (-r.rssi, r.address))
