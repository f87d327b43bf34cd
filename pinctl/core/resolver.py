"""Characteristic lookup across discovered services.

Some BLE stacks silently drop characteristics when discovery is filtered by
UUID. Resolution therefore runs an ordered list of strategies, filtered
first and unfiltered second, over every service before giving up.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence

from pinctl.core.errors import DiscoveryError, ResolutionNotFound
from pinctl.core.model import (
    CharacteristicDescriptor,
    ResolvedCharacteristic,
    ServiceDescriptor,
    canonical_uuid,
)
from pinctl.transports.base import Adapter

LOGGER = logging.getLogger(__name__)

Strategy = Callable[[Adapter, ServiceDescriptor, str], Awaitable[CharacteristicDescriptor | None]]


async def _filtered(
    adapter: Adapter,
    service: ServiceDescriptor,
    target_uuid: str,
) -> CharacteristicDescriptor | None:
    found = await adapter.discover_characteristics(service, uuid_filter=target_uuid)
    return found[0] if found else None


async def _unfiltered(
    adapter: Adapter,
    service: ServiceDescriptor,
    target_uuid: str,
) -> CharacteristicDescriptor | None:
    for characteristic in await adapter.discover_characteristics(service):
        if canonical_uuid(characteristic.uuid) == target_uuid:
            return characteristic
    return None


STRATEGIES: tuple[tuple[str, Strategy], ...] = (
    ("filtered", _filtered),
    ("unfiltered", _unfiltered),
)


async def resolve_characteristic(
    adapter: Adapter,
    services: Sequence[ServiceDescriptor],
    target_uuid: str,
) -> ResolvedCharacteristic:
    target = canonical_uuid(target_uuid)
    for strategy_name, strategy in STRATEGIES:
        for service in services:
            try:
                characteristic = await strategy(adapter, service, target)
            except DiscoveryError as exc:
                LOGGER.debug("Skipping service %s (%s discovery): %s", service.uuid, strategy_name, exc)
                continue
            if characteristic is not None:
                LOGGER.debug(
                    "Resolved %s in service %s via %s discovery",
                    target,
                    service.uuid,
                    strategy_name,
                )
                return ResolvedCharacteristic(characteristic=characteristic, service_uuid=service.uuid)
        LOGGER.debug("%s discovery did not find %s", strategy_name.capitalize(), target)

    raise ResolutionNotFound(
        f"Characteristic {target} not found in {len(services)} service(s)"
    )
