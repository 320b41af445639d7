from __future__ import annotations

from functools import lru_cache
from typing import AsyncIterator

from allocation.connectors.property_registry import PropertyRegistryClient
from allocation.core.config import settings
from allocation.services.directory import PropertyDirectory
from allocation.services.rental_rules import RentalRuleEngine, RentalRulesConfig


@lru_cache
def get_rule_engine() -> RentalRuleEngine:
    return RentalRuleEngine(RentalRulesConfig.from_settings(settings))


async def get_directory() -> AsyncIterator[PropertyDirectory]:
    client = PropertyRegistryClient.from_settings(settings)
    try:
        yield client
    finally:
        await client.aclose()
