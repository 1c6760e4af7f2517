"""Token decimal resolution with ordered fallback tiers.

Tiers, in order:
1. The token registry, keyed by (address, chain)
2. The aggregator's token list for the chain, matched case-insensitively
3. DEFAULT_DECIMALS

A tier that errors or finds nothing hands over to the next one; the
resolver itself never raises.
"""

import logging
from typing import Any, Awaitable, Callable, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from profitpath.ledger.repository import TokenRepository
from profitpath.routing.base import DEFAULT_DECIMALS
from profitpath.routing.okx import AGGREGATOR_ALL_TOKENS, OkxClient

logger = logging.getLogger(__name__)

DecimalLookup = Callable[[str, str], Awaitable[Optional[int]]]


def coerce_decimals(value: Any) -> Optional[int]:
    """Accept ints and digit strings as decimal counts; anything else is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def registry_lookup(session_factory: async_sessionmaker[AsyncSession]) -> DecimalLookup:
    """Tier 1: the token registry."""

    async def lookup(address: str, chain: str) -> Optional[int]:
        async with session_factory() as session:
            decimals = await TokenRepository(session).get_decimals(address, chain)
        return coerce_decimals(decimals)

    lookup.__name__ = "registry"
    return lookup


def aggregator_lookup(client: OkxClient) -> DecimalLookup:
    """Tier 2: the aggregator's full token list for the chain."""

    async def lookup(address: str, chain: str) -> Optional[int]:
        payload = await client.get(AGGREGATOR_ALL_TOKENS, {"chainIndex": chain})
        tokens = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(tokens, list):
            return None
        wanted = address.lower()
        for token in tokens:
            if str(token.get("tokenContractAddress", "")).lower() == wanted:
                return coerce_decimals(token.get("decimals"))
        return None

    lookup.__name__ = "aggregator_token_list"
    return lookup


class DecimalResolver:
    """Runs decimal lookups in order and stops at the first hit."""

    def __init__(self, lookups: Sequence[DecimalLookup], default: int = DEFAULT_DECIMALS):
        self.lookups = list(lookups)
        self.default = default

    async def resolve(self, address: str, chain: str) -> int:
        """Resolve a token's decimals; always returns a count."""
        for lookup in self.lookups:
            name = getattr(lookup, "__name__", repr(lookup))
            try:
                decimals = await lookup(address, chain)
            except Exception as e:
                logger.warning(
                    f"Decimal lookup '{name}' failed for {address} on chain {chain}: {e}"
                )
                continue
            if decimals is not None:
                logger.debug(f"Decimals for {address} on chain {chain} from {name}: {decimals}")
                return decimals

        logger.info(
            f"Decimals for {address} on chain {chain} not found, defaulting to {self.default}"
        )
        return self.default


def create_decimal_resolver(
    session_factory: async_sessionmaker[AsyncSession],
    client: OkxClient,
) -> DecimalResolver:
    """Create the standard registry -> aggregator -> default resolver."""
    return DecimalResolver([registry_lookup(session_factory), aggregator_lookup(client)])
