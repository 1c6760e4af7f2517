"""Wallet portfolio lookups (total value and token balances)."""

import logging
from typing import Any

from profitpath.routing.okx import (
    BALANCE_TOKEN_BALANCES,
    BALANCE_TOTAL_VALUE,
    OkxClient,
    extract_data,
)
from profitpath.utils.ratelimit import RateLimitedCache
from profitpath.web.services.quote_service import require_fields

logger = logging.getLogger(__name__)

DEFAULT_CHAINS = "1"


class PortfolioService:
    """Portfolio data for a wallet, cached per address and chain set."""

    def __init__(self, client: OkxClient, cache: RateLimitedCache):
        self.client = client
        self.cache = cache

    async def _fetch(self, path: str, address: str, chains: str, not_found: str) -> Any:
        logger.info(f"Portfolio lookup {path} for {address} on chains {chains}")
        payload = await self.client.get(
            path, {"address": address, "accountId": address, "chains": chains}
        )
        return extract_data(payload, not_found=not_found)

    async def get_total_value(self, address: str, chains: str = DEFAULT_CHAINS) -> Any:
        """Total portfolio value across the given chains."""
        require_fields(address=address)
        return await self.cache.get_or_fetch(
            f"total-value:{address}:{chains}",
            lambda: self._fetch(
                BALANCE_TOTAL_VALUE, address, chains, "No portfolio value returned"
            ),
        )

    async def get_token_balances(self, address: str, chains: str = DEFAULT_CHAINS) -> Any:
        """Per-token balances across the given chains."""
        require_fields(address=address)
        return await self.cache.get_or_fetch(
            f"token-balances:{address}:{chains}",
            lambda: self._fetch(
                BALANCE_TOKEN_BALANCES, address, chains, "No token balances returned"
            ),
        )
