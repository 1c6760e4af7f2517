"""Token registry refresh and listing.

The refresh walks every supported chain, pulls the aggregator's token
list and upserts it into the registry the Decimal Resolver reads from.
Calls are spaced by a RateLimiter to stay under the upstream rate limit.
"""

import logging
from typing import Any, Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from profitpath.errors import ProfitPathError
from profitpath.ledger.repository import TokenRepository
from profitpath.routing.base import Token
from profitpath.routing.decimals import coerce_decimals
from profitpath.routing.okx import AGGREGATOR_ALL_TOKENS, OkxClient
from profitpath.utils.ratelimit import RateLimiter

logger = logging.getLogger(__name__)

SUPPORTED_CHAIN_INDICES = (
    1, 56, 137, 42161, 43114, 324, 8453, 59144, 5000,
    4200, 81457, 169, 534352, 7000, 195, 501, 784, 607,
)


def token_from_aggregator(raw: dict, chain: str) -> Optional[Token]:
    """Map an all-tokens entry to a Token; entries without an address are skipped."""
    address = raw.get("tokenContractAddress")
    if not address:
        return None
    return Token(
        symbol=str(raw.get("tokenSymbol", "")),
        name=str(raw.get("tokenName", "")),
        chain=str(chain),
        address=str(address),
        decimals=coerce_decimals(raw.get("decimals")),
        logo_url=raw.get("tokenLogoUrl"),
    )


class TokenService:
    """Keeps the token registry in sync with the aggregator."""

    def __init__(
        self,
        client: OkxClient,
        session_factory: async_sessionmaker[AsyncSession],
        limiter: Optional[RateLimiter] = None,
    ):
        self.client = client
        self.session_factory = session_factory
        self.limiter = limiter or RateLimiter(interval=1.2)

    async def fetch_chain_tokens(self, chain: str) -> list[Token]:
        """Fetch one chain's token list from the aggregator."""
        await self.limiter.acquire()
        payload = await self.client.get(AGGREGATOR_ALL_TOKENS, {"chainIndex": chain})
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, list):
            logger.error(f"No token data received for chain {chain}: {payload}")
            return []
        tokens = []
        for raw in data:
            if isinstance(raw, dict):
                token = token_from_aggregator(raw, chain)
                if token is not None:
                    tokens.append(token)
        return tokens

    async def refresh_tokens(
        self, chain_indices: Iterable[Any] = SUPPORTED_CHAIN_INDICES
    ) -> dict[str, int]:
        """Refresh the registry for each chain.

        A failing chain is logged and skipped; the others still refresh.

        Returns:
            Tokens written per chain
        """
        written: dict[str, int] = {}
        for chain_index in chain_indices:
            chain = str(chain_index)
            try:
                tokens = await self.fetch_chain_tokens(chain)
                async with self.session_factory() as session:
                    written[chain] = await TokenRepository(session).upsert_tokens(tokens)
                    await session.commit()
            except (ProfitPathError, SQLAlchemyError) as e:
                logger.error(f"Token refresh failed for chain {chain}: {e}")
                continue
            logger.info(f"Stored {written[chain]} tokens for chain {chain}")

        logger.info(f"Token refresh complete: {sum(written.values())} tokens")
        return written

    async def list_tokens(self, chain: Optional[str] = None) -> list[Token]:
        async with self.session_factory() as session:
            return await TokenRepository(session).list_tokens(chain)

    async def list_chains(self) -> list[str]:
        async with self.session_factory() as session:
            return await TokenRepository(session).list_chains()
