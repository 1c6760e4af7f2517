"""Cross-chain quote, route and bridge discovery service."""

import logging
from typing import Any, Optional

from profitpath.routing.base import Quote
from profitpath.routing.decimals import DecimalResolver
from profitpath.routing.normalizer import parse_cross_chain_quote
from profitpath.routing.okx import (
    CROSS_CHAIN_BRIDGE_PAIRS,
    CROSS_CHAIN_QUOTE,
    CROSS_CHAIN_ROUTE,
    CROSS_CHAIN_SUPPORTED_TOKENS,
    OkxClient,
    extract_data,
)
from profitpath.web.services.quote_service import (
    require_fields,
    resolve_amount,
    token_address,
)

logger = logging.getLogger(__name__)


class BridgeService:
    """Cross-chain routing backed by the aggregator's bridge endpoints.

    Cross-chain quotes are single-route; the aggregator picks the route.
    Source and destination chains may also be equal.
    """

    def __init__(
        self,
        client: OkxClient,
        resolver: DecimalResolver,
        default_slippage: str = "0.01",
    ):
        self.client = client
        self.resolver = resolver
        self.default_slippage = default_slippage

    async def get_quote(
        self,
        from_chain: str,
        to_chain: str,
        from_token: str,
        to_token: str,
        amount: str,
        slippage: Optional[str] = None,
        from_token_decimals: Optional[int] = None,
    ) -> Quote:
        """Get the cross-chain quote for a human-readable amount.

        Raises:
            ValidationError: Missing fields or malformed amount
            UpstreamError: Aggregator failure
            NotFoundError: No bridge route
        """
        require_fields(
            fromChain=from_chain,
            toChain=to_chain,
            fromToken=from_token,
            toToken=to_token,
            amount=amount,
        )
        from_address = token_address(from_token)
        to_address = token_address(to_token)
        amount_in = await resolve_amount(
            self.resolver, amount, from_address, str(from_chain), decimals=from_token_decimals
        )

        logger.info(
            f"Cross-chain quote: {amount_in} {from_address} (chain {from_chain}) -> "
            f"{to_address} (chain {to_chain})"
        )
        payload = await self.client.get(
            CROSS_CHAIN_QUOTE,
            {
                "fromChainIndex": from_chain,
                "toChainIndex": to_chain,
                "fromTokenAddress": from_address,
                "toTokenAddress": to_address,
                "amount": amount_in,
                "slippage": slippage or self.default_slippage,
            },
        )
        return parse_cross_chain_quote(payload, str(from_chain), str(to_chain))

    async def get_route(
        self,
        from_chain_id: str,
        to_chain_id: str,
        from_token_address: str,
        to_token_address: str,
        amount: str,
    ) -> Any:
        """Raw route information for an amount already in minimal units."""
        require_fields(
            fromChainId=from_chain_id,
            toChainId=to_chain_id,
            fromTokenAddress=from_token_address,
            toTokenAddress=to_token_address,
            amount=amount,
        )
        payload = await self.client.get(
            CROSS_CHAIN_ROUTE,
            {
                "fromChainId": from_chain_id,
                "toChainId": to_chain_id,
                "fromTokenAddress": from_token_address,
                "toTokenAddress": to_token_address,
                "amount": amount,
            },
        )
        return extract_data(payload, not_found="No cross-chain route found")

    async def _supported_tokens(self) -> list[dict]:
        payload = await self.client.get(CROSS_CHAIN_SUPPORTED_TOKENS)
        data = extract_data(payload, not_found="No cross-chain tokens returned")
        return [item for item in data if isinstance(item, dict)]

    async def get_supported_chains(self) -> list[str]:
        """Unique chain ids that have bridgeable tokens, in upstream order."""
        chains: list[str] = []
        for token in await self._supported_tokens():
            chain_id = str(token.get("chainId"))
            if chain_id not in chains:
                chains.append(chain_id)
        return chains

    async def get_supported_tokens(self, chain_id: str) -> list[dict]:
        """Bridgeable tokens on one chain."""
        require_fields(chainId=chain_id)
        return [
            token
            for token in await self._supported_tokens()
            if str(token.get("chainId")) == str(chain_id)
        ]

    async def get_supported_token_pairs(
        self, from_chain_id: str, from_token_address: str
    ) -> list[dict]:
        """Valid bridge destinations for one source token."""
        require_fields(fromChainId=from_chain_id, fromTokenAddress=from_token_address)
        payload = await self.client.get(CROSS_CHAIN_BRIDGE_PAIRS)
        data = extract_data(payload, not_found="No bridge token pairs returned")
        wanted = str(from_token_address).lower()
        return [
            pair
            for pair in data
            if isinstance(pair, dict)
            and str(pair.get("fromChainId")) == str(from_chain_id)
            and str(pair.get("fromTokenAddress", "")).lower() == wanted
        ]
