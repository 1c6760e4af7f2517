"""Same-chain quote service.

Pipeline: resolve decimals -> minimal units -> signed quote call ->
normalized Quote list. This service is read-only; it never builds or
executes transactions.
"""

import logging
from typing import Optional

from profitpath.amounts import to_minimal_units
from profitpath.errors import ValidationError
from profitpath.routing.base import Quote
from profitpath.routing.decimals import DecimalResolver
from profitpath.routing.normalizer import parse_same_chain_quotes
from profitpath.routing.okx import AGGREGATOR_QUOTE, OkxClient

logger = logging.getLogger(__name__)


def token_address(token_id: str) -> str:
    """Contract address from a token identifier like '0xabc...-ETH'."""
    return str(token_id).split("-")[0]


def require_fields(**fields) -> None:
    """Raise a ValidationError naming every blank field."""
    missing = [name for name, value in fields.items() if value in (None, "")]
    if missing:
        raise ValidationError(f"Missing required parameters: {', '.join(missing)}")


async def resolve_amount(
    resolver: DecimalResolver,
    amount: Optional[str],
    address: str,
    chain: str,
    decimals: Optional[int] = None,
    price_probe: bool = False,
) -> str:
    """Minimal-unit amount for a token, resolving decimals when needed."""
    if price_probe and (amount is None or str(amount).strip() in ("", "0")):
        # Price-only query: skip decimal resolution, send one minimal unit
        return to_minimal_units(None, 0, price_probe=True)
    if decimals is None:
        decimals = await resolver.resolve(address, chain)
    return to_minimal_units(amount, decimals, price_probe=price_probe)


class QuoteService:
    """Fetches and normalizes same-chain quotes from the aggregator."""

    def __init__(self, client: OkxClient, resolver: DecimalResolver):
        self.client = client
        self.resolver = resolver

    async def get_quotes(
        self,
        from_chain: str,
        to_chain: str,
        from_token: str,
        to_token: str,
        amount: Optional[str] = None,
    ) -> list[Quote]:
        """Get candidate quotes, best first.

        An absent or zero amount is a price probe and is quoted for one
        minimal unit.

        Raises:
            ValidationError: Missing fields, or source and destination chains differ
            UpstreamError: Aggregator failure
            NotFoundError: No route for the pair
        """
        require_fields(
            fromChain=from_chain, toChain=to_chain, fromToken=from_token, toToken=to_token
        )
        if str(from_chain) != str(to_chain):
            raise ValidationError(
                "Cross-chain quotes are not supported by the same-chain quote endpoint; "
                "use the cross-chain quote instead."
            )

        chain = str(from_chain)
        from_address = token_address(from_token)
        to_address = token_address(to_token)
        amount_in = await resolve_amount(
            self.resolver, amount, from_address, chain, price_probe=True
        )

        logger.info(f"Quoting {amount_in} {from_address} -> {to_address} on chain {chain}")
        payload = await self.client.get(
            AGGREGATOR_QUOTE,
            {
                "chainId": chain,
                "fromTokenAddress": from_address,
                "toTokenAddress": to_address,
                "amount": amount_in,
            },
        )
        quotes = parse_same_chain_quotes(payload, chain)
        best = quotes[0]
        logger.info(
            f"Got {len(quotes)} quote(s) on chain {chain}. "
            f"Best: {best.router_name or 'aggregator'} ({best.amount_out})"
        )
        return quotes
