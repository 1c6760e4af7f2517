"""Swap orchestration: validate -> approve -> build swap or bridge transaction.

This service builds unsigned transaction payloads only. It does NOT sign
or broadcast anything; the caller's wallet does that.

Each step is independent. Nothing is remembered between calls, so a
caller resumes by passing the previous step's output back in.
"""

import logging
from typing import Any, Mapping, Optional, Union

from profitpath.amounts import to_minimal_units
from profitpath.errors import NotFoundError, ValidationError
from profitpath.routing.base import (
    DEFAULT_DECIMALS,
    Quote,
    SwapIntent,
    SwapTransaction,
    is_evm_chain,
)
from profitpath.routing.decimals import coerce_decimals
from profitpath.routing.okx import (
    AGGREGATOR_APPROVE,
    AGGREGATOR_SWAP,
    AGGREGATOR_SWAP_INSTRUCTION,
    CROSS_CHAIN_BUILD_TX,
    OkxClient,
    extract_data,
)
from profitpath.web.services.quote_service import require_fields

logger = logging.getLogger(__name__)

# Ask the bridge for its optimal route (net received after fees and slippage)
OPTIMAL_ROUTE_SORT = "1"

QuoteLike = Union[Quote, Mapping[str, Any], None]


def quote_from_decimals(quote: QuoteLike) -> int:
    """Source-token decimals carried by a quote, or DEFAULT_DECIMALS."""
    decimals = None
    if isinstance(quote, Quote):
        decimals = quote.from_token.decimals
    elif isinstance(quote, Mapping):
        from_token = quote.get("fromToken")
        if isinstance(from_token, Mapping):
            decimals = coerce_decimals(from_token.get("decimals", from_token.get("decimal")))
    return decimals if decimals is not None else DEFAULT_DECIMALS


def quote_slippage(quote: QuoteLike) -> Optional[str]:
    """Slippage a quote was priced with, if it carries one."""
    if isinstance(quote, Quote):
        value = quote.raw.get("slippage")
    elif isinstance(quote, Mapping):
        value = quote.get("slippage")
    else:
        value = None
    return str(value) if value not in (None, "") else None


def _first_item(data: Any) -> dict:
    item = data[0] if isinstance(data, list) and data else data
    return item if isinstance(item, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if value not in (None, "") else None


class SwapOrchestrator:
    """Builds approval, swap and bridge transactions against the aggregator."""

    def __init__(
        self,
        client: OkxClient,
        default_slippage: str = "0.5",
        default_bridge_slippage: str = "0.01",
    ):
        self.client = client
        self.default_slippage = default_slippage
        self.default_bridge_slippage = default_bridge_slippage

    async def get_approval_data(
        self,
        chain_index: str,
        token_contract_address: str,
        approve_amount: str,
    ) -> Any:
        """Fetch approval transaction data, returned unchanged.

        Args:
            chain_index: Chain of the token
            token_contract_address: Token to approve for the router
            approve_amount: Allowance in minimal units

        Raises:
            ValidationError: Missing field or non-integer amount
            UpstreamError: Aggregator failure
            NotFoundError: No approval data returned
        """
        require_fields(
            chainIndex=chain_index,
            tokenContractAddress=token_contract_address,
            approveAmount=approve_amount,
        )
        if not str(approve_amount).strip().isdigit():
            raise ValidationError(
                f"Invalid approveAmount: {approve_amount!r} (expected minimal units)"
            )

        logger.info(f"Approval data for {token_contract_address} on chain {chain_index}")
        payload = await self.client.get(
            AGGREGATOR_APPROVE,
            {
                "chainIndex": chain_index,
                "tokenContractAddress": token_contract_address,
                "approveAmount": str(approve_amount).strip(),
            },
        )
        return extract_data(payload, not_found="No approval data returned")

    async def build(self, intent: SwapIntent, quote: QuoteLike = None) -> SwapTransaction:
        """Build the swap or bridge transaction an intent calls for."""
        if intent.is_cross_chain:
            return await self.build_bridge_transaction(intent, quote)
        return await self.build_swap(intent, quote)

    async def build_swap(self, intent: SwapIntent, quote: QuoteLike = None) -> SwapTransaction:
        """Build a same-chain swap transaction.

        The amount is scaled with the quote's source-token decimals. EVM
        chains use the swap endpoint, all others the instruction endpoint.

        Raises:
            ValidationError: Invalid intent (raised before any call)
            UpstreamError: Aggregator failure
            NotFoundError: No transaction returned
        """
        intent.validate()
        amount = to_minimal_units(intent.amount, quote_from_decimals(quote))
        chain = str(intent.from_chain)
        path = AGGREGATOR_SWAP if is_evm_chain(chain) else AGGREGATOR_SWAP_INSTRUCTION

        logger.info(f"Building swap on chain {chain} via {path}")
        payload = await self.client.get(
            path,
            {
                "chainIndex": chain,
                "fromTokenAddress": intent.from_token_address,
                "toTokenAddress": intent.to_token_address,
                "amount": amount,
                "slippage": intent.slippage or self.default_slippage,
                "userWalletAddress": intent.user_wallet_address,
            },
        )
        item = _first_item(extract_data(payload, not_found="No swap transaction returned"))
        if not item:
            raise NotFoundError("No swap transaction returned", payload=payload)

        router = item.get("routerResult") if isinstance(item.get("routerResult"), dict) else {}
        tx = item.get("tx", item)
        minimum = tx.get("minReceiveAmount") if isinstance(tx, dict) else None
        return SwapTransaction(
            tx=tx,
            router=router or None,
            from_token_amount=_as_str(router.get("fromTokenAmount")) or amount,
            to_token_amount=_as_str(router.get("toTokenAmount")),
            minimum_receive=_as_str(minimum),
            raw=item,
        )

    async def build_bridge_transaction(
        self, intent: SwapIntent, quote: QuoteLike = None
    ) -> SwapTransaction:
        """Build a cross-chain transaction through the bridge build endpoint.

        Always requests the optimal route. Slippage comes from the intent,
        then the quote, then the bridge default.

        Raises:
            ValidationError: Invalid intent (raised before any call)
            UpstreamError: Aggregator failure
            NotFoundError: No transaction data returned
        """
        intent.validate()
        amount = to_minimal_units(intent.amount, quote_from_decimals(quote))
        slippage = intent.slippage or quote_slippage(quote) or self.default_bridge_slippage

        logger.info(
            f"Building bridge tx {intent.from_chain} -> {intent.to_chain} "
            f"for {intent.user_wallet_address}"
        )
        payload = await self.client.get(
            CROSS_CHAIN_BUILD_TX,
            {
                "fromChainIndex": intent.from_chain,
                "toChainIndex": intent.to_chain,
                "fromTokenAddress": intent.from_token_address,
                "toTokenAddress": intent.to_token_address,
                "amount": amount,
                "slippage": slippage,
                "userWalletAddress": intent.user_wallet_address,
                "receiveAddress": intent.effective_receive_address,
                "sort": OPTIMAL_ROUTE_SORT,
            },
        )
        item = _first_item(extract_data(payload, not_found="No transaction data returned"))
        if not item.get("tx"):
            raise NotFoundError("No transaction data returned by aggregator", payload=payload)

        # Upstream spells the field "minmumReceive"
        minimum = item.get("minmumReceive") or item.get("minimumReceive")
        return SwapTransaction(
            tx=item["tx"],
            router=item.get("router"),
            from_token_amount=_as_str(item.get("fromTokenAmount")),
            to_token_amount=_as_str(item.get("toTokenAmount")),
            minimum_receive=_as_str(minimum),
            raw=item,
        )
