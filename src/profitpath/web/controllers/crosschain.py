"""Cross-chain quote, route, bridge transaction and discovery endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from profitpath.routing.factory import (
    get_bridge_service,
    get_status_tracker,
    get_swap_orchestrator,
)
from profitpath.web.contracts.crosschain import CrossChainQuoteRequest
from profitpath.web.contracts.quotes import QuoteInfo
from profitpath.web.contracts.status import OrderStatusResponse
from profitpath.web.contracts.swaps import SwapRequest, SwapTransactionResponse
from profitpath.web.services.bridge_service import BridgeService
from profitpath.web.services.status_service import StatusTracker
from profitpath.web.services.swap_service import SwapOrchestrator

router = APIRouter(prefix="/crosschain", tags=["crosschain"])


@router.post("/quote", response_model=QuoteInfo)
async def get_cross_chain_quote(
    request: CrossChainQuoteRequest,
    service: BridgeService = Depends(get_bridge_service),
) -> QuoteInfo:
    """Get the aggregator's single best cross-chain quote."""
    quote = await service.get_quote(
        from_chain=request.from_chain,
        to_chain=request.to_chain,
        from_token=request.from_token,
        to_token=request.to_token,
        amount=request.amount,
        slippage=request.slippage,
        from_token_decimals=request.from_token_decimals,
    )
    return QuoteInfo.from_quote(quote)


@router.get("/route")
async def get_cross_chain_route(
    from_chain_id: Optional[str] = Query(None, alias="fromChainId"),
    to_chain_id: Optional[str] = Query(None, alias="toChainId"),
    from_token_address: Optional[str] = Query(None, alias="fromTokenAddress"),
    to_token_address: Optional[str] = Query(None, alias="toTokenAddress"),
    amount: Optional[str] = Query(None, description="Amount in minimal units"),
    service: BridgeService = Depends(get_bridge_service),
) -> dict:
    """Get raw route information for a bridge transfer."""
    data = await service.get_route(
        from_chain_id, to_chain_id, from_token_address, to_token_address, amount
    )
    return {"success": True, "data": data}


@router.post("/swap", response_model=SwapTransactionResponse)
async def build_bridge_transaction(
    request: SwapRequest,
    orchestrator: SwapOrchestrator = Depends(get_swap_orchestrator),
) -> SwapTransactionResponse:
    """Build an unsigned bridge transaction over the optimal route."""
    tx = await orchestrator.build_bridge_transaction(request.to_intent(), request.quote)
    return SwapTransactionResponse.from_transaction(tx)


@router.get("/tx-status", response_model=OrderStatusResponse)
async def get_bridge_status(
    tx_hash: Optional[str] = Query(None, alias="txHash"),
    tracker: StatusTracker = Depends(get_status_tracker),
) -> OrderStatusResponse:
    """Check a bridge transaction once. Callers poll at their own interval."""
    status = await tracker.get_order_status(tx_hash)
    return OrderStatusResponse(status=status.value)


@router.get("/supported-chains")
async def get_supported_chains(
    service: BridgeService = Depends(get_bridge_service),
) -> dict:
    """Chains that have bridgeable tokens."""
    chains = await service.get_supported_chains()
    return {"success": True, "chains": chains}


@router.get("/supported-tokens")
async def get_supported_tokens(
    chain_id: Optional[str] = Query(None, alias="chainId"),
    service: BridgeService = Depends(get_bridge_service),
) -> dict:
    """Bridgeable tokens on one chain."""
    tokens = await service.get_supported_tokens(chain_id)
    return {"success": True, "tokens": tokens}


@router.get("/supported-token-pairs")
async def get_supported_token_pairs(
    from_chain_id: Optional[str] = Query(None, alias="fromChainId"),
    from_token_address: Optional[str] = Query(None, alias="fromTokenAddress"),
    service: BridgeService = Depends(get_bridge_service),
) -> dict:
    """Bridge destinations available for a source token."""
    pairs = await service.get_supported_token_pairs(from_chain_id, from_token_address)
    return {"success": True, "pairs": pairs}
