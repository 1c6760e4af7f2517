"""Same-chain quote, approval, swap and status endpoints.

Swap and approval endpoints return unsigned transaction data only. The
client signs and broadcasts.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from profitpath.routing.factory import (
    get_quote_service,
    get_status_tracker,
    get_swap_orchestrator,
)
from profitpath.web.contracts.quotes import QuoteListResponse, QuoteRequest
from profitpath.web.contracts.status import TransactionStatusResponse
from profitpath.web.contracts.swaps import (
    ApproveRequest,
    ApproveResponse,
    SwapRequest,
    SwapTransactionResponse,
)
from profitpath.web.services.quote_service import QuoteService
from profitpath.web.services.status_service import StatusTracker
from profitpath.web.services.swap_service import SwapOrchestrator

router = APIRouter(prefix="/quotes", tags=["quotes"])


@router.post("", response_model=QuoteListResponse)
async def get_quotes(
    request: QuoteRequest,
    service: QuoteService = Depends(get_quote_service),
) -> QuoteListResponse:
    """Get candidate same-chain quotes, best first.

    This is a READ-ONLY operation. Cross-chain requests are rejected;
    use /crosschain/quote for those.
    """
    quotes = await service.get_quotes(
        from_chain=request.from_chain,
        to_chain=request.to_chain,
        from_token=request.from_token,
        to_token=request.to_token,
        amount=request.amount,
    )
    return QuoteListResponse.from_quotes(quotes)


@router.post("/swap", response_model=SwapTransactionResponse)
async def build_swap(
    request: SwapRequest,
    orchestrator: SwapOrchestrator = Depends(get_swap_orchestrator),
) -> SwapTransactionResponse:
    """Build an unsigned same-chain swap transaction."""
    tx = await orchestrator.build_swap(request.to_intent(), request.quote)
    return SwapTransactionResponse.from_transaction(tx)


@router.post("/approve", response_model=ApproveResponse)
async def get_approval(
    request: ApproveRequest,
    orchestrator: SwapOrchestrator = Depends(get_swap_orchestrator),
) -> ApproveResponse:
    """Get token approval transaction data for the aggregator router."""
    data = await orchestrator.get_approval_data(
        chain_index=request.chain_index,
        token_contract_address=request.token_contract_address,
        approve_amount=request.approve_amount,
    )
    return ApproveResponse(approve_data=data)


@router.get("/transaction-status", response_model=TransactionStatusResponse)
async def get_transaction_status(
    chain_index: Optional[str] = Query(None, alias="chainIndex"),
    tx_hash: Optional[str] = Query(None, alias="txHash"),
    tracker: StatusTracker = Depends(get_status_tracker),
) -> TransactionStatusResponse:
    """Check a same-chain swap once. Callers poll at their own interval."""
    result = await tracker.get_transaction_status(chain_index, tx_hash)
    return TransactionStatusResponse.from_result(result)
