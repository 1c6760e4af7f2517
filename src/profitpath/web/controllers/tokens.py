"""Token registry endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends

from profitpath.routing.factory import get_token_service
from profitpath.web.contracts.quotes import TokenInfo
from profitpath.web.contracts.tokens import TokenListResponse, TokenRefreshResponse
from profitpath.web.services.token_service import TokenService

router = APIRouter(prefix="/tokens", tags=["tokens"])


@router.get("", response_model=TokenListResponse)
async def list_tokens(
    chain: Optional[str] = None,
    service: TokenService = Depends(get_token_service),
) -> TokenListResponse:
    """List registered tokens, optionally for one chain index."""
    tokens = await service.list_tokens(chain)
    return TokenListResponse(
        tokens=[TokenInfo.from_token(token) for token in tokens],
        total=len(tokens),
    )


@router.get("/chains", response_model=list[str])
async def list_chains(service: TokenService = Depends(get_token_service)) -> list[str]:
    """Chain indices that have registered tokens."""
    return await service.list_chains()


@router.post("/fetch", response_model=TokenRefreshResponse)
async def refresh_tokens(
    service: TokenService = Depends(get_token_service),
) -> TokenRefreshResponse:
    """Refresh the registry from the aggregator's token lists.

    Chains are fetched one at a time, so this takes a while.
    """
    written = await service.refresh_tokens()
    return TokenRefreshResponse(
        message="Tokens fetched from the aggregator and stored.",
        chains=written,
        total=sum(written.values()),
    )
