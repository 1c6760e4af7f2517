"""Wallet endpoints: credit score and portfolio.

Both are rate-limited against the aggregator and cached per address.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from profitpath.routing.factory import get_credit_score_service, get_portfolio_service
from profitpath.web.services.credit_score_service import CreditScoreService
from profitpath.web.services.portfolio_service import DEFAULT_CHAINS, PortfolioService

router = APIRouter(tags=["wallets"])


@router.get("/credit-score")
async def get_credit_score(
    address: Optional[str] = None,
    service: CreditScoreService = Depends(get_credit_score_service),
) -> dict:
    """Score a wallet from its recent on-chain activity."""
    return await service.get_credit_score(address)


@router.get("/portfolio/total-value")
async def get_total_value(
    address: Optional[str] = None,
    chains: str = Query(DEFAULT_CHAINS, description="Comma-separated chain indices"),
    service: PortfolioService = Depends(get_portfolio_service),
) -> dict:
    """Total value of a wallet's holdings."""
    data = await service.get_total_value(address, chains)
    return {"success": True, "data": data}


@router.get("/portfolio/token-balances")
async def get_token_balances(
    address: Optional[str] = None,
    chains: str = Query(DEFAULT_CHAINS, description="Comma-separated chain indices"),
    service: PortfolioService = Depends(get_portfolio_service),
) -> dict:
    """Per-token balances of a wallet."""
    data = await service.get_token_balances(address, chains)
    return {"success": True, "data": data}
