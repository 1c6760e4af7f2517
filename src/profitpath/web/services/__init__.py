"""Web services over the aggregator API.

These services build unsigned transaction payloads only. They never
sign or broadcast transactions.
"""

from profitpath.web.services.bridge_service import BridgeService
from profitpath.web.services.credit_score_service import CreditScoreService
from profitpath.web.services.portfolio_service import PortfolioService
from profitpath.web.services.quote_service import QuoteService
from profitpath.web.services.status_service import StatusTracker
from profitpath.web.services.swap_service import SwapOrchestrator
from profitpath.web.services.token_service import TokenService

__all__ = [
    "BridgeService",
    "CreditScoreService",
    "PortfolioService",
    "QuoteService",
    "StatusTracker",
    "SwapOrchestrator",
    "TokenService",
]
