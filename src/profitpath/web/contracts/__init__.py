"""Request and response contracts for the web layer.

These Pydantic models define the API interface for web clients.
"""

from profitpath.web.contracts.crosschain import CrossChainQuoteRequest
from profitpath.web.contracts.quotes import (
    QuoteInfo,
    QuoteListResponse,
    QuoteRequest,
    TokenInfo,
)
from profitpath.web.contracts.status import OrderStatusResponse, TransactionStatusResponse
from profitpath.web.contracts.swaps import (
    ApproveRequest,
    ApproveResponse,
    SwapRequest,
    SwapTransactionResponse,
)
from profitpath.web.contracts.tokens import TokenListResponse, TokenRefreshResponse

__all__ = [
    # Quote contracts
    "QuoteRequest",
    "QuoteInfo",
    "QuoteListResponse",
    "TokenInfo",
    # Cross-chain contracts
    "CrossChainQuoteRequest",
    # Swap contracts
    "SwapRequest",
    "ApproveRequest",
    "ApproveResponse",
    "SwapTransactionResponse",
    # Status contracts
    "OrderStatusResponse",
    "TransactionStatusResponse",
    # Token contracts
    "TokenListResponse",
    "TokenRefreshResponse",
]
