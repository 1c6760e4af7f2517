"""Routing module for aggregator quotes and swap transactions.

Only the data model is exported here; the client, resolver and
normalizer are imported from their own modules.
"""

from profitpath.routing.base import (
    Quote,
    QuoteKind,
    SwapIntent,
    SwapTransaction,
    Token,
    TransactionStatus,
)

__all__ = [
    "Quote",
    "QuoteKind",
    "SwapIntent",
    "SwapTransaction",
    "Token",
    "TransactionStatus",
]
