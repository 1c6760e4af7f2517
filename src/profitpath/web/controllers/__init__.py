"""HTTP controllers for web API endpoints.

These controllers MUST NOT sign or broadcast transactions. All
operations are read-only or prepare data for client-side signing.
"""

from profitpath.web.controllers.crosschain import router as crosschain_router
from profitpath.web.controllers.quotes import router as quotes_router
from profitpath.web.controllers.tokens import router as tokens_router
from profitpath.web.controllers.wallets import router as wallets_router

__all__ = [
    "quotes_router",
    "crosschain_router",
    "tokens_router",
    "wallets_router",
]
