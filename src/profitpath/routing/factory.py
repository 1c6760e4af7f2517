"""Factory for the aggregator client and the services built on it.

Each getter returns a process-wide instance, so the rate limiter and
cache are shared by every request. The web layer resolves these through
FastAPI dependencies; tests override them.
"""

import logging
from functools import lru_cache

from profitpath.config import get_settings
from profitpath.ledger.database import get_session_factory
from profitpath.routing.decimals import DecimalResolver, create_decimal_resolver
from profitpath.routing.okx import OkxClient
from profitpath.utils.ratelimit import RateLimitedCache, RateLimiter
from profitpath.web.services.bridge_service import BridgeService
from profitpath.web.services.credit_score_service import CreditScoreService
from profitpath.web.services.portfolio_service import PortfolioService
from profitpath.web.services.quote_service import QuoteService
from profitpath.web.services.status_service import StatusTracker
from profitpath.web.services.swap_service import SwapOrchestrator
from profitpath.web.services.token_service import TokenService

logger = logging.getLogger(__name__)


@lru_cache
def get_okx_client() -> OkxClient:
    """Create the signed aggregator client.

    Raises:
        ConfigurationError: Credentials are missing
    """
    settings = get_settings()
    logger.info(f"Creating aggregator client for {settings.okx_base_url}")
    return OkxClient.from_settings(settings)


@lru_cache
def get_rate_limited_cache() -> RateLimitedCache:
    settings = get_settings()
    return RateLimitedCache(interval=settings.rate_limit_interval, ttl=settings.cache_ttl)


@lru_cache
def get_decimal_resolver() -> DecimalResolver:
    return create_decimal_resolver(get_session_factory(), get_okx_client())


def get_quote_service() -> QuoteService:
    return QuoteService(get_okx_client(), get_decimal_resolver())


def get_bridge_service() -> BridgeService:
    settings = get_settings()
    return BridgeService(
        get_okx_client(),
        get_decimal_resolver(),
        default_slippage=settings.default_bridge_slippage,
    )


def get_swap_orchestrator() -> SwapOrchestrator:
    settings = get_settings()
    return SwapOrchestrator(
        get_okx_client(),
        default_slippage=settings.default_slippage,
        default_bridge_slippage=settings.default_bridge_slippage,
    )


def get_status_tracker() -> StatusTracker:
    settings = get_settings()
    return StatusTracker(get_okx_client(), trade_base_url=settings.okx_trade_base_url)


@lru_cache
def get_token_service() -> TokenService:
    settings = get_settings()
    return TokenService(
        get_okx_client(),
        get_session_factory(),
        limiter=RateLimiter(interval=settings.token_refresh_delay),
    )


@lru_cache
def get_credit_score_service() -> CreditScoreService:
    settings = get_settings()
    return CreditScoreService(
        get_okx_client(),
        get_rate_limited_cache(),
        ai_api_url=settings.ai_api_url,
        timeout=settings.http_timeout,
    )


def get_portfolio_service() -> PortfolioService:
    return PortfolioService(get_okx_client(), get_rate_limited_cache())


async def close_clients() -> None:
    """Close HTTP clients created by the getters above."""
    if get_okx_client.cache_info().currsize:
        await get_okx_client().aclose()
    if get_credit_score_service.cache_info().currsize:
        await get_credit_score_service().aclose()
