"""Utility modules for ProfitPath."""

from profitpath.utils.ratelimit import RateLimitedCache, RateLimiter, TTLCache

__all__ = ["RateLimitedCache", "RateLimiter", "TTLCache"]
