"""Health check endpoints."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from profitpath import __version__
from profitpath.config import get_settings
from profitpath.ledger.database import get_session_factory
from profitpath.ledger.repository import TokenRepository

logger = logging.getLogger(__name__)

router = APIRouter()


async def registry_status(session_factory: async_sessionmaker[AsyncSession]) -> dict:
    """Whether the token registry answers, and how many chains it holds."""
    try:
        async with session_factory() as session:
            chains = await TokenRepository(session).list_chains()
    except SQLAlchemyError as e:
        logger.warning(f"Token registry unreachable: {e}")
        return {"reachable": False, "chains": 0}
    return {"reachable": True, "chains": len(chains)}


@router.get("/health")
async def health_check():
    """Liveness only; touches no upstream or database."""
    return {"status": "healthy", "service": "profitpath"}


@router.get("/health/detailed")
async def detailed_health(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """Credentials, registry reachability and redacted configuration.

    Reports "degraded" when credentials are missing or the registry
    cannot be read.
    """
    settings = get_settings()
    registry = await registry_status(session_factory)
    degraded = bool(settings.missing_credentials) or not registry["reachable"]
    return {
        "status": "degraded" if degraded else "healthy",
        "service": "profitpath",
        "version": __version__,
        "missing_credentials": settings.missing_credentials,
        "registry": registry,
        "config": settings.get_safe_dict(),
    }
