"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from profitpath import __version__
from profitpath.config import get_settings
from profitpath.errors import ProfitPathError
from profitpath.ledger.database import close_db, init_db
from profitpath.routing.factory import close_clients

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    await init_db()
    yield
    # Shutdown
    await close_clients()
    await close_db()


async def handle_profitpath_error(request: Request, exc: ProfitPathError) -> JSONResponse:
    """Render application errors as {"error", "details"} with their status."""
    if exc.http_status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="ProfitPath API",
        description="Swap and bridge orchestration over a DEX aggregator",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if not settings.is_production else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ProfitPathError, handle_profitpath_error)

    # Register routes
    from profitpath.api.routes import health
    from profitpath.web.controllers import (
        crosschain_router,
        quotes_router,
        tokens_router,
        wallets_router,
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(quotes_router)
    app.include_router(crosschain_router)
    app.include_router(tokens_router)
    app.include_router(wallets_router)

    return app
