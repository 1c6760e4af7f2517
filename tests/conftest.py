"""Pytest configuration and fixtures."""

import os
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Callable, Union

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["OKX_API_KEY"] = "test-key"
os.environ["OKX_API_SECRET"] = "test-secret"
os.environ["OKX_API_PASSPHRASE"] = "test-passphrase"
os.environ["DEBUG"] = "true"

from profitpath.ledger.models import Base
from profitpath.ledger.repository import TokenRepository
from profitpath.routing.okx import OkxClient
from profitpath.routing.signing import RequestSigner

FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0, 123000, tzinfo=timezone.utc)


class FakeClock:
    """Monotonic clock that only moves when told to (or when slept on)."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


Route = Union[Any, Callable[[httpx.Request], httpx.Response]]


class FakeAggregator:
    """httpx mock transport keyed by request path.

    A route value is either a JSON payload answered with 200, an
    httpx.Response, or a callable taking the request.
    """

    def __init__(self):
        self.routes: dict[str, Route] = {}
        self.requests: list[httpx.Request] = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"code": "404", "msg": "not mocked", "data": []})
        if callable(route):
            return route(request)
        if isinstance(route, httpx.Response):
            return route
        return httpx.Response(200, json=route)

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]

    def last(self) -> httpx.Request:
        return self.requests[-1]

    def client(self, signer: RequestSigner) -> OkxClient:
        return OkxClient(
            signer=signer,
            base_url="https://web3.okx.com",
            timeout=5.0,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(self.handle)),
        )


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def signer() -> RequestSigner:
    """Signer with test credentials and a frozen clock."""
    return RequestSigner(
        api_key="test-key",
        secret="test-secret",
        passphrase="test-passphrase",
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def aggregator() -> FakeAggregator:
    return FakeAggregator()


@pytest_asyncio.fixture
async def okx_client(aggregator: FakeAggregator, signer: RequestSigner) -> AsyncGenerator[OkxClient, None]:
    client = aggregator.client(signer)
    yield client
    await client._http_client.aclose()


@pytest_asyncio.fixture
async def db_engine():
    """Create in-memory database engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for testing."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def token_repo(db_session: AsyncSession) -> TokenRepository:
    """Create token repository for testing."""
    return TokenRepository(db_session)
