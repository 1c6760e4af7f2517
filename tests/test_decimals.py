"""Tests for tiered decimal resolution."""

import pytest

from profitpath.ledger.repository import TokenRepository
from profitpath.routing.base import Token
from profitpath.routing.decimals import (
    DecimalResolver,
    aggregator_lookup,
    coerce_decimals,
    create_decimal_resolver,
    registry_lookup,
)
from profitpath.routing.okx import AGGREGATOR_ALL_TOKENS

USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"


def token_list(decimals="6"):
    return {
        "code": "0",
        "data": [
            {"tokenContractAddress": "0xdac17f958d2ee523a2206206994597c13d831ec7", "decimals": "6"},
            {"tokenContractAddress": USDC.lower(), "decimals": decimals},
        ],
    }


class TestCoerceDecimals:
    """Tests for decimal count coercion."""

    @pytest.mark.parametrize(
        "value,expected",
        [(6, 6), ("18", 18), (" 8 ", 8), (0, 0), (-1, None), ("abc", None), (None, None), (True, None)],
    )
    def test_coerce(self, value, expected):
        assert coerce_decimals(value) == expected


class TestDecimalResolver:
    """Tests for tier ordering and failure handling."""

    @pytest.mark.asyncio
    async def test_first_hit_wins(self):
        calls = []

        async def first(address, chain):
            calls.append("first")
            return 6

        async def second(address, chain):
            calls.append("second")
            return 9

        resolver = DecimalResolver([first, second])
        assert await resolver.resolve(USDC, "1") == 6
        assert calls == ["first"]

    @pytest.mark.asyncio
    async def test_failing_tier_degrades(self):
        async def broken(address, chain):
            raise RuntimeError("registry down")

        async def working(address, chain):
            return 8

        resolver = DecimalResolver([broken, working])
        assert await resolver.resolve(USDC, "1") == 8

    @pytest.mark.asyncio
    async def test_default_when_exhausted(self):
        async def missing(address, chain):
            return None

        resolver = DecimalResolver([missing, missing])
        assert await resolver.resolve(USDC, "1") == 18

    @pytest.mark.asyncio
    async def test_no_tiers(self):
        assert await DecimalResolver([]).resolve(USDC, "1") == 18


class TestStandardTiers:
    """Tests for registry -> aggregator -> default."""

    @pytest.mark.asyncio
    async def test_registry_beats_aggregator(self, session_factory, aggregator, okx_client):
        async with session_factory() as session:
            await TokenRepository(session).upsert_tokens(
                [Token(symbol="USDC", chain="1", address=USDC, decimals=6)]
            )
            await session.commit()
        aggregator.routes[AGGREGATOR_ALL_TOKENS] = token_list(decimals="9")

        resolver = create_decimal_resolver(session_factory, okx_client)

        assert await resolver.resolve(USDC, "1") == 6
        assert aggregator.requests == []

    @pytest.mark.asyncio
    async def test_aggregator_case_insensitive_match(self, session_factory, aggregator, okx_client):
        aggregator.routes[AGGREGATOR_ALL_TOKENS] = token_list(decimals="6")

        resolver = create_decimal_resolver(session_factory, okx_client)

        assert await resolver.resolve(USDC.upper().replace("0X", "0x"), "1") == 6
        assert "chainIndex=1" in str(aggregator.last().url)

    @pytest.mark.asyncio
    async def test_aggregator_error_falls_back_to_default(self, session_factory, aggregator, okx_client):
        # No route mocked: the aggregator answers 404
        resolver = create_decimal_resolver(session_factory, okx_client)
        assert await resolver.resolve(USDC, "1") == 18

    @pytest.mark.asyncio
    async def test_registry_token_without_decimals_falls_through(
        self, session_factory, aggregator, okx_client
    ):
        async with session_factory() as session:
            await TokenRepository(session).upsert_tokens(
                [Token(symbol="USDC", chain="1", address=USDC, decimals=None)]
            )
            await session.commit()
        aggregator.routes[AGGREGATOR_ALL_TOKENS] = token_list(decimals="6")

        resolver = DecimalResolver(
            [registry_lookup(session_factory), aggregator_lookup(okx_client)]
        )
        assert await resolver.resolve(USDC, "1") == 6
