"""Tests for credit scoring and portfolio lookups."""

import httpx
import pytest

from profitpath.errors import UpstreamError, ValidationError
from profitpath.routing.okx import (
    BALANCE_TOKEN_BALANCES,
    BALANCE_TOTAL_VALUE,
    TRANSACTIONS_BY_ADDRESS,
)
from profitpath.utils.ratelimit import RateLimitedCache
from profitpath.web.services.credit_score_service import (
    FALLBACK_EXPLANATION,
    CreditFactors,
    CreditScoreService,
    calculate_credit_score,
    extract_factors,
)
from profitpath.web.services.portfolio_service import PortfolioService

WALLET = "0x" + "ab" * 20
DAY_MS = 24 * 60 * 60 * 1000
NOW_MS = 1_714_564_800_000


def transactions_payload():
    return {
        "code": "0",
        "data": [
            {
                "transactions": [
                    {"txTime": str(NOW_MS - 100 * DAY_MS), "symbol": "ETH", "tokenContractAddress": ""},
                    {"txTime": str(NOW_MS - 10 * DAY_MS), "symbol": "USDC", "tokenContractAddress": "0xa"},
                    {"txTime": str(NOW_MS - 1 * DAY_MS), "symbol": "USDC", "tokenContractAddress": "0xa"},
                ]
            }
        ],
    }


class TestExtractFactors:
    """Tests for factor extraction."""

    def test_factors(self):
        transactions = transactions_payload()["data"][0]["transactions"]
        factors = extract_factors(transactions, now_ms=NOW_MS)

        assert factors == CreditFactors(
            wallet_age_days=100, tx_frequency=3, token_diversity=2, protocol_interactions=2
        )

    def test_empty(self):
        assert extract_factors([], now_ms=NOW_MS) == CreditFactors()

    def test_unparseable_times(self):
        factors = extract_factors([{"txTime": "", "symbol": "ETH"}], now_ms=NOW_MS)
        assert factors.wallet_age_days == 0
        assert factors.tx_frequency == 1


class TestCalculateCreditScore:
    """Tests for the local fallback formula."""

    def test_minimum(self):
        assert calculate_credit_score(CreditFactors()) == 300

    def test_weights(self):
        factors = CreditFactors(
            wallet_age_days=100, tx_frequency=3, token_diversity=2, protocol_interactions=2
        )
        # 300 + 55 + 1.2 + 10 + 10
        assert calculate_credit_score(factors) == 376

    def test_capped(self):
        factors = CreditFactors(
            wallet_age_days=5000, tx_frequency=5000, token_diversity=50, protocol_interactions=50
        )
        assert calculate_credit_score(factors) == 900


class TestCreditScoreService:
    """Tests for AI delegation, fallback and caching."""

    def service(self, okx_client, fake_clock, ai_handler):
        return CreditScoreService(
            okx_client,
            RateLimitedCache(interval=1.0, ttl=60.0, clock=fake_clock, sleep=fake_clock.sleep),
            ai_api_url="http://ai.test",
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(ai_handler)),
            now_ms=lambda: NOW_MS,
        )

    @pytest.mark.asyncio
    async def test_ai_score(self, aggregator, okx_client, fake_clock):
        aggregator.routes[TRANSACTIONS_BY_ADDRESS] = transactions_payload()
        ai_requests = []

        def ai_handler(request):
            ai_requests.append(request)
            return httpx.Response(200, json={"score": 812, "explanation": "Strong history"})

        service = self.service(okx_client, fake_clock, ai_handler)
        result = await service.get_credit_score(WALLET)

        assert result["score"] == 812
        assert result["factors"]["walletAgeDays"] == 100
        assert str(ai_requests[0].url) == "http://ai.test/ai/credit-score"
        params = aggregator.last().url.params
        assert params["address"] == WALLET
        assert params["chains"] == "1"
        assert params["limit"] == "20"
        await service.aclose()

    @pytest.mark.asyncio
    async def test_local_fallback(self, aggregator, okx_client, fake_clock):
        aggregator.routes[TRANSACTIONS_BY_ADDRESS] = transactions_payload()

        def ai_handler(request):
            return httpx.Response(500, json={"error": "model unavailable"})

        service = self.service(okx_client, fake_clock, ai_handler)
        result = await service.get_credit_score(WALLET)

        assert result["score"] == 376
        assert result["explanation"] == FALLBACK_EXPLANATION
        await service.aclose()

    @pytest.mark.asyncio
    async def test_cached_per_address(self, aggregator, okx_client, fake_clock):
        aggregator.routes[TRANSACTIONS_BY_ADDRESS] = transactions_payload()

        def ai_handler(request):
            return httpx.Response(200, json={"score": 700})

        service = self.service(okx_client, fake_clock, ai_handler)
        await service.get_credit_score(WALLET)
        fake_clock.advance(30)
        await service.get_credit_score(WALLET)

        assert len(aggregator.requests) == 1
        await service.aclose()

    @pytest.mark.asyncio
    async def test_non_success_history(self, aggregator, okx_client, fake_clock):
        aggregator.routes[TRANSACTIONS_BY_ADDRESS] = {"code": "50011", "msg": "Too Many Requests"}

        service = self.service(okx_client, fake_clock, lambda request: httpx.Response(200, json={}))
        with pytest.raises(UpstreamError):
            await service.get_credit_score(WALLET)
        await service.aclose()

    @pytest.mark.asyncio
    async def test_address_required(self, aggregator, okx_client, fake_clock):
        service = self.service(okx_client, fake_clock, lambda request: httpx.Response(200, json={}))
        with pytest.raises(ValidationError):
            await service.get_credit_score("")
        assert aggregator.requests == []
        await service.aclose()


class TestPortfolioService:
    """Tests for balance lookups."""

    @pytest.mark.asyncio
    async def test_total_value(self, aggregator, okx_client, fake_clock):
        aggregator.routes[BALANCE_TOTAL_VALUE] = {"code": "0", "data": [{"totalValue": "1234.56"}]}
        service = PortfolioService(
            okx_client, RateLimitedCache(clock=fake_clock, sleep=fake_clock.sleep)
        )

        data = await service.get_total_value(WALLET)

        assert data == [{"totalValue": "1234.56"}]
        params = aggregator.last().url.params
        assert params["accountId"] == WALLET
        assert params["chains"] == "1"

    @pytest.mark.asyncio
    async def test_token_balances_cached(self, aggregator, okx_client, fake_clock):
        aggregator.routes[BALANCE_TOKEN_BALANCES] = {
            "code": "0",
            "data": [{"tokenAssets": [{"symbol": "ETH", "balance": "1.2"}]}],
        }
        service = PortfolioService(
            okx_client, RateLimitedCache(clock=fake_clock, sleep=fake_clock.sleep)
        )

        first = await service.get_token_balances(WALLET, "1,56")
        second = await service.get_token_balances(WALLET, "1,56")

        assert first == second
        assert len(aggregator.requests) == 1
        assert aggregator.last().url.params["chains"] == "1,56"
