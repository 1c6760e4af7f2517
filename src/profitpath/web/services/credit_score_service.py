"""Wallet credit scoring.

Factors are extracted from the wallet's recent transactions and sent to
the AI scoring service. When that call fails, a local rules-based score
is used instead. The local weights are a reference fallback, not a
stable contract.

Results are cached per address and upstream fetches are rate-limited.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Optional

import httpx

from profitpath.errors import UpstreamError
from profitpath.routing.okx import TRANSACTIONS_BY_ADDRESS, OkxClient
from profitpath.utils.ratelimit import RateLimitedCache
from profitpath.web.services.quote_service import require_fields

logger = logging.getLogger(__name__)

MS_PER_DAY = 1000 * 60 * 60 * 24
MIN_SCORE = 300
MAX_SCORE = 900
FALLBACK_EXPLANATION = "Fallback: Local rules-based score."


@dataclass
class CreditFactors:
    """Inputs to the credit score, camelCased on the wire."""

    wallet_age_days: int = 0
    tx_frequency: int = 0
    token_diversity: int = 0
    protocol_interactions: int = 0

    def to_dict(self) -> dict:
        return {
            "walletAgeDays": self.wallet_age_days,
            "txFrequency": self.tx_frequency,
            "tokenDiversity": self.token_diversity,
            "protocolInteractions": self.protocol_interactions,
        }


def _tx_time(tx: dict) -> Optional[float]:
    try:
        value = float(tx.get("txTime"))
    except (TypeError, ValueError):
        return None
    return value if value and math.isfinite(value) else None


def extract_factors(transactions: list, now_ms: Optional[float] = None) -> CreditFactors:
    """Derive score factors from a list of wallet transactions."""
    transactions = [tx for tx in transactions if isinstance(tx, dict)]
    if not transactions:
        return CreditFactors()

    now_ms = time.time() * 1000 if now_ms is None else now_ms
    tx_times = [t for t in (_tx_time(tx) for tx in transactions) if t is not None]
    wallet_age_days = int((now_ms - min(tx_times)) // MS_PER_DAY) if tx_times else 0

    tokens = {tx.get("tokenContractAddress") or tx.get("symbol") for tx in transactions}
    protocols = {tx.get("symbol") for tx in transactions}
    return CreditFactors(
        wallet_age_days=max(wallet_age_days, 0),
        tx_frequency=len(transactions),
        token_diversity=len(tokens),
        protocol_interactions=len(protocols),
    )


def calculate_credit_score(factors: CreditFactors) -> int:
    """Local rules-based score between 300 and 900."""
    score = float(MIN_SCORE)
    score += min(factors.wallet_age_days, 365) * 0.55
    score += min(factors.tx_frequency, 500) * 0.4
    score += min(factors.token_diversity, 20) * 5
    score += min(factors.protocol_interactions, 20) * 5
    # Half-up rounding
    return int(math.floor(min(score, MAX_SCORE) + 0.5))


class CreditScoreService:
    """Scores wallets from their on-chain activity."""

    def __init__(
        self,
        client: OkxClient,
        cache: RateLimitedCache,
        ai_api_url: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
        now_ms: Optional[Callable[[], float]] = None,
    ):
        self.client = client
        self.cache = cache
        self.ai_api_url = ai_api_url.rstrip("/")
        self.timeout = timeout
        self._http_client = http_client
        self._now_ms = now_ms or (lambda: time.time() * 1000)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout)
        return self._http_client

    async def get_credit_score(self, address: str) -> dict:
        """Score a wallet, serving a cached result when fresh.

        Raises:
            ValidationError: Missing address
            UpstreamError: Transaction history unavailable
        """
        require_fields(address=address)
        return await self.cache.get_or_fetch(
            f"credit-score:{address}", lambda: self._score(address)
        )

    async def fetch_transactions(self, address: str) -> list:
        payload = await self.client.get(
            TRANSACTIONS_BY_ADDRESS, {"address": address, "chains": "1", "limit": "20"}
        )
        if not isinstance(payload, dict) or str(payload.get("code")) != "0":
            raise UpstreamError("Aggregator returned a non-success response", payload=payload)

        data = payload.get("data")
        first = data[0] if isinstance(data, list) and data else {}
        transactions = first.get("transactions") if isinstance(first, dict) else None
        return transactions if isinstance(transactions, list) else []

    async def _score(self, address: str) -> dict:
        transactions = await self.fetch_transactions(address)
        factors = extract_factors(transactions, now_ms=self._now_ms())
        logger.info(f"Credit factors for {address}: {factors.to_dict()}")

        try:
            ai_result = await self._score_with_ai(factors)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"AI scoring failed, using local score: {e}")
            return {
                "score": calculate_credit_score(factors),
                "factors": factors.to_dict(),
                "explanation": FALLBACK_EXPLANATION,
            }
        return {**ai_result, "factors": factors.to_dict()}

    async def _score_with_ai(self, factors: CreditFactors) -> dict:
        client = await self._get_client()
        response = await client.post(
            f"{self.ai_api_url}/ai/credit-score",
            json={"factors": factors.to_dict()},
            timeout=self.timeout,
        )
        response.raise_for_status()
        result = response.json()
        if not isinstance(result, dict):
            raise ValueError("AI scoring returned a non-object response")
        return result

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
