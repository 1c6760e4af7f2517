"""Signed HTTP client for the OKX DEX aggregator API.

API docs: https://web3.okx.com/build/docs/waas/dex-api-reference

The query string is encoded once and the same string is both signed and
sent, so the signature always covers the bytes on the wire.
"""

import logging
from typing import Any, Mapping, Optional
from urllib.parse import urlencode

import httpx

from profitpath.config import Settings
from profitpath.errors import NotFoundError, UpstreamError
from profitpath.routing.signing import RequestSigner

logger = logging.getLogger(__name__)

OKX_WEB3_API = "https://web3.okx.com"

# Request paths
AGGREGATOR_QUOTE = "/api/v5/dex/aggregator/quote"
AGGREGATOR_SWAP = "/api/v5/dex/aggregator/swap"
AGGREGATOR_SWAP_INSTRUCTION = "/api/v5/dex/aggregator/swap-instruction"
AGGREGATOR_APPROVE = "/api/v5/dex/aggregator/approve-transaction"
AGGREGATOR_HISTORY = "/api/v5/dex/aggregator/history"
AGGREGATOR_ALL_TOKENS = "/api/v5/dex/aggregator/all-tokens"
CROSS_CHAIN_QUOTE = "/api/v5/dex/cross-chain/quote"
CROSS_CHAIN_ROUTE = "/api/v5/dex/cross-chain/route"
CROSS_CHAIN_BUILD_TX = "/api/v5/dex/cross-chain/build-tx"
CROSS_CHAIN_SUPPORTED_TOKENS = "/api/v5/dex/cross-chain/supported/tokens"
CROSS_CHAIN_BRIDGE_PAIRS = "/api/v5/dex/cross-chain/supported/bridge-tokens-pairs"
TRADE_ORDER = "/api/v5/trade/order"
TRANSACTIONS_BY_ADDRESS = "/api/v5/dex/post-transaction/transactions-by-address"
BALANCE_TOTAL_VALUE = "/api/v5/dex/balance/total-value"
BALANCE_TOKEN_BALANCES = "/api/v5/dex/balance/all-token-balances-by-address"


def build_request_path(path: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """Append an encoded query string to a path, skipping None values.

    Parameter order is preserved, which keeps the signed string stable.
    """
    if not params:
        return path
    items = [(key, str(value)) for key, value in params.items() if value is not None]
    if not items:
        return path
    return f"{path}?{urlencode(items)}"


def extract_data(payload: Any, not_found: str = "No data returned by aggregator") -> Any:
    """Unwrap the `data` field of an aggregator response envelope.

    Raises:
        UpstreamError: The envelope carries an error message and no data
        NotFoundError: The envelope is a success with empty data
    """
    if not isinstance(payload, dict):
        raise UpstreamError("Unexpected response shape from aggregator", payload=payload)

    data = payload.get("data")
    if data:
        return data

    message = payload.get("msg") or payload.get("message")
    if message:
        raise UpstreamError(str(message), payload=payload)

    code = payload.get("code")
    if code not in (None, "0", 0):
        raise UpstreamError(f"Aggregator returned error code {code}", payload=payload)

    raise NotFoundError(not_found, payload=payload)


class OkxClient:
    """Async client issuing signed requests to the aggregator.

    The client never retries; failures are raised as UpstreamError.
    """

    def __init__(
        self,
        signer: RequestSigner,
        base_url: str = OKX_WEB3_API,
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the client.

        Args:
            signer: Produces authentication headers
            base_url: Aggregator host
            timeout: Per-request timeout in seconds
            http_client: Optional shared client (e.g. with a mock transport)
        """
        self.signer = signer
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http_client = http_client
        self._owns_client = http_client is None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> "OkxClient":
        return cls(
            signer=RequestSigner.from_settings(settings),
            base_url=settings.okx_base_url,
            timeout=settings.http_timeout,
            http_client=http_client,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._http_client

    async def get(
        self,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        base_url: Optional[str] = None,
    ) -> Any:
        """Issue a signed GET and return the decoded JSON body."""
        request_path = build_request_path(path, params)
        return await self._send("GET", request_path, base_url)

    async def _send(
        self,
        method: str,
        request_path: str,
        base_url: Optional[str],
    ) -> Any:
        url = f"{(base_url or self.base_url).rstrip('/')}{request_path}"
        headers = self.signer.headers(method, request_path)

        logger.debug(f"Aggregator request: {method} {request_path}")
        client = await self._get_client()

        try:
            response = await client.request(
                method,
                url,
                headers=headers,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            logger.warning(f"Aggregator request timed out after {self.timeout}s: {request_path}")
            raise UpstreamError(f"Aggregator request timed out: {request_path}") from e
        except httpx.HTTPError as e:
            logger.warning(f"Aggregator transport error for {request_path}: {e}")
            raise UpstreamError(f"Aggregator request failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if response.status_code >= 400:
            message = None
            if isinstance(data, dict):
                message = data.get("msg") or data.get("message")
            logger.warning(
                f"Aggregator API error: {response.status_code} for {request_path}"
            )
            raise UpstreamError(
                message or f"Aggregator API error: HTTP {response.status_code}",
                payload=data if data is not None else response.text,
                status_code=response.status_code,
            )

        if data is None:
            raise UpstreamError(
                "Aggregator returned a non-JSON response",
                payload=response.text,
                status_code=response.status_code,
            )

        return data

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None
