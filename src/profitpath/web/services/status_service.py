"""Transaction and order status tracking.

Polling is caller-driven: each call performs exactly one upstream fetch
and returns the mapped status. Nothing is scheduled in the background.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from profitpath.errors import UpstreamError
from profitpath.routing.base import TransactionStatus
from profitpath.routing.okx import AGGREGATOR_HISTORY, TRADE_ORDER, OkxClient
from profitpath.web.services.quote_service import require_fields

logger = logging.getLogger(__name__)

ORDER_STATE_MAP = {
    "live": TransactionStatus.PENDING,
    "filled": TransactionStatus.SUCCESS,
    "canceled": TransactionStatus.FAILED,
}

# Swap history uses its own words for the same outcomes
HISTORY_STATUS_MAP = {
    **ORDER_STATE_MAP,
    "pending": TransactionStatus.PENDING,
    "success": TransactionStatus.SUCCESS,
    "fail": TransactionStatus.FAILED,
    "failed": TransactionStatus.FAILED,
}


def map_order_state(state: Any) -> TransactionStatus:
    """Map an upstream order state onto TransactionStatus."""
    if not isinstance(state, str):
        return TransactionStatus.UNKNOWN
    return ORDER_STATE_MAP.get(state, TransactionStatus.UNKNOWN)


def map_history_status(status: Any) -> TransactionStatus:
    """Map a swap history status onto TransactionStatus."""
    if not isinstance(status, str):
        return TransactionStatus.UNKNOWN
    return HISTORY_STATUS_MAP.get(status.lower(), TransactionStatus.UNKNOWN)


@dataclass
class TransactionStatusResult:
    """Status of a same-chain swap as reported by swap history."""

    status: TransactionStatus
    upstream_status: Optional[str]
    tx_hash: Optional[str]
    from_token_details: Any = None
    to_token_details: Any = None
    tx_time: Optional[str] = None
    error_msg: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "upstreamStatus": self.upstream_status,
            "txHash": self.tx_hash,
            "fromTokenDetails": self.from_token_details,
            "toTokenDetails": self.to_token_details,
            "txTime": self.tx_time,
            "errorMsg": self.error_msg,
        }


class StatusTracker:
    """One-shot status lookups against the aggregator."""

    def __init__(self, client: OkxClient, trade_base_url: Optional[str] = None):
        self.client = client
        self.trade_base_url = trade_base_url

    async def get_order_status(self, order_id: str) -> TransactionStatus:
        """Status of a bridge transaction looked up as an order.

        Unrecognised or missing states map to UNKNOWN.
        """
        require_fields(txHash=order_id)
        payload = await self.client.get(
            TRADE_ORDER, {"ordId": order_id}, base_url=self.trade_base_url
        )
        orders = payload.get("data") if isinstance(payload, dict) else None
        state = None
        if isinstance(orders, list) and orders and isinstance(orders[0], dict):
            state = orders[0].get("state")

        status = map_order_state(state)
        logger.info(f"Order {order_id}: state={state!r} -> {status.value}")
        return status

    async def get_transaction_status(
        self, chain_index: str, tx_hash: str
    ) -> TransactionStatusResult:
        """Status of a same-chain swap from the aggregator's swap history.

        Raises:
            ValidationError: Missing chain index or hash
            UpstreamError: Non-success envelope or no history record
        """
        require_fields(chainIndex=chain_index, txHash=tx_hash)
        payload = await self.client.get(
            AGGREGATOR_HISTORY, {"chainIndex": chain_index, "txHash": tx_hash}
        )
        if not isinstance(payload, dict) or str(payload.get("code")) != "0" or not payload.get("data"):
            message = payload.get("msg") if isinstance(payload, dict) else None
            raise UpstreamError(
                message or "Failed to get transaction status from aggregator", payload=payload
            )

        record = payload["data"]
        if isinstance(record, list):
            record = record[0]
        if not isinstance(record, dict):
            raise UpstreamError("Unexpected transaction history shape", payload=payload)

        upstream_status = record.get("status")
        return TransactionStatusResult(
            status=map_history_status(upstream_status),
            upstream_status=upstream_status,
            tx_hash=record.get("txHash", tx_hash),
            from_token_details=record.get("fromTokenDetails"),
            to_token_details=record.get("toTokenDetails"),
            tx_time=record.get("txTime"),
            error_msg=record.get("errorMsg"),
        )
