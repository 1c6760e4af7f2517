"""Transaction status contracts."""

from typing import Any, Optional

from profitpath.web.contracts.common import ApiModel
from profitpath.web.services.status_service import TransactionStatusResult


class OrderStatusResponse(ApiModel):
    """Canonical status of a bridge transaction."""

    status: str


class TransactionStatusResponse(ApiModel):
    """Canonical status of a same-chain swap with its history details."""

    status: str
    upstream_status: Optional[str] = None
    tx_hash: Optional[str] = None
    from_token_details: Any = None
    to_token_details: Any = None
    tx_time: Optional[str] = None
    error_msg: Optional[str] = None

    @classmethod
    def from_result(cls, result: TransactionStatusResult) -> "TransactionStatusResponse":
        return cls(
            status=result.status.value,
            upstream_status=result.upstream_status,
            tx_hash=result.tx_hash,
            from_token_details=result.from_token_details,
            to_token_details=result.to_token_details,
            tx_time=result.tx_time,
            error_msg=result.error_msg,
        )
