"""Swap, approval and bridge transaction contracts.

Transactions returned here are unsigned. The client signs and
broadcasts them.
"""

from typing import Any, Optional

from pydantic import Field, field_validator

from profitpath.routing.base import SwapIntent, SwapTransaction
from profitpath.web.contracts.common import ApiModel, as_text


class SwapRequest(ApiModel):
    """A swap intent plus, optionally, the quote it was priced from."""

    from_chain: Optional[str] = None
    to_chain: Optional[str] = None
    from_token_address: Optional[str] = Field(None, description="Source token contract")
    to_token_address: Optional[str] = Field(None, description="Destination token contract")
    amount: Optional[str] = Field(None, description="Human-readable amount")
    slippage: Optional[str] = Field(None, description="Slippage tolerance")
    user_wallet_address: Optional[str] = Field(None, description="Sending wallet")
    receive_address: Optional[str] = Field(
        None, description="Destination wallet; defaults to the sending wallet"
    )
    quote: Optional[dict[str, Any]] = Field(
        None, description="Quote previously returned, used for token decimals and slippage"
    )

    @field_validator("from_chain", "to_chain", "amount", "slippage", mode="before")
    @classmethod
    def coerce_text(cls, value):
        return as_text(value)

    def to_intent(self) -> SwapIntent:
        return SwapIntent(
            from_chain=self.from_chain or "",
            to_chain=self.to_chain or "",
            from_token_address=self.from_token_address or "",
            to_token_address=self.to_token_address or "",
            amount=self.amount or "",
            user_wallet_address=self.user_wallet_address or "",
            slippage=self.slippage,
            receive_address=self.receive_address,
        )


class ApproveRequest(ApiModel):
    """Request for token approval transaction data."""

    chain_index: Optional[str] = None
    token_contract_address: Optional[str] = None
    approve_amount: Optional[str] = Field(None, description="Allowance in minimal units")

    @field_validator("chain_index", "approve_amount", mode="before")
    @classmethod
    def coerce_text(cls, value):
        return as_text(value)


class ApproveResponse(ApiModel):
    """Approval transaction data, unchanged from the aggregator."""

    approve_data: Any


class SwapTransactionResponse(ApiModel):
    """Unsigned swap or bridge transaction with route metadata."""

    success: bool = True
    tx_data: Any = None
    bridge_info: Any = None
    from_token_amount: Optional[str] = None
    to_token_amount: Optional[str] = None
    minimum_receive: Optional[str] = None

    @classmethod
    def from_transaction(cls, tx: SwapTransaction) -> "SwapTransactionResponse":
        return cls(
            tx_data=tx.tx,
            bridge_info=tx.router,
            from_token_amount=tx.from_token_amount,
            to_token_amount=tx.to_token_amount,
            minimum_receive=tx.minimum_receive,
        )
