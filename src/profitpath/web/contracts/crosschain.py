"""Cross-chain quote contracts."""

from typing import Optional

from pydantic import Field, field_validator

from profitpath.web.contracts.common import ApiModel, as_text


class CrossChainQuoteRequest(ApiModel):
    """Request for a cross-chain quote. Chains may be equal."""

    from_chain: Optional[str] = None
    to_chain: Optional[str] = None
    from_token: Optional[str] = Field(None, description="Source token contract")
    to_token: Optional[str] = Field(None, description="Destination token contract")
    amount: Optional[str] = Field(None, description="Human-readable amount")
    slippage: Optional[str] = None
    from_token_decimals: Optional[int] = Field(
        None, ge=0, description="Skips decimal resolution when given"
    )

    @field_validator("from_chain", "to_chain", "amount", "slippage", mode="before")
    @classmethod
    def coerce_text(cls, value):
        return as_text(value)
