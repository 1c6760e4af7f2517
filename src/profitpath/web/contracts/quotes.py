"""Quote request and response contracts."""

from typing import Optional

from pydantic import Field, field_validator

from profitpath.routing.base import Quote, Token
from profitpath.web.contracts.common import ApiModel, as_text


class QuoteRequest(ApiModel):
    """Request for same-chain quotes.

    Required fields are checked by the quote service so that missing
    values produce one descriptive error.
    """

    from_chain: Optional[str] = Field(None, description="Source chain index")
    to_chain: Optional[str] = Field(None, description="Destination chain index (must match)")
    from_token: Optional[str] = Field(None, description="Source token address or 'address-suffix'")
    to_token: Optional[str] = Field(None, description="Destination token address")
    amount: Optional[str] = Field(
        None, description="Human-readable amount; empty or zero asks for price only"
    )

    @field_validator("from_chain", "to_chain", "amount", mode="before")
    @classmethod
    def coerce_text(cls, value):
        return as_text(value)


class TokenInfo(ApiModel):
    """Token metadata."""

    symbol: str
    name: str = ""
    chain: str
    address: str
    decimals: Optional[int] = None
    logo_url: Optional[str] = None

    @classmethod
    def from_token(cls, token: Token) -> "TokenInfo":
        return cls(
            symbol=token.symbol,
            name=token.name,
            chain=token.chain,
            address=token.address,
            decimals=token.decimals,
            logo_url=token.logo_url,
        )


class QuoteInfo(ApiModel):
    """One candidate route, amounts in minimal units."""

    kind: str
    from_token: TokenInfo
    to_token: TokenInfo
    amount_in: str
    amount_out: str
    min_amount_out: Optional[str] = None
    router_address: Optional[str] = None
    route_description: Optional[str] = None
    router_name: Optional[str] = None

    @classmethod
    def from_quote(cls, quote: Quote) -> "QuoteInfo":
        return cls(
            kind=quote.kind.value,
            from_token=TokenInfo.from_token(quote.from_token),
            to_token=TokenInfo.from_token(quote.to_token),
            amount_in=quote.amount_in,
            amount_out=quote.amount_out,
            min_amount_out=quote.min_amount_out,
            router_address=quote.router_address,
            route_description=quote.route_description,
            router_name=quote.router_name,
        )


class QuoteListResponse(ApiModel):
    """Candidate quotes; the first is the best."""

    success: bool = True
    quotes: list[QuoteInfo] = Field(default_factory=list)
    best_quote: Optional[QuoteInfo] = None

    @classmethod
    def from_quotes(cls, quotes: list[Quote]) -> "QuoteListResponse":
        items = [QuoteInfo.from_quote(quote) for quote in quotes]
        return cls(quotes=items, best_quote=items[0] if items else None)
