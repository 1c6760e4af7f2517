"""Token registry contracts."""

from pydantic import Field

from profitpath.web.contracts.common import ApiModel
from profitpath.web.contracts.quotes import TokenInfo


class TokenListResponse(ApiModel):
    """Registered tokens."""

    tokens: list[TokenInfo] = Field(default_factory=list)
    total: int = 0


class TokenRefreshResponse(ApiModel):
    """Result of a token list refresh."""

    message: str
    chains: dict[str, int] = Field(default_factory=dict, description="Tokens stored per chain")
    total: int = 0
