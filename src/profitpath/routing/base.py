"""Canonical data model for quotes, swap intents and transaction status."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from profitpath.errors import ValidationError

WALLET_ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")

# Chain indices served by the EVM swap endpoint; every other chain uses
# the instruction-style endpoint.
EVM_CHAIN_INDICES = frozenset({"1", "66", "42161", "137", "10", "56", "43114"})

DEFAULT_DECIMALS = 18


class TransactionStatus(str, Enum):
    """Canonical status of a swap or bridge transaction."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    UNKNOWN = "unknown"


class QuoteKind(str, Enum):
    """Which upstream endpoint family produced a quote."""

    SAME_CHAIN = "same_chain"
    CROSS_CHAIN = "cross_chain"


@dataclass(frozen=True)
class Token:
    """Token metadata, unique by (address, chain)."""

    symbol: str
    chain: str
    address: str
    decimals: Optional[int] = None
    name: str = ""
    logo_url: Optional[str] = None

    @property
    def key(self) -> tuple[str, str]:
        """Registry key; address comparison is case-insensitive."""
        return (self.address.lower(), str(self.chain))

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "name": self.name,
            "chain": self.chain,
            "address": self.address,
            "decimals": self.decimals,
            "logoUrl": self.logo_url,
        }


@dataclass(frozen=True)
class Quote:
    """A single candidate route for a swap, amounts in minimal units."""

    kind: QuoteKind
    from_token: Token
    to_token: Token
    amount_in: str
    amount_out: str
    min_amount_out: Optional[str] = None
    router_address: Optional[str] = None
    route_description: Optional[str] = None
    router_name: Optional[str] = None
    raw: dict = field(default_factory=dict, compare=False, repr=False)

    def to_dict(self) -> dict:
        """Convert to the JSON shape returned to API clients."""
        return {
            "kind": self.kind.value,
            "fromToken": self.from_token.to_dict(),
            "toToken": self.to_token.to_dict(),
            "amountIn": self.amount_in,
            "amountOut": self.amount_out,
            "minAmountOut": self.min_amount_out,
            "routerAddress": self.router_address,
            "routeDescription": self.route_description,
            "routerName": self.router_name,
        }


@dataclass
class SwapIntent:
    """What a caller wants to swap, with the amount in human units."""

    from_chain: str
    to_chain: str
    from_token_address: str
    to_token_address: str
    amount: str
    user_wallet_address: str
    slippage: Optional[str] = None
    receive_address: Optional[str] = None

    @property
    def is_cross_chain(self) -> bool:
        return str(self.from_chain) != str(self.to_chain)

    @property
    def effective_receive_address(self) -> str:
        """Destination address; defaults to the sending wallet."""
        return self.receive_address or self.user_wallet_address

    def validate(self) -> "SwapIntent":
        """Check required fields and the wallet address format.

        Raises:
            ValidationError: listing missing fields, or on a malformed address
        """
        required = {
            "fromChain": self.from_chain,
            "toChain": self.to_chain,
            "fromToken": self.from_token_address,
            "toToken": self.to_token_address,
            "amount": self.amount,
            "userWalletAddress": self.user_wallet_address,
        }
        missing = [name for name, value in required.items() if value in (None, "")]
        if missing:
            raise ValidationError(f"Missing required parameters: {', '.join(missing)}")

        if not is_valid_wallet_address(self.user_wallet_address):
            raise ValidationError(
                f"Invalid wallet address format: {self.user_wallet_address!r} "
                "(expected 0x followed by 40 hex characters)"
            )
        return self


@dataclass(frozen=True)
class SwapTransaction:
    """Unsigned transaction payload built by the aggregator."""

    tx: Any
    router: Any
    from_token_amount: Optional[str]
    to_token_amount: Optional[str]
    minimum_receive: Optional[str]
    raw: Any = field(default=None, compare=False, repr=False)

    def to_dict(self) -> dict:
        return {
            "txData": self.tx,
            "bridgeInfo": self.router,
            "fromTokenAmount": self.from_token_amount,
            "toTokenAmount": self.to_token_amount,
            "minimumReceive": self.minimum_receive,
        }


def is_valid_wallet_address(address: Optional[str]) -> bool:
    """Check a 0x-prefixed, 40-hex-character wallet address."""
    return bool(address) and WALLET_ADDRESS_PATTERN.match(address) is not None


def is_evm_chain(chain_index: Any) -> bool:
    """Check whether a chain uses the EVM swap endpoint."""
    return str(chain_index) in EVM_CHAIN_INDICES
