"""Repository for token registry operations."""

from collections import defaultdict
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from profitpath.ledger.models import TokenRecord
from profitpath.routing.base import Token


def _to_token(record: TokenRecord) -> Token:
    return Token(
        symbol=record.symbol,
        name=record.name,
        chain=record.chain,
        address=record.address,
        decimals=record.decimals,
        logo_url=record.logo_url,
    )


class TokenRepository:
    """Read/write access to token metadata keyed by (address, chain)."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_token(self, address: str, chain: str) -> Optional[Token]:
        """Get a token by case-insensitive address and chain."""
        stmt = select(TokenRecord).where(
            TokenRecord.address == address.lower(),
            TokenRecord.chain == str(chain),
        )
        result = await self.session.execute(stmt)
        record = result.scalar_one_or_none()
        return _to_token(record) if record else None

    async def get_decimals(self, address: str, chain: str) -> Optional[int]:
        """Get a token's decimal count, or None if unknown."""
        token = await self.get_token(address, chain)
        return token.decimals if token else None

    async def upsert_tokens(self, tokens: Iterable[Token]) -> int:
        """Insert new tokens and refresh existing ones.

        Returns:
            Number of tokens written
        """
        by_chain: dict[str, dict[str, Token]] = defaultdict(dict)
        for token in tokens:
            by_chain[str(token.chain)][token.address.lower()] = token

        written = 0
        for chain, chain_tokens in by_chain.items():
            stmt = select(TokenRecord).where(
                TokenRecord.chain == chain,
                TokenRecord.address.in_(list(chain_tokens.keys())),
            )
            result = await self.session.execute(stmt)
            existing = {record.address: record for record in result.scalars().all()}

            for address, token in chain_tokens.items():
                record = existing.get(address)
                if record is None:
                    record = TokenRecord(address=address, chain=chain)
                    self.session.add(record)
                record.symbol = token.symbol
                record.name = token.name
                record.decimals = token.decimals
                record.logo_url = token.logo_url
                written += 1

        await self.session.flush()
        return written

    async def list_tokens(self, chain: Optional[str] = None) -> list[Token]:
        """List registered tokens, optionally for one chain."""
        stmt = select(TokenRecord).order_by(TokenRecord.chain, TokenRecord.symbol)
        if chain is not None:
            stmt = stmt.where(TokenRecord.chain == str(chain))
        result = await self.session.execute(stmt)
        return [_to_token(record) for record in result.scalars().all()]

    async def list_chains(self) -> list[str]:
        """List the distinct chains that have registered tokens."""
        stmt = select(TokenRecord.chain).distinct().order_by(TokenRecord.chain)
        result = await self.session.execute(stmt)
        return [str(chain) for chain in result.scalars().all()]
