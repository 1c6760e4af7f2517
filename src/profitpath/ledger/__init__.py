"""Token registry persistence."""

from profitpath.ledger.database import close_db, get_session_factory, init_db
from profitpath.ledger.models import Base, TokenRecord
from profitpath.ledger.repository import TokenRepository

__all__ = [
    # Models
    "Base",
    "TokenRecord",
    # Database
    "get_session_factory",
    "init_db",
    "close_db",
    "TokenRepository",
]
