"""Application configuration using pydantic-settings.

Aggregator credentials are read from OKX_API_KEY, OKX_API_SECRET and
OKX_API_PASSPHRASE. All three are required before any signed call.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from profitpath.errors import ConfigurationError

CREDENTIAL_ENV_VARS = ("OKX_API_KEY", "OKX_API_SECRET", "OKX_API_PASSPHRASE")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Aggregator credentials
    # ======================
    okx_api_key: str = Field(default="", description="Aggregator API key")
    okx_api_secret: str = Field(default="", description="Aggregator API secret (HMAC key)")
    okx_api_passphrase: str = Field(default="", description="Aggregator API passphrase")

    # ======================
    # Aggregator endpoints
    # ======================
    okx_base_url: str = Field(
        default="https://web3.okx.com", description="DEX aggregator API host"
    )
    okx_trade_base_url: str = Field(
        default="https://www.okx.com", description="Host serving order status lookups"
    )
    http_timeout: float = Field(
        default=10.0, gt=0, description="Timeout in seconds for every upstream call"
    )

    # ======================
    # Rate limiting / caching
    # ======================
    rate_limit_interval: float = Field(
        default=1.0, ge=0, description="Minimum spacing between rate-limited upstream calls"
    )
    cache_ttl: float = Field(default=60.0, gt=0, description="Per-key result cache TTL")
    token_refresh_delay: float = Field(
        default=1.2, ge=0, description="Spacing between per-chain token list fetches"
    )

    # ======================
    # Swap defaults
    # ======================
    default_slippage: str = Field(default="0.5", description="Same-chain swap slippage")
    default_bridge_slippage: str = Field(default="0.01", description="Cross-chain slippage")

    # ======================
    # Credit scoring
    # ======================
    ai_api_url: str = Field(
        default="http://localhost:4000", description="Base URL of the AI scoring service"
    )

    # ======================
    # Database
    # ======================
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/profitpath.db",
        description="Token registry database URL",
    )

    # ======================
    # API
    # ======================
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=4000, description="API server port")

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug mode")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def missing_credentials(self) -> list[str]:
        """Names of credential variables that are unset or blank."""
        values = {
            "OKX_API_KEY": self.okx_api_key,
            "OKX_API_SECRET": self.okx_api_secret,
            "OKX_API_PASSPHRASE": self.okx_api_passphrase,
        }
        return [name for name in CREDENTIAL_ENV_VARS if not values[name].strip()]

    def require_credentials(self) -> None:
        """Fail loudly when any aggregator credential is missing.

        Raises:
            ConfigurationError: naming every missing variable
        """
        missing = self.missing_credentials
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "api_host": self.api_host,
            "api_port": self.api_port,
            "database_url": self._redact_url(self.database_url),
            "aggregator": {
                "base_url": self.okx_base_url,
                "trade_base_url": self.okx_trade_base_url,
                "timeout": self.http_timeout,
                "api_key": "***" if self.okx_api_key else "(not set)",
                "api_secret": "***" if self.okx_api_secret else "(not set)",
                "api_passphrase": "***" if self.okx_api_passphrase else "(not set)",
            },
            "limits": {
                "rate_limit_interval": self.rate_limit_interval,
                "cache_ttl": self.cache_ttl,
                "token_refresh_delay": self.token_refresh_delay,
            },
            "swap": {
                "slippage": self.default_slippage,
                "bridge_slippage": self.default_bridge_slippage,
            },
            "ai_api_url": self.ai_api_url,
        }

    @staticmethod
    def _redact_url(url: str) -> str:
        """Redact sensitive parts of database URL."""
        if "://" in url and "@" in url:
            proto, rest = url.split("://", 1)
            if "@" in rest:
                creds, host = rest.rsplit("@", 1)
                if ":" in creds:
                    user, _ = creds.split(":", 1)
                    return f"{proto}://{user}:***@{host}"
        return url


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

