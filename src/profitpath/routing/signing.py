"""Request signing for the aggregator's authenticated API.

Every call carries four headers. The signature is
base64(HMAC-SHA256(secret, timestamp + METHOD + request_path + body)),
where request_path includes the query string exactly as sent.
"""

import base64
import hashlib
import hmac
from datetime import datetime, timezone
from typing import Callable, Optional

from profitpath.config import Settings
from profitpath.errors import ConfigurationError, InternalError

HEADER_KEY = "OK-ACCESS-KEY"
HEADER_PASSPHRASE = "OK-ACCESS-PASSPHRASE"
HEADER_SIGN = "OK-ACCESS-SIGN"
HEADER_TIMESTAMP = "OK-ACCESS-TIMESTAMP"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-05-01T12:00:00.123Z."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def compute_signature(timestamp: str, method: str, request_path: str, body: str, secret: str) -> str:
    """Compute the base64 HMAC-SHA256 signature for one request."""
    prehash = f"{timestamp}{method.upper()}{request_path}{body}"
    try:
        digest = hmac.new(secret.encode("utf-8"), prehash.encode("utf-8"), hashlib.sha256).digest()
    except (TypeError, ValueError, AttributeError) as e:
        raise InternalError(f"Failed to compute request signature: {e}") from e
    return base64.b64encode(digest).decode("ascii")


class RequestSigner:
    """Builds the authentication header set for the aggregator API."""

    def __init__(
        self,
        api_key: str,
        secret: str,
        passphrase: str,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the signer.

        Args:
            api_key: Aggregator API key
            secret: HMAC secret
            passphrase: API passphrase
            clock: Returns the current time; injectable for tests

        Raises:
            ConfigurationError: If any credential is blank
        """
        missing = [
            name
            for name, value in (
                ("api_key", api_key),
                ("secret", secret),
                ("passphrase", passphrase),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(f"Missing aggregator credentials: {', '.join(missing)}")

        self._api_key = api_key
        self._secret = secret
        self._passphrase = passphrase
        self._clock = clock or _utc_now

    @classmethod
    def from_settings(cls, settings: Settings) -> "RequestSigner":
        settings.require_credentials()
        return cls(
            api_key=settings.okx_api_key,
            secret=settings.okx_api_secret,
            passphrase=settings.okx_api_passphrase,
        )

    def sign(self, timestamp: str, method: str, request_path: str, body: str = "") -> str:
        return compute_signature(timestamp, method, request_path, body, self._secret)

    def headers(self, method: str, request_path: str, body: str = "") -> dict[str, str]:
        """Build signed headers; the timestamp is taken fresh on every call."""
        timestamp = format_timestamp(self._clock())
        return {
            HEADER_KEY: self._api_key,
            HEADER_PASSPHRASE: self._passphrase,
            HEADER_SIGN: self.sign(timestamp, method, request_path, body),
            HEADER_TIMESTAMP: timestamp,
        }
