"""Error taxonomy shared by the aggregator client, services and web layer.

Each error carries the HTTP status the web layer answers with. Upstream
errors keep the aggregator's raw payload so callers can act on it.
"""

from typing import Any, Optional


class ProfitPathError(Exception):
    """Base class for all application errors."""

    http_status = 500

    def __init__(self, message: str, payload: Any = None):
        self.message = message
        self.payload = payload
        super().__init__(message)

    def to_dict(self) -> dict:
        """Render the error for an API response body."""
        data: dict[str, Any] = {"error": self.message}
        if self.payload is not None:
            data["details"] = self.payload
        return data


class ValidationError(ProfitPathError):
    """A required field is missing or malformed. Never retried."""

    http_status = 400


class UpstreamError(ProfitPathError):
    """The aggregator answered with a failure or could not be reached."""

    http_status = 502

    def __init__(
        self,
        message: str,
        payload: Any = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, payload)
        self.status_code = status_code


class NotFoundError(ProfitPathError):
    """The aggregator returned no matching route or data."""

    http_status = 404


class InternalError(ProfitPathError):
    """Unexpected local fault, e.g. a signature computation failure."""

    http_status = 500


class ConfigurationError(ProfitPathError):
    """Required configuration is missing. Fatal at startup."""

    http_status = 500
