"""Tests for aggregator request signing."""

import base64
import hashlib
import hmac
from datetime import datetime, timedelta, timezone

import pytest

from profitpath.config import Settings
from profitpath.errors import ConfigurationError
from profitpath.routing.signing import (
    HEADER_KEY,
    HEADER_PASSPHRASE,
    HEADER_SIGN,
    HEADER_TIMESTAMP,
    RequestSigner,
    compute_signature,
    format_timestamp,
)

TIMESTAMP = "2024-05-01T12:00:00.123Z"
PATH = "/api/v5/dex/aggregator/quote?chainId=1&amount=1000"


class TestFormatTimestamp:
    """Tests for the ISO-8601 millisecond timestamp."""

    def test_millisecond_precision_with_z_suffix(self):
        moment = datetime(2024, 5, 1, 12, 0, 0, 123456, tzinfo=timezone.utc)
        assert format_timestamp(moment) == "2024-05-01T12:00:00.123Z"

    def test_converts_to_utc(self):
        moment = datetime(2024, 5, 1, 14, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        assert format_timestamp(moment) == "2024-05-01T12:00:00.000Z"


class TestComputeSignature:
    """Tests for the HMAC-SHA256 signature."""

    def test_matches_hmac_of_prehash(self):
        prehash = f"{TIMESTAMP}GET{PATH}"
        expected = base64.b64encode(
            hmac.new(b"secret", prehash.encode(), hashlib.sha256).digest()
        ).decode()

        assert compute_signature(TIMESTAMP, "GET", PATH, "", "secret") == expected

    def test_deterministic(self):
        first = compute_signature(TIMESTAMP, "GET", PATH, "", "secret")
        second = compute_signature(TIMESTAMP, "GET", PATH, "", "secret")
        assert first == second

    @pytest.mark.parametrize(
        "changed",
        [
            ("2024-05-01T12:00:00.124Z", "GET", PATH, "", "secret"),
            (TIMESTAMP, "POST", PATH, "", "secret"),
            (TIMESTAMP, "GET", PATH + "&slippage=0.5", "", "secret"),
            (TIMESTAMP, "GET", PATH, '{"a":1}', "secret"),
            (TIMESTAMP, "GET", PATH, "", "other-secret"),
        ],
    )
    def test_any_input_change_changes_signature(self, changed):
        base = compute_signature(TIMESTAMP, "GET", PATH, "", "secret")
        assert compute_signature(*changed) != base

    def test_method_is_upper_cased(self):
        assert compute_signature(TIMESTAMP, "get", PATH, "", "s") == compute_signature(
            TIMESTAMP, "GET", PATH, "", "s"
        )


class TestRequestSigner:
    """Tests for the header set."""

    def test_headers(self, signer):
        headers = signer.headers("GET", PATH)

        assert headers[HEADER_KEY] == "test-key"
        assert headers[HEADER_PASSPHRASE] == "test-passphrase"
        assert headers[HEADER_TIMESTAMP] == TIMESTAMP
        assert headers[HEADER_SIGN] == compute_signature(TIMESTAMP, "GET", PATH, "", "test-secret")

    def test_timestamp_taken_per_call(self):
        moments = iter(
            [
                datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc),
                datetime(2024, 5, 1, 12, 0, 1, tzinfo=timezone.utc),
            ]
        )
        signer = RequestSigner("k", "s", "p", clock=lambda: next(moments))

        first = signer.headers("GET", PATH)
        second = signer.headers("GET", PATH)

        assert first[HEADER_TIMESTAMP] != second[HEADER_TIMESTAMP]
        assert first[HEADER_SIGN] != second[HEADER_SIGN]

    def test_blank_credential_rejected(self):
        with pytest.raises(ConfigurationError) as exc:
            RequestSigner(api_key="k", secret="", passphrase="p")
        assert "secret" in exc.value.message

    def test_from_settings_requires_all_credentials(self):
        settings = Settings(okx_api_key="k", okx_api_secret="s", okx_api_passphrase="")

        with pytest.raises(ConfigurationError) as exc:
            RequestSigner.from_settings(settings)
        assert "OKX_API_PASSPHRASE" in exc.value.message
