"""Tests for the submission rate limit key."""
import pytest
from starlette.requests import Request

from expense_claims.config import settings
from expense_claims.utils.rate_limit import get_rate_limit_key


def make_request(forwarded_for: str = None, client_host: str = "10.0.0.7") -> Request:
    headers = []
    if forwarded_for is not None:
        headers.append((b"x-forwarded-for", forwarded_for.encode()))
    return Request({
        "type": "http",
        "method": "POST",
        "path": "/api/claims",
        "query_string": b"",
        "headers": headers,
        "client": (client_host, 52000),
    })


@pytest.mark.unit
def test_key_is_peer_address_by_default(monkeypatch):
    monkeypatch.setattr(settings, "RATE_LIMIT_TRUST_FORWARDED_FOR", False)

    assert get_rate_limit_key(make_request()) == "10.0.0.7"
    # A client cannot pick its own bucket by sending the header
    assert get_rate_limit_key(make_request("203.0.113.9")) == "10.0.0.7"
    assert get_rate_limit_key(make_request("198.51.100.1")) == "10.0.0.7"


@pytest.mark.unit
def test_forwarded_for_used_behind_trusted_proxy(monkeypatch):
    monkeypatch.setattr(settings, "RATE_LIMIT_TRUST_FORWARDED_FOR", True)

    assert get_rate_limit_key(make_request("203.0.113.9, 10.0.0.1")) == "203.0.113.9"
    assert get_rate_limit_key(make_request()) == "10.0.0.7"
