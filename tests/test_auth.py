import asyncio
import os

import pytest
from jose import jwt
from starlette.requests import Request

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from eatoff.api.deps import get_request_ip
from eatoff.core.config import settings
from eatoff.services.auth import (
    AuthError,
    create_access_token,
    decode_token,
    hash_password,
    token_subject,
    verify_password,
)


def _build_request(
    *,
    headers: dict[str, str] | None = None,
    client_host: str = "127.0.0.1",
) -> Request:
    encoded_headers = [
        (key.lower().encode("latin-1"), value.encode("latin-1"))
        for key, value in (headers or {}).items()
    ]
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/admin/auth/login",
        "headers": encoded_headers,
        "client": (client_host, 5050),
    }
    return Request(scope)


def test_request_ip_ignores_forwarded_by_default() -> None:
    previous = settings.TRUST_PROXY_HEADERS
    settings.TRUST_PROXY_HEADERS = False
    try:
        request = _build_request(headers={"x-forwarded-for": "1.1.1.1"}, client_host="10.0.0.7")
        assert asyncio.run(get_request_ip(request)) == "10.0.0.7"
    finally:
        settings.TRUST_PROXY_HEADERS = previous


def test_request_ip_skips_garbage_forwarded_entries() -> None:
    previous = settings.TRUST_PROXY_HEADERS
    settings.TRUST_PROXY_HEADERS = True
    try:
        request = _build_request(headers={"x-forwarded-for": "unknown, 2.2.2.2"})
        assert asyncio.run(get_request_ip(request)) == "2.2.2.2"
    finally:
        settings.TRUST_PROXY_HEADERS = previous


def test_access_token_round_trip_keeps_role() -> None:
    payload = decode_token(create_access_token("42", "agent", "ioana@eatoff.example"))
    assert payload["role"] == "agent"
    assert token_subject(payload, ("admin", "agent")) == 42


def test_token_for_wrong_audience_is_refused() -> None:
    payload = decode_token(create_access_token("42", "customer"))
    with pytest.raises(AuthError):
        token_subject(payload, ("admin", "agent"))


def test_token_signed_with_other_key_is_refused() -> None:
    forged = jwt.encode({"sub": "1", "role": "admin"}, "not-the-key", algorithm="HS256")
    with pytest.raises(AuthError):
        decode_token(forged)


def test_password_hashing() -> None:
    hashed = hash_password("s3cret")
    assert verify_password("s3cret", hashed) is True
    assert verify_password("wrong", hashed) is False
    assert verify_password("s3cret", None) is False
