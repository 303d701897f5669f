import time

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi import HTTPException, status
from jose import jwk, jwt

from admind.auth import clerk
from admind.auth import dependencies as auth_dependencies
from admind.config import settings


@pytest.fixture(scope="module")
def signing_key():
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_jwk = jwk.construct(private_pem, algorithm="RS256").public_key().to_dict()
    public_jwk["kid"] = "kid_1"
    return private_pem, public_jwk


def _token(private_pem: str, kid: str = "kid_1", **overrides) -> str:
    claims = {
        "sub": "user_from_token",
        "iss": settings.CLERK_JWT_ISSUER,
        "exp": int(time.time()) + 300,
        "email": "owner@admind.test",
    }
    claims.update(overrides)
    return jwt.encode(claims, private_pem, algorithm="RS256", headers={"kid": kid})


@pytest.fixture(autouse=True)
def reset_signing_keys():
    clerk.signing_keys.invalidate()
    yield
    clerk.signing_keys.invalidate()


def test_verify_clerk_token_accepts_signed_token(signing_key, monkeypatch):
    private_pem, public_jwk = signing_key
    monkeypatch.setattr(clerk.signing_keys, "fetch", lambda: {"keys": [public_jwk]})

    claims = clerk.verify_clerk_token(_token(private_pem))

    assert claims["sub"] == "user_from_token"


def test_verify_clerk_token_rejects_expired_and_wrong_issuer(signing_key, monkeypatch):
    private_pem, public_jwk = signing_key
    monkeypatch.setattr(clerk.signing_keys, "fetch", lambda: {"keys": [public_jwk]})

    for token in (
        _token(private_pem, exp=int(time.time()) - 60),
        _token(private_pem, iss="https://evil.test"),
    ):
        with pytest.raises(HTTPException) as exc_info:
            clerk.verify_clerk_token(token)
        assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED


def test_unknown_kid_refetches_once(signing_key, monkeypatch):
    private_pem, public_jwk = signing_key
    rotated = dict(public_jwk, kid="kid_2")
    responses = [{"keys": [public_jwk]}, {"keys": [public_jwk, rotated]}]
    calls = []

    def fake_fetch():
        calls.append(1)
        return responses[len(calls) - 1]

    monkeypatch.setattr(clerk.signing_keys, "fetch", fake_fetch)

    claims = clerk.verify_clerk_token(_token(private_pem, kid="kid_2"))

    assert claims["sub"] == "user_from_token"
    assert len(calls) == 2


def test_missing_signing_key_is_unauthorized(signing_key, monkeypatch):
    private_pem, public_jwk = signing_key
    monkeypatch.setattr(clerk.signing_keys, "fetch", lambda: {"keys": [public_jwk]})

    with pytest.raises(HTTPException) as exc_info:
        clerk.verify_clerk_token(_token(private_pem, kid="kid_unknown"))
    assert exc_info.value.detail == "Signing key not found"


def test_signing_keys_are_cached_until_ttl(monkeypatch):
    keys = clerk.SigningKeySet("https://clerk.test/jwks", ttl_seconds=60)
    calls = []

    def fake_fetch():
        calls.append(1)
        return {"keys": [{"kid": "kid_1", "kty": "RSA"}]}

    monkeypatch.setattr(keys, "fetch", fake_fetch)

    assert keys.get("kid_1")["kty"] == "RSA"
    assert keys.get("kid_1") is not None
    assert len(calls) == 1

    keys._fetched_at -= 61
    assert not keys.is_fresh()
    keys.get("kid_1")
    assert len(calls) == 2


def test_bearer_token_authenticates_dashboard(anonymous_client, monkeypatch):
    monkeypatch.setattr(auth_dependencies, "verify_clerk_token", lambda _token: {"sub": "user_from_token"})

    resp = anonymous_client.get("/dashboard/stats", headers={"Authorization": "Bearer test-token"})

    assert resp.status_code == 200
    assert resp.json()["activeCampaigns"] == 0


def test_token_without_subject_is_rejected(anonymous_client, monkeypatch):
    monkeypatch.setattr(auth_dependencies, "verify_clerk_token", lambda _token: {"email": "x@example.com"})

    resp = anonymous_client.get("/dashboard/stats", headers={"Authorization": "Bearer test-token"})

    assert resp.status_code == 401
    assert resp.json() == {"detail": "Invalid token claims"}


def test_invalid_token_on_public_booking_is_rejected(anonymous_client, monkeypatch):
    def reject(_token):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    monkeypatch.setattr(auth_dependencies, "verify_clerk_token", reject)

    resp = anonymous_client.post(
        "/meetings",
        headers={"Authorization": "Bearer garbage"},
        json={"attendee_name": "Jane", "attendee_email": "jane@example.com"},
    )

    assert resp.status_code == 401


def test_malformed_token_is_rejected_without_fetching_keys(monkeypatch):
    def fail_fetch():  # pragma: no cover - must not be called
        raise AssertionError("JWKS should not be fetched for a malformed token")

    monkeypatch.setattr(clerk.signing_keys, "fetch", fail_fetch)

    with pytest.raises(HTTPException) as exc_info:
        clerk.verify_clerk_token("not-a-jwt")
    assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED


def test_jwks_outage_is_service_unavailable(monkeypatch):
    def refuse(*_args, **_kwargs):
        raise httpx.ConnectError("connection refused")

    monkeypatch.setattr(clerk.httpx, "get", refuse)

    with pytest.raises(HTTPException) as exc_info:
        clerk.SigningKeySet("https://clerk.test/jwks").get("kid_1")
    assert exc_info.value.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
