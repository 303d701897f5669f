from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import httpx
from fastapi import HTTPException, status
from jose import jwt
from jose.exceptions import JWSError, JWTError

from admind.config import settings


logger = logging.getLogger("auth.clerk")

JWKS_TTL_SECONDS = 300


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class SigningKeySet:
    """Clerk's published signing keys, cached for a few minutes at a time."""

    def __init__(self, jwks_url: str, ttl_seconds: int = JWKS_TTL_SECONDS) -> None:
        self.jwks_url = jwks_url
        self.ttl_seconds = ttl_seconds
        self._keys: Dict[str, Dict[str, Any]] = {}
        self._fetched_at: float = 0.0

    def is_fresh(self) -> bool:
        return bool(self._keys) and (time.time() - self._fetched_at) < self.ttl_seconds

    def invalidate(self) -> None:
        self._keys = {}
        self._fetched_at = 0.0

    def fetch(self) -> Dict[str, Any]:
        try:
            resp = httpx.get(self.jwks_url, timeout=10)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPError as exc:
            logger.exception("JWKS fetch failed", extra={"jwks_url": self.jwks_url})
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Unable to fetch signing keys",
            ) from exc

    def _load(self) -> None:
        jwks = self.fetch()
        self._keys = {key["kid"]: key for key in jwks.get("keys", []) if key.get("kid")}
        self._fetched_at = time.time()
        logger.debug("Loaded signing keys", extra={"kids": sorted(self._keys)})

    def get(self, kid: str) -> Optional[Dict[str, Any]]:
        if not self.is_fresh():
            self._load()
        key = self._keys.get(kid)
        if key is None:
            # Clerk may have rotated keys since the last load.
            self.invalidate()
            self._load()
            key = self._keys.get(kid)
        return key


signing_keys = SigningKeySet(settings.CLERK_JWKS_URL)


def verify_clerk_token(token: str) -> Dict[str, Any]:
    try:
        header = jwt.get_unverified_header(token)
    except JWTError as exc:
        logger.warning("Invalid token header", exc_info=exc)
        raise _unauthorized("Invalid token") from exc

    kid = header.get("kid")
    if not kid:
        raise _unauthorized("Missing kid in token")
    public_key = signing_keys.get(kid)
    if public_key is None:
        logger.warning("Signing key not found", extra={"kid": kid})
        raise _unauthorized("Signing key not found")

    try:
        claims = jwt.decode(
            token,
            public_key,
            algorithms=[public_key.get("alg", "RS256")],
            audience=settings.CLERK_AUDIENCE,
            issuer=settings.CLERK_JWT_ISSUER,
            options={"verify_aud": settings.CLERK_AUDIENCE is not None},
        )
    except (JWTError, JWSError, ValueError) as exc:
        logger.warning("Token verification failed", exc_info=exc, extra={"kid": kid})
        raise _unauthorized("Invalid token") from exc

    logger.debug("Verified Clerk token", extra={"kid": kid, "sub": claims.get("sub")})
    return claims
