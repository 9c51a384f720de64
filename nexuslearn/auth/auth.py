"""Bearer-token authentication for API requests.

Clients send ``Authorization: Bearer <jwt>``; tokens are HS256/HS512 JWTs
signed with ``AUTH_JWT_SECRET``. Routes depend on
:func:`require_authenticated_user` and read the caller's id with
:func:`extract_user_id`.
"""

from __future__ import annotations

from typing import Any, cast

from fastapi import HTTPException, Request, status

# jose does not provide type hints
from jose import JWTError, jwt  # type: ignore[import-untyped]
from loguru import logger

from nexuslearn.configs.config import config

AUTH_HEADER_PREFIX = "Bearer "
ALLOWED_ALGORITHMS = {"HS256", "HS512"}


def _get_jwt_secret() -> str:
    secret = config.auth_jwt_secret
    if not secret:
        raise RuntimeError("AUTH_JWT_SECRET is not configured")
    return secret


def _extract_bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith(AUTH_HEADER_PREFIX):
        token = auth_header[len(AUTH_HEADER_PREFIX) :].strip()
        return token or None
    return None


def _token_preview(token: str) -> str:
    return f"{token[:8]}..." if len(token) > 8 else token


def decode_token(token: str) -> dict[str, Any]:
    """Verify a bearer token and return its claims.

    Raises:
        HTTPException: 401 "Invalid token" when the signature, algorithm or
            expiry check fails
        RuntimeError: When no signing secret is configured
    """
    secret = _get_jwt_secret()
    try:
        header = jwt.get_unverified_header(token)
    except JWTError as exc:
        logger.warning(
            "Rejecting bearer token with unparseable header (preview={}): {}",
            _token_preview(token),
            str(exc),
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token"
        ) from exc

    algorithm = header.get("alg") if isinstance(header, dict) else None
    if not isinstance(algorithm, str) or algorithm not in ALLOWED_ALGORITHMS:
        logger.warning(
            "Rejecting bearer token with unsupported algorithm (alg={}, preview={})",
            algorithm,
            _token_preview(token),
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token"
        )

    try:
        decoded = jwt.decode(
            token, secret, algorithms=[algorithm], options={"verify_aud": False}
        )
    except JWTError as exc:
        logger.warning(
            "Bearer token verification failed (algorithm={}, preview={}): {}",
            algorithm,
            _token_preview(token),
            str(exc),
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token"
        ) from exc
    return cast(dict[str, Any], decoded)


async def require_authenticated_user(request: Request) -> dict[str, Any]:
    token = _extract_bearer_token(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized"
        )

    try:
        claims = decode_token(token)
    except RuntimeError as exc:
        logger.error(f"Authentication unavailable: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="server misconfiguration",
        ) from exc

    if extract_user_id(claims) is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token"
        )
    return claims


def extract_user_id(decoded_token: dict[str, Any] | None) -> str | None:
    """Return the user id carried by the token claims."""
    if not isinstance(decoded_token, dict):
        return None
    for claim in ("sub", "uid", "user_id"):
        value = decoded_token.get(claim)
        if isinstance(value, str) and value.strip():
            return value.strip()
    user_section = decoded_token.get("user")
    if isinstance(user_section, dict):
        candidate = user_section.get("id")
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()
    return None
