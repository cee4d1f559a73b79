"""Bearer token verification.

Tokens are minted by the identity provider with the shared signing secret;
this service only needs to verify them and read `sub` / `email`.
`create_access_token` exists for local tooling and tests.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from fastapi import HTTPException, status
from jose import JWTError, jwt

from core.config import Settings, get_settings
from schemas.auth import TokenData


_logger = logging.getLogger(__name__)


def _settings() -> Settings:  # lazy accessor to allow tests to set env first
    return get_settings()


def _credentials_exception(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def create_access_token(
    data: dict[str, Any], expires_delta: timedelta | None = None
) -> str:
    """Encodes a JWT with `sub` (subject) and expiry"""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(UTC) + timedelta(
            minutes=_settings().ACCESS_TOKEN_EXPIRE_MINUTES
        )
    to_encode.update({"exp": expire})
    s = _settings()
    return jwt.encode(to_encode, s.SECRET_KEY, algorithm=s.ALGORITHM)


def decode_token(token: str) -> TokenData:
    """Decode and validate a JWT, returning TokenData or raising 401.

    Expects a `sub` claim (user identifier). `email` and `scopes` are optional.
    """
    try:
        s = _settings()
        payload = jwt.decode(
            token,
            s.SECRET_KEY,
            algorithms=[s.ALGORITHM],
            options={"verify_aud": False},
        )
    except JWTError as err:
        _logger.debug("JWT rejected: %s", err)
        raise _credentials_exception("Could not validate credentials") from err

    sub = payload.get("sub")
    if sub is None or str(sub).strip() == "":
        raise _credentials_exception("Token missing subject")

    email = payload.get("email")
    scopes = payload.get("scopes", [])
    return TokenData(
        sub=str(sub),
        email=email if isinstance(email, str) else None,
        scopes=list(scopes) if isinstance(scopes, list) else [],
    )
