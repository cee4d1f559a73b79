from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from core.security import decode_token
from schemas.auth import CurrentUser


# --------------------------------------------------------------------------- #
# Common constants / helpers
# --------------------------------------------------------------------------- #
LOGGER = logging.getLogger(__name__)
BEARER = "Bearer"


def unauthorized(detail: str = "Could not validate credentials") -> HTTPException:
    """Return the canonical 401 response."""
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": BEARER},
    )


# Login lives with the identity provider; tokenUrl only feeds the OpenAPI docs.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token", auto_error=False)


# --------------------------------------------------------------------------- #
# The dependency
# --------------------------------------------------------------------------- #
async def get_current_user(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
) -> CurrentUser:
    """
    Resolve the currently authenticated user from a bearer JWT.

    Raises
    ------
    HTTPException(401)
        If the token is missing, malformed, expired, or has no subject.
    """
    if not token:
        LOGGER.debug("Request without bearer token rejected")
        raise unauthorized("Unauthorized")

    # `decode_token` raises HTTPException(401) on failure.
    token_data = decode_token(token)

    sub = token_data.sub
    if not sub:
        LOGGER.debug("Token missing 'sub' claim")
        raise unauthorized()

    user = CurrentUser(id=sub, email=token_data.email)
    # Lets the rate limiter bucket by user instead of client IP
    request.state.user_id = user.id
    return user


CurrentUserDep = Annotated[CurrentUser, Depends(get_current_user)]
