"""
MoveMate Backend — Bearer Token Dependency
===========================================

What:  Resolves the caller's user id from `Authorization: Bearer <JWT>`.
How:   Verifies the token signature and expiry with python-jose, using
       JWT_SECRET_KEY / JWT_ALGORITHM, and reads the user id from the `id`
       claim. Tokens are issued by the account service; nothing here signs.

Failure modes (all 401, rendered by the AuthenticationError handler):
    no / non-bearer header         → authentication_required
    bad signature, expired, junk   → invalid_token
    valid token without `id` claim → invalid_token
"""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from movemate.config import settings
from movemate.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

# auto_error=False so a missing header reaches our own handler and gets the
# standard error body instead of FastAPI's default 403.
bearer_scheme = HTTPBearer(auto_error=False)


def decode_user_id(token: str) -> str:
    try:
        payload = jwt.decode(
            token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm]
        )
    except JWTError as e:
        logger.info("Rejected bearer token: %s", str(e))
        raise AuthenticationError(
            message="Invalid or expired token",
            code="invalid_token",
        ) from e

    user_id = payload.get("id")
    if not user_id:
        raise AuthenticationError(message="Token has no user id", code="invalid_token")
    return str(user_id)


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    if credentials is None:
        raise AuthenticationError()
    return decode_user_id(credentials.credentials)
