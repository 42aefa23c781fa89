"""
Tubely Authentication Module

Bearer token handling for the upload endpoints. Tokens are HS256 JWTs issued
by the wider Tubely service with the user ID in the ``sub`` claim and
``tubely-access`` as issuer. This module:

- Extracts the bearer credential from the Authorization header (HTTPBearer)
- Verifies signature, expiry and issuer with python-jose
- Resolves a token to the requesting user ID for the upload pipeline

Extraction and verification are separate: the router only pulls
the raw token out of the request, and the upload service decides when to
verify it so that a malformed video ID is rejected before authentication.

Usage:
    ```python
    from fastapi import Depends
    from tubely.core.auth import get_bearer_token

    @router.post("/video_upload/{video_id}")
    async def upload(video_id: str, token: str | None = Depends(get_bearer_token)):
        ...
    ```
"""

import logging

from datetime import UTC, datetime, timedelta
from typing import Any

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from tubely.config import Settings
from tubely.core.exceptions import UnauthenticatedError


logger = logging.getLogger(__name__)


# HTTPBearer security scheme; auto_error is off so a missing header reaches the
# upload service as None and is reported in validation order
security = HTTPBearer(
    scheme_name="Bearer",
    description="JWT access token issued by the Tubely API.",
    auto_error=False,
)


def create_access_token(
    user_id: str,
    settings: Settings,
    expires_in: timedelta | None = None,
) -> str:
    """
    Create an access token for the given user.

    Used by tests and local tooling; production tokens are minted by the
    service that owns login.

    Args:
        user_id: Value for the ``sub`` claim.
        settings: Settings providing secret, issuer and algorithm.
        expires_in: Lifetime override; defaults to jwt_expiration_hours.

    Returns:
        str: The encoded JWT.
    """
    now = datetime.now(UTC)
    expire = now + (expires_in or timedelta(hours=settings.jwt_expiration_hours))

    payload = {
        "iss": settings.jwt_issuer,
        "sub": user_id,
        "iat": now,
        "exp": expire,
    }

    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def validate_access_token(token: str, settings: Settings) -> str:
    """
    Verify an access token and return the user ID it was issued to.

    Args:
        token: The raw JWT string.
        settings: Settings providing secret, issuer and algorithm.

    Returns:
        str: The ``sub`` claim.

    Raises:
        UnauthenticatedError: If the token is invalid, expired, from another
            issuer, or has no subject.
    """
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
        )
    except ExpiredSignatureError as e:
        logger.warning("Access token has expired")
        raise UnauthenticatedError("Token has expired", reason="expired-token") from e
    except JWTError as e:
        logger.warning("Access token validation failed: %s", str(e))
        raise UnauthenticatedError("Invalid token", reason="invalid-token") from e

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("Token missing 'sub' claim")
        raise UnauthenticatedError(
            "Invalid token: missing user identifier", reason="invalid-token"
        )

    return str(user_id)


class TokenAuthenticator:
    """
    Resolves bearer tokens to user IDs.

    The upload service depends on this object rather than on jose directly so
    tests can substitute an authenticator with a fixed answer.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def authenticate(self, token: str | None) -> str:
        """
        Return the user ID for ``token``.

        Raises:
            UnauthenticatedError: If no token was supplied or it fails verification.
        """
        if not token:
            raise UnauthenticatedError("Couldn't find bearer token", reason="missing-token")
        return validate_access_token(token, self.settings)


async def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str | None:
    """Raw bearer token from the Authorization header, or None when absent."""
    if credentials is None:
        return None
    return credentials.credentials
