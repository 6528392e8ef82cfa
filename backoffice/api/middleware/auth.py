"""JWT authentication for API requests."""

import os
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import ValidationError

from backoffice.api.dependencies import SettingsDep
from backoffice.api.exceptions import AuthenticationError
from backoffice.api.middleware.context import update_request_context
from backoffice.api.models.context import UserContext
from backoffice.observability.logging import get_logger

logger = get_logger(__name__)

# Security scheme for OpenAPI docs
security_scheme = HTTPBearer(auto_error=False)


def get_jwt_secret() -> str:
    """Get JWT secret from environment."""
    secret = os.environ.get("BACKOFFICE_JWT_SECRET")
    if not secret:
        raise RuntimeError("BACKOFFICE_JWT_SECRET environment variable not set")
    return secret


async def get_user_context(
    request: Request,
    settings: SettingsDep,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security_scheme)],
) -> UserContext:
    """Validate the bearer token and map its claims to a UserContext.

    Raises:
        AuthenticationError: 401 if the token is missing, invalid or expired
    """
    if credentials is None:
        logger.warning("auth_missing_token", path=request.url.path)
        raise AuthenticationError("Missing authentication token")

    try:
        payload = jwt.decode(
            credentials.credentials,
            get_jwt_secret(),
            algorithms=[settings.api.auth.algorithm],
        )
    except JWTError as e:
        logger.warning("auth_jwt_error", error=str(e), path=request.url.path)
        raise AuthenticationError("Invalid or expired token") from None

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("auth_missing_subject", path=request.url.path)
        raise AuthenticationError("Token missing sub claim")

    try:
        user = UserContext(
            user_id=str(user_id),
            email=payload.get("email"),
            role=payload.get("role", "user"),
        )
    except ValidationError as e:
        logger.warning("auth_validation_error", error=str(e), path=request.url.path)
        raise AuthenticationError("Invalid token claims") from None

    update_request_context(user_id=user.user_id)
    logger.debug("auth_success", user_id=user.user_id, role=user.role)
    return user


UserContextDep = Annotated[UserContext, Depends(get_user_context)]
