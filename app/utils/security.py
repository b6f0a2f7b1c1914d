"""
Request authentication and role gating.

Routes depend on get_current_user (any signed-in user) or require_roles(...)
(specific roles). The mobile client sends its Firebase ID token as
``Authorization: Bearer <token>``.
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.exceptions import AuthenticationError
from app.models.user import UserResponse, UserRole
from app.services import auth_service
from app.services.user_service import get_user_service

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> UserResponse:
    """
    Resolve the signed-in user from the bearer ID token.

    Raises:
        401: No token, or the token fails verification
        403: Token is valid but the user has no profile document
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        uid = auth_service.verify_id_token(credentials.credentials)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = get_user_service().get_user(uid)
    if user is None:
        logger.warning(f"Token for {uid} has no user profile")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User profile not found",
        )
    return user


def require_roles(*roles: UserRole):
    """Dependency factory: the signed-in user must have one of the given roles."""

    async def _checker(user: UserResponse = Depends(get_current_user)) -> UserResponse:
        if user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role: {', '.join(r.value for r in roles)}",
            )
        return user

    return _checker
