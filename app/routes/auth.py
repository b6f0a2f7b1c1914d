"""
Authentication endpoints - email/password accounts on Firebase Auth.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from app.models.user import AuthResponse, LoginRequest, RegisterRequest, SessionResponse, UserResponse
from app.services import auth_service
from app.services.user_service import get_user_service, home_view_for_role
from app.utils.security import get_current_user
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest):
    """
    Create a citizen account.

    The client signs in afterwards with /auth/login; registration does not
    start a session. Admin and worker roles are granted by an admin.
    """
    try:
        user = get_user_service().register(
            email=request.email,
            password=request.password,
            name=request.name,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return AuthResponse(
        success=True,
        message="Account created. Please sign in.",
        user=user,
        home_view=home_view_for_role(user.role),
    )


@router.post("/login", response_model=AuthResponse)
async def login(request: LoginRequest):
    """
    Sign in with email and password.

    Returns the Firebase ID token (send it as a Bearer token) and the home
    view for the user's role.
    """
    try:
        tokens = auth_service.sign_in_with_password(request.email, request.password)
    except RuntimeError as e:
        logger.error(f"Login unavailable: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    user = get_user_service().get_user(tokens["uid"])
    if user is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User profile not found")

    logger.info(f"User signed in: {user.id} ({user.role.value})")
    return AuthResponse(
        success=True,
        message="Signed in",
        user=user,
        home_view=home_view_for_role(user.role),
        id_token=tokens["id_token"],
        refresh_token=tokens["refresh_token"],
        expires_in=tokens["expires_in"],
    )


@router.post("/logout")
async def logout(user: UserResponse = Depends(get_current_user)):
    """Revoke every session of the signed-in user."""
    auth_service.revoke_sessions(user.id)
    return {"success": True, "message": "Signed out"}


@router.get("/me", response_model=SessionResponse)
async def me(user: UserResponse = Depends(get_current_user)):
    """Current profile and the home view the client should show."""
    return SessionResponse(user=user, home_view=home_view_for_role(user.role))
