"""
Auth service - thin wrapper over Firebase Authentication.

Account creation, token verification and session revocation go through the
Admin SDK. Password sign-in has no Admin SDK equivalent, so it calls the
Identity Toolkit REST endpoint with the project's web API key, the same call
the Firebase client SDK makes.
"""

import logging
from typing import Dict

import requests
from firebase_admin import auth

from app.config.firebase import initialize_firebase_app
from app.core.exceptions import AuthenticationError
from app.core.settings import settings

logger = logging.getLogger(__name__)

SIGN_IN_URL = "https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"


def _auth():
    """Admin SDK auth module, with the default app initialized."""
    initialize_firebase_app()
    return auth


def create_account(email: str, password: str, name: str) -> str:
    """
    Create a Firebase Auth account and return its uid.

    Raises:
        ValueError: Email already registered or rejected by Firebase
    """
    try:
        record = _auth().create_user(email=email, password=password, display_name=name)
    except auth.EmailAlreadyExistsError:
        raise ValueError(f"An account already exists for {email}")
    except ValueError as e:
        # Admin SDK raises ValueError for malformed email/password
        raise ValueError(f"Invalid registration details: {e}")

    logger.info(f"Auth account created: {record.uid}")
    return record.uid


def delete_account(uid: str) -> None:
    _auth().delete_user(uid)
    logger.info(f"Auth account deleted: {uid}")


def verify_id_token(id_token: str) -> str:
    """
    Verify a Firebase ID token (rejecting revoked sessions) and return the uid.

    Raises:
        AuthenticationError: Token missing, malformed, expired or revoked
    """
    if not id_token:
        raise AuthenticationError("Missing ID token")
    try:
        decoded = _auth().verify_id_token(id_token, check_revoked=True)
    except auth.RevokedIdTokenError:
        raise AuthenticationError("Session has been signed out")
    except auth.ExpiredIdTokenError:
        raise AuthenticationError("ID token has expired")
    except auth.UserDisabledError:
        raise AuthenticationError("Account is disabled")
    except (auth.InvalidIdTokenError, ValueError) as e:
        raise AuthenticationError(f"Invalid ID token: {e}")
    return decoded["uid"]


def revoke_sessions(uid: str) -> None:
    """Sign the user out everywhere by revoking their refresh tokens."""
    _auth().revoke_refresh_tokens(uid)
    logger.info(f"Sessions revoked for {uid}")


def sign_in_with_password(email: str, password: str) -> Dict:
    """
    Exchange email/password for Firebase tokens.

    Returns:
        Dict with uid, id_token, refresh_token and expires_in (seconds)

    Raises:
        AuthenticationError: Wrong credentials or Identity Toolkit unreachable
        RuntimeError: FIREBASE_WEB_API_KEY is not configured
    """
    if not settings.FIREBASE_WEB_API_KEY:
        raise RuntimeError("FIREBASE_WEB_API_KEY is not configured; password sign-in is unavailable")

    try:
        resp = requests.post(
            SIGN_IN_URL,
            params={"key": settings.FIREBASE_WEB_API_KEY},
            json={"email": email, "password": password, "returnSecureToken": True},
            timeout=10.0,
        )
    except requests.RequestException as e:
        logger.error(f"Identity Toolkit request failed: {e}")
        raise AuthenticationError("Sign-in service unavailable")

    if resp.status_code != 200:
        try:
            reason = resp.json().get("error", {}).get("message", "UNKNOWN")
        except ValueError:
            reason = "UNKNOWN"
        logger.info(f"Sign-in rejected for {email}: {reason}")
        raise AuthenticationError("Invalid email or password")

    data = resp.json()
    return {
        "uid": data["localId"],
        "id_token": data["idToken"],
        "refresh_token": data["refreshToken"],
        "expires_in": int(data.get("expiresIn", 3600)),
    }
