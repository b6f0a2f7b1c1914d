"""
User Service - user profiles and roles in Firestore.

The profile lives at users/{uid}, keyed by the Firebase Auth uid. The role
stored there decides which home view the client opens and which workflow
actions the user may perform.
"""

from typing import Dict, List, Optional
import logging

from app.config.firebase import get_db
from app.core.exceptions import NotFoundError
from app.models.user import UserResponse, UserRole
from app.services import auth_service
from app.utils.firestore_helpers import iter_documents, parse_timestamp, utcnow, where_filter

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"

HOME_VIEWS = {
    UserRole.CITIZEN: "citizen_home",
    UserRole.ADMIN: "admin_dashboard",
    UserRole.WORKER: "worker_dashboard",
}


def home_view_for_role(role: UserRole) -> str:
    """Role-based screen selection for a signed-in user."""
    return HOME_VIEWS[UserRole(role)]


class UserService:
    """
    Service for user management in Firestore.
    """

    def __init__(self):
        self.db = get_db()

    def _to_user(self, uid: str, data: Dict) -> UserResponse:
        try:
            role = UserRole(data.get("role", UserRole.CITIZEN.value))
        except ValueError:
            logger.warning(f"User {uid} has unknown role {data.get('role')!r}; treating as citizen")
            role = UserRole.CITIZEN
        return UserResponse(
            id=uid,
            name=data.get("name"),
            email=data.get("email"),
            role=role,
            created_at=parse_timestamp(data.get("createdAt")),
        )

    def get_user(self, uid: str) -> Optional[UserResponse]:
        doc = self.db.collection(USERS_COLLECTION).document(uid).get()
        if not doc.exists:
            return None
        return self._to_user(doc.id, doc.to_dict() or {})

    def create_profile(self, uid: str, email: str, name: str, role: UserRole = UserRole.CITIZEN) -> UserResponse:
        profile = {
            "userId": uid,
            "name": name,
            "email": email,
            "role": role.value,
            "createdAt": utcnow(),
        }
        self.db.collection(USERS_COLLECTION).document(uid).set(profile)
        logger.info(f"User profile created: {uid} ({role.value})")
        return self._to_user(uid, profile)

    def register(self, email: str, password: str, name: str) -> UserResponse:
        """
        Create the auth account and its citizen profile.

        If the profile write fails the auth account is removed again, so a
        retry with the same email is possible.
        """
        uid = auth_service.create_account(email=email, password=password, name=name)
        try:
            return self.create_profile(uid, email=email, name=name, role=UserRole.CITIZEN)
        except Exception:
            logger.error(f"Profile write failed for {uid}; rolling back auth account", exc_info=True)
            auth_service.delete_account(uid)
            raise

    def set_role(self, uid: str, role: UserRole) -> UserResponse:
        doc_ref = self.db.collection(USERS_COLLECTION).document(uid)
        doc = doc_ref.get()
        if not doc.exists:
            raise NotFoundError(f"User {uid} not found")

        doc_ref.update({"role": role.value})
        logger.info(f"✅ Role of {uid} changed to {role.value}")
        return self._to_user(uid, doc_ref.get().to_dict() or {})

    def list_users(self, role: Optional[UserRole] = None) -> List[UserResponse]:
        query = self.db.collection(USERS_COLLECTION)
        if role is not None:
            query = where_filter(query, "role", "==", role.value)
        users = [self._to_user(data["id"], data) for data in iter_documents(query)]
        users.sort(key=lambda u: (u.name or "").lower())
        return users


# Global service instance
_user_service = None


def get_user_service() -> UserService:
    """Get or create UserService singleton."""
    global _user_service
    if _user_service is None:
        _user_service = UserService()
    return _user_service
