"""Service layer for user accounts and profiles."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from firebase_admin import firestore

from ecommunity.auth.utils import hash_password
from ecommunity.core.constants import (
    POSTS_COLLECTION,
    PROFILE_USER_FIELDS,
    USERS_COLLECTION,
)
from ecommunity.errors import AccessDenied, DuplicateResourceError, NotFoundError
from ecommunity.utils import public_user, snapshot_to_dict, utcnow

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.client import Client

PROFILE_UPDATE_FIELDS = ("username", "firstname", "lastname", "about", "livesin")


def strip_private(user: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of a user document without the password hash."""
    return {k: v for k, v in user.items() if k != "password"}


class UserService:
    """Service class for user-related operations and Firestore interaction."""

    @staticmethod
    def get_user_by_id(db: Client, user_id: str) -> dict[str, Any] | None:
        """Fetch a user by their ID."""
        user_doc = cast("DocumentSnapshot", db.collection(USERS_COLLECTION).document(user_id).get())
        return snapshot_to_dict(user_doc)

    @staticmethod
    def require_user(db: Client, user_id: str, message: str = "User not found") -> dict[str, Any]:
        """Fetch a user or raise NotFoundError."""
        user = UserService.get_user_by_id(db, user_id)
        if user is None:
            raise NotFoundError(message)
        return user

    @staticmethod
    def find_by_field(db: Client, field: str, value: Any) -> dict[str, Any] | None:
        """Return the first user whose `field` equals `value`."""
        if not value:
            return None
        docs = list(
            db.collection(USERS_COLLECTION)
            .where(filter=firestore.FieldFilter(field, "==", value))
            .limit(1)
            .stream()
        )
        if not docs:
            return None
        return snapshot_to_dict(docs[0])

    @staticmethod
    def find_by_login(db: Client, identifier: str) -> dict[str, Any] | None:
        """Resolve a login identifier that may be a username or an email."""
        return UserService.find_by_field(
            db, "username", identifier
        ) or UserService.find_by_field(db, "email", identifier)

    @staticmethod
    def create_user(  # noqa: PLR0913
        db: Client,
        username: str,
        password: str,
        firstname: str,
        lastname: str,
        email: str | None = None,
    ) -> dict[str, Any]:
        """Register a new account after checking username and email uniqueness."""
        if UserService.find_by_field(db, "username", username):
            raise DuplicateResourceError("Username is already taken")
        if email and UserService.find_by_field(db, "email", email):
            raise DuplicateResourceError("Email is already registered")

        user_ref = db.collection(USERS_COLLECTION).document()
        user_data = {
            "username": username,
            "email": email or None,
            "password": hash_password(password),
            "firstname": firstname,
            "lastname": lastname,
            "role": "user",
            "avatar": "",
            "coverPicture": "",
            "about": "",
            "livesin": "",
            "friends": [],
            "sentFriendRequests": [],
            "joinedCommunities": [],
            "myCommunities": [],
            "createdAt": utcnow(),
        }
        user_ref.set(user_data)
        return {"id": user_ref.id, **user_data}

    @staticmethod
    def get_profile(db: Client, user_id: str) -> dict[str, Any]:
        """Fetch a public profile with post and friend counts."""
        user = UserService.require_user(db, user_id)
        posts = (
            db.collection(POSTS_COLLECTION)
            .where(filter=firestore.FieldFilter("author", "==", user_id))
            .stream()
        )
        profile = strip_private(user)
        profile["postCount"] = sum(1 for _ in posts)
        profile["friendsCount"] = len(user.get("friends", []))
        return profile

    @staticmethod
    def update_profile(
        db: Client, actor_id: str, user_id: str, update_data: dict[str, Any]
    ) -> dict[str, Any]:
        """Update the caller's own profile fields."""
        if actor_id != user_id:
            raise AccessDenied("You can only update your own profile")
        user = UserService.require_user(db, user_id)

        changes = {
            key: value
            for key, value in update_data.items()
            if key in PROFILE_UPDATE_FIELDS and value is not None
        }
        new_username = changes.get("username")
        if new_username and new_username != user.get("username"):
            existing = UserService.find_by_field(db, "username", new_username)
            if existing and existing["id"] != user_id:
                raise DuplicateResourceError("Username is already taken")

        if changes:
            db.collection(USERS_COLLECTION).document(user_id).update(changes)
        user.update(changes)
        return strip_private(user)

    @staticmethod
    def search_users(
        db: Client, term: str = "", exclude_id: str | None = None, limit: int = 20
    ) -> list[dict[str, Any]]:
        """List users whose username or name contains `term`."""
        term = term.strip().lower()
        results = []
        for doc in db.collection(USERS_COLLECTION).stream():
            if doc.id == exclude_id or not doc.exists:
                continue
            data = snapshot_to_dict(doc) or {}
            haystack = " ".join(
                str(data.get(k, "")) for k in ("username", "firstname", "lastname")
            ).lower()
            if term and term not in haystack:
                continue
            results.append(public_user(data, PROFILE_USER_FIELDS))
            if len(results) >= limit:
                break
        return results
