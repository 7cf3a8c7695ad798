"""Service layer for community membership, admin roles and authorship."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from firebase_admin import firestore
from flask import current_app

from ecommunity.core.constants import (
    COMMUNITIES_COLLECTION,
    COMMUNITY_MAX_TAGS,
    DEFAULT_COMMUNITY_IMAGE,
    NOTIFY_ADMIN_DEMOTION,
    NOTIFY_ADMIN_PROMOTION,
    NOTIFY_COMMUNITY_DELETED,
    NOTIFY_COMMUNITY_REMOVAL,
    NOTIFY_NEW_MEMBER,
    POSTS_COLLECTION,
    PRIVACY_PUBLIC,
    PRIVACY_READ_ONLY,
    USERS_COLLECTION,
)
from ecommunity.errors import (
    AccessDenied,
    DuplicateResourceError,
    NotFoundError,
    ValidationError,
)
from ecommunity.notification.services import NotificationService
from ecommunity.user.services import UserService
from ecommunity.utils import (
    display_name,
    fetch_users,
    parse_tags,
    public_user,
    snapshot_to_dict,
    utcnow,
)

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client

    from ecommunity.realtime import Publisher

    from .models import Community, Member


def _community_ref(db: Client, community_id: str) -> Any:
    return db.collection(COMMUNITIES_COLLECTION).document(community_id)


def _user_ref(db: Client, user_id: str) -> Any:
    return db.collection(USERS_COLLECTION).document(user_id)


def with_counts(community: dict[str, Any]) -> Community:
    """Attach the computed member count to a community."""
    community["membersCount"] = len(community.get("members", []))
    return community  # type: ignore[return-value]


def can_post(user_id: str, community: dict[str, Any]) -> bool:
    """Return True if `user_id` may post into `community`.

    Members may post unless the community is read-only; admins and the
    author may post whatever the privacy setting.
    """
    if user_id == community.get("authorId"):
        return True
    if user_id in community.get("admins", []):
        return True
    return (
        community.get("privacy", PRIVACY_PUBLIC) != PRIVACY_READ_ONLY
        and user_id in community.get("members", [])
    )


class CommunityService:
    """Service class for community-related operations."""

    @staticmethod
    def get_community(db: Client, community_id: str) -> Community:
        """Fetch a community or raise NotFoundError."""
        community = snapshot_to_dict(_community_ref(db, community_id).get())
        if community is None:
            raise NotFoundError("Community not found")
        return with_counts(community)

    @staticmethod
    def create_community(  # noqa: PLR0913
        db: Client,
        author_id: str,
        name: str,
        description: str = "",
        privacy: str | None = None,
        tags: Any = None,
    ) -> Community:
        """Create a community owned, administered and joined by its author."""
        name = (name or "").strip()
        if not name:
            raise ValidationError("Community name is required")
        author = UserService.require_user(db, author_id, "Author not found")

        existing = list(
            db.collection(COMMUNITIES_COLLECTION)
            .where(filter=firestore.FieldFilter("name", "==", name))
            .limit(1)
            .stream()
        )
        if existing:
            raise DuplicateResourceError("A community with this name already exists")

        community_ref = db.collection(COMMUNITIES_COLLECTION).document()
        community_data = {
            "name": name,
            "description": description or "",
            "authorId": author_id,
            "admins": [author_id],
            "members": [author_id],
            "privacy": privacy or PRIVACY_PUBLIC,
            "tags": parse_tags(tags, COMMUNITY_MAX_TAGS),
            "image": DEFAULT_COMMUNITY_IMAGE,
            "coverImage": "",
            "createdAt": utcnow(),
        }
        community_ref.set(community_data)
        _user_ref(db, author_id).update(
            {
                "myCommunities": firestore.ArrayUnion([community_ref.id]),
                "joinedCommunities": firestore.ArrayUnion([community_ref.id]),
            }
        )
        current_app.logger.info(
            f"Community {community_ref.id} ({name}) created by {author_id}"
        )
        community = with_counts({"id": community_ref.id, **community_data})
        community["author"] = public_user(author)
        return community

    @staticmethod
    def list_communities(db: Client) -> list[Community]:
        """Return every community, newest first."""
        communities = []
        for doc in db.collection(COMMUNITIES_COLLECTION).stream():
            data = snapshot_to_dict(doc)
            if data is not None:
                communities.append(with_counts(data))
        communities.sort(key=lambda c: str(c.get("createdAt", "")), reverse=True)
        return communities

    @staticmethod
    def list_user_communities(db: Client, user_id: str) -> list[Community]:
        """Return communities the user authored, administers or belongs to."""
        return [
            c
            for c in CommunityService.list_communities(db)
            if c.get("authorId") == user_id
            or user_id in c.get("members", [])
            or user_id in c.get("admins", [])
        ]

    @staticmethod
    def get_members(db: Client, community_id: str) -> list[Member]:
        """Return member profiles flagged with their admin and author roles."""
        community = CommunityService.get_community(db, community_id)
        admins = set(community.get("admins", []))
        profiles = fetch_users(db, community.get("members", []))
        members = []
        for user_id, profile in profiles.items():
            profile["isAdmin"] = user_id in admins
            profile["isAuthor"] = user_id == community.get("authorId")
            members.append(profile)
        return members  # type: ignore[return-value]

    @staticmethod
    def join(db: Client, publisher: Publisher, community_id: str, user_id: str) -> str:
        """Add a user to the members; joining twice changes nothing."""
        community = CommunityService.get_community(db, community_id)
        user = UserService.require_user(db, user_id)
        if user_id in community.get("members", []):
            return "You are already a member of this community"

        _community_ref(db, community_id).update(
            {"members": firestore.ArrayUnion([user_id])}
        )
        _user_ref(db, user_id).update(
            {"joinedCommunities": firestore.ArrayUnion([community_id])}
        )

        for admin_id in community.get("admins", []):
            if admin_id == user_id:
                continue
            NotificationService.notify(
                db,
                publisher,
                admin_id,
                NOTIFY_NEW_MEMBER,
                f'New member joined your community "{community["name"]}"',
                communityId=community_id,
                communityName=community["name"],
                userId=user_id,
                userName=display_name(user),
            )
        return "You joined the community"

    @staticmethod
    def leave(db: Client, community_id: str, user_id: str) -> str:
        """Remove a user from a community, handing over authorship if needed.

        The author may only leave while another admin exists; that admin
        becomes the author.
        """
        community = CommunityService.get_community(db, community_id)
        UserService.require_user(db, user_id)
        members = community.get("members", [])
        admins = community.get("admins", [])

        if user_id not in members:
            raise ValidationError("You are not a member of this community.")

        community_ref = _community_ref(db, community_id)
        if community.get("authorId") == user_id:
            other_admins = [a for a in admins if a != user_id]
            if not other_admins:
                raise ValidationError(
                    "As the only admin, you cannot leave this community. Please "
                    "promote another member to admin first, or delete the community."
                )
            new_author = other_admins[0]
            community_ref.update(
                {
                    "authorId": new_author,
                    "admins": firestore.ArrayRemove([user_id]),
                    "members": firestore.ArrayRemove([user_id]),
                }
            )
            _user_ref(db, new_author).update(
                {"myCommunities": firestore.ArrayUnion([community_id])}
            )
            message = (
                "You have left the community. Another admin has been promoted "
                "to community author."
            )
            current_app.logger.info(
                f"Authorship of community {community_id} moved from {user_id} "
                f"to {new_author}"
            )
        elif user_id in admins:
            community_ref.update(
                {
                    "admins": firestore.ArrayRemove([user_id]),
                    "members": firestore.ArrayRemove([user_id]),
                }
            )
            message = "You have left the community and are no longer an admin."
        else:
            community_ref.update({"members": firestore.ArrayRemove([user_id])})
            message = "You have left the community."

        _user_ref(db, user_id).update(
            {
                "joinedCommunities": firestore.ArrayRemove([community_id]),
                "myCommunities": firestore.ArrayRemove([community_id]),
            }
        )
        return message

    @staticmethod
    def promote(
        db: Client,
        publisher: Publisher,
        community_id: str,
        actor_id: str,
        member_id: str,
    ) -> str:
        """Make a member an admin. Only admins may promote."""
        community = CommunityService.get_community(db, community_id)
        if actor_id not in community.get("admins", []):
            raise AccessDenied("Action forbidden: only admins can promote members")
        if member_id not in community.get("members", []):
            raise ValidationError("The user is not a member of this community")
        if member_id in community.get("admins", []):
            raise ValidationError("The user is already an admin")

        _community_ref(db, community_id).update(
            {"admins": firestore.ArrayUnion([member_id])}
        )
        NotificationService.notify(
            db,
            publisher,
            member_id,
            NOTIFY_ADMIN_PROMOTION,
            f'You have been promoted to admin in the community "{community["name"]}"',
            communityId=community_id,
            communityName=community["name"],
        )
        return "Member made an admin"

    @staticmethod
    def demote(
        db: Client,
        publisher: Publisher,
        community_id: str,
        actor_id: str,
        member_id: str,
    ) -> str:
        """Take admin rights away. Only the author may demote."""
        community = CommunityService.get_community(db, community_id)
        if actor_id != community.get("authorId"):
            raise AccessDenied("Only the community author can demote admins")
        if member_id not in community.get("admins", []):
            raise ValidationError("The user is not an admin")
        if member_id == community.get("authorId"):
            raise ValidationError("Cannot demote the community author")

        _community_ref(db, community_id).update(
            {"admins": firestore.ArrayRemove([member_id])}
        )
        NotificationService.notify(
            db,
            publisher,
            member_id,
            NOTIFY_ADMIN_DEMOTION,
            f'You have been removed as an admin from the community "{community["name"]}"',
            communityId=community_id,
            communityName=community["name"],
        )
        return "Admin demoted to regular member"

    @staticmethod
    def remove_member(
        db: Client,
        publisher: Publisher,
        community_id: str,
        actor_id: str,
        member_id: str,
    ) -> str:
        """Expel a member. Admins may remove anyone except the author."""
        community = CommunityService.get_community(db, community_id)
        if actor_id not in community.get("admins", []):
            raise AccessDenied("Only admins can remove members")
        if member_id == community.get("authorId"):
            raise AccessDenied("The community author cannot be removed")
        if member_id not in community.get("members", []):
            raise NotFoundError("Member not found in this community")

        _community_ref(db, community_id).update(
            {
                "members": firestore.ArrayRemove([member_id]),
                "admins": firestore.ArrayRemove([member_id]),
            }
        )
        if UserService.get_user_by_id(db, member_id) is not None:
            _user_ref(db, member_id).update(
                {"joinedCommunities": firestore.ArrayRemove([community_id])}
            )
        NotificationService.notify(
            db,
            publisher,
            member_id,
            NOTIFY_COMMUNITY_REMOVAL,
            f'You have been removed from the community "{community["name"]}"',
            communityId=community_id,
            communityName=community["name"],
        )
        return "Member removed successfully"

    @staticmethod
    def delete(
        db: Client, publisher: Publisher, community_id: str, actor_id: str
    ) -> None:
        """Delete a community along with its posts. Author only."""
        community = CommunityService.get_community(db, community_id)
        if actor_id != community.get("authorId"):
            raise AccessDenied(
                "Action forbidden: Only the community author can delete it"
            )

        for member_id in community.get("members", []):
            if member_id == actor_id:
                continue
            NotificationService.notify(
                db,
                publisher,
                member_id,
                NOTIFY_COMMUNITY_DELETED,
                f'The community "{community["name"]}" has been deleted',
                communityName=community["name"],
            )

        posts = (
            db.collection(POSTS_COLLECTION)
            .where(filter=firestore.FieldFilter("community", "==", community_id))
            .stream()
        )
        for post in posts:
            db.collection(POSTS_COLLECTION).document(post.id).delete()

        affected = set(community.get("members", [])) | {actor_id}
        for user_id in affected:
            if UserService.get_user_by_id(db, user_id) is None:
                continue
            _user_ref(db, user_id).update(
                {
                    "joinedCommunities": firestore.ArrayRemove([community_id]),
                    "myCommunities": firestore.ArrayRemove([community_id]),
                }
            )

        _community_ref(db, community_id).delete()
        current_app.logger.info(f"Community {community_id} deleted by {actor_id}")
