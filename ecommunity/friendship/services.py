"""Friend request lifecycle between two users.

Every transition returns a `Decision`. Invalid transitions are declined with a
reason instead of raising, so routes can surface them to the caller. Both sides
of a transition are written in one batch; list fields use ArrayUnion and
ArrayRemove so repeating a write is harmless.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from firebase_admin import firestore
from flask import current_app

from ecommunity.core.constants import (
    FRIEND_REQUESTS_SUBCOLLECTION,
    NOTIFY_FRIEND_ACCEPTED,
    NOTIFY_FRIEND_REQUEST,
    PROFILE_USER_FIELDS,
    REQUEST_PENDING,
    USERS_COLLECTION,
)
from ecommunity.core.types import Decision
from ecommunity.notification.services import NotificationService
from ecommunity.user.services import UserService
from ecommunity.utils import display_name, fetch_users, public_user, utcnow

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client

    from ecommunity.realtime import Publisher

STATUS_FRIENDS = "friends"
STATUS_REQUEST_SENT = "request_sent"
STATUS_REQUEST_RECEIVED = "request_received"
STATUS_NONE = "none"


def _user_ref(db: Client, user_id: str) -> Any:
    return db.collection(USERS_COLLECTION).document(user_id)


def _request_ref(db: Client, recipient_id: str, sender_id: str) -> Any:
    """Pending request held by `recipient_id`, keyed by the sender's id."""
    return _user_ref(db, recipient_id).collection(FRIEND_REQUESTS_SUBCOLLECTION).document(
        sender_id
    )


def get_pending_request(
    db: Client, recipient_id: str, sender_id: str
) -> dict[str, Any] | None:
    """Return the pending request from `sender_id` held by `recipient_id`."""
    doc = _request_ref(db, recipient_id, sender_id).get()
    if not doc.exists:
        return None
    data = doc.to_dict() or {}
    if data.get("status") != REQUEST_PENDING or data.get("senderId") != sender_id:
        return None
    return data


class FriendshipService:
    """Service class for the friendship state machine."""

    @staticmethod
    def send_request(
        db: Client, publisher: Publisher, sender_id: str, target_id: str | None
    ) -> Decision:
        """Propose a friendship from `sender_id` to `target_id`."""
        if not target_id:
            return Decision.declined("Target user ID is required")
        if sender_id == target_id:
            return Decision.declined("You cannot send friend request to yourself")

        target = UserService.get_user_by_id(db, target_id)
        if target is None:
            return Decision.declined("Target user not found", 404)
        sender = UserService.get_user_by_id(db, sender_id)
        if sender is None:
            return Decision.declined("User not found", 404)

        if target_id in sender.get("friends", []):
            return Decision.declined("You are already friends with this user")
        if target_id in sender.get("sentFriendRequests", []) or get_pending_request(
            db, target_id, sender_id
        ):
            return Decision.declined("Friend request already sent")
        if get_pending_request(db, sender_id, target_id):
            return Decision.declined("This user has already sent you a friend request")

        batch = db.batch()
        batch.update(
            _user_ref(db, sender_id),
            {"sentFriendRequests": firestore.ArrayUnion([target_id])},
        )
        batch.set(
            _request_ref(db, target_id, sender_id),
            {
                "senderId": sender_id,
                "recipientId": target_id,
                "status": REQUEST_PENDING,
                "createdAt": utcnow(),
            },
        )
        batch.commit()

        NotificationService.notify(
            db,
            publisher,
            target_id,
            NOTIFY_FRIEND_REQUEST,
            f"{display_name(sender)} sent you a friend request",
            senderId=sender_id,
            senderName=display_name(sender),
            senderUsername=sender.get("username", ""),
            senderAvatar=sender.get("avatar", ""),
        )
        return Decision.accepted(
            "Friend request sent successfully",
            sentRequests=list(
                fetch_users(db, sender.get("sentFriendRequests", []) + [target_id]).values()
            ),
        )

    @staticmethod
    def accept_request(
        db: Client, publisher: Publisher, user_id: str, sender_id: str
    ) -> Decision:
        """Accept the pending request `sender_id` sent to `user_id`."""
        user = UserService.get_user_by_id(db, user_id)
        if user is None:
            return Decision.declined("User not found", 404)
        if get_pending_request(db, user_id, sender_id) is None:
            return Decision.declined("Friend request not found", 404)
        sender = UserService.get_user_by_id(db, sender_id)
        if sender is None:
            # The sender's account is gone; drop the dangling request.
            _request_ref(db, user_id, sender_id).delete()
            return Decision.declined("Target user not found", 404)

        batch = db.batch()
        batch.update(
            _user_ref(db, user_id), {"friends": firestore.ArrayUnion([sender_id])}
        )
        batch.update(
            _user_ref(db, sender_id),
            {
                "friends": firestore.ArrayUnion([user_id]),
                "sentFriendRequests": firestore.ArrayRemove([user_id]),
            },
        )
        batch.delete(_request_ref(db, user_id, sender_id))
        batch.commit()

        NotificationService.delete_matching(
            db, publisher, user_id, type=NOTIFY_FRIEND_REQUEST, senderId=sender_id
        )
        NotificationService.notify(
            db,
            publisher,
            sender_id,
            NOTIFY_FRIEND_ACCEPTED,
            f"{display_name(user)} accepted your friend request",
            accepterId=user_id,
            accepterName=display_name(user),
            accepterUsername=user.get("username", ""),
            accepterAvatar=user.get("avatar", ""),
        )
        friends = user.get("friends", []) + [sender_id]
        return Decision.accepted(
            "Friend request accepted successfully",
            friends=list(fetch_users(db, friends).values()),
        )

    @staticmethod
    def reject_request(
        db: Client, publisher: Publisher, user_id: str, sender_id: str
    ) -> Decision:
        """Reject the pending request `sender_id` sent to `user_id`."""
        if UserService.get_user_by_id(db, user_id) is None:
            return Decision.declined("User not found", 404)
        if get_pending_request(db, user_id, sender_id) is None:
            return Decision.declined("Friend request not found", 404)

        batch = db.batch()
        batch.delete(_request_ref(db, user_id, sender_id))
        if UserService.get_user_by_id(db, sender_id) is not None:
            batch.update(
                _user_ref(db, sender_id),
                {"sentFriendRequests": firestore.ArrayRemove([user_id])},
            )
        batch.commit()

        NotificationService.delete_matching(
            db, publisher, user_id, type=NOTIFY_FRIEND_REQUEST, senderId=sender_id
        )
        return Decision.accepted("Friend request rejected successfully")

    @staticmethod
    def cancel_request(
        db: Client, publisher: Publisher, user_id: str, target_id: str
    ) -> Decision:
        """Withdraw a request `user_id` sent to `target_id`."""
        user = UserService.get_user_by_id(db, user_id)
        if user is None:
            return Decision.declined("User not found", 404)
        if target_id not in user.get("sentFriendRequests", []):
            return Decision.declined("No friend request sent to this user")

        batch = db.batch()
        batch.update(
            _user_ref(db, user_id),
            {"sentFriendRequests": firestore.ArrayRemove([target_id])},
        )
        if UserService.get_user_by_id(db, target_id) is not None:
            batch.delete(_request_ref(db, target_id, user_id))
        batch.commit()

        NotificationService.delete_matching(
            db, publisher, target_id, type=NOTIFY_FRIEND_REQUEST, senderId=user_id
        )
        remaining = [uid for uid in user.get("sentFriendRequests", []) if uid != target_id]
        return Decision.accepted(
            "Friend request cancelled successfully",
            sentRequests=list(fetch_users(db, remaining).values()),
        )

    @staticmethod
    def remove_friend(db: Client, user_id: str, friend_id: str) -> Decision:
        """End an existing friendship on both sides."""
        user = UserService.get_user_by_id(db, user_id)
        if user is None:
            return Decision.declined("User not found", 404)
        if friend_id not in user.get("friends", []):
            return Decision.declined("You are not friends with this user")

        batch = db.batch()
        batch.update(
            _user_ref(db, user_id), {"friends": firestore.ArrayRemove([friend_id])}
        )
        if UserService.get_user_by_id(db, friend_id) is not None:
            batch.update(
                _user_ref(db, friend_id), {"friends": firestore.ArrayRemove([user_id])}
            )
        else:
            current_app.logger.warning(
                f"Removing friend {friend_id} of {user_id}: account no longer exists"
            )
        batch.commit()

        remaining = [uid for uid in user.get("friends", []) if uid != friend_id]
        return Decision.accepted(
            "Friend removed successfully",
            friends=list(fetch_users(db, remaining).values()),
            friendsCount=len(remaining),
        )

    @staticmethod
    def get_status(db: Client, user_id: str, target_id: str) -> Decision:
        """Describe the relationship between `user_id` and `target_id`."""
        if user_id == target_id:
            return Decision.declined("Cannot check friendship status with yourself")
        user = UserService.get_user_by_id(db, user_id)
        if user is None:
            return Decision.declined("User not found", 404)
        if UserService.get_user_by_id(db, target_id) is None:
            return Decision.declined("Target user not found", 404)

        are_friends = target_id in user.get("friends", [])
        sent_request = target_id in user.get("sentFriendRequests", [])
        received_request = get_pending_request(db, user_id, target_id) is not None

        status = STATUS_NONE
        if are_friends:
            status = STATUS_FRIENDS
        elif sent_request:
            status = STATUS_REQUEST_SENT
        elif received_request:
            status = STATUS_REQUEST_RECEIVED

        return Decision.accepted(
            status,
            status=status,
            areFriends=are_friends,
            sentRequest=sent_request,
            receivedRequest=received_request,
        )

    @staticmethod
    def get_friends(db: Client, viewer_id: str, user_id: str) -> Decision:
        """List a user's friends; only the user and their friends may look."""
        viewer = UserService.get_user_by_id(db, viewer_id)
        if viewer is None:
            return Decision.declined("User not found", 404)
        if viewer_id != user_id and user_id not in viewer.get("friends", []):
            return Decision.declined(
                "You can only view friends of your own profile or your friends", 403
            )
        user = viewer if viewer_id == user_id else UserService.get_user_by_id(db, user_id)
        if user is None:
            return Decision.declined("User not found", 404)

        friends = list(fetch_users(db, user.get("friends", []), PROFILE_USER_FIELDS).values())
        return Decision.accepted(
            "Friends fetched", friends=friends, friendsCount=len(friends)
        )

    @staticmethod
    def get_requests(db: Client, user_id: str) -> Decision:
        """List pending requests received by and sent from `user_id`."""
        user = UserService.get_user_by_id(db, user_id)
        if user is None:
            return Decision.declined("User not found", 404)

        received = []
        requests_query = (
            _user_ref(db, user_id)
            .collection(FRIEND_REQUESTS_SUBCOLLECTION)
            .where(filter=firestore.FieldFilter("status", "==", REQUEST_PENDING))
            .stream()
        )
        for doc in requests_query:
            data = doc.to_dict() or {}
            sender = UserService.get_user_by_id(db, data.get("senderId", ""))
            if sender is None:
                continue
            received.append({**data, "from": public_user(sender)})
        received.sort(key=lambda r: str(r.get("createdAt", "")))

        sent = list(fetch_users(db, user.get("sentFriendRequests", [])).values())
        return Decision.accepted(
            "Friend requests fetched",
            receivedRequests=received,
            sentRequests=sent,
            receivedCount=len(received),
            sentCount=len(sent),
        )
