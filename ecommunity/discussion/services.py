"""Service layer for discussion rooms and their chat messages."""

from __future__ import annotations

import secrets
from typing import TYPE_CHECKING, Any

from firebase_admin import firestore
from flask import current_app

from ecommunity.core.constants import (
    DEFAULT_DISCUSSION_CATEGORY,
    DEFAULT_MAX_PARTICIPANTS,
    DEFAULT_PAGE_SIZE,
    DISCUSSION_CATEGORIES,
    DISCUSSIONS_COLLECTION,
    EVENT_MESSAGE_UPDATED,
    EVENT_NEW_MESSAGE,
)
from ecommunity.errors import AccessDenied, NotFoundError, ValidationError
from ecommunity.realtime import discussion_room
from ecommunity.user.services import UserService
from ecommunity.utils import (
    fetch_users,
    paginate,
    parse_tags,
    public_user,
    snapshot_to_dict,
    utcnow,
)

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client

    from ecommunity.realtime import Publisher

    from .models import Discussion, Message

UNKNOWN_USER = {"username": "Unknown"}


def _discussion_ref(db: Client, discussion_id: str) -> Any:
    return db.collection(DISCUSSIONS_COLLECTION).document(discussion_id)


def _time_key(field: str):
    def key(item: dict[str, Any]) -> str:
        value = item.get(field)
        return value.isoformat() if hasattr(value, "isoformat") else str(value or "")

    return key


def _matches(discussion: dict[str, Any], search: str) -> bool:
    haystack = " ".join(
        [
            discussion.get("title", ""),
            discussion.get("description", ""),
            " ".join(discussion.get("tags", [])),
        ]
    ).lower()
    return search.lower() in haystack


def enrich_discussion(
    db: Client, discussion: dict[str, Any], with_messages: bool = False
) -> Discussion:
    """Replace user ids with public profiles.

    Listings drop the message history and carry a message count instead.
    """
    messages = discussion.get("messages", [])
    user_ids = [discussion.get("creator", "")] + list(discussion.get("participants", []))
    if with_messages:
        user_ids += [m.get("sender", "") for m in messages]
    users = fetch_users(db, user_ids)

    def profile(user_id):
        return users.get(user_id) or {"id": user_id, **UNKNOWN_USER}

    enriched = dict(discussion)
    enriched["creator"] = profile(discussion.get("creator", ""))
    enriched["participants"] = [profile(uid) for uid in discussion.get("participants", [])]
    enriched["messageCount"] = len(messages)
    if with_messages:
        enriched["messages"] = [
            {**m, "sender": profile(m.get("sender", ""))} for m in messages
        ]
    else:
        enriched.pop("messages", None)
    return enriched  # type: ignore[return-value]


class DiscussionService:
    """Service class for discussion-related operations."""

    @staticmethod
    def get_raw_discussion(db: Client, discussion_id: str) -> dict[str, Any]:
        """Fetch a discussion document or raise NotFoundError."""
        discussion = snapshot_to_dict(_discussion_ref(db, discussion_id).get())
        if discussion is None:
            raise NotFoundError("Discussion not found")
        return discussion

    @staticmethod
    def create_discussion(  # noqa: PLR0913
        db: Client,
        creator_id: str,
        title: str,
        description: str = "",
        category: str | None = None,
        tags: Any = None,
        max_participants: int | None = None,
    ) -> Discussion:
        """Open a discussion with its creator as the first participant."""
        if not title or not title.strip():
            raise ValidationError("Title is required")
        category = category or DEFAULT_DISCUSSION_CATEGORY
        if category not in DISCUSSION_CATEGORIES:
            raise ValidationError("Invalid discussion category")
        creator = UserService.require_user(db, creator_id)

        now = utcnow()
        ref = db.collection(DISCUSSIONS_COLLECTION).document()
        data = {
            "title": title.strip(),
            "description": description or "",
            "creator": creator_id,
            "participants": [creator_id],
            "messages": [],
            "category": category,
            "tags": parse_tags(tags),
            "isActive": True,
            "maxParticipants": max_participants or DEFAULT_MAX_PARTICIPANTS,
            "createdAt": now,
            "updatedAt": now,
        }
        ref.set(data)
        discussion = {"id": ref.id, **data}
        discussion["creator"] = public_user(creator)
        discussion["participants"] = [public_user(creator)]
        return discussion  # type: ignore[return-value]

    @staticmethod
    def list_discussions(
        db: Client,
        category: str | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> dict[str, Any]:
        """Return one page of active discussions, newest first."""
        query = db.collection(DISCUSSIONS_COLLECTION).where(
            filter=firestore.FieldFilter("isActive", "==", True)
        )
        if category:
            query = query.where(filter=firestore.FieldFilter("category", "==", category))

        discussions = []
        for doc in query.stream():
            data = snapshot_to_dict(doc)
            if data is None or (search and not _matches(data, search)):
                continue
            discussions.append(data)
        discussions.sort(key=_time_key("createdAt"), reverse=True)

        result = paginate(discussions, page, limit)
        result["discussions"] = [enrich_discussion(db, d) for d in result.pop("items")]
        return result

    @staticmethod
    def list_user_discussions(
        db: Client, user_id: str, page: int = 1, limit: int = DEFAULT_PAGE_SIZE
    ) -> dict[str, Any]:
        """Return active discussions the user takes part in, most recently active first."""
        query = db.collection(DISCUSSIONS_COLLECTION).where(
            filter=firestore.FieldFilter("participants", "array_contains", user_id)
        )
        discussions = []
        for doc in query.stream():
            data = snapshot_to_dict(doc)
            if data is not None and data.get("isActive"):
                discussions.append(data)
        discussions.sort(key=_time_key("updatedAt"), reverse=True)

        result = paginate(discussions, page, limit)
        result["discussions"] = [enrich_discussion(db, d) for d in result.pop("items")]
        return result

    @staticmethod
    def get_discussion(db: Client, discussion_id: str, viewer_id: str) -> Discussion:
        """Return a discussion with its history and whether the viewer takes part."""
        discussion = DiscussionService.get_raw_discussion(db, discussion_id)
        is_participant = viewer_id in discussion.get("participants", [])
        enriched = enrich_discussion(db, discussion, with_messages=True)
        enriched["isParticipant"] = is_participant
        return enriched

    @staticmethod
    def join(db: Client, discussion_id: str, user_id: str) -> Discussion:
        discussion = DiscussionService.get_raw_discussion(db, discussion_id)
        participants = discussion.get("participants", [])
        if not discussion.get("isActive"):
            raise ValidationError("Discussion is not active")
        if user_id in participants:
            raise ValidationError("Already a participant in this discussion")
        capacity = discussion.get("maxParticipants") or DEFAULT_MAX_PARTICIPANTS
        if len(participants) >= capacity:
            raise ValidationError("Discussion is full")

        _discussion_ref(db, discussion_id).update(
            {"participants": firestore.ArrayUnion([user_id]), "updatedAt": utcnow()}
        )
        discussion["participants"] = participants + [user_id]
        return enrich_discussion(db, discussion)

    @staticmethod
    def leave(db: Client, discussion_id: str, user_id: str) -> None:
        discussion = DiscussionService.get_raw_discussion(db, discussion_id)
        if user_id not in discussion.get("participants", []):
            raise ValidationError("Not a participant in this discussion")
        _discussion_ref(db, discussion_id).update(
            {"participants": firestore.ArrayRemove([user_id]), "updatedAt": utcnow()}
        )

    @staticmethod
    def add_message(
        db: Client,
        publisher: Publisher,
        discussion_id: str,
        user_id: str,
        content: str,
    ) -> Message:
        """Append a chat message and push it to the discussion room."""
        if not content or not content.strip():
            raise ValidationError("Message content is required")
        discussion = DiscussionService.get_raw_discussion(db, discussion_id)
        if not discussion.get("isActive"):
            raise ValidationError("Discussion is not active")
        if user_id not in discussion.get("participants", []):
            raise AccessDenied("Must be a participant to send messages")

        now = utcnow()
        message = {
            "id": secrets.token_hex(12),
            "sender": user_id,
            "content": content.strip(),
            "timestamp": now,
            "edited": False,
            "editedAt": None,
        }
        _discussion_ref(db, discussion_id).update(
            {"messages": firestore.ArrayUnion([message]), "updatedAt": now}
        )

        sender = UserService.get_user_by_id(db, user_id)
        published = {**message, "sender": public_user(sender) or {"id": user_id}}
        DiscussionService._publish(
            publisher,
            discussion_id,
            EVENT_NEW_MESSAGE,
            {"discussionId": discussion_id, "message": published},
        )
        return published  # type: ignore[return-value]

    @staticmethod
    def edit_message(  # noqa: PLR0913
        db: Client,
        publisher: Publisher,
        discussion_id: str,
        message_id: str,
        user_id: str,
        content: str,
    ) -> Message:
        """Change the text of one of the caller's own messages."""
        if not content or not content.strip():
            raise ValidationError("Message content is required")
        discussion = DiscussionService.get_raw_discussion(db, discussion_id)
        messages = list(discussion.get("messages", []))
        index = next(
            (i for i, m in enumerate(messages) if m.get("id") == message_id), None
        )
        if index is None:
            raise NotFoundError("Message not found")
        if messages[index].get("sender") != user_id:
            raise AccessDenied("Can only edit your own messages")

        now = utcnow()
        updated = {
            **messages[index],
            "content": content.strip(),
            "edited": True,
            "editedAt": now,
        }
        messages[index] = updated
        _discussion_ref(db, discussion_id).update(
            {"messages": messages, "updatedAt": now}
        )

        sender = UserService.get_user_by_id(db, user_id)
        published = {**updated, "sender": public_user(sender) or {"id": user_id}}
        DiscussionService._publish(
            publisher,
            discussion_id,
            EVENT_MESSAGE_UPDATED,
            {
                "discussionId": discussion_id,
                "messageId": message_id,
                "updatedMessage": published,
            },
        )
        return published  # type: ignore[return-value]

    @staticmethod
    def _publish(
        publisher: Publisher, discussion_id: str, event: str, payload: Any
    ) -> None:
        try:
            publisher.publish(discussion_room(discussion_id), event, payload)
        except Exception as e:
            current_app.logger.error(
                f"Error emitting {event} to discussion {discussion_id}: {e}"
            )

    @staticmethod
    def delete(db: Client, discussion_id: str, user_id: str) -> None:
        """Close a discussion. The history stays readable."""
        discussion = DiscussionService.get_raw_discussion(db, discussion_id)
        if discussion.get("creator") != user_id:
            raise AccessDenied("Only the creator can delete the discussion")
        _discussion_ref(db, discussion_id).update(
            {"isActive": False, "updatedAt": utcnow()}
        )
        current_app.logger.info(f"Discussion {discussion_id} closed by {user_id}")
