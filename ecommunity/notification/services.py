"""Service layer for the per-user notification inbox."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from flask import current_app

from ecommunity.core.constants import (
    EVENT_NEW_NOTIFICATION,
    EVENT_NOTIFICATION_DELETED,
    EVENT_NOTIFICATION_UPDATED,
    NOTIFICATIONS_SUBCOLLECTION,
    USERS_COLLECTION,
)
from ecommunity.errors import NotFoundError, ValidationError
from ecommunity.realtime import notification_room
from ecommunity.utils import serialize, utcnow

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client

    from ecommunity.realtime import Publisher


def _inbox(db: Client, user_id: str) -> Any:
    return (
        db.collection(USERS_COLLECTION)
        .document(user_id)
        .collection(NOTIFICATIONS_SUBCOLLECTION)
    )


def _timestamp_key(record: dict[str, Any]) -> str:
    timestamp = record.get("timestamp")
    return timestamp.isoformat() if hasattr(timestamp, "isoformat") else str(timestamp or "")


class NotificationService:
    """Create, read and prune notification records, pushing each change live."""

    @staticmethod
    def notify(
        db: Client,
        publisher: Publisher,
        user_id: str,
        type: str,
        message: str,
        **payload: Any,
    ) -> dict[str, Any] | None:
        """Append a notification to a user's inbox and push it live.

        Never raises: a failure is logged and None is returned so the action
        that triggered the notification still succeeds.
        """
        if not user_id or not type or not message:
            current_app.logger.error(
                f"Invalid notification format for user {user_id}: type={type!r}"
            )
            return None

        try:
            ref = _inbox(db, user_id).document()
            record = {
                **payload,
                "id": ref.id,
                "type": type,
                "message": message,
                "timestamp": utcnow(),
                "isRead": False,
            }
            ref.set(record)
        except Exception as e:
            current_app.logger.error(f"Error adding notification for {user_id}: {e}")
            return None

        NotificationService._publish(
            publisher, user_id, EVENT_NEW_NOTIFICATION, serialize(record)
        )
        return record

    @staticmethod
    def _publish(publisher: Publisher, user_id: str, event: str, payload: Any) -> None:
        try:
            publisher.publish(notification_room(user_id), event, payload)
        except Exception as e:
            current_app.logger.error(f"Error emitting {event} to user {user_id}: {e}")

    @staticmethod
    def list_notifications(db: Client, user_id: str) -> list[dict[str, Any]]:
        """Return a user's notifications, most recent first."""
        records = []
        for doc in _inbox(db, user_id).stream():
            data = doc.to_dict() or {}
            if not data.get("id") or not data.get("type"):
                current_app.logger.warning(
                    f"Skipping invalid notification {doc.id} for user {user_id}"
                )
                continue
            records.append(data)
        records.sort(key=_timestamp_key, reverse=True)
        return records

    @staticmethod
    def unread_count(db: Client, user_id: str) -> int:
        return sum(
            1 for n in NotificationService.list_notifications(db, user_id) if not n.get("isRead")
        )

    @staticmethod
    def mark_read(
        db: Client, publisher: Publisher, user_id: str, notification_id: str | None
    ) -> dict[str, Any]:
        """Mark one notification as read."""
        if not notification_id:
            raise ValidationError("Notification ID is required")
        ref = _inbox(db, user_id).document(notification_id)
        doc = ref.get()
        if not doc.exists:
            raise NotFoundError("Notification not found")
        ref.update({"isRead": True})
        record = {**(doc.to_dict() or {}), "isRead": True}
        NotificationService._publish(
            publisher, user_id, EVENT_NOTIFICATION_UPDATED, serialize(record)
        )
        return record

    @staticmethod
    def mark_all_read(db: Client, publisher: Publisher, user_id: str) -> int:
        """Mark every unread notification as read and return how many changed."""
        changed = 0
        for record in NotificationService.list_notifications(db, user_id):
            if record.get("isRead"):
                continue
            _inbox(db, user_id).document(record["id"]).update({"isRead": True})
            record["isRead"] = True
            changed += 1
            NotificationService._publish(
                publisher, user_id, EVENT_NOTIFICATION_UPDATED, serialize(record)
            )
        return changed

    @staticmethod
    def delete(
        db: Client, publisher: Publisher, user_id: str, notification_id: str | None
    ) -> None:
        """Delete one notification by id."""
        if not notification_id:
            raise ValidationError("Notification ID is required")
        _inbox(db, user_id).document(notification_id).delete()
        NotificationService._publish(
            publisher, user_id, EVENT_NOTIFICATION_DELETED, notification_id
        )

    @staticmethod
    def delete_matching(
        db: Client, publisher: Publisher, user_id: str, **fields: Any
    ) -> int:
        """Delete every notification whose payload matches all `fields`.

        Used when the event behind a notification is reversed, such as a
        cancelled friend request.
        """
        removed = 0
        for record in NotificationService.list_notifications(db, user_id):
            if all(record.get(k) == v for k, v in fields.items()):
                NotificationService.delete(db, publisher, user_id, record["id"])
                removed += 1
        return removed
