"""Live push channel: the publisher interface and Socket.IO room handlers.

The handlers are bound to the shared `socketio` at import time, so every app
the factory builds serves the same events.
"""

from __future__ import annotations

from typing import Any, Protocol

from flask import current_app, request, session
from flask_socketio import join_room, leave_room

from .core.constants import DISCUSSION_ROOM_PREFIX, NOTIFICATION_ROOM_PREFIX
from .extensions import socketio
from .utils import serialize

PUBLISHER_EXTENSION = "ecommunity.publisher"


class Publisher(Protocol):
    """Anything able to push an event into a named room."""

    def publish(self, room: str, event: str, payload: Any) -> None:
        """Push `payload` as `event` to every client in `room`."""


class SocketIOPublisher:
    """Publisher backed by the Flask-SocketIO server."""

    def __init__(self, socketio: Any) -> None:
        self.socketio = socketio

    def publish(self, room: str, event: str, payload: Any) -> None:
        self.socketio.emit(event, serialize(payload), to=room)


class NullPublisher:
    """Publisher that drops every event."""

    def publish(self, room: str, event: str, payload: Any) -> None:
        return None


def notification_room(user_id: str) -> str:
    return f"{NOTIFICATION_ROOM_PREFIX}{user_id}"


def discussion_room(discussion_id: str) -> str:
    return f"{DISCUSSION_ROOM_PREFIX}{discussion_id}"


def get_publisher() -> Publisher:
    """Return the publisher installed on the current app."""
    return current_app.extensions.get(PUBLISHER_EXTENSION) or NullPublisher()


@socketio.on("connect")
def connect(auth=None):
    """Remember who the socket belongs to when it presents a bearer token."""
    from .auth.utils import bearer_token, decode_token
    from .errors import AuthenticationError

    token = (auth or {}).get("token") or bearer_token(
        request.headers.get("Authorization")
    )
    session.pop("user_id", None)
    if not token:
        return
    try:
        session["user_id"] = decode_token(token)["id"]
    except AuthenticationError as e:
        current_app.logger.warning(f"Socket connected with a bad token: {e.message}")


@socketio.on("join-notifications")
def join_notifications(data):
    user_id = (data or {}).get("userId")
    if not user_id:
        return
    if user_id != session.get("user_id"):
        current_app.logger.warning(
            f"Refused notifications room of {user_id} to socket of "
            f"{session.get('user_id') or 'anonymous'}"
        )
        return
    join_room(notification_room(user_id))
    current_app.logger.info(f"User {user_id} joined notifications room")


@socketio.on("leave-notifications")
def leave_notifications(data):
    user_id = (data or {}).get("userId")
    if user_id:
        leave_room(notification_room(user_id))
        current_app.logger.info(f"User {user_id} left notifications room")


@socketio.on("join-discussion")
def join_discussion(data):
    discussion_id = (data or {}).get("discussionId")
    if discussion_id:
        join_room(discussion_room(discussion_id))
        current_app.logger.info(f"Joined discussion room: {discussion_id}")


@socketio.on("leave-discussion")
def leave_discussion(data):
    discussion_id = (data or {}).get("discussionId")
    if discussion_id:
        leave_room(discussion_room(discussion_id))
        current_app.logger.info(f"Left discussion room: {discussion_id}")
