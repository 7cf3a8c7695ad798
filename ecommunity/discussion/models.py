"""Data models for the discussion blueprint."""

from __future__ import annotations

from typing import Any, TypedDict

from ecommunity.core.types import FirestoreDocument


class Message(TypedDict, total=False):
    """A chat message embedded in a discussion."""

    id: str
    sender: str | dict[str, Any]
    content: str
    timestamp: Any
    edited: bool
    editedAt: Any


class Discussion(FirestoreDocument, total=False):
    """A discussion document in Firestore."""

    title: str
    description: str
    creator: str | dict[str, Any]
    participants: list[str] | list[dict[str, Any]]
    messages: list[Message]
    category: str
    tags: list[str]
    isActive: bool
    maxParticipants: int

    # Calculated fields
    isParticipant: bool
    messageCount: int
