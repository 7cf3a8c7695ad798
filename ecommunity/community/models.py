"""Data models for the community blueprint."""

from __future__ import annotations

from typing import Any, TypedDict

from ecommunity.core.types import FirestoreDocument


class Member(TypedDict, total=False):
    """A community member as listed on the members endpoint."""

    id: str
    username: str
    firstname: str
    lastname: str
    avatar: str
    isAdmin: bool
    isAuthor: bool


class Community(FirestoreDocument, total=False):
    """A community document in Firestore."""

    name: str
    description: str
    authorId: str
    admins: list[str]
    members: list[str]
    privacy: str
    tags: list[str]
    image: str
    coverImage: str

    # Calculated fields
    membersCount: int
    author: dict[str, Any]
