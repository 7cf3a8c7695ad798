"""Data models for the post blueprint."""

from __future__ import annotations

from typing import Any, TypedDict

from ecommunity.core.types import FirestoreDocument


class Comment(TypedDict, total=False):
    """A comment embedded in a post. Replies point at a top-level comment."""

    id: str
    content: str
    author: str | dict[str, Any]
    parentComment: str | None
    createdAt: Any


class Post(FirestoreDocument, total=False):
    """A post document in Firestore."""

    title: str
    content: str
    author: str | dict[str, Any]
    community: str
    likes: list[str]
    dislikes: list[str]
    comments: list[Comment]
    tags: list[str]

    # Calculated fields
    commentCount: int
