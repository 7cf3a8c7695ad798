"""Service layer for posts, reactions and comments."""

from __future__ import annotations

import secrets
from typing import TYPE_CHECKING, Any

from firebase_admin import firestore

from ecommunity.community.services import CommunityService, can_post
from ecommunity.core.constants import (
    NOTIFY_COMMENT_REPLY,
    NOTIFY_POST_COMMENT,
    NOTIFY_POST_DISLIKE,
    NOTIFY_POST_LIKE,
    POSTS_COLLECTION,
    PRIVACY_READ_ONLY,
)
from ecommunity.errors import AccessDenied, NotFoundError, ValidationError
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

    from .models import Comment, Post

UNKNOWN_AUTHOR = {"username": "Unknown"}


def _post_ref(db: Client, post_id: str) -> Any:
    return db.collection(POSTS_COLLECTION).document(post_id)


def _created_key(item: dict[str, Any]) -> str:
    created = item.get("createdAt")
    return created.isoformat() if hasattr(created, "isoformat") else str(created or "")


def enrich_posts(db: Client, posts: list[dict[str, Any]]) -> list[Post]:
    """Attach author profiles and comment counts to raw post documents."""
    authors = fetch_users(db, [p.get("author", "") for p in posts])
    for post in posts:
        author_id = post.get("author", "")
        post["author"] = authors.get(author_id) or {"id": author_id, **UNKNOWN_AUTHOR}
        post["commentCount"] = len(post.get("comments", []))
    return posts  # type: ignore[return-value]


class PostService:
    """Service class for post-related operations."""

    @staticmethod
    def get_raw_post(db: Client, post_id: str) -> dict[str, Any]:
        """Fetch a post document without enrichment or raise NotFoundError."""
        post = snapshot_to_dict(_post_ref(db, post_id).get())
        if post is None:
            raise NotFoundError("Post not found")
        return post

    @staticmethod
    def get_post(db: Client, post_id: str) -> Post:
        return enrich_posts(db, [PostService.get_raw_post(db, post_id)])[0]

    @staticmethod
    def _query(db: Client, field: str | None = None, value: Any = None) -> list[Post]:
        query = db.collection(POSTS_COLLECTION)
        if field:
            query = query.where(filter=firestore.FieldFilter(field, "==", value))
        posts = []
        for doc in query.stream():
            data = snapshot_to_dict(doc)
            if data is not None:
                posts.append(data)
        posts.sort(key=_created_key, reverse=True)
        return enrich_posts(db, posts)

    @staticmethod
    def list_posts(db: Client) -> list[Post]:
        """Return every post, newest first."""
        return PostService._query(db)

    @staticmethod
    def list_user_posts(db: Client, user_id: str) -> list[Post]:
        return PostService._query(db, "author", user_id)

    @staticmethod
    def list_community_posts(db: Client, community_id: str) -> list[Post]:
        return PostService._query(db, "community", community_id)

    @staticmethod
    def create_post(  # noqa: PLR0913
        db: Client,
        author_id: str,
        title: str,
        content: str,
        community_id: str,
        tags: Any = None,
    ) -> Post:
        """Create a post in a community the author is allowed to post in."""
        if not title or not content or not community_id:
            raise ValidationError("Title, content, and community are required")
        author = UserService.require_user(db, author_id, "Author not found")
        community = CommunityService.get_community(db, community_id)

        if not can_post(author_id, community):
            if community.get("privacy") == PRIVACY_READ_ONLY:
                raise AccessDenied(
                    "This is a read-only community. Only admins can create posts."
                )
            raise AccessDenied("Only members of this community can create posts.")

        now = utcnow()
        post_ref = db.collection(POSTS_COLLECTION).document()
        post_data = {
            "title": title,
            "content": content,
            "author": author_id,
            "community": community_id,
            "likes": [],
            "dislikes": [],
            "comments": [],
            "tags": parse_tags(tags),
            "createdAt": now,
            "updatedAt": now,
        }
        post_ref.set(post_data)
        post = {"id": post_ref.id, **post_data}
        post["author"] = public_user(author)
        post["commentCount"] = 0
        return post  # type: ignore[return-value]

    @staticmethod
    def update_post(
        db: Client, post_id: str, actor_id: str, changes: dict[str, Any]
    ) -> Post:
        """Edit the title or content of a post. Author only."""
        post = PostService.get_raw_post(db, post_id)
        if post.get("author") != actor_id:
            raise AccessDenied("You can only update your own posts")

        update_data = {
            key: changes[key]
            for key in ("title", "content")
            if changes.get(key)
        }
        if "tags" in changes:
            update_data["tags"] = parse_tags(changes["tags"])
        update_data["updatedAt"] = utcnow()
        _post_ref(db, post_id).update(update_data)
        post.update(update_data)
        return enrich_posts(db, [post])[0]

    @staticmethod
    def delete_post(db: Client, post_id: str, actor_id: str) -> None:
        """Delete a post.

        The post author, the community author and community admins may
        delete, except that admins may not remove the community author's
        posts.
        """
        post = PostService.get_raw_post(db, post_id)
        post_author = post.get("author")
        if actor_id != post_author:
            try:
                community = CommunityService.get_community(db, post.get("community", ""))
            except NotFoundError:
                community = {}
            community_author = community.get("authorId")
            is_community_author = actor_id == community_author
            if not is_community_author and actor_id not in community.get("admins", []):
                raise AccessDenied(
                    "You can only delete your own posts or posts in communities "
                    "where you are an admin"
                )
            if not is_community_author and post_author == community_author:
                raise AccessDenied(
                    "Community admins cannot delete posts created by the "
                    "community author"
                )
        _post_ref(db, post_id).delete()

    @staticmethod
    def _react(  # noqa: PLR0913
        db: Client,
        publisher: Publisher,
        post_id: str,
        user_id: str,
        field: str,
        opposite: str,
        notification_type: str,
        verb: str,
    ) -> Post:
        post = PostService.get_raw_post(db, post_id)
        ref = _post_ref(db, post_id)

        if user_id in post.get(field, []):
            ref.update({field: firestore.ArrayRemove([user_id])})
            post[field] = [uid for uid in post.get(field, []) if uid != user_id]
            return enrich_posts(db, [post])[0]

        ref.update(
            {
                field: firestore.ArrayUnion([user_id]),
                opposite: firestore.ArrayRemove([user_id]),
            }
        )
        post[field] = post.get(field, []) + [user_id]
        post[opposite] = [uid for uid in post.get(opposite, []) if uid != user_id]

        if post.get("author") != user_id:
            user = UserService.get_user_by_id(db, user_id)
            name = display_name(user)
            NotificationService.notify(
                db,
                publisher,
                post["author"],
                notification_type,
                f"{name} {verb} your post",
                postId=post_id,
                userId=user_id,
                userName=name,
                userUsername=(user or {}).get("username", ""),
                userAvatar=(user or {}).get("avatar", ""),
            )
        return enrich_posts(db, [post])[0]

    @staticmethod
    def like_post(db: Client, publisher: Publisher, post_id: str, user_id: str) -> Post:
        """Toggle a like; liking clears an existing dislike."""
        return PostService._react(
            db, publisher, post_id, user_id, "likes", "dislikes", NOTIFY_POST_LIKE, "liked"
        )

    @staticmethod
    def dislike_post(
        db: Client, publisher: Publisher, post_id: str, user_id: str
    ) -> Post:
        """Toggle a dislike; disliking clears an existing like."""
        return PostService._react(
            db,
            publisher,
            post_id,
            user_id,
            "dislikes",
            "likes",
            NOTIFY_POST_DISLIKE,
            "disliked",
        )

    @staticmethod
    def get_comments(db: Client, post_id: str) -> list[Comment]:
        """Return a post's comments in the order they were written."""
        post = PostService.get_raw_post(db, post_id)
        comments = post.get("comments", [])
        authors = fetch_users(db, [c.get("author", "") for c in comments])
        enriched = []
        for comment in comments:
            author_id = comment.get("author", "")
            enriched.append(
                {
                    **comment,
                    "author": authors.get(author_id)
                    or {"id": author_id, **UNKNOWN_AUTHOR},
                }
            )
        return enriched  # type: ignore[return-value]

    @staticmethod
    def add_comment(  # noqa: PLR0913
        db: Client,
        publisher: Publisher,
        post_id: str,
        user_id: str,
        content: str,
        parent_comment_id: str | None = None,
    ) -> Comment:
        """Comment on a post, or reply to one of its top-level comments."""
        if not content or not content.strip():
            raise ValidationError("Comment content is required")
        post = PostService.get_raw_post(db, post_id)
        user = UserService.require_user(db, user_id)

        parent = None
        if parent_comment_id:
            parent = next(
                (c for c in post.get("comments", []) if c.get("id") == parent_comment_id),
                None,
            )
            if parent is None:
                raise ValidationError("Parent comment not found on this post")
            if parent.get("parentComment"):
                raise ValidationError("Replies can only be made to top-level comments")

        comment = {
            "id": secrets.token_hex(12),
            "content": content.strip(),
            "author": user_id,
            "parentComment": parent_comment_id or None,
            "createdAt": utcnow(),
        }
        _post_ref(db, post_id).update({"comments": firestore.ArrayUnion([comment])})

        name = display_name(user)
        post_author = post.get("author")
        if post_author and post_author != user_id:
            NotificationService.notify(
                db,
                publisher,
                post_author,
                NOTIFY_POST_COMMENT,
                f"{name} commented on your post",
                postId=post_id,
                commentId=comment["id"],
                userId=user_id,
                userName=name,
            )
        if parent is not None:
            parent_author = parent.get("author")
            if parent_author and parent_author not in (user_id, post_author):
                NotificationService.notify(
                    db,
                    publisher,
                    parent_author,
                    NOTIFY_COMMENT_REPLY,
                    f"{name} replied to your comment",
                    postId=post_id,
                    commentId=comment["id"],
                    parentCommentId=parent_comment_id,
                    userId=user_id,
                    userName=name,
                )

        return {**comment, "author": public_user(user)}  # type: ignore[return-value]
