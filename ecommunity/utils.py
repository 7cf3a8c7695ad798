"""Utility functions for the application."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from .core.constants import PUBLIC_USER_FIELDS, USERS_COLLECTION
from .errors import ValidationError

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def serialize(value: Any) -> Any:
    """Convert Firestore values into JSON-friendly structures.

    Datetimes become ISO strings; lists and dicts are converted recursively.
    """
    if isinstance(value, dict):
        return {k: serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize(v) for v in value]
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


def snapshot_to_dict(doc: Any) -> dict[str, Any] | None:
    """Return a document snapshot as a dict including its id."""
    if not doc.exists:
        return None
    data = doc.to_dict() or {}
    data["id"] = doc.id
    return data


def public_user(data: dict[str, Any] | None, fields=PUBLIC_USER_FIELDS) -> dict[str, Any]:
    """Project a user document onto the fields safe to embed elsewhere."""
    if not data:
        return {}
    projected = {"id": data.get("id")}
    for key in fields:
        projected[key] = data.get(key, "")
    return projected


def display_name(user: dict[str, Any] | None) -> str:
    """Return 'First Last' for a user, falling back to the username."""
    if not user:
        return "Someone"
    full = f"{user.get('firstname', '')} {user.get('lastname', '')}".strip()
    return full or user.get("username") or "Someone"


def fetch_users(
    db: Client, user_ids: list[str], fields=PUBLIC_USER_FIELDS
) -> dict[str, dict[str, Any]]:
    """Fetch several users at once and return public profiles keyed by id."""
    unique_ids = list(dict.fromkeys(uid for uid in user_ids if uid))
    if not unique_ids:
        return {}
    users = {}
    for uid in unique_ids:
        data = snapshot_to_dict(db.collection(USERS_COLLECTION).document(uid).get())
        if data is not None:
            users[uid] = public_user(data, fields)
    return users


def parse_tags(raw: Any, limit: int | None = None) -> list[str]:
    """Accept tags as a list or a JSON-encoded list and return clean strings."""
    if raw is None or raw == "":
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            raw = raw.split(",")
    if not isinstance(raw, list):
        return []
    tags = [str(tag).strip() for tag in raw if str(tag).strip()]
    if limit is not None:
        tags = tags[:limit]
    return tags


def first_form_error(form: Any) -> str:
    """Return the first validation message of a WTForms form."""
    for field_name, messages in form.errors.items():
        if messages:
            label = getattr(form, field_name).label.text
            return f"{label}: {messages[0]}"
    return "Validation failed."


def validate_form(form: Any) -> Any:
    """Validate a form and raise ValidationError with its first message."""
    if not form.validate():
        raise ValidationError(first_form_error(form))
    return form


def paginate(items: list[Any], page: int, limit: int) -> dict[str, Any]:
    """Slice a list for a page and describe the pagination."""
    page = max(page, 1)
    limit = max(limit, 1)
    total = len(items)
    start = (page - 1) * limit
    return {
        "items": items[start : start + limit],
        "total": total,
        "currentPage": page,
        "totalPages": (total + limit - 1) // limit,
    }
