"""Service layer for the recommendation tag catalogue."""

from __future__ import annotations

from typing import TYPE_CHECKING

from flask import current_app

from ecommunity.core.constants import DEFAULT_TAGS, TAGS_COLLECTION, TAGS_DOCUMENT

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client


class TagService:
    """Service class for the tag catalogue."""

    @staticmethod
    def get_tags(db: Client) -> list[str]:
        """Return the catalogue, seeding it with the default tags on first use."""
        ref = db.collection(TAGS_COLLECTION).document(TAGS_DOCUMENT)
        doc = ref.get()
        if doc.exists:
            tags = (doc.to_dict() or {}).get("tags")
            if tags:
                return list(tags)

        ref.set({"tags": list(DEFAULT_TAGS)})
        current_app.logger.info("Seeded the tag catalogue with the default tags")
        return list(DEFAULT_TAGS)
