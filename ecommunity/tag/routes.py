"""Routes for the tag blueprint."""

from firebase_admin import firestore
from flask import jsonify

from . import bp
from .services import TagService


@bp.route("/", methods=["GET"])
def list_tags():
    """Return the recommendation tags."""
    db = firestore.client()
    return jsonify(TagService.get_tags(db))
