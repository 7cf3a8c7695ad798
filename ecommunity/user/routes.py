"""Routes for the user blueprint."""

from firebase_admin import firestore
from flask import g, jsonify, request

from ecommunity.auth.decorators import login_required
from ecommunity.utils import serialize, validate_form

from . import bp
from .forms import UpdateProfileForm
from .services import UserService


@bp.route("/", methods=["GET"])
@login_required
def search_users():
    """Search other users by username or name."""
    db = firestore.client()
    term = request.args.get("q", "")
    users = UserService.search_users(db, term, exclude_id=g.user["id"])
    return jsonify({"success": True, "users": serialize(users)})


@bp.route("/<string:user_id>", methods=["GET"])
def view_user(user_id):
    """Return a user's public profile with post and friend counts."""
    db = firestore.client()
    return jsonify(serialize(UserService.get_profile(db, user_id)))


@bp.route("/<string:user_id>", methods=["PUT"])
@login_required
def update_user(user_id):
    """Update the caller's own profile."""
    form = validate_form(UpdateProfileForm())
    payload = request.get_json(silent=True) or {}
    changes = {field.name: field.data for field in form if field.name in payload}

    db = firestore.client()
    user = UserService.update_profile(db, g.user["id"], user_id, changes)
    return jsonify(
        {"success": True, "message": "Profile updated", "user": serialize(user)}
    )
