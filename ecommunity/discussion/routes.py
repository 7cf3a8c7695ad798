"""Routes for the discussion blueprint."""

from firebase_admin import firestore
from flask import g, jsonify, request

from ecommunity.auth.decorators import login_required
from ecommunity.core.constants import DEFAULT_PAGE_SIZE
from ecommunity.realtime import get_publisher
from ecommunity.utils import serialize, validate_form

from . import bp
from .forms import DiscussionForm, MessageForm
from .services import DiscussionService


def _page_args():
    page = request.args.get("page", 1, type=int)
    limit = request.args.get("limit", DEFAULT_PAGE_SIZE, type=int)
    return page, limit


@bp.route("/", methods=["POST"])
@login_required
def create_discussion():
    """Open a discussion with the caller as its first participant."""
    form = validate_form(DiscussionForm())
    payload = request.get_json(silent=True) or {}
    db = firestore.client()
    discussion = DiscussionService.create_discussion(
        db,
        g.user["id"],
        title=form.title.data,
        description=form.description.data or "",
        category=form.category.data or None,
        tags=payload.get("tags"),
        max_participants=form.maxParticipants.data,
    )
    return (
        jsonify(
            {
                "success": True,
                "message": "Discussion created successfully",
                "discussion": serialize(discussion),
            }
        ),
        201,
    )


@bp.route("/", methods=["GET"])
@login_required
def list_discussions():
    """List active discussions, filtered by category or search text."""
    db = firestore.client()
    page, limit = _page_args()
    result = DiscussionService.list_discussions(
        db,
        category=request.args.get("category") or None,
        search=request.args.get("search") or None,
        page=page,
        limit=limit,
    )
    return jsonify({"success": True, **serialize(result)})


@bp.route("/my-discussions", methods=["GET"])
@login_required
def my_discussions():
    db = firestore.client()
    page, limit = _page_args()
    result = DiscussionService.list_user_discussions(db, g.user["id"], page, limit)
    return jsonify({"success": True, **serialize(result)})


@bp.route("/<string:discussion_id>", methods=["GET"])
@login_required
def view_discussion(discussion_id):
    db = firestore.client()
    discussion = DiscussionService.get_discussion(db, discussion_id, g.user["id"])
    return jsonify(
        {
            "success": True,
            "discussion": serialize(discussion),
            "isParticipant": discussion["isParticipant"],
        }
    )


@bp.route("/<string:discussion_id>/join", methods=["POST"])
@login_required
def join_discussion(discussion_id):
    db = firestore.client()
    discussion = DiscussionService.join(db, discussion_id, g.user["id"])
    return jsonify(
        {
            "success": True,
            "message": "Joined discussion successfully",
            "discussion": serialize(discussion),
        }
    )


@bp.route("/<string:discussion_id>/leave", methods=["POST"])
@login_required
def leave_discussion(discussion_id):
    db = firestore.client()
    DiscussionService.leave(db, discussion_id, g.user["id"])
    return jsonify({"success": True, "message": "Left discussion successfully"})


@bp.route("/<string:discussion_id>/messages", methods=["POST"])
@login_required
def add_message(discussion_id):
    form = validate_form(MessageForm())
    db = firestore.client()
    message = DiscussionService.add_message(
        db, get_publisher(), discussion_id, g.user["id"], form.content.data
    )
    return jsonify(
        {
            "success": True,
            "message": "Message sent successfully",
            "data": serialize(message),
        }
    )


@bp.route("/<string:discussion_id>/messages/<string:message_id>", methods=["PUT"])
@login_required
def edit_message(discussion_id, message_id):
    form = validate_form(MessageForm())
    db = firestore.client()
    message = DiscussionService.edit_message(
        db, get_publisher(), discussion_id, message_id, g.user["id"], form.content.data
    )
    return jsonify(
        {
            "success": True,
            "message": "Message updated successfully",
            "data": serialize(message),
        }
    )


@bp.route("/<string:discussion_id>", methods=["DELETE"])
@login_required
def delete_discussion(discussion_id):
    db = firestore.client()
    DiscussionService.delete(db, discussion_id, g.user["id"])
    return jsonify({"success": True, "message": "Discussion deleted successfully"})
