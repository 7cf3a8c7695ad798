"""Routes for the friendship blueprint.

Each route hands the transition to FriendshipService and answers with the
resulting Decision, whether it was accepted or declined.
"""

from firebase_admin import firestore
from flask import current_app, g, jsonify, request

from ecommunity.auth.decorators import login_required
from ecommunity.realtime import get_publisher
from ecommunity.utils import serialize

from . import bp
from .services import FriendshipService


def _respond(decision):
    if not decision.ok:
        current_app.logger.warning(
            f"Friendship action by {g.user['id']} declined: {decision.message}"
        )
    return jsonify(serialize(decision.to_response())), decision.status_code


@bp.route("/send-request", methods=["POST"])
@login_required
def send_request():
    db = firestore.client()
    target_id = (request.get_json(silent=True) or {}).get("targetUserId")
    decision = FriendshipService.send_request(
        db, get_publisher(), g.user["id"], target_id
    )
    return _respond(decision)


@bp.route("/accept-request/<string:sender_id>", methods=["POST"])
@login_required
def accept_request(sender_id):
    db = firestore.client()
    decision = FriendshipService.accept_request(
        db, get_publisher(), g.user["id"], sender_id
    )
    return _respond(decision)


@bp.route("/reject-request/<string:sender_id>", methods=["POST"])
@login_required
def reject_request(sender_id):
    db = firestore.client()
    decision = FriendshipService.reject_request(
        db, get_publisher(), g.user["id"], sender_id
    )
    return _respond(decision)


@bp.route("/cancel-request/<string:target_id>", methods=["DELETE"])
@login_required
def cancel_request(target_id):
    db = firestore.client()
    decision = FriendshipService.cancel_request(
        db, get_publisher(), g.user["id"], target_id
    )
    return _respond(decision)


@bp.route("/remove-friend/<string:friend_id>", methods=["DELETE"])
@login_required
def remove_friend(friend_id):
    db = firestore.client()
    return _respond(FriendshipService.remove_friend(db, g.user["id"], friend_id))


@bp.route("/friends/<string:user_id>", methods=["GET"])
@login_required
def friends(user_id):
    """List a user's friends, if the caller is allowed to see them."""
    db = firestore.client()
    return _respond(FriendshipService.get_friends(db, g.user["id"], user_id))


@bp.route("/requests", methods=["GET"])
@login_required
def list_requests():
    db = firestore.client()
    return _respond(FriendshipService.get_requests(db, g.user["id"]))


@bp.route("/status/<string:target_id>", methods=["GET"])
@login_required
def status(target_id):
    db = firestore.client()
    return _respond(FriendshipService.get_status(db, g.user["id"], target_id))
