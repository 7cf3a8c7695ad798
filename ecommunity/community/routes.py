"""Routes for the community blueprint."""

from firebase_admin import firestore
from flask import g, jsonify, request

from ecommunity.auth.decorators import login_required
from ecommunity.realtime import get_publisher
from ecommunity.utils import serialize, validate_form

from . import bp
from .forms import CommunityForm, MemberForm
from .services import CommunityService


def _ok(message):
    return jsonify({"success": True, "message": message})


@bp.route("/", methods=["GET"])
def list_communities():
    """Return every community, newest first."""
    db = firestore.client()
    return jsonify(serialize(CommunityService.list_communities(db)))


@bp.route("/", methods=["POST"])
@login_required
def create_community():
    """Create a community authored by the caller."""
    form = validate_form(CommunityForm())
    payload = request.get_json(silent=True) or {}
    db = firestore.client()
    community = CommunityService.create_community(
        db,
        g.user["id"],
        name=form.name.data,
        description=form.description.data or "",
        privacy=form.privacy.data or None,
        tags=payload.get("tags"),
    )
    return jsonify(serialize(community)), 201


@bp.route("/user/<string:user_id>", methods=["GET"])
def user_communities(user_id):
    """Return the communities a user authored, administers or joined."""
    db = firestore.client()
    return jsonify(serialize(CommunityService.list_user_communities(db, user_id)))


@bp.route("/<string:community_id>", methods=["GET"])
def view_community(community_id):
    db = firestore.client()
    return jsonify(serialize(CommunityService.get_community(db, community_id)))


@bp.route("/<string:community_id>/members", methods=["GET"])
def community_members(community_id):
    db = firestore.client()
    return jsonify(serialize(CommunityService.get_members(db, community_id)))


@bp.route("/<string:community_id>", methods=["DELETE"])
@login_required
def delete_community(community_id):
    db = firestore.client()
    CommunityService.delete(db, get_publisher(), community_id, g.user["id"])
    return _ok("Community deleted successfully")


@bp.route("/<string:community_id>/join", methods=["POST"])
@login_required
def join_community(community_id):
    db = firestore.client()
    return _ok(CommunityService.join(db, get_publisher(), community_id, g.user["id"]))


@bp.route("/<string:community_id>/leave", methods=["POST"])
@login_required
def leave_community(community_id):
    db = firestore.client()
    return _ok(CommunityService.leave(db, community_id, g.user["id"]))


@bp.route("/<string:community_id>/admin", methods=["PUT"])
@login_required
def promote_member(community_id):
    """Make the member named in the body an admin."""
    form = validate_form(MemberForm())
    db = firestore.client()
    message = CommunityService.promote(
        db, get_publisher(), community_id, g.user["id"], form.member.data
    )
    return _ok(message)


@bp.route("/<string:community_id>/demote", methods=["PUT"])
@login_required
def demote_admin(community_id):
    """Remove admin rights from the member named in the body."""
    form = validate_form(MemberForm())
    db = firestore.client()
    message = CommunityService.demote(
        db, get_publisher(), community_id, g.user["id"], form.member.data
    )
    return _ok(message)


@bp.route("/<string:community_id>/member/<string:member_id>", methods=["DELETE"])
@login_required
def remove_member(community_id, member_id):
    db = firestore.client()
    message = CommunityService.remove_member(
        db, get_publisher(), community_id, g.user["id"], member_id
    )
    return _ok(message)
