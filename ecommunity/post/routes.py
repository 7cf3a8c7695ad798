"""Routes for the post blueprint."""

from firebase_admin import firestore
from flask import g, jsonify, request

from ecommunity.auth.decorators import login_required
from ecommunity.realtime import get_publisher
from ecommunity.utils import serialize, validate_form

from . import bp
from .forms import CommentForm, EditPostForm, PostForm
from .services import PostService


@bp.route("/", methods=["GET"])
def list_posts():
    """Return every post, newest first."""
    db = firestore.client()
    return jsonify(serialize(PostService.list_posts(db)))


@bp.route("/", methods=["POST"])
@login_required
def create_post():
    """Create a post in a community."""
    form = validate_form(PostForm())
    payload = request.get_json(silent=True) or {}
    db = firestore.client()
    post = PostService.create_post(
        db,
        g.user["id"],
        title=form.title.data,
        content=form.content.data,
        community_id=form.community.data,
        tags=payload.get("tags"),
    )
    return jsonify(serialize(post)), 201


@bp.route("/user/<string:user_id>", methods=["GET"])
def user_posts(user_id):
    db = firestore.client()
    return jsonify(serialize(PostService.list_user_posts(db, user_id)))


@bp.route("/community/<string:community_id>", methods=["GET"])
def community_posts(community_id):
    db = firestore.client()
    return jsonify(serialize(PostService.list_community_posts(db, community_id)))


@bp.route("/<string:post_id>", methods=["GET"])
def view_post(post_id):
    db = firestore.client()
    return jsonify(serialize(PostService.get_post(db, post_id)))


@bp.route("/<string:post_id>", methods=["PUT"])
@login_required
def update_post(post_id):
    validate_form(EditPostForm())
    db = firestore.client()
    changes = request.get_json(silent=True) or {}
    post = PostService.update_post(db, post_id, g.user["id"], changes)
    return jsonify(serialize(post))


@bp.route("/<string:post_id>", methods=["DELETE"])
@login_required
def delete_post(post_id):
    db = firestore.client()
    PostService.delete_post(db, post_id, g.user["id"])
    return jsonify({"success": True, "message": "Post deleted successfully"})


@bp.route("/<string:post_id>/like", methods=["PUT"])
@login_required
def like_post(post_id):
    db = firestore.client()
    post = PostService.like_post(db, get_publisher(), post_id, g.user["id"])
    return jsonify(serialize(post))


@bp.route("/<string:post_id>/dislike", methods=["PUT"])
@login_required
def dislike_post(post_id):
    db = firestore.client()
    post = PostService.dislike_post(db, get_publisher(), post_id, g.user["id"])
    return jsonify(serialize(post))


@bp.route("/<string:post_id>/comments", methods=["GET"])
def post_comments(post_id):
    db = firestore.client()
    return jsonify(serialize(PostService.get_comments(db, post_id)))


@bp.route("/<string:post_id>/comments", methods=["POST"])
@login_required
def add_comment(post_id):
    """Comment on a post or reply to a top-level comment."""
    form = validate_form(CommentForm())
    db = firestore.client()
    comment = PostService.add_comment(
        db,
        get_publisher(),
        post_id,
        g.user["id"],
        form.content.data,
        form.parentComment.data or None,
    )
    return jsonify(serialize(comment)), 201
