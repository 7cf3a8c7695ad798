"""Routes for the notification blueprint."""

from firebase_admin import firestore
from flask import g, jsonify, request

from ecommunity.auth.decorators import login_required
from ecommunity.realtime import get_publisher
from ecommunity.utils import serialize

from . import bp
from .services import NotificationService


def _notification_id():
    return (request.get_json(silent=True) or {}).get("notificationId")


@bp.route("/", methods=["GET"])
@login_required
def list_notifications():
    """Return the caller's notifications, newest first."""
    db = firestore.client()
    notifications = NotificationService.list_notifications(db, g.user["id"])
    return jsonify(serialize(notifications))


@bp.route("/count", methods=["GET"])
@login_required
def unread_count():
    db = firestore.client()
    return jsonify(
        {"success": True, "count": NotificationService.unread_count(db, g.user["id"])}
    )


@bp.route("/read", methods=["PUT"])
@login_required
def mark_read():
    db = firestore.client()
    NotificationService.mark_read(db, get_publisher(), g.user["id"], _notification_id())
    return jsonify({"success": True, "message": "Notification marked as read"})


@bp.route("/read-all", methods=["PUT"])
@login_required
def mark_all_read():
    db = firestore.client()
    changed = NotificationService.mark_all_read(db, get_publisher(), g.user["id"])
    return jsonify(
        {
            "success": True,
            "message": "All notifications marked as read",
            "updated": changed,
        }
    )


@bp.route("/", methods=["DELETE"])
@login_required
def delete_notification():
    db = firestore.client()
    NotificationService.delete(db, get_publisher(), g.user["id"], _notification_id())
    return jsonify({"success": True, "message": "Notification deleted"})
