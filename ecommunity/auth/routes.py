from firebase_admin import firestore
from flask import current_app, g, jsonify

from ecommunity.errors import NotFoundError, ValidationError
from ecommunity.user.services import UserService, strip_private
from ecommunity.utils import serialize, validate_form

from . import bp
from .decorators import login_required
from .forms import LoginForm, RegisterForm
from .utils import create_token, verify_password


def _session_payload(user):
    token = create_token(user["id"], user["username"], user.get("role", "user"))
    return {"user": serialize(strip_private(user)), "token": token}


@bp.route("/register", methods=["POST"])
def register():
    """Create an account and return it with a bearer token."""
    form = validate_form(RegisterForm())
    db = firestore.client()
    user = UserService.create_user(
        db,
        username=form.username.data,
        password=form.password.data,
        firstname=form.firstname.data,
        lastname=form.lastname.data,
        email=form.email.data or None,
    )
    current_app.logger.info(f"Registered user {user['id']} ({user['username']})")
    return jsonify(_session_payload(user)), 201


@bp.route("/login", methods=["POST"])
def login():
    """Exchange a username or email plus password for a bearer token."""
    form = validate_form(LoginForm())
    db = firestore.client()
    user = UserService.find_by_login(db, form.email.data)
    if user is None:
        raise NotFoundError("User not found")
    if not verify_password(user.get("password", ""), form.password.data):
        raise ValidationError("Invalid credentials")
    return jsonify(_session_payload(user))


@bp.route("/me", methods=["GET"])
@login_required
def me():
    """Return the authenticated user."""
    return jsonify({"success": True, "user": serialize(strip_private(g.user))})
