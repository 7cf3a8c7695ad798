"""Password hashing and bearer-token helpers."""

from __future__ import annotations

from typing import Any

from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.security import check_password_hash, generate_password_hash

from ecommunity.errors import AuthenticationError

TOKEN_SALT = "ecommunity-auth"


def hash_password(password: str) -> str:
    return generate_password_hash(password, method="pbkdf2:sha256")


def verify_password(password_hash: str, password: str) -> bool:
    return check_password_hash(password_hash, password)


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=TOKEN_SALT)


def create_token(user_id: str, username: str, role: str = "user") -> str:
    """Sign the identity claims of a user into a bearer token."""
    return _serializer().dumps({"id": user_id, "username": username, "role": role})


def decode_token(token: str) -> dict[str, Any]:
    """Verify a bearer token and return its claims.

    Raises:
        AuthenticationError: If the token is expired or has been tampered with.
    """
    try:
        return _serializer().loads(token, max_age=current_app.config["TOKEN_MAX_AGE"])
    except SignatureExpired as e:
        raise AuthenticationError("Session expired. Please login again.") from e
    except BadSignature as e:
        raise AuthenticationError("Invalid token.") from e


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an `Authorization: Bearer ...` header."""
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization.split(" ", 1)[1].strip()
    return token or None
