"""Decorators for the auth blueprint."""

from functools import wraps

from flask import g

from ecommunity.errors import AuthenticationError


def login_required(f):
    """Reject the request unless a valid bearer token identified a user.

    Usage:
    @login_required
    def protected_view():
        ...
    """

    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get("auth_error"):
            raise AuthenticationError(g.auth_error)
        if g.get("user") is None:
            raise AuthenticationError("Authentication required. No token provided.")
        return f(*args, **kwargs)

    return decorated_function
