"""The post blueprint."""

from flask import Blueprint

bp = Blueprint("post", __name__, url_prefix="/api/posts")

from . import routes  # noqa: E402

__all__ = ["routes"]
