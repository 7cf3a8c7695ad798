"""The tag blueprint."""

from flask import Blueprint

bp = Blueprint("tag", __name__, url_prefix="/api/tags")

from . import routes  # noqa: E402

__all__ = ["routes"]
