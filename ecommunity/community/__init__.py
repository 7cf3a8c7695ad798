"""The community blueprint."""

from flask import Blueprint

bp = Blueprint("community", __name__, url_prefix="/api/communities")

from . import routes  # noqa: E402

__all__ = ["routes"]
