"""The discussion blueprint."""

from flask import Blueprint

bp = Blueprint("discussion", __name__, url_prefix="/api/discussions")

from . import routes  # noqa: E402

__all__ = ["routes"]
