"""The friendship blueprint."""

from flask import Blueprint

bp = Blueprint("friendship", __name__, url_prefix="/api/friendship")

from . import routes  # noqa: E402

__all__ = ["routes"]
