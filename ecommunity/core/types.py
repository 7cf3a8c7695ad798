"""Core data types for the ecommunity application."""

from dataclasses import dataclass, field
from typing import Any, Dict, TypedDict  # noqa: UP035


class _FirestoreDocumentBase(TypedDict):
    id: str
    createdAt: Any


class FirestoreDocument(_FirestoreDocumentBase, total=False):
    """Generic Firestore document structure."""

    updatedAt: Any


@dataclass
class Decision:
    """Outcome of a state transition that may be declined.

    A declined decision is not an error: it carries the reason the transition
    was refused and the HTTP status a route should answer with.
    """

    ok: bool
    message: str
    status_code: int = 200
    data: Dict[str, Any] = field(default_factory=dict)  # noqa: UP006

    @classmethod
    def accepted(cls, message: str, **data: Any) -> "Decision":
        """Build a successful decision."""
        return cls(ok=True, message=message, status_code=200, data=data)

    @classmethod
    def declined(cls, message: str, status_code: int = 400) -> "Decision":
        """Build a declined decision."""
        return cls(ok=False, message=message, status_code=status_code)

    def to_response(self) -> Dict[str, Any]:  # noqa: UP006
        """Return the JSON body for this decision."""
        return {"success": self.ok, "message": self.message, **self.data}
