"""Shared test case wiring the app to an in-memory Firestore."""

import datetime
import unittest
from unittest.mock import MagicMock, patch

from mockfirestore import MockFirestore

from ecommunity import create_app
from ecommunity.auth.utils import create_token
from tests.mock_utils import (
    FIRESTORE_TARGETS,
    MockBatch,
    RecordingPublisher,
    mock_firestore_module,
    patch_mockfirestore,
)

patch_mockfirestore()

TEST_PASSWORD = "Password123!"  # nosec


class FirebaseTestCase(unittest.TestCase):
    """Base test case with a MockFirestore, a recording publisher and an app."""

    def setUp(self) -> None:
        self.db = MockFirestore()
        self.db.batch = MagicMock(side_effect=lambda: MockBatch(self.db))
        self.firestore_module = mock_firestore_module(self.db)

        patchers = [patch("firebase_admin.initialize_app")] + [
            patch(target, new=self.firestore_module) for target in FIRESTORE_TARGETS
        ]
        for p in patchers:
            p.start()
            self.addCleanup(p.stop)

        self.publisher = RecordingPublisher()
        self.app = create_app(
            {"TESTING": True, "SECRET_KEY": "test-secret"}, publisher=self.publisher
        )
        self.client = self.app.test_client()
        self.app_context = self.app.app_context()
        self.app_context.push()
        self.addCleanup(self.app_context.pop)
        self._clock = 0

    def create_user(self, user_id, username=None, **fields):
        """Store a user document directly and return it with its id."""
        data = {
            "username": username or user_id,
            "email": f"{user_id}@example.com",
            "password": "",
            "firstname": user_id.capitalize(),
            "lastname": "Tester",
            "role": "user",
            "avatar": "",
            "about": "",
            "livesin": "",
            "friends": [],
            "sentFriendRequests": [],
            "joinedCommunities": [],
            "myCommunities": [],
        }
        data.update(fields)
        self.db.collection("users").document(user_id).set(data)
        return {"id": user_id, **data}

    def get_user(self, user_id):
        return self.db.collection("users").document(user_id).get().to_dict()

    def auth_headers(self, user_id, role="user"):
        token = create_token(user_id, user_id, role)
        return {"Authorization": f"Bearer {token}"}

    def tick(self):
        """Return strictly increasing timestamps for seeded documents."""
        self._clock += 1
        return datetime.datetime(2024, 1, 1, tzinfo=datetime.timezone.utc) + (
            datetime.timedelta(minutes=self._clock)
        )

    def inbox(self, user_id):
        """Return the raw notification records stored for a user."""
        docs = (
            self.db.collection("users")
            .document(user_id)
            .collection("notifications")
            .stream()
        )
        return [doc.to_dict() for doc in docs if doc.exists]
