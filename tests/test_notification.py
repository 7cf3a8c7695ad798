"""Tests for the notification fan-out."""

from unittest.mock import MagicMock, patch

from ecommunity.errors import NotFoundError, ValidationError
from ecommunity.notification.services import NotificationService
from tests.helpers import FirebaseTestCase


class NotificationServiceTestCase(FirebaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.create_user("alice")

    def notify(self, type="post_like", message="Someone liked your post", **payload):
        return NotificationService.notify(
            self.db, self.publisher, "alice", type, message, **payload
        )

    def test_notify_stores_record_and_publishes(self) -> None:
        record = self.notify(postId="p1")

        self.assertIsNotNone(record)
        stored = self.inbox("alice")
        self.assertEqual(len(stored), 1)
        self.assertEqual(stored[0]["id"], record["id"])
        self.assertEqual(stored[0]["postId"], "p1")
        self.assertFalse(stored[0]["isRead"])

        room, event, payload = self.publisher.events[0]
        self.assertEqual(room, "notifications-alice")
        self.assertEqual(event, "new-notification")
        self.assertEqual(payload["id"], record["id"])
        self.assertIsInstance(payload["timestamp"], str)

    def test_notify_rejects_missing_type_or_message(self) -> None:
        self.assertIsNone(self.notify(type=""))
        self.assertIsNone(self.notify(message=""))
        self.assertEqual(self.inbox("alice"), [])
        self.assertEqual(self.publisher.events, [])

    def test_publish_failure_does_not_raise(self) -> None:
        failing = MagicMock()
        failing.publish.side_effect = RuntimeError("socket down")

        record = NotificationService.notify(
            self.db, failing, "alice", "post_like", "Someone liked your post"
        )

        self.assertIsNotNone(record)
        self.assertEqual(len(self.inbox("alice")), 1)

    def test_storage_failure_does_not_raise(self) -> None:
        broken_db = MagicMock()
        broken_db.collection.side_effect = RuntimeError("firestore down")

        record = NotificationService.notify(
            broken_db, self.publisher, "alice", "post_like", "Someone liked your post"
        )

        self.assertIsNone(record)
        self.assertEqual(self.publisher.events, [])

    def test_list_is_newest_first_and_skips_invalid_records(self) -> None:
        inbox = self.db.collection("users").document("alice").collection("notifications")
        for record_id, is_read in (("old", False), ("new", True)):
            inbox.document(record_id).set(
                {
                    "id": record_id,
                    "type": "post_like",
                    "message": record_id,
                    "timestamp": self.tick(),
                    "isRead": is_read,
                }
            )
        inbox.document("broken").set({"message": "no type"})

        records = NotificationService.list_notifications(self.db, "alice")

        self.assertEqual([r["id"] for r in records], ["new", "old"])
        self.assertEqual(NotificationService.unread_count(self.db, "alice"), 1)

    def test_mark_read(self) -> None:
        record = self.notify()

        NotificationService.mark_read(self.db, self.publisher, "alice", record["id"])

        self.assertTrue(self.inbox("alice")[0]["isRead"])
        self.assertEqual(len(self.publisher.events_named("notification-updated")), 1)

    def test_mark_read_requires_known_id(self) -> None:
        with self.assertRaises(ValidationError):
            NotificationService.mark_read(self.db, self.publisher, "alice", None)
        with self.assertRaises(NotFoundError):
            NotificationService.mark_read(self.db, self.publisher, "alice", "missing")

    def test_mark_all_read_counts_changes(self) -> None:
        self.notify()
        self.notify()

        changed = NotificationService.mark_all_read(self.db, self.publisher, "alice")

        self.assertEqual(changed, 2)
        self.assertEqual(NotificationService.unread_count(self.db, "alice"), 0)
        self.assertEqual(
            NotificationService.mark_all_read(self.db, self.publisher, "alice"), 0
        )

    def test_delete_publishes_id(self) -> None:
        record = self.notify()

        NotificationService.delete(self.db, self.publisher, "alice", record["id"])

        self.assertEqual(self.inbox("alice"), [])
        room, _, payload = self.publisher.events_named("notification-deleted")[0]
        self.assertEqual(room, "notifications-alice")
        self.assertEqual(payload, record["id"])

    def test_delete_matching_only_removes_matches(self) -> None:
        self.notify(type="friend_request", message="a", senderId="bob")
        self.notify(type="friend_request", message="b", senderId="carol")

        removed = NotificationService.delete_matching(
            self.db, self.publisher, "alice", type="friend_request", senderId="bob"
        )

        self.assertEqual(removed, 1)
        self.assertEqual([n["senderId"] for n in self.inbox("alice")], ["carol"])


class NotificationRoutesTestCase(FirebaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.create_user("alice")
        self.record = NotificationService.notify(
            self.db, self.publisher, "alice", "post_like", "Someone liked your post"
        )

    def test_list_and_count(self) -> None:
        headers = self.auth_headers("alice")
        response = self.client.get("/api/notifications/", headers=headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()[0]["id"], self.record["id"])

        response = self.client.get("/api/notifications/count", headers=headers)
        self.assertEqual(response.get_json()["count"], 1)

    def test_mark_read_and_delete(self) -> None:
        headers = self.auth_headers("alice")
        body = {"notificationId": self.record["id"]}

        response = self.client.put("/api/notifications/read", json=body, headers=headers)
        self.assertEqual(response.status_code, 200)

        response = self.client.put("/api/notifications/read-all", headers=headers)
        self.assertEqual(response.get_json()["updated"], 0)

        response = self.client.delete("/api/notifications/", json=body, headers=headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.inbox("alice"), [])

    def test_missing_id_is_rejected(self) -> None:
        response = self.client.put(
            "/api/notifications/read", json={}, headers=self.auth_headers("alice")
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()["message"], "Notification ID is required")

    @patch("ecommunity.notification.routes.NotificationService.list_notifications")
    def test_unexpected_error_is_json_500(self, mock_list) -> None:
        mock_list.side_effect = RuntimeError("boom")
        response = self.client.get(
            "/api/notifications/", headers=self.auth_headers("alice")
        )
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.get_json()["message"], "Internal Server Error")
