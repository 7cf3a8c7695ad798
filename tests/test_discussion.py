"""Tests for discussion rooms and live chat messages."""

from ecommunity.discussion.services import DiscussionService
from ecommunity.errors import AccessDenied, NotFoundError, ValidationError
from tests.helpers import FirebaseTestCase


class DiscussionServiceTestCase(FirebaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        for user_id in ("host", "guest", "late"):
            self.create_user(user_id)
        self.discussion = DiscussionService.create_discussion(
            self.db, "host", "Release planning", "Next sprint", "tech", ["#release"]
        )
        self.discussion_id = self.discussion["id"]

    def raw(self):
        return DiscussionService.get_raw_discussion(self.db, self.discussion_id)

    def test_create_makes_creator_participant(self) -> None:
        self.assertEqual(self.discussion["creator"]["id"], "host")
        raw = self.raw()
        self.assertEqual(raw["participants"], ["host"])
        self.assertTrue(raw["isActive"])
        self.assertEqual(raw["maxParticipants"], 50)
        self.assertEqual(raw["tags"], ["#release"])

    def test_create_validates_title_and_category(self) -> None:
        with self.assertRaises(ValidationError):
            DiscussionService.create_discussion(self.db, "host", "")
        with self.assertRaises(ValidationError):
            DiscussionService.create_discussion(self.db, "host", "t", category="cooking")
        general = DiscussionService.create_discussion(self.db, "host", "Untitled chat")
        self.assertEqual(general["category"], "general")

    def test_join_and_leave(self) -> None:
        DiscussionService.join(self.db, self.discussion_id, "guest")
        self.assertEqual(self.raw()["participants"], ["host", "guest"])

        with self.assertRaises(ValidationError):
            DiscussionService.join(self.db, self.discussion_id, "guest")

        DiscussionService.leave(self.db, self.discussion_id, "guest")
        self.assertEqual(self.raw()["participants"], ["host"])
        with self.assertRaises(ValidationError):
            DiscussionService.leave(self.db, self.discussion_id, "guest")

    def test_join_full_discussion(self) -> None:
        small = DiscussionService.create_discussion(
            self.db, "host", "Pair", max_participants=2
        )
        DiscussionService.join(self.db, small["id"], "guest")

        with self.assertRaises(ValidationError) as ctx:
            DiscussionService.join(self.db, small["id"], "late")
        self.assertEqual(ctx.exception.message, "Discussion is full")

    def test_add_message_publishes_to_room(self) -> None:
        message = DiscussionService.add_message(
            self.db, self.publisher, self.discussion_id, "host", "Kickoff at 10"
        )

        self.assertEqual(message["sender"]["id"], "host")
        self.assertFalse(message["edited"])
        self.assertEqual(len(self.raw()["messages"]), 1)

        room, event, payload = self.publisher.events[-1]
        self.assertEqual(room, f"discussion-{self.discussion_id}")
        self.assertEqual(event, "new-message")
        self.assertEqual(payload["discussionId"], self.discussion_id)
        self.assertEqual(payload["message"]["id"], message["id"])

    def test_add_message_requires_participation(self) -> None:
        with self.assertRaises(AccessDenied):
            DiscussionService.add_message(
                self.db, self.publisher, self.discussion_id, "guest", "hi"
            )
        with self.assertRaises(ValidationError):
            DiscussionService.add_message(
                self.db, self.publisher, self.discussion_id, "host", "  "
            )
        self.assertEqual(self.publisher.events, [])

    def test_edit_message_is_sender_only(self) -> None:
        DiscussionService.join(self.db, self.discussion_id, "guest")
        message = DiscussionService.add_message(
            self.db, self.publisher, self.discussion_id, "host", "Draft"
        )

        with self.assertRaises(AccessDenied):
            DiscussionService.edit_message(
                self.db, self.publisher, self.discussion_id, message["id"], "guest", "x"
            )
        with self.assertRaises(NotFoundError):
            DiscussionService.edit_message(
                self.db, self.publisher, self.discussion_id, "missing", "host", "x"
            )

        updated = DiscussionService.edit_message(
            self.db, self.publisher, self.discussion_id, message["id"], "host", "Final"
        )

        self.assertTrue(updated["edited"])
        self.assertIsNotNone(updated["editedAt"])
        stored = self.raw()["messages"][0]
        self.assertEqual(stored["content"], "Final")
        self.assertTrue(stored["edited"])
        _, event, payload = self.publisher.events[-1]
        self.assertEqual(event, "message-updated")
        self.assertEqual(payload["messageId"], message["id"])
        self.assertEqual(payload["updatedMessage"]["content"], "Final")

    def test_delete_is_soft_and_creator_only(self) -> None:
        DiscussionService.add_message(
            self.db, self.publisher, self.discussion_id, "host", "Bye"
        )
        with self.assertRaises(AccessDenied):
            DiscussionService.delete(self.db, self.discussion_id, "guest")

        DiscussionService.delete(self.db, self.discussion_id, "host")

        raw = self.raw()
        self.assertFalse(raw["isActive"])
        self.assertEqual(len(raw["messages"]), 1)
        with self.assertRaises(ValidationError):
            DiscussionService.join(self.db, self.discussion_id, "guest")
        with self.assertRaises(ValidationError):
            DiscussionService.add_message(
                self.db, self.publisher, self.discussion_id, "host", "Still here?"
            )

    def test_get_reports_participation(self) -> None:
        DiscussionService.add_message(
            self.db, self.publisher, self.discussion_id, "host", "Hello"
        )

        as_host = DiscussionService.get_discussion(self.db, self.discussion_id, "host")
        as_guest = DiscussionService.get_discussion(self.db, self.discussion_id, "guest")

        self.assertTrue(as_host["isParticipant"])
        self.assertFalse(as_guest["isParticipant"])
        self.assertEqual(as_host["messages"][0]["sender"]["username"], "host")

    def test_listings_filter_and_paginate(self) -> None:
        DiscussionService.create_discussion(self.db, "guest", "Football night", category="sports")
        closed = DiscussionService.create_discussion(self.db, "host", "Old thread")
        DiscussionService.delete(self.db, closed["id"], "host")

        everything = DiscussionService.list_discussions(self.db)
        self.assertEqual(everything["total"], 2)
        self.assertNotIn("messages", everything["discussions"][0])

        sports = DiscussionService.list_discussions(self.db, category="sports")
        self.assertEqual([d["title"] for d in sports["discussions"]], ["Football night"])

        found = DiscussionService.list_discussions(self.db, search="RELEASE")
        self.assertEqual([d["id"] for d in found["discussions"]], [self.discussion_id])

        page = DiscussionService.list_discussions(self.db, page=2, limit=1)
        self.assertEqual(len(page["discussions"]), 1)
        self.assertEqual(page["totalPages"], 2)
        self.assertEqual(page["currentPage"], 2)

        mine = DiscussionService.list_user_discussions(self.db, "host")
        self.assertEqual([d["id"] for d in mine["discussions"]], [self.discussion_id])


class DiscussionRoutesTestCase(FirebaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.create_user("host")
        self.create_user("guest")

    def test_chat_flow(self) -> None:
        response = self.client.post(
            "/api/discussions/",
            json={"title": "Standup", "category": "business", "maxParticipants": 5},
            headers=self.auth_headers("host"),
        )
        self.assertEqual(response.status_code, 201)
        discussion_id = response.get_json()["discussion"]["id"]

        response = self.client.post(
            f"/api/discussions/{discussion_id}/messages",
            json={"content": "hi"},
            headers=self.auth_headers("guest"),
        )
        self.assertEqual(response.status_code, 403)

        self.client.post(
            f"/api/discussions/{discussion_id}/join", headers=self.auth_headers("guest")
        )
        response = self.client.post(
            f"/api/discussions/{discussion_id}/messages",
            json={"content": "hi"},
            headers=self.auth_headers("guest"),
        )
        self.assertEqual(response.status_code, 200)
        message_id = response.get_json()["data"]["id"]

        response = self.client.put(
            f"/api/discussions/{discussion_id}/messages/{message_id}",
            json={"content": "hello"},
            headers=self.auth_headers("guest"),
        )
        self.assertTrue(response.get_json()["data"]["edited"])

        response = self.client.get(
            f"/api/discussions/{discussion_id}", headers=self.auth_headers("guest")
        )
        body = response.get_json()
        self.assertTrue(body["isParticipant"])
        self.assertEqual(body["discussion"]["maxParticipants"], 5)

        response = self.client.get(
            "/api/discussions/my-discussions", headers=self.auth_headers("guest")
        )
        self.assertEqual(response.get_json()["total"], 1)

        response = self.client.delete(
            f"/api/discussions/{discussion_id}", headers=self.auth_headers("host")
        )
        self.assertEqual(response.status_code, 200)

        response = self.client.get("/api/discussions/", headers=self.auth_headers("host"))
        self.assertEqual(response.get_json()["discussions"], [])

    def test_invalid_category_is_400(self) -> None:
        response = self.client.post(
            "/api/discussions/",
            json={"title": "Recipes", "category": "cooking"},
            headers=self.auth_headers("host"),
        )
        self.assertEqual(response.status_code, 400)
