"""Tests for the application factory and its global handlers."""

import os
from unittest.mock import patch

from ecommunity import create_app
from ecommunity.realtime import PUBLISHER_EXTENSION, SocketIOPublisher, get_publisher
from tests.helpers import FirebaseTestCase


class AppTestCase(FirebaseTestCase):
    def test_health_and_index(self) -> None:
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data, b"OK")

        response = self.client.get("/")
        self.assertEqual(response.get_json()["message"], "Server is running!")

    def test_unknown_route_is_json_404(self) -> None:
        response = self.client.get("/api/nothing-here")
        self.assertEqual(response.status_code, 404)
        self.assertFalse(response.get_json()["success"])

    def test_wrong_method_is_json_405(self) -> None:
        response = self.client.delete("/api/tags/")
        self.assertEqual(response.status_code, 405)
        self.assertFalse(response.get_json()["success"])

    def test_cors_headers_for_allowed_origin(self) -> None:
        response = self.client.get("/health", headers={"Origin": "http://localhost:3000"})
        self.assertEqual(
            response.headers["Access-Control-Allow-Origin"], "http://localhost:3000"
        )
        self.assertEqual(response.headers["Access-Control-Allow-Credentials"], "true")

        response = self.client.get("/health", headers={"Origin": "http://evil.test"})
        self.assertNotIn("Access-Control-Allow-Origin", response.headers)

    def test_injected_publisher_is_used(self) -> None:
        self.assertIs(get_publisher(), self.publisher)


class AppConfigTestCase(FirebaseTestCase):
    @patch.dict(os.environ, {"APP_ENV": "production", "SHOW_STACK_TRACES": ""})
    def test_production_hides_stack_traces(self) -> None:
        app = create_app({"TESTING": True})
        self.assertFalse(app.config["SHOW_STACK_TRACES"])

    @patch.dict(os.environ, {"APP_ENV": "development", "SHOW_STACK_TRACES": ""})
    def test_development_shows_stack_traces(self) -> None:
        app = create_app({"TESTING": True})
        self.assertTrue(app.config["SHOW_STACK_TRACES"])

    @patch.dict(os.environ, {"CORS_ORIGINS": "https://a.example, https://b.example"})
    def test_cors_origins_from_environment(self) -> None:
        app = create_app({"TESTING": True})
        self.assertEqual(
            app.config["CORS_ORIGINS"], ["https://a.example", "https://b.example"]
        )

    def test_default_publisher_is_socketio(self) -> None:
        app = create_app({"TESTING": True})
        self.assertIsInstance(app.extensions[PUBLISHER_EXTENSION], SocketIOPublisher)

    @patch("ecommunity._init_firebase")
    def test_firebase_skipped_when_testing(self, mock_init) -> None:
        create_app({"TESTING": True})
        mock_init.assert_not_called()
        create_app({"TESTING": False})
        mock_init.assert_called_once()
