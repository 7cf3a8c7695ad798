"""Tests for registration, login and bearer-token authentication."""

from ecommunity.auth.utils import (
    bearer_token,
    create_token,
    decode_token,
    hash_password,
    verify_password,
)
from ecommunity.errors import AuthenticationError
from tests.helpers import TEST_PASSWORD, FirebaseTestCase


class AuthUtilsTestCase(FirebaseTestCase):
    def test_password_hash_round_trip(self) -> None:
        hashed = hash_password(TEST_PASSWORD)
        self.assertNotEqual(hashed, TEST_PASSWORD)
        self.assertTrue(verify_password(hashed, TEST_PASSWORD))
        self.assertFalse(verify_password(hashed, "wrong"))

    def test_token_carries_identity_claims(self) -> None:
        claims = decode_token(create_token("u1", "alice", "admin"))
        self.assertEqual(claims, {"id": "u1", "username": "alice", "role": "admin"})

    def test_tampered_token_is_rejected(self) -> None:
        token = create_token("u1", "alice")
        with self.assertRaises(AuthenticationError) as ctx:
            decode_token(token[:-2] + "xx")
        self.assertEqual(ctx.exception.message, "Invalid token.")

    def test_expired_token_is_rejected(self) -> None:
        token = create_token("u1", "alice")
        self.app.config["TOKEN_MAX_AGE"] = -1
        with self.assertRaises(AuthenticationError) as ctx:
            decode_token(token)
        self.assertIn("expired", ctx.exception.message)

    def test_bearer_token_parsing(self) -> None:
        self.assertEqual(bearer_token("Bearer abc"), "abc")
        self.assertIsNone(bearer_token("Basic abc"))
        self.assertIsNone(bearer_token("Bearer "))
        self.assertIsNone(bearer_token(None))


class AuthRoutesTestCase(FirebaseTestCase):
    def register(self, **overrides):
        body = {
            "username": "alice",
            "email": "alice@gmail.com",
            "password": TEST_PASSWORD,
            "firstname": "Alice",
            "lastname": "Smith",
        }
        body.update(overrides)
        return self.client.post("/api/auth/register", json=body)

    def login(self, identifier, password=TEST_PASSWORD):
        return self.client.post(
            "/api/auth/login", json={"email": identifier, "password": password}
        )

    def test_register_returns_user_and_token(self) -> None:
        response = self.register()

        self.assertEqual(response.status_code, 201)
        body = response.get_json()
        self.assertEqual(body["user"]["username"], "alice")
        self.assertNotIn("password", body["user"])
        self.assertEqual(decode_token(body["token"])["id"], body["user"]["id"])

        stored = self.get_user(body["user"]["id"])
        self.assertTrue(verify_password(stored["password"], TEST_PASSWORD))
        self.assertEqual(stored["friends"], [])

    def test_register_rejects_duplicates(self) -> None:
        self.register()

        response = self.register(email="other@gmail.com")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()["message"], "Username is already taken")

        response = self.register(username="alice2")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()["message"], "Email is already registered")

    def test_register_validates_fields(self) -> None:
        self.assertEqual(self.register(username="a!").status_code, 400)
        self.assertEqual(self.register(password="123").status_code, 400)
        self.assertEqual(self.register(firstname="").status_code, 400)

    def test_login_by_username_or_email(self) -> None:
        self.register()

        by_username = self.login("alice")
        self.assertEqual(by_username.status_code, 200)
        by_email = self.login("alice@gmail.com")
        self.assertEqual(by_email.status_code, 200)
        self.assertEqual(
            by_username.get_json()["user"]["id"], by_email.get_json()["user"]["id"]
        )

    def test_login_failures(self) -> None:
        self.register()

        response = self.login("alice", "wrong-password")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()["message"], "Invalid credentials")

        response = self.login("nobody")
        self.assertEqual(response.status_code, 404)

    def test_me_requires_valid_token(self) -> None:
        token = self.register().get_json()["token"]

        response = self.client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {token}"}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()["user"]["username"], "alice")

        response = self.client.get("/api/auth/me")
        self.assertEqual(response.status_code, 401)
        self.assertIn("No token", response.get_json()["message"])

        response = self.client.get(
            "/api/auth/me", headers={"Authorization": "Bearer not-a-token"}
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.get_json()["message"], "Invalid token.")

    def test_token_for_missing_user_is_rejected(self) -> None:
        response = self.client.get("/api/auth/me", headers=self.auth_headers("ghost"))
        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.get_json()["success"])

