"""
Auth tests — signup, three-way login, set-password, bearer tokens.

Tests cover:
  - Password hashing (bcrypt)
  - First-signup-is-admin rule, duplicate accounts
  - Login outcomes: not found / setup required / bad password / token
  - Token claims, expiry and rejection of tampered tokens
  - The set-password activation step
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from trackboard.models.auth import User
from trackboard.services.jwt_service import decode_access_token
from trackboard.services.user_service import invite_user
from trackboard.utils.crypto import hash_password, verify_password

from conftest import DEFAULT_PASSWORD, auth_headers, login, signup


# ═══════════════════════════════════════════════════════════════
# PASSWORD HASHING
# ═══════════════════════════════════════════════════════════════

class TestPasswordHashing:
    def test_hash_and_verify(self):
        hashed = hash_password("s3cret!")
        assert hashed != "s3cret!"
        assert verify_password("s3cret!", hashed)
        assert not verify_password("wrong", hashed)

    def test_salted(self):
        assert hash_password("same") != hash_password("same")

    def test_missing_or_garbage_hash_never_verifies(self):
        assert not verify_password("anything", None)
        assert not verify_password("anything", "")
        assert not verify_password("anything", "not-a-bcrypt-hash")


# ═══════════════════════════════════════════════════════════════
# SIGNUP
# ═══════════════════════════════════════════════════════════════

class TestSignup:
    def test_first_signup_is_admin_rest_are_users(self, client):
        for name in ("first", "second", "third"):
            res = signup(client, name, f"{name}@acme.io")
            assert res.status_code == 201
            assert res.get_json() == {"message": "User created"}

        roles = {u.username: u.role for u in User.query.all()}
        assert roles == {"first": "admin", "second": "user", "third": "user"}

    def test_signup_returns_no_token(self, client):
        body = signup(client, "solo", "solo@acme.io").get_json()
        assert "token" not in body

    def test_client_supplied_role_is_ignored(self, client, admin):
        res = client.post("/api/auth/signup", json={
            "username": "sneaky", "email": "sneaky@acme.io",
            "password": DEFAULT_PASSWORD, "role": "admin",
        })
        assert res.status_code == 201
        assert User.query.filter_by(username="sneaky").one().role == "user"

    def test_password_is_stored_hashed(self, client):
        signup(client, "hashy", "hashy@acme.io", "plain-text-pw")
        user = User.query.filter_by(username="hashy").one()
        assert user.password_hash != "plain-text-pw"
        assert verify_password("plain-text-pw", user.password_hash)

    def test_duplicate_username_conflict(self, client, admin):
        res = signup(client, "root", "other@acme.io")
        assert res.status_code == 409
        assert res.get_json()["code"] == "ERR_CONFLICT_DUPLICATE"

    def test_duplicate_email_conflict_is_case_insensitive(self, client, admin):
        res = signup(client, "someone", "ROOT@acme.io")
        assert res.status_code == 409

    @pytest.mark.parametrize("payload", [
        {"email": "a@acme.io", "password": "x"},
        {"username": "a", "password": "x"},
        {"username": "a", "email": "a@acme.io"},
        {"username": "a", "email": "not-an-email", "password": "x"},
    ])
    def test_missing_or_invalid_fields(self, client, payload):
        res = client.post("/api/auth/signup", json=payload)
        assert res.status_code == 400
        assert "error" in res.get_json()

    @pytest.mark.parametrize("payload", [
        {"username": "a", "email": "a@acme.io", "password": 1234},
        {"username": 7, "email": "a@acme.io", "password": "x"},
        {"username": "a", "email": ["a@acme.io"], "password": "x"},
    ])
    def test_non_string_fields_rejected(self, client, payload):
        res = client.post("/api/auth/signup", json=payload)
        assert res.status_code == 400
        assert res.get_json()["code"] == "ERR_VALIDATION_INVALID"

    def test_body_must_be_an_object(self, client):
        assert client.post("/api/auth/signup", json=["a", "b"]).status_code == 400


# ═══════════════════════════════════════════════════════════════
# LOGIN
# ═══════════════════════════════════════════════════════════════

class TestLogin:
    def test_unknown_email_is_not_found(self, client, admin):
        res = login(client, "ghost@acme.io")
        assert res.status_code == 404

    def test_wrong_password_is_unauthorized(self, client, admin):
        res = login(client, admin["email"], "wrong-password")
        assert res.status_code == 401
        assert res.get_json()["error"] == "Invalid credentials"

    def test_success_returns_token_and_user(self, client, admin):
        res = login(client, admin["email"])
        assert res.status_code == 200
        body = res.get_json()
        assert body["tokenType"] == "Bearer"
        assert body["expiresIn"] == 3600
        assert body["user"]["username"] == "root"
        assert "password_hash" not in body["user"]
        assert "passwordSetupRequired" not in body

    def test_email_lookup_ignores_case(self, client, admin):
        assert login(client, admin["email"].upper()).status_code == 200

    def test_non_string_password_rejected(self, client, admin):
        res = client.post("/api/auth/login", json={"email": admin["email"], "password": 1234})
        assert res.status_code == 400
        assert User.query.filter_by(email=admin["email"]).one().password_hash

    def test_invited_account_requires_password_setup(self, client, admin):
        invite_user("newbie@acme.io")
        res = login(client, "newbie@acme.io", "whatever")
        assert res.status_code == 200
        assert res.get_json() == {"passwordSetupRequired": True, "email": "newbie@acme.io"}


# ═══════════════════════════════════════════════════════════════
# TOKENS
# ═══════════════════════════════════════════════════════════════

class TestTokens:
    def test_claims(self, admin):
        claims = decode_access_token(admin["token"])
        assert claims["sub"] == admin["id"]
        assert claims["username"] == "root"
        assert claims["role"] == "admin"
        assert claims["type"] == "access"
        assert claims["exp"] - claims["iat"] == 3600
        assert claims["jti"]

    def test_no_token(self, client):
        res = client.get("/api/projects")
        assert res.status_code == 401
        assert res.get_json()["error"] == "No token provided"

    def test_malformed_header(self, client, admin):
        res = client.get("/api/projects", headers={"Authorization": admin["token"]})
        assert res.status_code == 401
        assert res.get_json()["error"] == "No token provided"

    def test_garbage_token(self, client):
        res = client.get("/api/projects", headers=auth_headers("not.a.jwt"))
        assert res.status_code == 401
        assert res.get_json()["error"] == "Invalid or expired token"

    def test_tampered_signature(self, client, app, admin):
        forged = jwt.encode(
            {"sub": admin["id"], "role": "admin", "type": "access"},
            "some-other-secret-that-is-long-enough-for-hs256-0123456789",
            algorithm="HS256",
        )
        res = client.get("/api/projects", headers=auth_headers(forged))
        assert res.status_code == 401

    def test_expired_token(self, client, app, admin):
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        expired = jwt.encode(
            {
                "sub": admin["id"], "username": "root", "email": admin["email"],
                "role": "admin", "type": "access",
                "iat": past, "exp": past + timedelta(hours=1),
            },
            app.config["JWT_SECRET_KEY"],
            algorithm="HS256",
        )
        res = client.get("/api/projects", headers=auth_headers(expired))
        assert res.status_code == 401
        assert res.get_json()["error"] == "Invalid or expired token"

    def test_wrong_token_type(self, client, app, admin):
        now = datetime.now(timezone.utc)
        refresh = jwt.encode(
            {"sub": admin["id"], "type": "refresh", "iat": now, "exp": now + timedelta(hours=1)},
            app.config["JWT_SECRET_KEY"],
            algorithm="HS256",
        )
        res = client.get("/api/projects", headers=auth_headers(refresh))
        assert res.status_code == 401

    def test_me(self, client, admin):
        res = client.get("/api/auth/me", headers=admin["headers"])
        assert res.status_code == 200
        body = res.get_json()
        assert body["id"] == admin["id"]
        assert body["status"] == "active"


# ═══════════════════════════════════════════════════════════════
# SET PASSWORD
# ═══════════════════════════════════════════════════════════════

class TestSetPassword:
    def test_activates_invited_account(self, client, admin):
        invite_user("late@acme.io")
        res = client.post(
            "/api/users/set-password",
            json={"email": "late@acme.io", "password": "Fresh123!"},
        )
        assert res.status_code == 200

        user = User.query.filter_by(email="late@acme.io").one()
        assert user.status == "active"
        assert login(client, "late@acme.io", "Fresh123!").status_code == 200

    def test_unknown_email(self, client):
        res = client.post(
            "/api/users/set-password",
            json={"email": "nobody@acme.io", "password": "x"},
        )
        assert res.status_code == 404

    def test_cannot_overwrite_existing_password(self, client, admin):
        res = client.post(
            "/api/users/set-password",
            json={"email": admin["email"], "password": "hijack"},
        )
        assert res.status_code == 400
        assert login(client, admin["email"], "hijack").status_code == 401
        assert login(client, admin["email"]).status_code == 200

    def test_password_required(self, client, admin):
        invite_user("blank@acme.io")
        res = client.post("/api/users/set-password", json={"email": "blank@acme.io"})
        assert res.status_code == 400
