"""
tests/test_api_routes.py -- Integration tests for the auth and todo routes.

These tests exercise the full stack: FastAPI routing -> bearer-token
dependency -> AuthService / AuthorizationGuard -> stores -> response model
serialization. Unit testing individual route functions would miss the
exception handlers that turn domain errors into status codes.

Coverage:
  - Sign-up: 201 body shape, 409 duplicate, 400 validation
  - Login: 200 token, 401 identical for wrong password and unknown user
  - Bearer auth: missing / malformed / tampered / expired -> same 401
  - Todos: owner CRUD; another user's todo -> 404 identical to a missing id
  - Storage faults: unreachable database -> 503 storage_unavailable

Fixtures used (from conftest.py):
  - api_client: TestClient with isolated in-memory stores (module scope)
"""

from __future__ import annotations

from fastapi.testclient import TestClient
from sqlalchemy import create_engine

from conftest import signup_and_login


class TestSignUp:
    def test_signup_created(self, api_client: TestClient) -> None:
        resp = api_client.post(
            "/api/v1/auth/signup",
            json={"username": "alice", "password": "password123", "email": "a@x.com", "name": "Alice"},
        )
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert set(data) == {"id", "username", "email", "name", "createdAt"}
        assert data["username"] == "alice"
        assert data["email"] == "a@x.com"
        assert data["name"] == "Alice"
        assert "password" not in resp.text

    def test_signup_ignores_client_created_at(self, api_client: TestClient) -> None:
        resp = api_client.post(
            "/api/v1/auth/signup",
            json={
                "username": "timetraveller",
                "password": "password123",
                "email": "t@x.com",
                "name": "T",
                "createdAt": "1999-01-01T00:00:00+00:00",
            },
        )
        assert resp.status_code == 201
        assert not resp.json()["createdAt"].startswith("1999")

    def test_signup_duplicate_conflict(self, api_client: TestClient) -> None:
        body = {"username": "dupe", "password": "password123", "email": "d@x.com", "name": "Dupe"}
        assert api_client.post("/api/v1/auth/signup", json=body).status_code == 201
        resp = api_client.post("/api/v1/auth/signup", json={**body, "email": "other@x.com"})
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "conflict"

    def test_signup_short_password(self, api_client: TestClient) -> None:
        resp = api_client.post(
            "/api/v1/auth/signup",
            json={"username": "shorty", "password": "short", "email": "s@x.com", "name": "S"},
        )
        assert resp.status_code == 400
        error = resp.json()["error"]
        assert error["code"] == "validation_error"
        assert "password" in error["detail"]

    def test_signup_missing_field(self, api_client: TestClient) -> None:
        resp = api_client.post("/api/v1/auth/signup", json={"username": "nofields"})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "validation_error"
        assert set(resp.json()["error"]["detail"]) == {"password", "email", "name"}

    def test_rejected_password_not_echoed(self, api_client: TestClient) -> None:
        secret = "S3cr3t-" + "p" * 260
        resp = api_client.post(
            "/api/v1/auth/signup",
            json={"username": "echo", "password": secret, "email": "e@x.com", "name": "Echo"},
        )
        assert resp.status_code == 400
        assert "S3cr3t" not in resp.text
        assert list(resp.json()["error"]["detail"]) == ["password"]

    def test_validation_detail_has_one_shape(self, api_client: TestClient) -> None:
        schema_fail = api_client.post(
            "/api/v1/auth/signup",
            json={"username": "shape1", "password": "p" * 300, "email": "s@x.com", "name": "S"},
        )
        policy_fail = api_client.post(
            "/api/v1/auth/signup",
            json={"username": "shape2", "password": "short", "email": "s@x.com", "name": "S"},
        )
        assert schema_fail.status_code == policy_fail.status_code == 400
        for resp in (schema_fail, policy_fail):
            detail = resp.json()["error"]["detail"]
            assert isinstance(detail, dict)
            assert isinstance(detail["password"], str)


class TestLogin:
    def test_login_returns_bearer_token(self, api_client: TestClient) -> None:
        api_client.post(
            "/api/v1/auth/signup",
            json={"username": "logan", "password": "password123", "email": "l@x.com", "name": "Logan"},
        )
        resp = api_client.post("/api/v1/auth/login", json={"username": "logan", "password": "password123"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["tokenType"] == "Bearer"
        assert data["token"].count(".") == 2
        assert data["expiresIn"] == 3600
        assert resp.headers["cache-control"] == "no-store"

    def test_wrong_password_and_unknown_user_identical(self, api_client: TestClient) -> None:
        api_client.post(
            "/api/v1/auth/signup",
            json={"username": "wanda", "password": "password123", "email": "w@x.com", "name": "Wanda"},
        )
        wrong = api_client.post("/api/v1/auth/login", json={"username": "wanda", "password": "wrongpass"})
        unknown = api_client.post("/api/v1/auth/login", json={"username": "bob", "password": "anything"})
        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json() == unknown.json()
        assert wrong.json()["error"]["code"] == "bad_credentials"

    def test_me(self, api_client: TestClient) -> None:
        headers = signup_and_login(api_client, "meuser")
        resp = api_client.get("/api/v1/auth/me", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["username"] == "meuser"


class TestBearerAuth:
    def test_missing_header(self, api_client: TestClient) -> None:
        resp = api_client.get("/api/v1/auth/me")
        assert resp.status_code == 401
        assert resp.headers["www-authenticate"] == "Bearer"

    def test_failures_share_one_body(self, api_client: TestClient) -> None:
        headers = signup_and_login(api_client, "tamper")
        token = headers["Authorization"].split(" ", 1)[1]
        tampered = token[:-2] + ("A" if token[-2] != "A" else "B") + token[-1]

        missing = api_client.get("/api/v1/auth/me")
        malformed = api_client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-token"})
        forged = api_client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {tampered}"})
        wrong_scheme = api_client.get("/api/v1/auth/me", headers={"Authorization": f"Basic {token}"})

        bodies = [r.json() for r in (missing, malformed, forged, wrong_scheme)]
        assert all(r.status_code == 401 for r in (missing, malformed, forged, wrong_scheme))
        assert all(body == bodies[0] for body in bodies)
        assert bodies[0]["error"]["code"] == "unauthorized"

    def test_expired_token(self, api_client: TestClient) -> None:
        signup_and_login(api_client, "expiring")
        service = api_client.app.state.auth_service
        user = service.store.find_by_username("expiring").identity
        stale = service.codec.encode(user.id, now=1_000_000_000)
        resp = api_client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {stale.value}"})
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "unauthorized"

    def test_scheme_is_case_insensitive(self, api_client: TestClient) -> None:
        headers = signup_and_login(api_client, "lowercase")
        token = headers["Authorization"].split(" ", 1)[1]
        resp = api_client.get("/api/v1/auth/me", headers={"Authorization": f"bearer {token}"})
        assert resp.status_code == 200


class TestTodos:
    def test_owner_crud(self, api_client: TestClient) -> None:
        headers = signup_and_login(api_client, "owner")

        created = api_client.post("/api/v1/todos", json={"title": "Write tests", "content": "all of them"}, headers=headers)
        assert created.status_code == 201, created.text
        todo = created.json()
        assert todo["completed"] is False

        listed = api_client.get("/api/v1/todos", headers=headers)
        assert [t["id"] for t in listed.json()] == [todo["id"]]

        patched = api_client.patch(f"/api/v1/todos/{todo['id']}", json={"completed": True}, headers=headers)
        assert patched.status_code == 200
        assert patched.json()["completed"] is True
        assert patched.json()["title"] == "Write tests"

        fetched = api_client.get(f"/api/v1/todos/{todo['id']}", headers=headers)
        assert fetched.json()["completed"] is True

        deleted = api_client.delete(f"/api/v1/todos/{todo['id']}", headers=headers)
        assert deleted.status_code == 204
        assert api_client.get(f"/api/v1/todos/{todo['id']}", headers=headers).status_code == 404

    def test_other_users_todo_is_not_found(self, api_client: TestClient) -> None:
        owner = signup_and_login(api_client, "victim")
        intruder = signup_and_login(api_client, "intruder")
        todo = api_client.post("/api/v1/todos", json={"title": "private"}, headers=owner).json()

        forbidden_get = api_client.get(f"/api/v1/todos/{todo['id']}", headers=intruder)
        missing_get = api_client.get("/api/v1/todos/999999", headers=intruder)
        assert forbidden_get.status_code == missing_get.status_code == 404
        assert forbidden_get.json() == missing_get.json()

        assert api_client.patch(f"/api/v1/todos/{todo['id']}", json={"title": "pwned"}, headers=intruder).status_code == 404
        assert api_client.delete(f"/api/v1/todos/{todo['id']}", headers=intruder).status_code == 404

        still_there = api_client.get(f"/api/v1/todos/{todo['id']}", headers=owner)
        assert still_there.status_code == 200
        assert still_there.json()["title"] == "private"

    def test_list_only_shows_own(self, api_client: TestClient) -> None:
        first = signup_and_login(api_client, "lister1")
        second = signup_and_login(api_client, "lister2")
        api_client.post("/api/v1/todos", json={"title": "one"}, headers=first)
        api_client.post("/api/v1/todos", json={"title": "two"}, headers=second)
        titles = [t["title"] for t in api_client.get("/api/v1/todos", headers=first).json()]
        assert titles == ["one"]

    def test_todos_require_auth(self, api_client: TestClient) -> None:
        assert api_client.get("/api/v1/todos").status_code == 401
        assert api_client.post("/api/v1/todos", json={"title": "x"}).status_code == 401


class TestStorageErrors:
    def test_unreachable_database_is_503(self, api_client: TestClient, monkeypatch, tmp_path) -> None:
        store = api_client.app.state.credential_store
        broken = create_engine(f"sqlite:///{tmp_path / 'does-not-exist' / 'auth.db'}")
        monkeypatch.setattr(store, "engine", broken)

        resp = api_client.post("/api/v1/auth/login", json={"username": "anyone", "password": "password123"})
        broken.dispose()

        assert resp.status_code == 503
        assert resp.json() == {
            "error": {
                "code": "storage_unavailable",
                "message": "Storage is temporarily unavailable. Try again later.",
            }
        }
