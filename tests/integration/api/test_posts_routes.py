"""Integration tests for post API routes."""
from pathlib import Path
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from postlab.api.deps import Settings, get_settings
from postlab.api.main import app


@pytest.fixture
def override_settings(test_db_path, rules_path):
    def _settings():
        s = Settings()
        s.db_path = test_db_path
        s.rules_path = Path(rules_path)
        s.secret_key = "test-secret"
        return s

    app.dependency_overrides[get_settings] = _settings
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client(override_settings):
    # No context manager: the lifespan would migrate the default data dir
    return TestClient(app)


@pytest.fixture
def alice_headers(resolver, alice):
    return {"Authorization": f"Bearer {resolver.issue(alice)}"}


@pytest.fixture
def bob_headers(resolver, bob):
    return {"Authorization": f"Bearer {resolver.issue(bob)}"}


def create(client, headers, title="Hello World", desc="A first post", body="Some **bold** text"):
    response = client.post(
        "/api/posts", json={"title": title, "desc": desc, "body": body}, headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()


# --- Queries ---


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


def test_list_empty(client):
    response = client.get("/api/posts")
    assert response.status_code == 200
    assert response.json() == []


def test_create_returns_camel_case_post(client, alice_headers, alice):
    post = create(client, alice_headers)

    assert post["slug"] == "hello-world"
    assert post["sanitizedHtml"] == "<p>Some <strong>bold</strong> text</p>"
    assert post["user"] == alice.id
    assert post["email"] == alice.email
    assert post["fullname"] == alice.fullname
    assert post["likes"] == []
    assert post["version"] == 1
    assert "createdAt" in post


def test_get_by_slug_id_and_user(client, alice_headers, bob_headers, alice):
    mine = create(client, alice_headers, title="Mine")
    create(client, bob_headers, title="Theirs")

    assert client.get("/api/posts/slug/mine").json()["id"] == mine["id"]
    assert client.get(f"/api/posts/{mine['id']}").json()["title"] == "Mine"

    user_posts = client.get(f"/api/posts/user/{alice.id}").json()
    assert [p["title"] for p in user_posts] == ["Mine"]
    assert client.get("/api/posts/user/nobody").json() == []


def test_list_and_search(client, alice_headers):
    create(client, alice_headers, title="Python tips", desc="short")
    create(client, alice_headers, title="Cooking", desc="No PYTHON here, really")
    create(client, alice_headers, title="Gardening", desc="soil")

    titles = [p["title"] for p in client.get("/api/posts").json()]
    assert titles == ["Gardening", "Cooking", "Python tips"]

    found = client.get("/api/posts/search", params={"filter": "python"}).json()
    assert {p["title"] for p in found} == {"Python tips", "Cooking"}

    assert len(client.get("/api/posts/search").json()) == 3
    assert len(client.get("/api/posts/search", params={"filter": ""}).json()) == 3


def test_unknown_slug_and_id(client):
    response = client.get("/api/posts/slug/missing")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "not_found"

    assert client.get(f"/api/posts/{uuid4()}").status_code == 404


def test_malformed_id_is_bad_request(client):
    response = client.get("/api/posts/not-a-uuid")
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "invalid_request"


# --- Mutations ---


def test_create_requires_auth(client):
    response = client.post("/api/posts", json={"title": "t", "desc": "d", "body": "b"})
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"
    assert client.get("/api/posts").json() == []


def test_create_with_bad_token(client):
    response = client.post(
        "/api/posts",
        json={"title": "t", "desc": "d", "body": "b"},
        headers={"Authorization": "Bearer garbage"},
    )
    assert response.status_code == 401


def test_create_with_cookie_token(client, resolver, alice):
    response = client.post(
        "/api/posts",
        json={"title": "Cookie", "desc": "d", "body": "b"},
        headers={"Cookie": f'access_token="Bearer {resolver.issue(alice)}"'},
    )
    assert response.status_code == 201
    assert response.json()["email"] == alice.email


def test_create_invalid_input(client, alice_headers):
    response = client.post(
        "/api/posts", json={"title": "", "desc": "", "body": "b"}, headers=alice_headers
    )
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "invalid_input"
    assert error["message"] == "Errors"
    assert set(error["errors"]) == {"title", "desc"}


def test_create_missing_field(client, alice_headers):
    response = client.post("/api/posts", json={"title": "x"}, headers=alice_headers)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "invalid_request"


def test_create_duplicate_title(client, alice_headers, bob_headers):
    create(client, alice_headers, title="Taken")
    response = client.post(
        "/api/posts", json={"title": "Taken", "desc": "d", "body": "b"}, headers=bob_headers
    )
    assert response.status_code == 409
    assert response.json()["error"]["errors"] == {"title": "This title is already taken."}


def test_create_sanitizes_body(client, alice_headers):
    post = create(
        client,
        alice_headers,
        title="Unsafe",
        body="<script>alert(1)</script> [x](javascript:evil)",
    )
    assert "<script" not in post["sanitizedHtml"]
    assert "javascript:" not in post["sanitizedHtml"]
    assert post["body"] == "<script>alert(1)</script> [x](javascript:evil)"


def test_update_by_owner(client, alice_headers):
    post = create(client, alice_headers)
    response = client.put(
        f"/api/posts/{post['id']}",
        json={"title": "Renamed Post", "desc": "new desc", "body": "# Head"},
        headers=alice_headers,
    )
    assert response.status_code == 200
    updated = response.json()
    assert updated["slug"] == "renamed-post"
    assert updated["sanitizedHtml"] == "<h1>Head</h1>"
    assert updated["version"] == 2
    assert updated["createdAt"] == post["createdAt"]
    assert updated["user"] == post["user"]


def test_update_by_other_user_forbidden(client, alice_headers, bob_headers):
    post = create(client, alice_headers)
    response = client.put(
        f"/api/posts/{post['id']}",
        json={"title": "Hijack", "desc": "d", "body": "b"},
        headers=bob_headers,
    )
    assert response.status_code == 403
    assert response.json()["error"]["message"] == "Action not allowed"
    assert client.get(f"/api/posts/{post['id']}").json()["title"] == post["title"]


def test_update_missing_post(client, alice_headers):
    response = client.put(
        f"/api/posts/{uuid4()}", json={"title": "t", "desc": "d", "body": "b"}, headers=alice_headers
    )
    assert response.status_code == 404


def test_update_with_stale_version(client, alice_headers):
    post = create(client, alice_headers)
    url = f"/api/posts/{post['id']}"
    payload = {"title": "One", "desc": "d", "body": "b", "version": 1}

    assert client.put(url, json=payload, headers=alice_headers).status_code == 200

    response = client.put(url, json={**payload, "title": "Two"}, headers=alice_headers)
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "stale_write"
    assert client.get(url).json()["title"] == "One"


def test_delete_flow(client, alice_headers, bob_headers):
    post = create(client, alice_headers)
    url = f"/api/posts/{post['id']}"

    assert client.delete(url).status_code == 401
    assert client.delete(url, headers=bob_headers).status_code == 403

    response = client.delete(url, headers=alice_headers)
    assert response.status_code == 200
    assert response.json() == {"id": post["id"], "message": "Post deleted successfully"}

    assert client.delete(url, headers=alice_headers).status_code == 404
    assert client.get(url).status_code == 404


def test_like_toggle(client, alice_headers, bob_headers, bob):
    post = create(client, alice_headers)
    url = f"/api/posts/{post['id']}/like"

    liked = client.post(url, headers=bob_headers).json()
    assert [like["email"] for like in liked["likes"]] == [bob.email]

    unliked = client.post(url, headers=bob_headers).json()
    assert unliked["likes"] == []
    assert unliked["version"] == 3


def test_like_requires_auth_and_existing_post(client, alice_headers):
    post = create(client, alice_headers)
    assert client.post(f"/api/posts/{post['id']}/like").status_code == 401
    assert client.post(f"/api/posts/{uuid4()}/like", headers=alice_headers).status_code == 404
