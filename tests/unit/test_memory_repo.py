from datetime import UTC, datetime, timedelta

import pytest

from postlab.adapters.memory import InMemoryPostRepo
from postlab.domain.entities import Like, Post

T0 = datetime(2026, 3, 1, tzinfo=UTC)


def make_post(title: str, *, user: str = "u1", desc: str = "d", minutes: int = 0) -> Post:
    return Post(
        title=title,
        slug=title.lower().replace(" ", "-"),
        desc=desc,
        body="b",
        sanitized_html="<p>b</p>",
        user=user,
        email=f"{user}@example.com",
        fullname=user,
        created_at=T0 + timedelta(minutes=minutes),
    )


@pytest.fixture
def repo():
    return InMemoryPostRepo()


def test_find_orders_newest_first(repo):
    repo.insert(make_post("Old", minutes=0))
    repo.insert(make_post("New", minutes=10))
    assert [p.title for p in repo.find()] == ["New", "Old"]


def test_find_by_user_and_text(repo):
    repo.insert(make_post("Straße notes", user="u1"))
    repo.insert(make_post("Other", user="u2", desc="about STRASSE"))

    assert [p.title for p in repo.find(user="u2")] == ["Other"]
    assert {p.title for p in repo.find(text="strasse")} == {"Straße notes", "Other"}
    assert repo.find(text="zzz") == []


def test_returned_posts_are_copies(repo):
    post = repo.insert(make_post("Copy"))
    fetched = repo.get_by_id(post.id)
    fetched.likes.append(Like(email="x@y.z", created_at=T0))
    assert repo.get_by_id(post.id).likes == []


def test_get_by_field(repo):
    post = repo.insert(make_post("Hello World"))
    assert repo.get_by_field("slug", "hello-world").id == post.id
    assert repo.get_by_field("title", "Hello World").id == post.id
    assert repo.get_by_field("title", "hello world") is None


def test_duplicate_insert_rejected(repo):
    post = repo.insert(make_post("Dup"))
    with pytest.raises(ValueError):
        repo.insert(post)


def test_update_bumps_version(repo):
    post = repo.insert(make_post("V"))
    updated = repo.update(post.id, {"title": "V2"}, expected_version=1)
    assert updated.title == "V2"
    assert updated.version == 2
    assert repo.get_by_id(post.id).version == 2


def test_update_stale_version(repo):
    post = repo.insert(make_post("V"))
    repo.update(post.id, {"title": "V2"}, expected_version=1)
    assert repo.update(post.id, {"title": "V3"}, expected_version=1) is None
    assert repo.get_by_id(post.id).title == "V2"


def test_update_missing_post(repo):
    post = make_post("Ghost")
    assert repo.update(post.id, {"title": "x"}, expected_version=1) is None


def test_update_rejects_unknown_fields(repo):
    post = repo.insert(make_post("V"))
    with pytest.raises(ValueError):
        repo.update(post.id, {"user": "u9"}, expected_version=1)


def test_delete(repo):
    post = repo.insert(make_post("Gone"))
    assert repo.delete(post.id) is True
    assert repo.delete(post.id) is False
    assert repo.get_by_id(post.id) is None
