import threading
from typing import Any
from uuid import UUID

from postlab.domain.entities import Post

UPDATABLE_FIELDS = frozenset(["title", "slug", "desc", "body", "sanitized_html", "likes"])


class InMemoryPostRepo:
    """Process-local post store. Version checks and writes happen under one lock."""

    def __init__(self) -> None:
        self._posts: dict[UUID, Post] = {}
        self._lock = threading.Lock()

    def find(self, *, user: str | None = None, text: str | None = None) -> list[Post]:
        needle = text.casefold() if text else None
        with self._lock:
            posts = list(self._posts.values())

        matches = [
            p.model_copy(deep=True)
            for p in posts
            if (user is None or p.user == user)
            and (
                needle is None
                or needle in p.title.casefold()
                or needle in p.desc.casefold()
            )
        ]
        matches.sort(key=lambda p: p.created_at, reverse=True)
        return matches

    def get_by_id(self, post_id: UUID) -> Post | None:
        with self._lock:
            post = self._posts.get(post_id)
        return post.model_copy(deep=True) if post else None

    def get_by_field(self, field: str, value: str) -> Post | None:
        with self._lock:
            for post in self._posts.values():
                if getattr(post, field) == value:
                    return post.model_copy(deep=True)
        return None

    def insert(self, post: Post) -> Post:
        with self._lock:
            if post.id in self._posts:
                raise ValueError(f"Post {post.id} already exists")
            self._posts[post.id] = post.model_copy(deep=True)
        return post

    def update(self, post_id: UUID, changes: dict[str, Any], expected_version: int) -> Post | None:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not updatable: {sorted(unknown)}")

        with self._lock:
            current = self._posts.get(post_id)
            if current is None or current.version != expected_version:
                return None
            updated = current.model_copy(
                update={**changes, "version": current.version + 1}
            ).model_copy(deep=True)
            self._posts[post_id] = updated
        return updated.model_copy(deep=True)

    def delete(self, post_id: UUID) -> bool:
        with self._lock:
            return self._posts.pop(post_id, None) is not None
