"""
Posts component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Protocol
from uuid import UUID

from postlab.domain.entities import Identity, Post

UniqueField = Literal["title", "slug"]


class PostRepoPort(Protocol):
    """
    Document store for posts.

    Adapters translate their own failures into StoreFailure.
    """

    def find(self, *, user: str | None = None, text: str | None = None) -> list[Post]:
        """
        Posts matching every given filter, newest first.

        ``text`` matches posts whose title or desc contains it, case-insensitively.
        """
        ...

    def get_by_id(self, post_id: UUID) -> Post | None:
        ...

    def get_by_field(self, field: UniqueField, value: str) -> Post | None:
        """Exact lookup on a unique field."""
        ...

    def insert(self, post: Post) -> Post:
        ...

    def update(self, post_id: UUID, changes: dict[str, Any], expected_version: int) -> Post | None:
        """
        Apply ``changes`` if the stored version equals ``expected_version``.

        Bumps the version. Returns the updated post, or None when no record
        with that id and version exists.
        """
        ...

    def delete(self, post_id: UUID) -> bool:
        """Delete a post. Returns False if it did not exist."""
        ...


class IdentityResolverPort(Protocol):
    """Authentication verifier."""

    def resolve(self, context: Any) -> Identity:
        """Return the caller identity or raise Unauthenticated."""
        ...


class TimePort(Protocol):
    """Port for time operations."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...


class BodyPipelinePort(Protocol):
    """Render + sanitize a post body."""

    def process(self, body: str) -> str:
        ...
