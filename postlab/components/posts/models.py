"""
Posts component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

# --- Query Inputs ---


@dataclass(frozen=True)
class GetPostInput:
    """Input for fetching a post by slug."""

    slug: str


@dataclass(frozen=True)
class GetPostForUpdateInput:
    """Input for fetching a post by id."""

    post_id: UUID


@dataclass(frozen=True)
class SearchPostsInput:
    """Input for substring search over title and desc."""

    filter: str | None = None


@dataclass(frozen=True)
class GetUserPostsInput:
    """Input for listing one user's posts."""

    user_id: str


# --- Mutation Inputs ---


@dataclass(frozen=True)
class CreatePostInput:
    title: str
    desc: str
    body: str


@dataclass(frozen=True)
class UpdatePostInput:
    post_id: UUID
    title: str
    desc: str
    body: str
    # When given, the update is rejected unless it matches the stored version
    expected_version: int | None = None


@dataclass(frozen=True)
class DeletePostInput:
    post_id: UUID


@dataclass(frozen=True)
class LikePostInput:
    post_id: UUID


# --- Outputs ---


DELETE_ACK = "Post deleted successfully"


@dataclass(frozen=True)
class DeletePostOutput:
    post_id: UUID
    message: str = DELETE_ACK
