from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from postlab.domain.entities import Post

# --- Requests ---


class PostCreateRequest(BaseModel):
    title: str
    desc: str
    body: str


class PostUpdateRequest(PostCreateRequest):
    # Version the client read; omit to skip the check
    version: int | None = None


# --- Responses ---


class LikeResponse(BaseModel):
    email: str
    createdAt: datetime


class PostResponse(BaseModel):
    id: UUID
    title: str
    slug: str
    desc: str
    body: str
    sanitizedHtml: str
    user: str
    email: str
    fullname: str
    likes: list[LikeResponse] = []
    createdAt: datetime
    version: int

    @classmethod
    def from_post(cls, post: Post) -> PostResponse:
        return cls(
            id=post.id,
            title=post.title,
            slug=post.slug,
            desc=post.desc,
            body=post.body,
            sanitizedHtml=post.sanitized_html,
            user=post.user,
            email=post.email,
            fullname=post.fullname,
            likes=[LikeResponse(email=like.email, createdAt=like.created_at) for like in post.likes],
            createdAt=post.created_at,
            version=post.version,
        )


class DeletePostResponse(BaseModel):
    id: UUID
    message: str
