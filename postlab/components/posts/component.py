"""
Posts component - Post lifecycle engine.

Queries (read-only):
- run_get_posts: all posts, newest first
- run_get_post: one post by slug
- run_search: title/desc substring match, case-insensitive
- run_get_for_update: one post by id
- run_get_user_posts: one user's posts, newest first

Mutations (caller identity resolved first, fails closed):
- run_create: validate -> unique title -> slug -> render+sanitize -> insert
- run_update: validate -> load -> owner check -> recompute derived fields -> update
- run_delete: load -> owner check -> delete
- run_like: load -> toggle caller's like -> update

Invariants:
- slug is always derived from the current title
- sanitized_html is always render+sanitize of the current body
- at most one like per email
- user/email/fullname/created_at never change after creation
- existence is checked before ownership
- read-modify-write is guarded by the version that was read
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from postlab.domain.entities import Identity, Like, Post
from postlab.domain.errors import Conflict, Forbidden, InvalidInput, NotFound, StaleWrite
from postlab.domain.slug import SLUG_FALLBACK, derive_slug
from postlab.domain.validators import PostLimits, validate_post_input

from .models import (
    CreatePostInput,
    DeletePostInput,
    DeletePostOutput,
    GetPostForUpdateInput,
    GetPostInput,
    GetUserPostsInput,
    LikePostInput,
    SearchPostsInput,
    UpdatePostInput,
)
from .ports import BodyPipelinePort, IdentityResolverPort, PostRepoPort, TimePort

logger = logging.getLogger(__name__)

TITLE_TAKEN = "This title is already taken."


# --- Helpers ---


def _load(repo: PostRepoPort, post_id: UUID) -> Post:
    post = repo.get_by_id(post_id)
    if post is None:
        raise NotFound(post_id=post_id)
    return post


def _authorize(identity: Identity, post: Post) -> None:
    if not post.is_owned_by(identity):
        logger.warning("Denied %s on post %s: not the owner", identity.email, post.id)
        raise Forbidden(post.id)


def _validate(title: str, desc: str, body: str, limits: PostLimits | None) -> None:
    result = validate_post_input(title, desc, body, limits)
    if not result.is_valid:
        raise InvalidInput(result.errors)


def _write(repo: PostRepoPort, post: Post, changes: dict[str, Any]) -> Post:
    updated = repo.update(post.id, changes, expected_version=post.version)
    if updated is None:
        logger.warning("Stale write on post %s at version %d", post.id, post.version)
        raise StaleWrite(post.id, post.version)
    return updated


# --- Queries ---


def run_get_posts(*, repo: PostRepoPort) -> list[Post]:
    """All posts, newest first."""
    return repo.find()


def run_get_post(inp: GetPostInput, *, repo: PostRepoPort) -> Post:
    post = repo.get_by_field("slug", inp.slug)
    if post is None:
        raise NotFound(slug=inp.slug)
    return post


def run_search(inp: SearchPostsInput, *, repo: PostRepoPort) -> list[Post]:
    """
    Posts whose title or desc contains the filter, ignoring case.

    The filter is a literal substring. No filter (or an empty one) returns
    every post.
    """
    if not inp.filter:
        return repo.find()
    return repo.find(text=inp.filter)


def run_get_for_update(inp: GetPostForUpdateInput, *, repo: PostRepoPort) -> Post:
    return _load(repo, inp.post_id)


def run_get_user_posts(inp: GetUserPostsInput, *, repo: PostRepoPort) -> list[Post]:
    return repo.find(user=inp.user_id)


# --- Mutations ---


def run_create(
    inp: CreatePostInput,
    *,
    context: Any,
    auth: IdentityResolverPort,
    repo: PostRepoPort,
    pipeline: BodyPipelinePort,
    time: TimePort,
    limits: PostLimits | None = None,
    slug_fallback: str = SLUG_FALLBACK,
) -> Post:
    identity = auth.resolve(context)
    _validate(inp.title, inp.desc, inp.body, limits)

    # Uniqueness is enforced at creation only
    if repo.get_by_field("title", inp.title) is not None:
        raise Conflict("Title is taken", errors={"title": TITLE_TAKEN})

    post = Post(
        title=inp.title,
        slug=derive_slug(inp.title, slug_fallback),
        desc=inp.desc,
        body=inp.body,
        sanitized_html=pipeline.process(inp.body),
        user=identity.id,
        email=identity.email,
        fullname=identity.fullname,
        created_at=time.now_utc(),
    )
    saved = repo.insert(post)
    logger.info("Post %s created by %s (slug=%s)", saved.id, identity.email, saved.slug)
    return saved


def run_update(
    inp: UpdatePostInput,
    *,
    context: Any,
    auth: IdentityResolverPort,
    repo: PostRepoPort,
    pipeline: BodyPipelinePort,
    limits: PostLimits | None = None,
    slug_fallback: str = SLUG_FALLBACK,
) -> Post:
    identity = auth.resolve(context)
    _validate(inp.title, inp.desc, inp.body, limits)

    post = _load(repo, inp.post_id)
    _authorize(identity, post)

    if inp.expected_version is not None and inp.expected_version != post.version:
        raise StaleWrite(post.id, inp.expected_version)

    # Title uniqueness is not re-checked on update
    changes = {
        "title": inp.title,
        "slug": derive_slug(inp.title, slug_fallback),
        "desc": inp.desc,
        "body": inp.body,
        "sanitized_html": pipeline.process(inp.body),
    }
    updated = _write(repo, post, changes)
    logger.info("Post %s updated by %s (version=%d)", updated.id, identity.email, updated.version)
    return updated


def run_delete(
    inp: DeletePostInput,
    *,
    context: Any,
    auth: IdentityResolverPort,
    repo: PostRepoPort,
) -> DeletePostOutput:
    identity = auth.resolve(context)

    post = _load(repo, inp.post_id)
    _authorize(identity, post)

    if not repo.delete(post.id):
        # Removed by someone else between load and delete
        raise NotFound(post_id=post.id)
    logger.info("Post %s deleted by %s", post.id, identity.email)
    return DeletePostOutput(post_id=post.id)


def run_like(
    inp: LikePostInput,
    *,
    context: Any,
    auth: IdentityResolverPort,
    repo: PostRepoPort,
    time: TimePort,
) -> Post:
    """Toggle the caller's like. Two calls in a row restore the original likes."""
    identity = auth.resolve(context)
    post = _load(repo, inp.post_id)

    if post.liked_by(identity.email):
        likes = [like for like in post.likes if like.email != identity.email]
    else:
        likes = [*post.likes, Like(email=identity.email, created_at=time.now_utc())]

    updated = _write(repo, post, {"likes": likes})
    logger.info(
        "Like toggled on post %s by %s (likes=%d)", updated.id, identity.email, len(updated.likes)
    )
    return updated
