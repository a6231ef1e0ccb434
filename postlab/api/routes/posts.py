from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends

from postlab.api.deps import (
    get_clock,
    get_identity_resolver,
    get_pipeline,
    get_post_limits,
    get_post_repo,
    get_request_context,
    get_slug_fallback,
)
from postlab.api.schemas import (
    DeletePostResponse,
    PostCreateRequest,
    PostResponse,
    PostUpdateRequest,
)
from postlab.components.posts import (
    CreatePostInput,
    DeletePostInput,
    GetPostForUpdateInput,
    GetPostInput,
    GetUserPostsInput,
    LikePostInput,
    SearchPostsInput,
    UpdatePostInput,
    run_create,
    run_delete,
    run_get_for_update,
    run_get_post,
    run_get_posts,
    run_get_user_posts,
    run_like,
    run_search,
    run_update,
)

router = APIRouter()


# --- Queries ---


@router.get("", response_model=list[PostResponse])
def list_posts(repo: Any = Depends(get_post_repo)) -> list[PostResponse]:
    """All posts, newest first."""
    return [PostResponse.from_post(p) for p in run_get_posts(repo=repo)]


@router.get("/search", response_model=list[PostResponse])
def search_posts(
    filter: str | None = None,
    repo: Any = Depends(get_post_repo),
) -> list[PostResponse]:
    """Posts whose title or description contains ``filter``."""
    posts = run_search(SearchPostsInput(filter=filter), repo=repo)
    return [PostResponse.from_post(p) for p in posts]


@router.get("/slug/{slug}", response_model=PostResponse)
def get_post(slug: str, repo: Any = Depends(get_post_repo)) -> PostResponse:
    return PostResponse.from_post(run_get_post(GetPostInput(slug=slug), repo=repo))


@router.get("/user/{user_id}", response_model=list[PostResponse])
def get_user_posts(user_id: str, repo: Any = Depends(get_post_repo)) -> list[PostResponse]:
    posts = run_get_user_posts(GetUserPostsInput(user_id=user_id), repo=repo)
    return [PostResponse.from_post(p) for p in posts]


@router.get("/{post_id}", response_model=PostResponse)
def get_post_for_update(post_id: UUID, repo: Any = Depends(get_post_repo)) -> PostResponse:
    post = run_get_for_update(GetPostForUpdateInput(post_id=post_id), repo=repo)
    return PostResponse.from_post(post)


# --- Mutations ---


@router.post("", response_model=PostResponse, status_code=201)
def create_post(
    req: PostCreateRequest,
    context: str | None = Depends(get_request_context),
    auth: Any = Depends(get_identity_resolver),
    repo: Any = Depends(get_post_repo),
    pipeline: Any = Depends(get_pipeline),
    time: Any = Depends(get_clock),
    limits: Any = Depends(get_post_limits),
    slug_fallback: str = Depends(get_slug_fallback),
) -> PostResponse:
    inp = CreatePostInput(title=req.title, desc=req.desc, body=req.body)
    post = run_create(
        inp,
        context=context,
        auth=auth,
        repo=repo,
        pipeline=pipeline,
        time=time,
        limits=limits,
        slug_fallback=slug_fallback,
    )
    return PostResponse.from_post(post)


@router.put("/{post_id}", response_model=PostResponse)
def update_post(
    post_id: UUID,
    req: PostUpdateRequest,
    context: str | None = Depends(get_request_context),
    auth: Any = Depends(get_identity_resolver),
    repo: Any = Depends(get_post_repo),
    pipeline: Any = Depends(get_pipeline),
    limits: Any = Depends(get_post_limits),
    slug_fallback: str = Depends(get_slug_fallback),
) -> PostResponse:
    inp = UpdatePostInput(
        post_id=post_id,
        title=req.title,
        desc=req.desc,
        body=req.body,
        expected_version=req.version,
    )
    post = run_update(
        inp,
        context=context,
        auth=auth,
        repo=repo,
        pipeline=pipeline,
        limits=limits,
        slug_fallback=slug_fallback,
    )
    return PostResponse.from_post(post)


@router.delete("/{post_id}", response_model=DeletePostResponse)
def delete_post(
    post_id: UUID,
    context: str | None = Depends(get_request_context),
    auth: Any = Depends(get_identity_resolver),
    repo: Any = Depends(get_post_repo),
) -> DeletePostResponse:
    result = run_delete(DeletePostInput(post_id=post_id), context=context, auth=auth, repo=repo)
    return DeletePostResponse(id=result.post_id, message=result.message)


@router.post("/{post_id}/like", response_model=PostResponse)
def like_post(
    post_id: UUID,
    context: str | None = Depends(get_request_context),
    auth: Any = Depends(get_identity_resolver),
    repo: Any = Depends(get_post_repo),
    time: Any = Depends(get_clock),
) -> PostResponse:
    """Toggle the caller's like on a post."""
    post = run_like(
        LikePostInput(post_id=post_id), context=context, auth=auth, repo=repo, time=time
    )
    return PostResponse.from_post(post)
