"""
Posts component - Post lifecycle engine.
"""

from .component import (
    TITLE_TAKEN,
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
from .models import (
    DELETE_ACK,
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
from .ports import (
    BodyPipelinePort,
    IdentityResolverPort,
    PostRepoPort,
    TimePort,
)

__all__ = [
    # Entry points
    "run_create",
    "run_delete",
    "run_get_for_update",
    "run_get_post",
    "run_get_posts",
    "run_get_user_posts",
    "run_like",
    "run_search",
    "run_update",
    # Input models
    "CreatePostInput",
    "DeletePostInput",
    "GetPostForUpdateInput",
    "GetPostInput",
    "GetUserPostsInput",
    "LikePostInput",
    "SearchPostsInput",
    "UpdatePostInput",
    # Output models
    "DeletePostOutput",
    "DELETE_ACK",
    "TITLE_TAKEN",
    # Ports
    "BodyPipelinePort",
    "IdentityResolverPort",
    "PostRepoPort",
    "TimePort",
]
