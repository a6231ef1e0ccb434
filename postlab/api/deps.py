import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from postlab.adapters.auth.jwt_identity import JWTIdentityResolver
from postlab.adapters.clock import SystemClock
from postlab.adapters.sqlite.repos import SQLitePostRepo
from postlab.api.auth_utils import DEV_SECRET_KEY
from postlab.components.render import ContentPipeline, create_pipeline
from postlab.domain.validators import PostLimits
from postlab.rules.loader import load_rules
from postlab.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        data_dir = os.environ.get("POSTLAB_DATA_DIR", "./data")
        self.base_dir = Path(os.getcwd())
        self.db_path = f"{data_dir}/posts.db"
        self.rules_path = Path(os.environ.get("POSTLAB_RULES_PATH", self.base_dir / "rules.yaml"))
        self.secret_key = os.environ.get("POSTLAB_SECRET_KEY", DEV_SECRET_KEY)
        origins = os.environ.get("POSTLAB_CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")
        self.cors_origins = [o.strip() for o in origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def _rules_at(path: Path) -> Rules:
    return load_rules(path)


def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return _rules_at(settings.rules_path)


# --- Content pipeline (built once per rules file, shared by reference) ---
@lru_cache
def _pipeline_at(path: Path) -> ContentPipeline:
    return create_pipeline(_rules_at(path).sanitizer)


def get_pipeline(settings: Settings = Depends(get_settings)) -> ContentPipeline:
    return _pipeline_at(settings.rules_path)


def get_post_limits(rules: Rules = Depends(get_rules)) -> PostLimits:
    return PostLimits(
        title_max=rules.posts.title.max,
        desc_max=rules.posts.desc.max,
        body_max=rules.posts.body.max,
    )


def get_slug_fallback(rules: Rules = Depends(get_rules)) -> str:
    return rules.posts.slug_fallback


# --- Repos ---
def get_post_repo(settings: Settings = Depends(get_settings)) -> SQLitePostRepo:
    return SQLitePostRepo(settings.db_path)


# --- Clock ---
_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


# --- Auth ---
bearer_scheme = HTTPBearer(auto_error=False)


def get_identity_resolver(settings: Settings = Depends(get_settings)) -> JWTIdentityResolver:
    return JWTIdentityResolver(secret_key=settings.secret_key)


def get_request_context(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> str | None:
    """
    The caller's bearer token, or None.

    Resolution into an identity is left to the engine so every mutation
    fails closed in one place.
    """
    # HttpOnly cookie wins over the Authorization header
    cookie = request.cookies.get("access_token", "")
    scheme, _, token = cookie.partition(" ")
    if scheme == "Bearer" and token:
        return token
    return credentials.credentials if credentials else None
