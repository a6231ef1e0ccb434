import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from postlab.adapters.sqlite.migrator import SQLiteMigrator
from postlab.api.deps import get_settings
from postlab.api.error_handlers import register_error_handlers
from postlab.api.routes import posts
from postlab.app_shell.config import ConfigError, validate_ops_rules
from postlab.rules.loader import load_rules

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Fail fast: bad rules, missing env or a broken migration stop startup."""
    settings = get_settings()
    try:
        rules = load_rules(settings.rules_path)
        validate_ops_rules(rules)
        applied = SQLiteMigrator(settings.db_path).run_migrations()
    except (FileNotFoundError, ValueError, ConfigError, RuntimeError) as e:
        logger.critical("Startup failed: %s", e)
        sys.exit(1)

    logger.info(
        "postlab %s up: rules %s v%s, db %s (%d migration(s) applied)",
        app.version,
        rules.project.slug,
        rules.project.rules_version,
        settings.db_path,
        len(applied),
    )
    yield


def create_app() -> FastAPI:
    application = FastAPI(
        title="Postlab API",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    register_error_handlers(application)
    application.include_router(posts.router, prefix="/api/posts", tags=["Posts"])

    application.add_middleware(
        CORSMiddleware,
        allow_origins=get_settings().cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Authorization", "Content-Type"],
    )

    @application.get("/health")
    def health_check() -> dict[str, str]:
        return {"status": "ok", "service": "postlab"}

    return application


app = create_app()
