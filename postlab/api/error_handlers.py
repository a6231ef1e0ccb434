"""Error handlers - map post error kinds and request validation to JSON responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from postlab.domain.errors import PostError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_post_error_handler(app)
    _register_validation_error_handler(app)


def _register_post_error_handler(app: FastAPI) -> None:
    @app.exception_handler(PostError)
    async def post_error_handler(request: Request, exc: PostError) -> JSONResponse:
        if exc.http_status >= 500:
            logger.error(
                f"PostError on {request.url.path}: {exc.message}",
                exc_info=exc.__cause__ is not None,
            )
        else:
            logger.info(f"{exc.kind} on {request.url.path}: {exc.message}")
        headers = {"WWW-Authenticate": "Bearer"} if exc.http_status == 401 else None
        return JSONResponse(
            status_code=exc.http_status,
            content={"error": exc.to_response()},
            headers=headers,
        )


def _register_validation_error_handler(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ) -> JSONResponse:
        logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": {
                    "code": "invalid_request",
                    "message": "Invalid request data",
                    "details": [
                        {
                            "field": ".".join(str(loc) for loc in e["loc"]),
                            "message": e["msg"],
                            "type": e["type"],
                        }
                        for e in exc.errors()
                    ],
                },
            },
        )
