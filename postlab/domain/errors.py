"""
Post error kinds.

Every failure the lifecycle engine reports is one of the PostError
subclasses below. Each carries a stable ``kind`` tag, the HTTP status the API
layer maps it to, and structured context instead of a free-text message.
"""

from __future__ import annotations

from typing import Any


class PostError(Exception):
    """Base class for all post lifecycle errors."""

    kind = "post_error"
    http_status = 500

    def __init__(
        self,
        message: str,
        errors: dict[str, str] | None = None,
        **context: Any,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors or {}
        self.context = context

    def to_response(self) -> dict[str, Any]:
        """Convert to the JSON error body returned by the API."""
        body: dict[str, Any] = {"code": self.kind, "message": self.message}
        if self.errors:
            body["errors"] = dict(self.errors)
        if self.context:
            body["context"] = {key: str(value) for key, value in self.context.items()}
        return body


class Unauthenticated(PostError):
    kind = "unauthenticated"
    http_status = 401

    def __init__(self, reason: str = "Authentication required") -> None:
        super().__init__(reason)


class InvalidInput(PostError):
    kind = "invalid_input"
    http_status = 400

    def __init__(self, errors: dict[str, str]) -> None:
        super().__init__("Errors", errors=errors)


class Conflict(PostError):
    kind = "conflict"
    http_status = 409


class StaleWrite(Conflict):
    """Raised when a read-modify-write lost the race against another writer."""

    kind = "stale_write"

    def __init__(self, post_id: Any, expected_version: int) -> None:
        super().__init__(
            "Post was modified concurrently",
            post_id=post_id,
            expected_version=expected_version,
        )
        self.post_id = post_id
        self.expected_version = expected_version


class NotFound(PostError):
    kind = "not_found"
    http_status = 404

    def __init__(self, message: str = "Post not found", **context: Any) -> None:
        super().__init__(message, **context)


class Forbidden(PostError):
    kind = "forbidden"
    http_status = 403

    def __init__(self, post_id: Any) -> None:
        super().__init__("Action not allowed", post_id=post_id)
        self.post_id = post_id


class StoreFailure(PostError):
    kind = "store_failure"
    http_status = 500

    def __init__(self, operation: str) -> None:
        super().__init__(f"Store failure during {operation}", operation=operation)
        self.operation = operation
