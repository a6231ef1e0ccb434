import json
import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from postlab.domain.entities import Like, Post
from postlab.domain.errors import StoreFailure

logger = logging.getLogger(__name__)

# Post field -> column. likes is stored as JSON.
COLUMNS = {
    "title": "title",
    "slug": "slug",
    "desc": "description",
    "body": "body",
    "sanitized_html": "sanitized_html",
    "likes": "likes_json",
}

LOOKUP_COLUMNS = {"title": "title", "slug": "slug"}


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def _contains_ci(haystack: str | None, needle: str | None) -> bool:
    if haystack is None or needle is None:
        return False
    return needle.casefold() in haystack.casefold()


def _to_iso(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat()


def _likes_to_json(likes: list[Like]) -> str:
    return json.dumps(
        [{"email": like.email, "created_at": _to_iso(like.created_at)} for like in likes]
    )


def _row_to_post(row: dict[str, Any]) -> Post:
    likes = [
        Like(email=item["email"], created_at=datetime.fromisoformat(item["created_at"]))
        for item in json.loads(row["likes_json"] or "[]")
    ]
    return Post(
        id=UUID(row["id"]),
        title=row["title"],
        slug=row["slug"],
        desc=row["description"],
        body=row["body"],
        sanitized_html=row["sanitized_html"],
        user=row["user_id"],
        email=row["email"],
        fullname=row["fullname"],
        likes=likes,
        created_at=datetime.fromisoformat(row["created_at"]),
        version=row["version"],
    )


class SQLitePostRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        # Python-side casefold matching, so non-ASCII text compares like the in-memory store
        conn.create_function("contains_ci", 2, _contains_ci, deterministic=True)
        return conn

    @contextmanager
    def _connection(self, operation: str) -> Iterator[sqlite3.Connection]:
        conn: sqlite3.Connection | None = None
        try:
            conn = self._get_conn()
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            if conn is not None:
                conn.rollback()
            logger.error("SQLite error during %s: %s", operation, e)
            raise StoreFailure(operation) from e
        except Exception:
            if conn is not None:
                conn.rollback()
            raise
        finally:
            if conn is not None:
                conn.close()

    def find(self, *, user: str | None = None, text: str | None = None) -> list[Post]:
        clauses: list[str] = []
        params: list[Any] = []
        if user is not None:
            clauses.append("user_id = ?")
            params.append(user)
        if text:
            clauses.append("(contains_ci(title, ?) OR contains_ci(description, ?))")
            params.extend([text, text])

        sql = "SELECT * FROM posts"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY created_at DESC"

        with self._connection("find") as conn:
            rows = conn.execute(sql, params).fetchall()
        return [_row_to_post(row) for row in rows]

    def get_by_id(self, post_id: UUID) -> Post | None:
        with self._connection("get_by_id") as conn:
            row = conn.execute("SELECT * FROM posts WHERE id = ?", (str(post_id),)).fetchone()
        return _row_to_post(row) if row else None

    def get_by_field(self, field: str, value: str) -> Post | None:
        column = LOOKUP_COLUMNS.get(field)
        if column is None:
            raise ValueError(f"Not a unique lookup field: {field}")

        with self._connection("get_by_field") as conn:
            row = conn.execute(
                f"SELECT * FROM posts WHERE {column} = ? ORDER BY created_at ASC LIMIT 1",
                (value,),
            ).fetchone()
        return _row_to_post(row) if row else None

    def insert(self, post: Post) -> Post:
        with self._connection("insert") as conn:
            conn.execute(
                """
                INSERT INTO posts (
                    id, title, slug, description, body, sanitized_html,
                    user_id, email, fullname, likes_json, created_at, version
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(post.id),
                    post.title,
                    post.slug,
                    post.desc,
                    post.body,
                    post.sanitized_html,
                    post.user,
                    post.email,
                    post.fullname,
                    _likes_to_json(post.likes),
                    _to_iso(post.created_at),
                    post.version,
                ),
            )
        return post

    def update(self, post_id: UUID, changes: dict[str, Any], expected_version: int) -> Post | None:
        unknown = set(changes) - set(COLUMNS)
        if unknown:
            raise ValueError(f"Fields not updatable: {sorted(unknown)}")

        assignments: list[str] = []
        params: list[Any] = []
        for name, value in changes.items():
            assignments.append(f"{COLUMNS[name]} = ?")
            params.append(_likes_to_json(value) if name == "likes" else value)
        assignments.append("version = version + 1")

        with self._connection("update") as conn:
            cursor = conn.execute(
                f"UPDATE posts SET {', '.join(assignments)} WHERE id = ? AND version = ?",
                (*params, str(post_id), expected_version),
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute("SELECT * FROM posts WHERE id = ?", (str(post_id),)).fetchone()
        return _row_to_post(row)

    def delete(self, post_id: UUID) -> bool:
        with self._connection("delete") as conn:
            cursor = conn.execute("DELETE FROM posts WHERE id = ?", (str(post_id),))
            deleted = cursor.rowcount > 0
        return deleted
