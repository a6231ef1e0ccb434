"""
Schema migrations for the post store.

Migrations are ``NNN_name.sql`` files applied in filename order. Each file
holds its Up script first; everything after a ``-- Down`` marker is the
rollback and is never executed here. Applied filenames are recorded in
``_migrations``.
"""

import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"
DOWN_MARKER = "-- Down"


@dataclass(frozen=True)
class Migration:
    filename: str
    path: Path

    def up_script(self) -> str:
        content = self.path.read_text()
        return content.split(DOWN_MARKER, 1)[0]


class SQLiteMigrator:
    def __init__(self, db_path: str, migrations_dir: str | Path = MIGRATIONS_DIR):
        self.db_path = db_path
        self.migrations_dir = Path(migrations_dir)

    def discover(self) -> list[Migration]:
        """All migration files, in the order they apply."""
        return [Migration(p.name, p) for p in sorted(self.migrations_dir.glob("*.sql"))]

    def pending(self) -> list[Migration]:
        if not Path(self.db_path).exists():
            return self.discover()
        conn = self._open()
        try:
            applied = self._applied(conn)
        finally:
            conn.close()
        return [m for m in self.discover() if m.filename not in applied]

    def run_migrations(self) -> list[str]:
        """Apply all pending migrations. Returns the filenames applied."""
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        applied_now: list[str] = []
        conn = self._open()
        try:
            applied = self._applied(conn)
            for migration in self.discover():
                if migration.filename in applied:
                    continue
                logger.info("Applying migration: %s", migration.filename)
                self._apply(conn, migration)
                applied_now.append(migration.filename)
        finally:
            conn.close()

        logger.info("Schema at %s is current (%d applied).", self.db_path, len(applied_now))
        return applied_now

    def _open(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS _migrations (
                filename TEXT PRIMARY KEY,
                applied_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
            )
            """
        )
        return conn

    def _applied(self, conn: sqlite3.Connection) -> set[str]:
        return {row[0] for row in conn.execute("SELECT filename FROM _migrations")}

    def _apply(self, conn: sqlite3.Connection, migration: Migration) -> None:
        try:
            conn.executescript(migration.up_script())
            conn.execute("INSERT INTO _migrations (filename) VALUES (?)", (migration.filename,))
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise RuntimeError(f"Migration {migration.filename} failed: {e}") from e
