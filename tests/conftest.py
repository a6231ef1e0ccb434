import os
from pathlib import Path

import pytest

from postlab.adapters.auth.jwt_identity import JWTIdentityResolver
from postlab.adapters.sqlite.migrator import SQLiteMigrator
from postlab.adapters.sqlite.repos import SQLitePostRepo
from postlab.domain.entities import Identity
from postlab.rules.loader import load_rules

TEST_SECRET = "test-secret"


@pytest.fixture
def rules_path() -> Path:
    # Tests run from the project root
    path = Path("rules.yaml").resolve()
    if not path.exists():
        raise FileNotFoundError(f"Rules not found at {path}")
    return path


@pytest.fixture
def rules(rules_path):
    return load_rules(rules_path)


@pytest.fixture
def test_db_path(tmp_path) -> str:
    """A migrated SQLite database in a temp dir."""
    db_path = os.path.join(str(tmp_path), "data", "posts.db")
    SQLiteMigrator(db_path).run_migrations()
    return db_path


@pytest.fixture
def sqlite_repo(test_db_path) -> SQLitePostRepo:
    return SQLitePostRepo(test_db_path)


@pytest.fixture
def alice() -> Identity:
    return Identity(id="u-alice", email="alice@example.com", fullname="Alice A")


@pytest.fixture
def bob() -> Identity:
    return Identity(id="u-bob", email="bob@example.com", fullname="Bob B")


@pytest.fixture
def resolver() -> JWTIdentityResolver:
    return JWTIdentityResolver(secret_key=TEST_SECRET)
