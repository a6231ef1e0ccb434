from datetime import UTC, datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

# --- Identity ---


class Identity(BaseModel):
    """Caller identity as resolved by the authentication verifier."""

    id: str
    email: str
    fullname: str


# --- Posts ---


class Like(BaseModel):
    email: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class Post(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    title: str
    slug: str
    desc: str
    body: str
    sanitized_html: str

    # Snapshot of the creating identity; email doubles as the ownership token
    user: str
    email: str
    fullname: str

    likes: list[Like] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Optimistic concurrency token, bumped on every write
    version: int = 1

    def liked_by(self, email: str) -> bool:
        return any(like.email == email for like in self.likes)

    def is_owned_by(self, identity: Identity) -> bool:
        return self.email == identity.email
