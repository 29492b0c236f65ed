"""ABOUTME: User domain model for the user API
ABOUTME: Plain Python object mapped imperatively to the users table"""

from datetime import UTC, datetime
from typing import Any


class User:
    """A person registered with the service, identified by a server-assigned integer id."""

    def __init__(
        self,
        name: str,
        email: str,
        bio: str | None = None,
        user_id: int | None = None,
        created_at: datetime | None = None,
    ):
        self.id = user_id
        self.name = name
        self.email = email
        self.bio = bio
        self.created_at = created_at or datetime.now(UTC)

    def update_profile(self, name: str, email: str, bio: str | None) -> None:
        self.name = name
        self.email = email
        self.bio = bio

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "bio": self.bio,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, User):  # pragma: no cover
            return False
        if self.id is None or other.id is None:
            return self is other
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id) if self.id is not None else id(self)

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"

    def create_detached_copy(self) -> "User":
        """Create a detached copy of this user for use outside SQLAlchemy sessions"""
        return User(
            name=self.name,
            email=self.email,
            bio=self.bio,
            user_id=self.id,
            created_at=self.created_at,
        )
