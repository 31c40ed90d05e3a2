"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, almost no logic). Mirrors the
approach in listings/models.py -- dataclasses own domain shape; stores and
routes do the work.

Layer rule: no imports from api/ or listings/.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Identity:
    """Verified claims about the requester for the current request.

    Built by auth.tokens.verify() from a signed token and stored on
    request.state.user by the authentication middleware. Never persisted.

    username and is_admin are required claims; issued_at mirrors the JWT
    "iat" claim when present. Every other claim in the token (e.g. "exp")
    is kept verbatim in extra so nothing the signer encoded is lost.
    """

    username: str
    is_admin: bool
    issued_at: int | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def claims(self) -> dict[str, Any]:
        """Return the claims in their wire form ({"username", "isAdmin", "iat", ...})."""
        out: dict[str, Any] = {"username": self.username, "isAdmin": self.is_admin}
        if self.issued_at is not None:
            out["iat"] = self.issued_at
        out.update(self.extra)
        return out


@dataclass
class User:
    """A registered Jobly user.

    hashed_password is only populated when the store needs it for
    authentication; it is never serialized to API responses. jobs holds the
    ids of jobs the user has applied to and is filled in by UserStore.get().
    """

    username: str
    first_name: str
    last_name: str
    email: str
    is_admin: bool = False
    hashed_password: str | None = None
    jobs: list[int] = field(default_factory=list)
