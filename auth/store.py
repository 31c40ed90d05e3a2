"""
auth/store.py -- Data access for Jobly users and their job applications.

Pattern: Repository + Data Mapper (same as listings/store.py).
UserStore is the repository; _row_to_user is the mapper. Route code never
touches SQL directly.

Security:
  All queries use bound parameters. No f-strings with values in SQL.
  Passwords are stored as bcrypt hashes only; the hash never leaves this
  module except inside User.hashed_password, which API models do not expose.
  authenticate() equalizes timing between unknown usernames and wrong
  passwords by always running one bcrypt check.

Layer rule: no imports from api/ or listings/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from auth.models import User
from auth.tokens import dummy_hash, hash_password, verify_password
from core.db import Database
from core.errors import BadRequestError, DuplicateError, NotFoundError, UnauthorizedError
from core.sql import placeholder, sql_for_partial_update

logger = logging.getLogger("jobly.auth")

_USER_COLUMNS = "username, first_name, last_name, email, is_admin"

_USER_FIELD_COLUMNS: dict[str, str] = {
    "firstName": "first_name",
    "lastName": "last_name",
    "isAdmin": "is_admin",
}
_USER_UPDATABLE = {"first_name", "last_name", "email", "is_admin", "password"}


class UserStore:
    """Repository for User records.

    Usage:
        users = UserStore(db)
        await users.register(User(username="u1", first_name="U", last_name="One", email="u1@x.com"), "pw")
        user = await users.authenticate("u1", "pw")
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    async def authenticate(self, username: str, password: str) -> User:
        """Return the user if username/password match.

        Raises UnauthorizedError with the same message for an unknown
        username and a wrong password.
        """
        rows = await self.db.query(
            f"SELECT {_USER_COLUMNS}, password FROM users WHERE username = $1",
            [username],
        )
        if not rows:
            # Equalize timing -- do NOT return early before running bcrypt
            verify_password(password, dummy_hash())
            raise UnauthorizedError("Invalid username/password")

        user = _row_to_user(rows[0])
        if not verify_password(password, rows[0]["password"]):
            raise UnauthorizedError("Invalid username/password")
        return user

    async def register(self, user: User, password: str) -> User:
        """Insert a new user with a freshly hashed password.

        Raises DuplicateError if the username is already taken.
        """
        existing = await self.db.query("SELECT username FROM users WHERE username = $1", [user.username])
        if existing:
            raise DuplicateError(f"Duplicate username: {user.username}")

        rows = await self.db.query(
            f"""
            INSERT INTO users (username, password, first_name, last_name, email, is_admin)
            VALUES ($1, $2, $3, $4, $5, $6)
            RETURNING {_USER_COLUMNS}
            """,
            [
                user.username,
                hash_password(password),
                user.first_name,
                user.last_name,
                user.email,
                bool(user.is_admin),
            ],
        )
        logger.info("Registered user %s (admin=%s)", user.username, bool(user.is_admin))
        return _row_to_user(rows[0])

    async def find_all(self) -> list[User]:
        """Return all users ordered by username."""
        rows = await self.db.query(f"SELECT {_USER_COLUMNS} FROM users ORDER BY username")
        return [_row_to_user(r) for r in rows]

    async def get(self, username: str) -> User:
        """Return one user with the ids of the jobs they applied to."""
        rows = await self.db.query(f"SELECT {_USER_COLUMNS} FROM users WHERE username = $1", [username])
        if not rows:
            raise NotFoundError(f"No user: {username}")
        user = _row_to_user(rows[0])

        applied = await self.db.query(
            "SELECT job_id FROM applications WHERE username = $1 ORDER BY job_id",
            [username],
        )
        user.jobs = [r["job_id"] for r in applied]
        return user

    async def update(self, username: str, data: Mapping[str, Any]) -> User:
        """Partially update a user; a new password is hashed before storage.

        data may contain firstName, lastName, email, isAdmin, password (or
        their column names). Username cannot be changed.
        """
        fields = dict(data)
        for key in fields:
            if _USER_FIELD_COLUMNS.get(key, key) not in _USER_UPDATABLE:
                raise BadRequestError(f"Cannot update field: {key}")
        if "password" in fields:
            if not fields["password"]:
                raise BadRequestError("Password may not be empty")
            fields["password"] = hash_password(fields["password"])

        set_clause = sql_for_partial_update(fields, _USER_FIELD_COLUMNS)
        username_idx = placeholder(len(set_clause.params) + 1)
        rows = await self.db.query(
            f"""
            UPDATE users
            SET {set_clause.text}
            WHERE username = {username_idx}
            RETURNING {_USER_COLUMNS}
            """,
            [*set_clause.params, username],
        )
        if not rows:
            raise NotFoundError(f"No user: {username}")
        return _row_to_user(rows[0])

    async def remove(self, username: str) -> None:
        rows = await self.db.query("DELETE FROM users WHERE username = $1 RETURNING username", [username])
        if not rows:
            raise NotFoundError(f"No user: {username}")
        logger.info("Removed user %s", username)

    async def apply_to_job(self, username: str, job_id: int) -> None:
        """Record that username applied to job_id.

        Raises NotFoundError if either the job or the user does not exist,
        DuplicateError if the application was already recorded.
        """
        if not await self.db.query("SELECT id FROM jobs WHERE id = $1", [job_id]):
            raise NotFoundError(f"No job: {job_id}")
        if not await self.db.query("SELECT username FROM users WHERE username = $1", [username]):
            raise NotFoundError(f"No user: {username}")
        if await self.db.query(
            "SELECT job_id FROM applications WHERE username = $1 AND job_id = $2",
            [username, job_id],
        ):
            raise DuplicateError(f"Already applied: {username} -> {job_id}")

        await self.db.query(
            "INSERT INTO applications (username, job_id) VALUES ($1, $2)",
            [username, job_id],
        )


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row: Mapping[str, Any]) -> User:
    return User(
        username=row["username"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        email=row["email"],
        is_admin=bool(row["is_admin"]),
    )
