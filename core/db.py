"""
core/db.py -- Schema and async query executor for the Jobly database.

Uses SQLAlchemy Core (not ORM) with the asyncio extension. Stores build SQL
text with positional placeholders ($1, $2, ...) via core/sql.py and hand it
to Database.query(), which rebinds the placeholders to SQLAlchemy named
binds (:p1, :p2, ...) so the same text runs on SQLite (aiosqlite) and
PostgreSQL (asyncpg) alike.

Each query() call awaits the driver, so a request handler suspends on I/O
without blocking the event loop. Every call runs in its own transaction
(engine.begin()) -- each store operation is a single atomic statement.

Security: all values are bound parameters. Callers never interpolate values
into SQL text.

Usage:
    db = Database("sqlite+aiosqlite:///jobly.db")
    await db.connect()                       # creates missing tables
    rows = await db.query("SELECT handle FROM companies WHERE handle = $1", ["ibm"])
    await db.close()
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    event,
    text,
)
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

logger = logging.getLogger("jobly.store")

_POSITIONAL = re.compile(r"\$(\d+)")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

companies = Table(
    "companies",
    metadata,
    Column("handle", String(25), primary_key=True),
    Column("name", Text, nullable=False, unique=True),
    Column("description", Text, nullable=False, server_default=""),
    Column("num_employees", Integer),
    Column("logo_url", Text),
    CheckConstraint("num_employees >= 0", name="ck_companies_num_employees"),
)

jobs = Table(
    "jobs",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", Text, nullable=False),
    Column("salary", Integer),
    Column("equity", Float),
    Column(
        "company_handle",
        String(25),
        ForeignKey("companies.handle", ondelete="CASCADE"),
        nullable=False,
    ),
    CheckConstraint("salary >= 0", name="ck_jobs_salary"),
    CheckConstraint("equity <= 1.0", name="ck_jobs_equity"),
)

users = Table(
    "users",
    metadata,
    Column("username", String(25), primary_key=True),
    Column("password", Text, nullable=False),  # bcrypt hash
    Column("first_name", Text, nullable=False),
    Column("last_name", Text, nullable=False),
    Column("email", Text, nullable=False),
    Column("is_admin", Boolean, nullable=False, server_default="0"),
)

applications = Table(
    "applications",
    metadata,
    Column("username", String(25), ForeignKey("users.username", ondelete="CASCADE"), primary_key=True),
    Column("job_id", Integer, ForeignKey("jobs.id", ondelete="CASCADE"), primary_key=True),
)


# ---------------------------------------------------------------------------
# SQLite pragmas
# ---------------------------------------------------------------------------


def _set_sqlite_pragmas(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode and foreign key enforcement.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool. foreign_keys=ON is what makes the
    ON DELETE CASCADE clauses on jobs/applications take effect.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def rebind(sql: str, params: Sequence[Any] = ()) -> tuple[Any, dict[str, Any]]:
    """Translate $N placeholders into a SQLAlchemy text() clause and bind dict."""
    stmt = text(_POSITIONAL.sub(lambda m: f":p{m.group(1)}", sql))
    binds = {f"p{idx}": value for idx, value in enumerate(params, start=1)}
    return stmt, binds


# ---------------------------------------------------------------------------
# Executor
# ---------------------------------------------------------------------------


class Database:
    """Thin async wrapper around an AsyncEngine.

    One instance lives on app.state.db for the lifetime of the server and is
    shared by every store. It holds no per-request state.
    """

    def __init__(self, db_url: str) -> None:
        self.url = db_url
        self.engine: AsyncEngine = create_async_engine(db_url)
        if db_url.startswith("sqlite"):
            event.listen(self.engine.sync_engine, "connect", _set_sqlite_pragmas)

    async def connect(self) -> None:
        """Create any missing tables. Safe to call on every startup."""
        async with self.engine.begin() as conn:
            await conn.run_sync(metadata.create_all)

    async def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """Run one statement with positional parameters and return its rows as dicts.

        Statements that return no rows (plain INSERT/UPDATE/DELETE without
        RETURNING) yield an empty list.
        """
        stmt, binds = rebind(sql, params)
        logger.debug("query %s params=%d", " ".join(sql.split()), len(binds))
        async with self.engine.begin() as conn:
            result = await conn.execute(stmt, binds)
            if not result.returns_rows:
                return []
            return [dict(row) for row in result.mappings().all()]

    async def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            await self.query("SELECT 1")
        except Exception:
            logger.exception("Database health check failed")
            return False
        return True

    async def close(self) -> None:
        await self.engine.dispose()
