"""
tests/conftest.py -- Shared test fixtures for the Jobly test suite.

This module provides:
  - db:        a fresh file-backed SQLite Database per test (async)
  - companies / jobs / users: stores bound to that Database
  - client:    TestClient on the real app with a patched lifespan and a
               seeded database, plus ready-made admin and user tokens

Design: each test gets its own SQLite file under tmp_path, so tests never
see each other's rows and no cleanup is needed. A file (not :memory:) is
used because aiosqlite opens a connection per pooled checkout and plain
:memory: databases are per-connection.

The DEBUG and BCRYPT_ROUNDS env vars must be set before any auth/core
import so get_settings() auto-generates SECRET_KEY in dev mode and bcrypt
runs at its cheapest cost factor.
"""

from __future__ import annotations

import os
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

# CRITICAL: set before any auth/core import (see module docstring).
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from api.limiter import limiter
from api.main import app
from auth.models import User
from auth.store import UserStore
from auth.tokens import create_token
from core.db import Database
from listings.models import Company, Job
from listings.store import CompanyStore, JobStore

# ---------------------------------------------------------------------------
# Seed data shared by store and API tests
# ---------------------------------------------------------------------------

SEED_COMPANIES = [
    Company(handle="c1", name="C1", description="Desc1", num_employees=1, logo_url="http://c1.img"),
    Company(handle="c2", name="C2", description="Desc2", num_employees=2, logo_url="http://c2.img"),
    Company(handle="c3", name="C3", description="Desc3", num_employees=3, logo_url="http://c3.img"),
]

SEED_USERS = [
    (User(username="u1", first_name="U1F", last_name="U1L", email="user1@user.com"), "password1"),
    (User(username="u2", first_name="U2F", last_name="U2L", email="user2@user.com"), "password2"),
    (User(username="admin", first_name="AdF", last_name="AdL", email="admin@user.com", is_admin=True), "adminpass"),
]


def _db_url(path) -> str:
    return f"sqlite+aiosqlite:///{path}"


async def seed(db: Database) -> list[int]:
    """Insert the seed companies, users, and jobs. Returns the job ids."""
    companies = CompanyStore(db)
    for c in SEED_COMPANIES:
        await companies.create(c)

    users = UserStore(db)
    for user, password in SEED_USERS:
        await users.register(user, password)

    jobs = JobStore(db)
    job_ids = []
    for title, salary, equity in [("J1", 1, 0.1), ("J2", 2, 0.2), ("J3", 3, 0.0), ("J4", None, None)]:
        job = await jobs.create(Job(title=title, salary=salary, equity=equity, company_handle="c1"))
        job_ids.append(job.id)
    return job_ids


# ---------------------------------------------------------------------------
# Store fixtures
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def db(tmp_path) -> AsyncIterator[Database]:
    database = Database(_db_url(tmp_path / "jobly_test.db"))
    await database.connect()
    yield database
    await database.close()


@pytest.fixture
def companies(db: Database) -> CompanyStore:
    return CompanyStore(db)


@pytest.fixture
def jobs(db: Database) -> JobStore:
    return JobStore(db)


@pytest.fixture
def users(db: Database) -> UserStore:
    return UserStore(db)


# ---------------------------------------------------------------------------
# API fixture
# ---------------------------------------------------------------------------


@dataclass
class ApiContext:
    client: TestClient
    admin_token: str
    u1_token: str
    job_ids: list[int]

    def auth(self, token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}


def _patch_lifespan(db_url: str, job_ids: list[int]):
    """Return an async context manager that replaces the real lifespan.

    Builds the Database inside the TestClient's event loop, seeds it, and
    wires the stores into app.state exactly like the production lifespan.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        database = Database(db_url)
        await database.connect()
        job_ids.extend(await seed(database))
        app.state.db = database
        app.state.companies = CompanyStore(database)
        app.state.jobs = JobStore(database)
        app.state.users = UserStore(database)
        yield
        await database.close()

    return test_lifespan


@pytest.fixture
def client(tmp_path) -> Iterator[ApiContext]:
    """Yield an ApiContext for integration tests against a seeded database."""
    job_ids: list[int] = []
    app.router.lifespan_context = _patch_lifespan(_db_url(tmp_path / "jobly_api.db"), job_ids)
    limiter.reset()

    admin_user = next(u for u, _ in SEED_USERS if u.is_admin)
    u1 = next(u for u, _ in SEED_USERS if u.username == "u1")

    with TestClient(app, raise_server_exceptions=True) as test_client:
        yield ApiContext(
            client=test_client,
            admin_token=create_token(admin_user),
            u1_token=create_token(u1),
            job_ids=job_ids,
        )
