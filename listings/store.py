"""
listings/store.py -- Data access for companies and jobs.

Pattern: Repository + Data Mapper. CompanyStore and JobStore are the
repositories (one clean interface per entity); the _row_to_* functions are
the mappers that turn raw rows into listings/models.py dataclasses. Route
handlers never touch SQL directly.

Every method is a coroutine that awaits core/db.Database, so a request
suspends on store I/O without blocking other requests.

Query shaping:
  Searches go through core.sql.SearchQuery, so only the filters actually
  supplied become WHERE predicates. Updates go through
  core.sql.sql_for_partial_update, so only the fields supplied are written.

Errors:
  DuplicateError  -- create() with a taken handle or name; update() onto a taken name
  NotFoundError   -- get()/update()/remove() on a missing key
  BadRequestError -- update() naming a field that may not be changed

Security: all values use $N placeholders. No f-strings with values in SQL.

Usage:
    companies = CompanyStore(db)
    await companies.create(Company(handle="ibm", name="IBM", num_employees=1000))
    await companies.find_all(name_like="ib", min_employees=10)
    await companies.update("ibm", {"numEmployees": 2000})
    await companies.remove("ibm")
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

from core.db import Database
from core.errors import BadRequestError, DuplicateError, NotFoundError
from core.sql import SearchQuery, SqlFragment, placeholder, sql_for_partial_update
from listings.models import Company, Job

logger = logging.getLogger("jobly.store")

_COMPANY_COLUMNS = "handle, name, description, num_employees, logo_url"
_JOB_COLUMNS = "id, title, salary, equity, company_handle"

# Public (camelCase) field name -> column name, for names that differ.
_COMPANY_FIELD_COLUMNS: dict[str, str] = {
    "numEmployees": "num_employees",
    "logoUrl": "logo_url",
}
_COMPANY_UPDATABLE = {"name", "description", "num_employees", "logo_url"}

# Jobs keep their id and company for life; only these may change.
_JOB_UPDATABLE = {"title", "salary", "equity"}


def _check_updatable(data: Mapping[str, Any], field_columns: Mapping[str, str], allowed: set[str]) -> None:
    """Reject update fields that do not map onto a mutable column."""
    for key in data:
        if field_columns.get(key, key) not in allowed:
            raise BadRequestError(f"Cannot update field: {key}")


# ---------------------------------------------------------------------------
# Companies
# ---------------------------------------------------------------------------


class CompanyStore:
    def __init__(self, db: Database) -> None:
        self.db = db

    async def create(self, company: Company) -> Company:
        """Insert a company and return it as stored.

        The duplicate check is a separate read before the insert, covering
        both unique keys (handle and name). Two concurrent creates can both
        pass it; the unique constraints are what finally reject the loser.

        Raises DuplicateError if the handle or the name is already taken.
        """
        existing = await self.db.query(
            "SELECT handle, name FROM companies WHERE handle = $1 OR name = $2",
            [company.handle, company.name],
        )
        if any(r["handle"] == company.handle for r in existing):
            raise DuplicateError(f"Duplicate company: {company.handle}")
        if existing:
            raise DuplicateError(f"Duplicate company name: {company.name}")

        rows = await self.db.query(
            f"""
            INSERT INTO companies (handle, name, description, num_employees, logo_url)
            VALUES ($1, $2, $3, $4, $5)
            RETURNING {_COMPANY_COLUMNS}
            """,
            [company.handle, company.name, company.description, company.num_employees, company.logo_url],
        )
        logger.info("Created company %s", company.handle)
        return _row_to_company(rows[0])

    @staticmethod
    def search_query(
        name_like: Optional[str] = None,
        min_employees: Optional[int] = None,
        max_employees: Optional[int] = None,
    ) -> SqlFragment:
        """Build the company search SELECT for the filters supplied.

        Filters are applied in a fixed order -- name, minimum, maximum -- so
        placeholder numbering is stable. An empty name_like is treated as
        absent. min_employees > max_employees is not checked here; it yields
        a valid query that matches nothing.
        """
        q = SearchQuery(f"SELECT {_COMPANY_COLUMNS} FROM companies", order_by="name")
        if name_like:
            q.where("LOWER(name) LIKE LOWER({})", f"%{name_like}%")
        if min_employees is not None:
            q.where("num_employees >= {}", min_employees)
        if max_employees is not None:
            q.where("num_employees <= {}", max_employees)
        return q.build()

    async def find_all(
        self,
        name_like: Optional[str] = None,
        min_employees: Optional[int] = None,
        max_employees: Optional[int] = None,
    ) -> list[Company]:
        """Return companies matching every supplied filter, ordered by name."""
        query = self.search_query(name_like, min_employees, max_employees)
        rows = await self.db.query(query.text, query.params)
        return [_row_to_company(r) for r in rows]

    async def get(self, handle: str) -> Company:
        """Return one company with its jobs. Raises NotFoundError if missing."""
        rows = await self.db.query(f"SELECT {_COMPANY_COLUMNS} FROM companies WHERE handle = $1", [handle])
        if not rows:
            raise NotFoundError(f"No company: {handle}")
        company = _row_to_company(rows[0])

        job_rows = await self.db.query(
            f"SELECT {_JOB_COLUMNS} FROM jobs WHERE company_handle = $1 ORDER BY id",
            [handle],
        )
        company.jobs = [_row_to_job(r) for r in job_rows]
        return company

    async def update(self, handle: str, data: Mapping[str, Any]) -> Company:
        """Partially update a company; only the fields in data change.

        data may use public names (numEmployees, logoUrl) or column names.
        The handle itself cannot be changed.

        Raises EmptyUpdateError for empty data, BadRequestError for a field
        that cannot be updated, DuplicateError for a name another company
        already uses, NotFoundError if no company has this handle.
        """
        _check_updatable(data, _COMPANY_FIELD_COLUMNS, _COMPANY_UPDATABLE)
        set_clause = sql_for_partial_update(data, _COMPANY_FIELD_COLUMNS)
        if data.get("name") is not None:
            taken = await self.db.query(
                "SELECT handle FROM companies WHERE name = $1 AND handle <> $2",
                [data["name"], handle],
            )
            if taken:
                raise DuplicateError(f"Duplicate company name: {data['name']}")
        handle_idx = placeholder(len(set_clause.params) + 1)

        rows = await self.db.query(
            f"""
            UPDATE companies
            SET {set_clause.text}
            WHERE handle = {handle_idx}
            RETURNING {_COMPANY_COLUMNS}
            """,
            [*set_clause.params, handle],
        )
        if not rows:
            raise NotFoundError(f"No company: {handle}")
        return _row_to_company(rows[0])

    async def remove(self, handle: str) -> None:
        """Delete a company (and, by cascade, its jobs). Raises NotFoundError if missing."""
        rows = await self.db.query("DELETE FROM companies WHERE handle = $1 RETURNING handle", [handle])
        if not rows:
            raise NotFoundError(f"No company: {handle}")
        logger.info("Removed company %s", handle)


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------


class JobStore:
    def __init__(self, db: Database) -> None:
        self.db = db

    async def create(self, job: Job) -> Job:
        """Insert a job posting and return it with its assigned id.

        Raises BadRequestError if the owning company does not exist.
        """
        company = await self.db.query("SELECT handle FROM companies WHERE handle = $1", [job.company_handle])
        if not company:
            raise BadRequestError(f"No company: {job.company_handle}")

        rows = await self.db.query(
            f"""
            INSERT INTO jobs (title, salary, equity, company_handle)
            VALUES ($1, $2, $3, $4)
            RETURNING {_JOB_COLUMNS}
            """,
            [job.title, job.salary, job.equity, job.company_handle],
        )
        return _row_to_job(rows[0])

    @staticmethod
    def search_query(
        title: Optional[str] = None,
        min_salary: Optional[int] = None,
        has_equity: Optional[bool] = None,
    ) -> SqlFragment:
        """Build the job search SELECT: title substring, salary floor, non-zero equity."""
        q = SearchQuery(f"SELECT {_JOB_COLUMNS} FROM jobs", order_by="title, id")
        if title:
            q.where("LOWER(title) LIKE LOWER({})", f"%{title}%")
        if min_salary is not None:
            q.where("salary >= {}", min_salary)
        if has_equity:
            q.where_raw("equity > 0")
        return q.build()

    async def find_all(
        self,
        title: Optional[str] = None,
        min_salary: Optional[int] = None,
        has_equity: Optional[bool] = None,
    ) -> list[Job]:
        query = self.search_query(title, min_salary, has_equity)
        rows = await self.db.query(query.text, query.params)
        return [_row_to_job(r) for r in rows]

    async def get(self, job_id: int) -> Job:
        """Return one job with its company. Raises NotFoundError if missing."""
        rows = await self.db.query(f"SELECT {_JOB_COLUMNS} FROM jobs WHERE id = $1", [job_id])
        if not rows:
            raise NotFoundError(f"No job: {job_id}")
        job = _row_to_job(rows[0])

        company_rows = await self.db.query(
            f"SELECT {_COMPANY_COLUMNS} FROM companies WHERE handle = $1",
            [job.company_handle],
        )
        if company_rows:
            job.company = _row_to_company(company_rows[0])
        return job

    async def update(self, job_id: int, data: Mapping[str, Any]) -> Job:
        """Partially update title/salary/equity. Raises NotFoundError if missing."""
        _check_updatable(data, {}, _JOB_UPDATABLE)
        set_clause = sql_for_partial_update(data)
        id_idx = placeholder(len(set_clause.params) + 1)

        rows = await self.db.query(
            f"""
            UPDATE jobs
            SET {set_clause.text}
            WHERE id = {id_idx}
            RETURNING {_JOB_COLUMNS}
            """,
            [*set_clause.params, job_id],
        )
        if not rows:
            raise NotFoundError(f"No job: {job_id}")
        return _row_to_job(rows[0])

    async def remove(self, job_id: int) -> None:
        rows = await self.db.query("DELETE FROM jobs WHERE id = $1 RETURNING id", [job_id])
        if not rows:
            raise NotFoundError(f"No job: {job_id}")


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern -- DB row -> domain dataclass)
# ---------------------------------------------------------------------------


def _row_to_company(row: Mapping[str, Any]) -> Company:
    return Company(
        handle=row["handle"],
        name=row["name"],
        description=row["description"] or "",
        num_employees=row["num_employees"],
        logo_url=row["logo_url"],
    )


def _row_to_job(row: Mapping[str, Any]) -> Job:
    equity = row["equity"]
    return Job(
        id=row["id"],
        title=row["title"],
        salary=row["salary"],
        equity=float(equity) if equity is not None else None,
        company_handle=row["company_handle"],
    )
