"""
tests/test_company_store.py -- CompanyStore against a real SQLite database.

Covers:
  - create(): returns stored record; duplicate handle or name raises before any INSERT
  - find_all(): no filters, each filter, combined filters, empty result
  - get(): includes jobs; missing handle raises NotFoundError
  - update(): partial update, empty update, immutable fields, renaming onto a
    taken name, two fields naming one column, missing handle
  - remove(): deletes (and cascades jobs); missing handle raises NotFoundError
  - the create -> get -> update -> remove -> get lifecycle
"""

import pytest

from conftest import SEED_COMPANIES, seed
from core.errors import BadRequestError, DuplicateError, EmptyUpdateError, NotFoundError
from listings.models import Company, Job

NEW_COMPANY = Company(
    handle="new",
    name="New",
    description="New Description",
    num_employees=1,
    logo_url="http://new.img",
)


@pytest.fixture
async def seeded(db):
    return await seed(db)


def _spy_queries(db, monkeypatch) -> list[str]:
    """Record every SQL string issued through db.query from now on."""
    issued: list[str] = []
    real_query = db.query

    async def spy(sql, params=()):
        issued.append(sql)
        return await real_query(sql, params)

    monkeypatch.setattr(db, "query", spy)
    return issued


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------


async def test_create(companies):
    """create() returns the record exactly as get() later reads it."""
    company = await companies.create(NEW_COMPANY)
    assert company == NEW_COMPANY
    assert await companies.get("new") == NEW_COMPANY


async def test_create_duplicate_raises_before_insert(companies, db, monkeypatch):
    """A taken handle is rejected by the lookup alone; no INSERT is attempted."""
    await companies.create(NEW_COMPANY)
    issued = _spy_queries(db, monkeypatch)

    with pytest.raises(DuplicateError, match="Duplicate company: new"):
        await companies.create(NEW_COMPANY)
    assert len(issued) == 1
    assert not any("INSERT" in sql for sql in issued)


async def test_create_duplicate_name_raises_before_insert(companies, db, monkeypatch, seeded):
    """A new handle with a taken name is a DuplicateError, not a constraint failure."""
    issued = _spy_queries(db, monkeypatch)

    with pytest.raises(DuplicateError, match="Duplicate company name: C1"):
        await companies.create(Company(handle="other", name="C1"))
    assert not any("INSERT" in sql for sql in issued)
    assert [c.handle for c in await companies.find_all()] == ["c1", "c2", "c3"]


async def test_duplicate_is_a_bad_request(companies):
    """DuplicateError is a BadRequestError, so routes answer 400."""
    await companies.create(NEW_COMPANY)
    with pytest.raises(BadRequestError):
        await companies.create(NEW_COMPANY)


# ---------------------------------------------------------------------------
# find_all
# ---------------------------------------------------------------------------


async def test_find_all_no_filter(companies, seeded):
    """With no filters every company comes back, ordered by name."""
    result = await companies.find_all()
    assert [c.handle for c in result] == ["c1", "c2", "c3"]
    assert result[0] == SEED_COMPANIES[0]


async def test_find_all_name_like_is_case_insensitive(companies, seeded):
    """name_like matches a substring regardless of case."""
    result = await companies.find_all(name_like="c1")
    assert [c.handle for c in result] == ["c1"]


async def test_find_all_min_employees(companies, seeded):
    """min_employees is an inclusive lower bound."""
    result = await companies.find_all(min_employees=2)
    assert [c.handle for c in result] == ["c2", "c3"]


async def test_find_all_max_employees(companies, seeded):
    """max_employees is an inclusive upper bound."""
    result = await companies.find_all(max_employees=2)
    assert [c.handle for c in result] == ["c1", "c2"]


async def test_find_all_all_filters(companies, seeded):
    """All three filters combine with AND."""
    result = await companies.find_all(name_like="C", min_employees=2, max_employees=2)
    assert [c.handle for c in result] == ["c2"]


async def test_find_all_min_above_max_is_empty(companies, seeded):
    """An inverted range is not an error at the store level; it matches nothing."""
    assert await companies.find_all(min_employees=3, max_employees=1) == []


async def test_find_all_no_match(companies, seeded):
    """A filter nothing matches returns an empty list."""
    assert await companies.find_all(name_like="nope") == []


# ---------------------------------------------------------------------------
# get
# ---------------------------------------------------------------------------


async def test_get_includes_jobs(companies, seeded):
    """get() attaches the company's jobs ordered by id."""
    company = await companies.get("c1")
    assert company.name == "C1"
    assert [j.title for j in company.jobs] == ["J1", "J2", "J3", "J4"]
    assert company.jobs[0].equity == pytest.approx(0.1)

    assert (await companies.get("c2")).jobs == []


async def test_get_not_found(companies):
    """get() on a missing handle raises NotFoundError."""
    with pytest.raises(NotFoundError):
        await companies.get("nope")


# ---------------------------------------------------------------------------
# update
# ---------------------------------------------------------------------------


async def test_update_full(companies, seeded):
    """Every updatable field can change in one call."""
    data = {"name": "New", "description": "New Description", "numEmployees": 10, "logoUrl": "http://new.img"}
    company = await companies.update("c1", data)
    assert company == Company(
        handle="c1",
        name="New",
        description="New Description",
        num_employees=10,
        logo_url="http://new.img",
    )


async def test_update_null_fields(companies, seeded):
    """Nullable columns can be cleared without touching the rest."""
    company = await companies.update("c1", {"numEmployees": None, "logoUrl": None})
    assert company.num_employees is None
    assert company.logo_url is None
    assert company.name == "C1"


async def test_update_accepts_column_names(companies, seeded):
    """Column names work as keys alongside the public camelCase names."""
    company = await companies.update("c2", {"num_employees": 99})
    assert company.num_employees == 99


async def test_update_same_column_twice_rejected(companies, seeded):
    """A public name and its column name together would assign one column twice."""
    with pytest.raises(BadRequestError):
        await companies.update("c1", {"numEmployees": 1, "num_employees": 2})
    assert (await companies.get("c1")).num_employees == 1


async def test_update_rename_onto_taken_name(companies, seeded):
    """Renaming to another company's name raises DuplicateError."""
    with pytest.raises(DuplicateError, match="Duplicate company name: C1"):
        await companies.update("c2", {"name": "C1"})
    assert (await companies.get("c2")).name == "C2"


async def test_update_keeps_own_name(companies, seeded):
    """Setting a company's name to its current value is not a duplicate."""
    company = await companies.update("c1", {"name": "C1", "numEmployees": 5})
    assert company.name == "C1"
    assert company.num_employees == 5


async def test_update_not_found(companies):
    """update() on a missing handle raises NotFoundError."""
    with pytest.raises(NotFoundError):
        await companies.update("nope", {"name": "test"})


async def test_update_empty(companies, seeded):
    """An empty update raises EmptyUpdateError."""
    with pytest.raises(EmptyUpdateError):
        await companies.update("c1", {})


async def test_update_handle_rejected(companies, seeded):
    """The handle is not an updatable field."""
    with pytest.raises(BadRequestError):
        await companies.update("c1", {"handle": "c9"})


# ---------------------------------------------------------------------------
# remove
# ---------------------------------------------------------------------------


async def test_remove(companies, seeded):
    """A removed company can no longer be fetched."""
    await companies.remove("c1")
    with pytest.raises(NotFoundError):
        await companies.get("c1")


async def test_remove_cascades_jobs(companies, jobs, seeded):
    """Removing a company removes its jobs."""
    await companies.remove("c1")
    assert await jobs.find_all() == []


async def test_remove_not_found(companies):
    """remove() on a missing handle raises NotFoundError."""
    with pytest.raises(NotFoundError):
        await companies.remove("nope")


# ---------------------------------------------------------------------------
# lifecycle
# ---------------------------------------------------------------------------


async def test_lifecycle(companies):
    """create, get, update and remove work end to end on one company."""
    ibm = Company(handle="ibm", name="IBM", num_employees=1000)
    await companies.create(ibm)

    fetched = await companies.get("ibm")
    assert fetched.name == "IBM"
    assert fetched.num_employees == 1000

    updated = await companies.update("ibm", {"numEmployees": 2000})
    assert updated == Company(handle="ibm", name="IBM", description="", num_employees=2000, logo_url=None)

    await companies.remove("ibm")
    with pytest.raises(NotFoundError):
        await companies.get("ibm")


async def test_jobs_survive_other_company_removal(companies, jobs, seeded):
    """The cascade only removes jobs belonging to the removed company."""
    await jobs.create(Job(title="Other", company_handle="c2"))
    await companies.remove("c2")
    assert len(await jobs.find_all()) == 4
