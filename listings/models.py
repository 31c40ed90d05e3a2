"""
listings/models.py -- Domain dataclasses for companies and their job postings.

These are pure data containers with zero logic. Query construction and
not-found/duplicate handling live in listings/store.py.

id is None on a Job before the record is written to the database.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Company:
    """A company that posts jobs.

    handle is the unique, URL-safe key (e.g. "ibm"). jobs is only filled in
    by CompanyStore.get(); list queries leave it empty.
    """

    handle: str
    name: str
    description: str = ""
    num_employees: Optional[int] = None
    logo_url: Optional[str] = None
    jobs: list["Job"] = field(default_factory=list)


@dataclass
class Job:
    """A job posting owned by a company.

    equity is a fraction between 0 and 1. company is only filled in by
    JobStore.get().
    """

    title: str
    company_handle: str
    salary: Optional[int] = None
    equity: Optional[float] = None
    id: Optional[int] = None
    company: Optional[Company] = None
