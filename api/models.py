"""
API request and response models for Jobly REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in listings/models.py
and auth/models.py, which own the internal domain representation. Route
handlers map between the two.

Wire format is camelCase (numEmployees, logoUrl, companyHandle, isAdmin).
Every model uses an alias generator so Python code stays snake_case while
JSON in and out is camelCase. Update models reject unknown fields and are
dumped with exclude_unset=True, so only fields the client actually sent
reach the partial update builder. Only nullable columns (numEmployees, logoUrl,
salary, equity) accept an explicit null in an update.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from auth.models import User
from listings.models import Company, Job

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

HANDLE_PATTERN = r"^[a-z0-9][a-z0-9-]*$"
USERNAME_PATTERN = r"^[A-Za-z0-9_.-]+$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

_REQUEST_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    str_strip_whitespace=True,
    extra="forbid",
)
_RESPONSE_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


def _reject_null(value: Any) -> Any:
    # None is only the unset default on update models; an explicit null is invalid.
    if value is None:
        raise ValueError("may not be null")
    return value


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    model_config = _REQUEST_CONFIG

    username: str = Field(min_length=1, max_length=25)
    password: str = Field(min_length=1, max_length=64)


class RegisterRequest(BaseModel):
    """Request body for POST /api/v1/auth/register (self sign-up, never admin)."""

    model_config = _REQUEST_CONFIG

    username: str = Field(min_length=1, max_length=25, pattern=USERNAME_PATTERN)
    password: str = Field(min_length=5, max_length=64)
    first_name: str = Field(min_length=1, max_length=30)
    last_name: str = Field(min_length=1, max_length=30)
    email: str = Field(min_length=6, max_length=60, pattern=EMAIL_PATTERN)


class TokenResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str


# ---------------------------------------------------------------------------
# Companies
# ---------------------------------------------------------------------------


class CompanyCreate(BaseModel):
    model_config = _REQUEST_CONFIG

    handle: str = Field(min_length=1, max_length=25, pattern=HANDLE_PATTERN)
    name: str = Field(min_length=1)
    description: str = ""
    num_employees: Optional[int] = Field(default=None, ge=0)
    logo_url: Optional[str] = Field(default=None, max_length=2048)

    def to_domain(self) -> Company:
        return Company(
            handle=self.handle,
            name=self.name,
            description=self.description,
            num_employees=self.num_employees,
            logo_url=self.logo_url,
        )


class CompanyUpdate(BaseModel):
    """Request body for PATCH /api/v1/companies/{handle}. Handle is immutable."""

    model_config = _REQUEST_CONFIG

    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    num_employees: Optional[int] = Field(default=None, ge=0)
    logo_url: Optional[str] = Field(default=None, max_length=2048)

    name_not_null = field_validator("name", "description")(_reject_null)


class CompanyResponse(BaseModel):
    model_config = _RESPONSE_CONFIG

    handle: str
    name: str
    description: str
    num_employees: Optional[int]
    logo_url: Optional[str]

    @classmethod
    def from_domain(cls, company: Company) -> "CompanyResponse":
        return cls(
            handle=company.handle,
            name=company.name,
            description=company.description,
            num_employees=company.num_employees,
            logo_url=company.logo_url,
        )


class JobSummary(BaseModel):
    """A job as listed under its company -- no company back-reference."""

    model_config = _RESPONSE_CONFIG

    id: int
    title: str
    salary: Optional[int]
    equity: Optional[float]


class CompanyDetailResponse(CompanyResponse):
    jobs: list[JobSummary] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, company: Company) -> "CompanyDetailResponse":
        return cls(
            handle=company.handle,
            name=company.name,
            description=company.description,
            num_employees=company.num_employees,
            logo_url=company.logo_url,
            jobs=[JobSummary(id=j.id, title=j.title, salary=j.salary, equity=j.equity) for j in company.jobs],
        )


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------


class JobCreate(BaseModel):
    model_config = _REQUEST_CONFIG

    title: str = Field(min_length=1)
    salary: Optional[int] = Field(default=None, ge=0)
    equity: Optional[float] = Field(default=None, ge=0, le=1)
    company_handle: str = Field(min_length=1, max_length=25, pattern=HANDLE_PATTERN)

    def to_domain(self) -> Job:
        return Job(
            title=self.title,
            salary=self.salary,
            equity=self.equity,
            company_handle=self.company_handle,
        )


class JobUpdate(BaseModel):
    """Request body for PATCH /api/v1/jobs/{id}. id and companyHandle are immutable."""

    model_config = _REQUEST_CONFIG

    title: Optional[str] = Field(default=None, min_length=1)
    salary: Optional[int] = Field(default=None, ge=0)
    equity: Optional[float] = Field(default=None, ge=0, le=1)

    title_not_null = field_validator("title")(_reject_null)


class JobResponse(BaseModel):
    model_config = _RESPONSE_CONFIG

    id: int
    title: str
    salary: Optional[int]
    equity: Optional[float]
    company_handle: str

    @classmethod
    def from_domain(cls, job: Job) -> "JobResponse":
        return cls(
            id=job.id,
            title=job.title,
            salary=job.salary,
            equity=job.equity,
            company_handle=job.company_handle,
        )


class JobDetailResponse(JobResponse):
    company: Optional[CompanyResponse] = None

    @classmethod
    def from_domain(cls, job: Job) -> "JobDetailResponse":
        return cls(
            id=job.id,
            title=job.title,
            salary=job.salary,
            equity=job.equity,
            company_handle=job.company_handle,
            company=CompanyResponse.from_domain(job.company) if job.company else None,
        )


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class UserCreate(RegisterRequest):
    """Request body for POST /api/v1/users (admin only; may create admins)."""

    is_admin: bool = False


class UserUpdate(BaseModel):
    """Request body for PATCH /api/v1/users/{username}. Username is immutable."""

    model_config = _REQUEST_CONFIG

    password: Optional[str] = Field(default=None, min_length=5, max_length=64)
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=30)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=30)
    email: Optional[str] = Field(default=None, min_length=6, max_length=60, pattern=EMAIL_PATTERN)
    is_admin: Optional[bool] = None

    fields_not_null = field_validator("password", "first_name", "last_name", "email", "is_admin")(_reject_null)


class UserResponse(BaseModel):
    model_config = _RESPONSE_CONFIG

    username: str
    first_name: str
    last_name: str
    email: str
    is_admin: bool

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            is_admin=user.is_admin,
        )


class UserDetailResponse(UserResponse):
    jobs: list[int] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, user: User) -> "UserDetailResponse":
        return cls(
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            is_admin=user.is_admin,
            jobs=list(user.jobs),
        )


class UserCreatedResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    user: UserResponse
    token: str


class ApplicationResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    applied: int


class DeletedResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    deleted: str
