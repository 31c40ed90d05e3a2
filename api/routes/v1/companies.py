"""
api/routes/v1/companies.py -- Company routes for the Jobly REST API.

Routes:
  POST   /companies            -- create company (admin)
  GET    /companies            -- list/search companies (public)
  GET    /companies/{handle}   -- company detail with jobs (public)
  PATCH  /companies/{handle}   -- partial update (admin)
  DELETE /companies/{handle}   -- delete company and its jobs (admin)

Search query parameters (all optional, camelCase like the JSON bodies):
  nameLike      -- case-insensitive substring of the company name
  minEmployees  -- inclusive lower bound on numEmployees
  maxEmployees  -- inclusive upper bound on numEmployees
minEmployees > maxEmployees is rejected here with 400; the store itself
would just return an empty list.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from api.models import CompanyCreate, CompanyDetailResponse, CompanyResponse, CompanyUpdate, DeletedResponse
from auth.dependencies import ensure_admin
from core.errors import BadRequestError
from listings.store import CompanyStore

router = APIRouter()


def _store(request: Request) -> CompanyStore:
    return request.app.state.companies


@router.post(
    "/companies",
    response_model=CompanyResponse,
    status_code=201,
    dependencies=[Depends(ensure_admin)],
)
async def create_company(request: Request, body: CompanyCreate) -> CompanyResponse:
    company = await _store(request).create(body.to_domain())
    return CompanyResponse.from_domain(company)


@router.get("/companies", response_model=list[CompanyResponse])
async def list_companies(
    request: Request,
    name_like: Optional[str] = Query(default=None, alias="nameLike", max_length=100),
    min_employees: Optional[int] = Query(default=None, alias="minEmployees", ge=0),
    max_employees: Optional[int] = Query(default=None, alias="maxEmployees", ge=0),
) -> list[CompanyResponse]:
    """Return companies matching every supplied filter, ordered by name."""
    if min_employees is not None and max_employees is not None and min_employees > max_employees:
        raise BadRequestError("minEmployees cannot be greater than maxEmployees")
    companies = await _store(request).find_all(
        name_like=name_like,
        min_employees=min_employees,
        max_employees=max_employees,
    )
    return [CompanyResponse.from_domain(c) for c in companies]


@router.get("/companies/{handle}", response_model=CompanyDetailResponse)
async def get_company(request: Request, handle: str) -> CompanyDetailResponse:
    company = await _store(request).get(handle)
    return CompanyDetailResponse.from_domain(company)


@router.patch(
    "/companies/{handle}",
    response_model=CompanyResponse,
    dependencies=[Depends(ensure_admin)],
)
async def update_company(request: Request, handle: str, body: CompanyUpdate) -> CompanyResponse:
    """Change only the fields present in the body. An empty body is a 400."""
    data = body.model_dump(exclude_unset=True, by_alias=True)
    company = await _store(request).update(handle, data)
    return CompanyResponse.from_domain(company)


@router.delete(
    "/companies/{handle}",
    response_model=DeletedResponse,
    dependencies=[Depends(ensure_admin)],
)
async def delete_company(request: Request, handle: str) -> DeletedResponse:
    await _store(request).remove(handle)
    return DeletedResponse(deleted=handle)
