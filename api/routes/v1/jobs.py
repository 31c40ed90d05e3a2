"""
api/routes/v1/jobs.py -- Job posting routes for the Jobly REST API.

Routes:
  POST   /jobs        -- create job (admin)
  GET    /jobs        -- list/search jobs (public): title, minSalary, hasEquity
  GET    /jobs/{id}   -- job detail with company (public)
  PATCH  /jobs/{id}   -- partial update of title/salary/equity (admin)
  DELETE /jobs/{id}   -- delete job (admin)
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from api.models import DeletedResponse, JobCreate, JobDetailResponse, JobResponse, JobUpdate
from auth.dependencies import ensure_admin
from listings.store import JobStore

router = APIRouter()


def _store(request: Request) -> JobStore:
    return request.app.state.jobs


@router.post("/jobs", response_model=JobResponse, status_code=201, dependencies=[Depends(ensure_admin)])
async def create_job(request: Request, body: JobCreate) -> JobResponse:
    job = await _store(request).create(body.to_domain())
    return JobResponse.from_domain(job)


@router.get("/jobs", response_model=list[JobResponse])
async def list_jobs(
    request: Request,
    title: Optional[str] = Query(default=None, max_length=100),
    min_salary: Optional[int] = Query(default=None, alias="minSalary", ge=0),
    has_equity: Optional[bool] = Query(default=None, alias="hasEquity"),
) -> list[JobResponse]:
    jobs = await _store(request).find_all(title=title, min_salary=min_salary, has_equity=has_equity)
    return [JobResponse.from_domain(j) for j in jobs]


@router.get("/jobs/{job_id}", response_model=JobDetailResponse)
async def get_job(request: Request, job_id: int) -> JobDetailResponse:
    job = await _store(request).get(job_id)
    return JobDetailResponse.from_domain(job)


@router.patch("/jobs/{job_id}", response_model=JobResponse, dependencies=[Depends(ensure_admin)])
async def update_job(request: Request, job_id: int, body: JobUpdate) -> JobResponse:
    data = body.model_dump(exclude_unset=True, by_alias=True)
    job = await _store(request).update(job_id, data)
    return JobResponse.from_domain(job)


@router.delete("/jobs/{job_id}", response_model=DeletedResponse, dependencies=[Depends(ensure_admin)])
async def delete_job(request: Request, job_id: int) -> DeletedResponse:
    await _store(request).remove(job_id)
    return DeletedResponse(deleted=str(job_id))
