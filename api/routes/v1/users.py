"""
api/routes/v1/users.py -- User management routes for the Jobly REST API.

Routes:
  POST   /users                              -- create user, may be admin (admin)
  GET    /users                              -- list users (admin)
  GET    /users/{username}                   -- user detail with applied job ids
  PATCH  /users/{username}                   -- partial update
  DELETE /users/{username}                   -- delete user
  POST   /users/{username}/jobs/{job_id}     -- apply to a job

Auth policy:
  /users collection routes require admin (ensure_admin).
  /users/{username}/... routes require the admin or that same user
  (ensure_admin_or_correct_user). Only an admin may change isAdmin.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from api.models import (
    ApplicationResponse,
    DeletedResponse,
    UserCreate,
    UserCreatedResponse,
    UserDetailResponse,
    UserResponse,
    UserUpdate,
)
from auth.dependencies import ensure_admin, ensure_admin_or_correct_user
from auth.models import Identity, User
from auth.store import UserStore
from auth.tokens import create_token
from core.errors import ForbiddenError

router = APIRouter()


def _store(request: Request) -> UserStore:
    return request.app.state.users


@router.post(
    "/users",
    response_model=UserCreatedResponse,
    status_code=201,
    dependencies=[Depends(ensure_admin)],
)
async def create_user(request: Request, body: UserCreate) -> UserCreatedResponse:
    """Admin-only registration. Returns the new user and a token for them."""
    user = await _store(request).register(
        User(
            username=body.username,
            first_name=body.first_name,
            last_name=body.last_name,
            email=body.email,
            is_admin=body.is_admin,
        ),
        body.password,
    )
    return UserCreatedResponse(user=UserResponse.from_domain(user), token=create_token(user))


@router.get("/users", response_model=list[UserResponse], dependencies=[Depends(ensure_admin)])
async def list_users(request: Request) -> list[UserResponse]:
    return [UserResponse.from_domain(u) for u in await _store(request).find_all()]


@router.get(
    "/users/{username}",
    response_model=UserDetailResponse,
    dependencies=[Depends(ensure_admin_or_correct_user)],
)
async def get_user(request: Request, username: str) -> UserDetailResponse:
    user = await _store(request).get(username)
    return UserDetailResponse.from_domain(user)


@router.patch("/users/{username}", response_model=UserResponse)
async def update_user(
    request: Request,
    username: str,
    body: UserUpdate,
    identity: Identity = Depends(ensure_admin_or_correct_user),
) -> UserResponse:
    data = body.model_dump(exclude_unset=True, by_alias=True)
    if "isAdmin" in data and not identity.is_admin:
        raise ForbiddenError("Only admins can change admin status.")
    user = await _store(request).update(username, data)
    return UserResponse.from_domain(user)


@router.delete(
    "/users/{username}",
    response_model=DeletedResponse,
    dependencies=[Depends(ensure_admin_or_correct_user)],
)
async def delete_user(request: Request, username: str) -> DeletedResponse:
    await _store(request).remove(username)
    return DeletedResponse(deleted=username)


@router.post(
    "/users/{username}/jobs/{job_id}",
    response_model=ApplicationResponse,
    dependencies=[Depends(ensure_admin_or_correct_user)],
)
async def apply_to_job(request: Request, username: str, job_id: int) -> ApplicationResponse:
    await _store(request).apply_to_job(username, job_id)
    return ApplicationResponse(applied=job_id)
