"""
auth/dependencies.py -- FastAPI Depends() gates for route authorization.

Every gate reads the Identity that AuthenticationMiddleware placed on
request.state.user (see auth/middleware.py). Gates never decode tokens
themselves. On success they return the Identity so handlers can use it; on
failure they raise UnauthorizedError, which api/main.py turns into a 401.

  ensure_logged_in              -- any valid identity
  ensure_admin                  -- identity with isAdmin true
  ensure_admin_or_correct_user  -- admin, or the user named by the
                                   {username} path parameter

Routes that allow anonymous access simply declare no gate.

Usage:
    @router.post("/companies", dependencies=[Depends(ensure_admin)])
    async def create_company(...): ...

Layer rule: no imports from api/ or listings/.
"""

from __future__ import annotations

from fastapi import Request

from auth.middleware import current_identity
from auth.models import Identity
from core.errors import UnauthorizedError


def ensure_logged_in(request: Request) -> Identity:
    """Require any authenticated identity."""
    identity = current_identity(request)
    if identity is None or not identity.username:
        raise UnauthorizedError()
    return identity


def ensure_admin(request: Request) -> Identity:
    """Require an authenticated identity whose isAdmin claim is true."""
    identity = ensure_logged_in(request)
    if identity.is_admin is not True:
        raise UnauthorizedError()
    return identity


def ensure_admin_or_correct_user(request: Request) -> Identity:
    """Require an admin, or the user whose username is in the route path.

    Username comparison is exact and case-sensitive.
    """
    identity = ensure_logged_in(request)
    if identity.is_admin is True:
        return identity
    if identity.username == request.path_params.get("username"):
        return identity
    raise UnauthorizedError()
