"""
auth/middleware.py -- Per-request authentication.

authenticate_jwt() inspects the Authorization header and, when it carries a
valid "Bearer <token>", stores the decoded Identity on request.state.user.
It never rejects a request: a missing, malformed, expired or wrongly-signed
token simply leaves request.state.user unset. Rejection is the job of the
gates in auth/dependencies.py, which run later, per route.

AuthenticationMiddleware runs authenticate_jwt() exactly once per HTTP
request, before routing, using the secret it was constructed with.

Layer rule: no imports from api/ or listings/.
"""

from __future__ import annotations

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from auth.models import Identity
from auth.tokens import InvalidCredential, verify

logger = logging.getLogger("jobly.auth")

_BEARER_PREFIX = "bearer "


def _bearer_token(request: Request) -> str | None:
    """Return the token from "Authorization: Bearer <token>", or None."""
    header = request.headers.get("authorization", "")
    if not header.lower().startswith(_BEARER_PREFIX):
        return None
    token = header[len(_BEARER_PREFIX) :].strip()
    return token or None


def current_identity(request: Request) -> Identity | None:
    """Return the Identity stored on the request, or None for anonymous requests."""
    return getattr(request.state, "user", None)


def authenticate_jwt(request: Request, secret: str) -> None:
    """Populate request.state.user from a bearer token, if one verifies.

    The slot is written at most once per request. An already-populated slot
    is left alone, and a failed verification never leaves a partial Identity
    behind.
    """
    if current_identity(request) is not None:
        return

    token = _bearer_token(request)
    if token is None:
        return

    try:
        identity = verify(token, secret)
    except InvalidCredential as exc:
        logger.debug("Ignoring invalid bearer token: %s", exc)
        return

    request.state.user = identity


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """Run authenticate_jwt() for every request before it reaches a route."""

    def __init__(self, app: ASGIApp, secret: str) -> None:
        super().__init__(app)
        self._secret = secret

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        authenticate_jwt(request, self._secret)
        return await call_next(request)
