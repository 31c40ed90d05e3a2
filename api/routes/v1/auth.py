"""
api/routes/v1/auth.py -- Token issuing endpoints.

Routes:
  POST /api/v1/auth/token     -- username/password login; returns {token}
  POST /api/v1/auth/register  -- self sign-up (never admin); returns {token}

Both endpoints are public: they are how a client obtains the bearer token
that AuthenticationMiddleware later verifies.

Security:
  POST /token is rate-limited per IP (Settings.login_rate_limit).
  UserStore.authenticate() provides timing equalization -- use it, never
  inline a lookup + password check.
  Cache-Control: no-store on every token response.
"""

from fastapi import APIRouter, Request, Response

from api.limiter import limiter
from api.models import LoginRequest, RegisterRequest, TokenResponse
from auth.models import User
from auth.store import UserStore
from auth.tokens import create_token
from core.config import get_settings

router = APIRouter()


def _login_rate_limit() -> str:
    return get_settings().login_rate_limit


@router.post("/auth/token", response_model=TokenResponse)
@limiter.limit(_login_rate_limit)  # registered endpoint must be the limiter's wrapper
async def login(request: Request, response: Response, body: LoginRequest) -> TokenResponse:
    """Exchange username/password for a signed token.

    Wrong username and wrong password produce the same 401 so the response
    does not reveal which usernames exist.
    """
    users: UserStore = request.app.state.users
    user = await users.authenticate(body.username, body.password)
    response.headers["Cache-Control"] = "no-store"
    return TokenResponse(token=create_token(user))


@router.post("/auth/register", response_model=TokenResponse, status_code=201)
async def register(request: Request, response: Response, body: RegisterRequest) -> TokenResponse:
    """Create a regular (non-admin) account and return a token for it."""
    users: UserStore = request.app.state.users
    user = await users.register(
        User(
            username=body.username,
            first_name=body.first_name,
            last_name=body.last_name,
            email=body.email,
            is_admin=False,
        ),
        body.password,
    )
    response.headers["Cache-Control"] = "no-store"
    return TokenResponse(token=create_token(user))
