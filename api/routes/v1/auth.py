"""
api/routes/v1/auth.py -- Login endpoint.

Routes:
  POST /api/v1/auth/login -- username-or-email + password; returns a bearer JWT

Security:
  CredentialService.login() equalizes timing between unknown identifiers and
  wrong passwords and raises the same InvalidCredentialsError for both. The
  exception handler in api/main.py turns that into one 401 body.
  Cache-Control: no-store on the success response so the token is not cached.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.models import LoginRequest, LoginResponse
from auth.service import CredentialService

# Auth policy:
# - POST /api/v1/auth/login: public -- login endpoint must be unauthenticated
router = APIRouter()


@router.post("/auth/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with a username or email and a password."""
    service: CredentialService = request.app.state.credentials
    token = service.login(body.login, body.password)
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(
            access_token=token,
            token_type="bearer",  # noqa: S106 # nosec B106 -- OAuth token type, not a password
            expires_in=request.app.state.token_issuer.expire_seconds,
        ).model_dump(),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp
