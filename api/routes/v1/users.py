"""
api/routes/v1/users.py -- Registration and self-service profile endpoints.

Routes:
  POST /api/v1/users     -- register; server generates and emails the password
  GET  /api/v1/users/me  -- current user's username, name, email (requires auth)
  PUT  /api/v1/users/me  -- update name and optionally password (requires auth)

Registration returns 201 even when the password email fails: the account
already exists at that point. email_sent=False tells the caller a human has
to deliver the password some other way.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response

from api.models import MeResponse, ProfileUpdate, UserCreate, UserCreatedResponse
from auth.dependencies import get_current_user
from auth.errors import NotificationError
from auth.models import User
from auth.service import CredentialService

logger = logging.getLogger("employeeauth.api.users")

# Auth policy:
# - POST /api/v1/users:    public -- open registration, password goes to the email address
# - GET  /api/v1/users/me: requires auth (get_current_user)
# - PUT  /api/v1/users/me: requires auth (get_current_user)
router = APIRouter()


@router.post("/users", response_model=UserCreatedResponse, status_code=201)
def create_user(request: Request, body: UserCreate) -> UserCreatedResponse:
    service: CredentialService = request.app.state.credentials
    try:
        user_id = service.register(body.username, body.name, body.email)
    except NotificationError as exc:
        logger.warning("User %s needs manual password delivery", exc.user_id)
        return UserCreatedResponse(id=exc.user_id, email_sent=False)
    return UserCreatedResponse(id=user_id, email_sent=True)


@router.get("/users/me", response_model=MeResponse)
def me(request: Request, current_user: User = Depends(get_current_user)) -> MeResponse:
    """Return profile information for the currently authenticated user."""
    service: CredentialService = request.app.state.credentials
    return MeResponse.from_profile(service.get_profile(current_user.id))


@router.put("/users/me", status_code=204)
def update_me(
    request: Request,
    body: ProfileUpdate,
    current_user: User = Depends(get_current_user),
) -> Response:
    """Update the current user's name and, if given, password.

    A new password failing the policy rejects the whole update (400) and
    leaves the stored name untouched.
    """
    service: CredentialService = request.app.state.credentials
    service.update_profile(current_user.id, body.name, body.new_password)
    return Response(status_code=204)
