"""
Auth API routes — signup, login, Google sign-in, current user.

Route prefix: /api/auth
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from auth.dependencies import get_auth_service, get_current_user
from auth.service import AuthService

router = APIRouter(tags=["auth"])


# ── Request / response schemas ─────────────────────────────────────────

# Fields are optional so that missing values reach the service and come
# back as 400 rather than FastAPI's 422.


class CredentialsRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class GoogleLoginRequest(BaseModel):
    credential: Optional[str] = None
    access_token: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None
    picture: Optional[str] = None


class UserOut(BaseModel):
    id: str
    email: str


class AuthResponse(BaseModel):
    token: str
    user: UserOut


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post("/signup", response_model=AuthResponse)
async def signup(
    req: CredentialsRequest,
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Register a new user with email + password."""
    result = await service.signup(req.email, req.password)
    return result.as_response()


@router.post("/login", response_model=AuthResponse)
async def login(
    req: CredentialsRequest,
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Login with email + password."""
    result = await service.login(req.email, req.password)
    return result.as_response()


@router.post("/google", response_model=AuthResponse)
async def google_login(
    req: GoogleLoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Sign in with a Google ID token, or a Google access token + email."""
    result = await service.federated_login(
        credential=req.credential,
        access_token=req.access_token,
        email=req.email,
    )
    return result.as_response()


@router.get("/me")
async def me(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    """Return the identity carried by the caller's token."""
    return {"user": user}
