"""
FastAPI dependencies for authentication.

Provides ``get_auth_service`` and the ``get_current_user`` request gate
used by every protected route.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Depends, Header, Request

from auth.service import AuthService


def get_auth_service(request: Request) -> AuthService:
    """The service instance built at application startup."""
    return request.app.state.auth_service


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """
    Verify the Bearer token and attach its payload to ``request.state.user``.

    Raises ``AuthenticationError`` (401) when the header is missing,
    malformed, or carries an invalid token.
    """
    payload = service.authenticate(authorization)
    request.state.user = payload
    return payload
