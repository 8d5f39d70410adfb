"""Shared FastAPI dependencies."""

from typing import Optional

from fastapi import Depends, Header, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config import get_settings
from app.core.security import decode_access_token
from app.services.donation_config import DonationConfig, InvalidUrlWarnings

optional_bearer = HTTPBearer(auto_error=False)


async def get_request_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_bearer),
    x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
) -> Optional[str]:
    """Opaque id of the caller, or None for anonymous donors."""
    if credentials is not None:
        payload = decode_access_token(credentials.credentials)
        sub = payload.get("sub") if payload else None
        if sub:
            return str(sub).strip() or None

    if x_user_id and x_user_id.strip():
        return x_user_id.strip()
    return None


def get_url_warnings(request: Request) -> InvalidUrlWarnings:
    warnings = getattr(request.app.state, "url_warnings", None)
    if warnings is None:
        warnings = InvalidUrlWarnings()
        request.app.state.url_warnings = warnings
    return warnings


def get_donation_config(warnings: InvalidUrlWarnings = Depends(get_url_warnings)) -> DonationConfig:
    return DonationConfig(get_settings(), warnings)
