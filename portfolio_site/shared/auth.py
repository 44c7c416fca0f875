"""
Admin Authentication

Admin routes require a Supabase access token in the Authorization header.
The token is resolved to a user through Supabase Auth and the user must have
a row in the profiles table with is_admin = true.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from portfolio_site.content.models import Profile
from portfolio_site.shared.database import get_db
from portfolio_site.shared.supabase import SupabaseClient, SupabaseError, get_supabase

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AdminUser:
    id: str
    email: Optional[str]
    access_token: str


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"message": message, "category": "security"},
    )


def is_admin(db: Session, user_id: str) -> bool:
    """Row-level admin check against the profiles table."""
    profile = db.query(Profile).filter(Profile.id == user_id).first()
    return bool(profile and profile.is_admin)


def resolve_user(supabase: SupabaseClient, access_token: str) -> Optional[dict]:
    """Session check: the Supabase user behind a token, or None."""
    try:
        return supabase.get_user(access_token)
    except SupabaseError as e:
        logger.error(f"Supabase user lookup failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"message": "Authentication service unavailable", "category": "server_error"},
        )


async def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> str:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise _unauthorized("Missing bearer token")
    return credentials.credentials


def require_admin(
    token: str = Depends(get_bearer_token),
    db: Session = Depends(get_db),
    supabase: SupabaseClient = Depends(get_supabase),
) -> AdminUser:
    """
    Dependency gating admin endpoints

    Usage in endpoints:
    @router.get("/admin/thing")
    def thing(admin: AdminUser = Depends(require_admin)):
        pass
    """
    user = resolve_user(supabase, token)
    if not user:
        raise _unauthorized("Invalid or expired session")

    if not is_admin(db, user["id"]):
        logger.warning(f"Non-admin user {user.get('email')} tried to reach the admin area")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"message": "Admin access required", "category": "security"},
        )

    return AdminUser(id=user["id"], email=user.get("email"), access_token=token)
