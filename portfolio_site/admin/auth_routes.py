"""
Admin sign-in

Password and OAuth (PKCE) sign-in through Supabase Auth. Only users with an
admin profile get a session back; the frontend keeps the access token and
sends it as a bearer token to /admin.
"""
import logging
import os
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, EmailStr
from sqlalchemy.orm import Session

from portfolio_site.shared.auth import get_bearer_token, is_admin, resolve_user
from portfolio_site.shared.database import get_db
from portfolio_site.shared.encryption import decrypt_value, encrypt_value
from portfolio_site.shared.errors import log_and_sanitize_error
from portfolio_site.shared.oauth_state import (
    STATE_EXPIRY,
    generate_pkce_pair,
    generate_state,
    validate_state,
)
from portfolio_site.shared.supabase import SupabaseClient, SupabaseError, get_supabase

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173").rstrip("/")
OAUTH_CALLBACK_URL = os.getenv("OAUTH_CALLBACK_URL", "http://localhost:8000/auth/callback")
OAUTH_PROVIDERS = {"github", "google"}
VERIFIER_COOKIE = "pkce_verifier"
COOKIE_SECURE = os.getenv("ENVIRONMENT", "development") == "production"


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


def _session_payload(session: dict) -> dict:
    user = session.get("user") or {}
    return {
        "access_token": session.get("access_token"),
        "refresh_token": session.get("refresh_token"),
        "expires_in": session.get("expires_in"),
        "user": {"id": user.get("id"), "email": user.get("email")},
    }


def _require_admin_session(db: Session, supabase: SupabaseClient, session: dict) -> dict:
    user = session.get("user") or {}
    if not user.get("id") or not is_admin(db, user["id"]):
        logger.warning(f"Sign-in refused for non-admin user {user.get('email')}")
        try:
            supabase.sign_out(session.get("access_token", ""))
        except SupabaseError as e:
            logger.warning(f"Could not revoke refused session: {e}")
        raise HTTPException(
            status_code=403,
            detail={"message": "Admin access required", "category": "security"},
        )
    return _session_payload(session)


@router.post("/login")
def login(
    credentials: LoginRequest,
    db: Session = Depends(get_db),
    supabase: SupabaseClient = Depends(get_supabase),
):
    try:
        session = supabase.sign_in_with_password(credentials.email, credentials.password)
    except SupabaseError as e:
        if e.status_code in (400, 401):
            raise HTTPException(
                status_code=401,
                detail={"message": "Invalid email or password", "category": "security"},
            )
        msg, _ = log_and_sanitize_error(e, "Admin sign-in")
        raise HTTPException(status_code=503, detail={"message": msg, "category": "server_error"})

    return _require_admin_session(db, supabase, session)


@router.post("/logout", status_code=204)
def logout(
    token: str = Depends(get_bearer_token),
    supabase: SupabaseClient = Depends(get_supabase),
):
    try:
        supabase.sign_out(token)
    except SupabaseError as e:
        # Expired tokens fail here; the client drops the token regardless
        logger.info(f"Sign-out returned an error: {e}")


@router.get("/session")
def session_status(
    token: str = Depends(get_bearer_token),
    db: Session = Depends(get_db),
    supabase: SupabaseClient = Depends(get_supabase),
):
    user = resolve_user(supabase, token)
    if not user:
        return {"authenticated": False, "is_admin": False, "user": None}
    return {
        "authenticated": True,
        "is_admin": is_admin(db, user["id"]),
        "user": {"id": user["id"], "email": user.get("email")},
    }


@router.get("/oauth/{provider}")
def oauth_start(provider: str, supabase: SupabaseClient = Depends(get_supabase)):
    """Redirect to the provider through Supabase with a signed state and PKCE challenge."""
    if provider not in OAUTH_PROVIDERS:
        raise HTTPException(status_code=404, detail=f"Unknown provider '{provider}'")

    state = generate_state()
    verifier, challenge = generate_pkce_pair()
    redirect_to = f"{OAUTH_CALLBACK_URL}?{urlencode({'state': state})}"

    response = RedirectResponse(supabase.authorize_url(provider, redirect_to, challenge))
    response.set_cookie(
        VERIFIER_COOKIE,
        encrypt_value(verifier),
        max_age=STATE_EXPIRY,
        httponly=True,
        secure=COOKIE_SECURE,
        samesite="lax",
    )
    return response


@router.get("/callback")
def oauth_callback(
    request: Request,
    code: str,
    state: str,
    db: Session = Depends(get_db),
    supabase: SupabaseClient = Depends(get_supabase),
):
    if not validate_state(state):
        logger.warning("OAuth callback with invalid or expired state")
        raise HTTPException(
            status_code=400,
            detail={"message": "Invalid or expired OAuth state", "category": "security"},
        )

    verifier = decrypt_value(request.cookies.get(VERIFIER_COOKIE, ""), max_age=STATE_EXPIRY)
    if not verifier:
        raise HTTPException(
            status_code=400,
            detail={"message": "Missing or expired sign-in verifier", "category": "security"},
        )

    try:
        session = supabase.exchange_code(code, verifier)
    except SupabaseError as e:
        msg, _ = log_and_sanitize_error(e, "OAuth code exchange", "Sign-in failed")
        raise HTTPException(status_code=400, detail={"message": msg, "category": "security"})

    payload = _require_admin_session(db, supabase, session)

    # Session goes back in the URL fragment, not the query string
    fragment = urlencode({
        "access_token": payload["access_token"] or "",
        "refresh_token": payload["refresh_token"] or "",
        "expires_in": payload["expires_in"] or "",
    })
    response = RedirectResponse(f"{FRONTEND_URL}/admin#{fragment}")
    response.delete_cookie(VERIFIER_COOKIE)
    return response
