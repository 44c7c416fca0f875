"""
Supabase Auth and Storage client

Thin wrapper over the GoTrue (/auth/v1) and Storage (/storage/v1) REST APIs
of the hosted Supabase project. Table access goes through SQLAlchemy instead
(see portfolio_site.shared.database).
"""
import logging
import os
from typing import Optional
from urllib.parse import quote, unquote, urlencode

import httpx

logger = logging.getLogger(__name__)

SUPABASE_URL = os.getenv("SUPABASE_URL", "http://localhost:54321")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")
# Storage writes bypass row-level security when a service key is configured
SUPABASE_SERVICE_KEY = os.getenv("SUPABASE_SERVICE_KEY")
REQUEST_TIMEOUT = float(os.getenv("SUPABASE_TIMEOUT_SECONDS", "10"))


class SupabaseError(RuntimeError):
    """Non-2xx answer from Supabase (or the request never completed)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class SupabaseClient:
    def __init__(
        self,
        url: str = SUPABASE_URL,
        anon_key: str = SUPABASE_ANON_KEY,
        service_key: Optional[str] = SUPABASE_SERVICE_KEY,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.url = url.rstrip("/")
        self.anon_key = anon_key
        self.service_key = service_key
        self._http = httpx.Client(timeout=REQUEST_TIMEOUT, transport=transport)

    def close(self) -> None:
        self._http.close()

    # ──────────────────────────────────────────────────────────────────────
    # HTTP helpers
    # ──────────────────────────────────────────────────────────────────────

    def _headers(self, token: Optional[str] = None, **extra) -> dict:
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {token or self.anon_key}",
        }
        headers.update(extra)
        return headers

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self._http.request(method, f"{self.url}{path}", **kwargs)
        except httpx.HTTPError as e:
            raise SupabaseError(f"{method} {path} failed: {e}") from e

        if response.status_code >= 400:
            try:
                body = response.json()
                message = body.get("error_description") or body.get("msg") or body.get("message") or response.text
            except ValueError:
                message = response.text
            raise SupabaseError(message or f"HTTP {response.status_code}", response.status_code)
        return response

    # ──────────────────────────────────────────────────────────────────────
    # Auth
    # ──────────────────────────────────────────────────────────────────────

    def sign_in_with_password(self, email: str, password: str) -> dict:
        """Password grant. Returns the session (access_token, refresh_token, user, ...)."""
        response = self._request(
            "POST",
            "/auth/v1/token?grant_type=password",
            json={"email": email, "password": password},
            headers=self._headers(),
        )
        return response.json()

    def sign_out(self, access_token: str) -> None:
        self._request("POST", "/auth/v1/logout", headers=self._headers(access_token))

    def get_user(self, access_token: str) -> Optional[dict]:
        """Resolve an access token to its user, or None if the token is not valid."""
        try:
            response = self._request("GET", "/auth/v1/user", headers=self._headers(access_token))
        except SupabaseError as e:
            if e.status_code in (401, 403):
                return None
            raise
        return response.json()

    def authorize_url(self, provider: str, redirect_to: str, code_challenge: str) -> str:
        """URL that starts an OAuth sign-in with PKCE (S256)."""
        params = {
            "provider": provider,
            "redirect_to": redirect_to,
            "code_challenge": code_challenge,
            "code_challenge_method": "s256",
        }
        return f"{self.url}/auth/v1/authorize?{urlencode(params)}"

    def exchange_code(self, auth_code: str, code_verifier: str) -> dict:
        response = self._request(
            "POST",
            "/auth/v1/token?grant_type=pkce",
            json={"auth_code": auth_code, "code_verifier": code_verifier},
            headers=self._headers(),
        )
        return response.json()

    # ──────────────────────────────────────────────────────────────────────
    # Storage
    # ──────────────────────────────────────────────────────────────────────

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.url}/storage/v1/object/public/{bucket}/{quote(path)}"

    def upload(self, bucket: str, path: str, content: bytes, content_type: str) -> str:
        """Upload (or overwrite) an object and return its public URL."""
        self._request(
            "POST",
            f"/storage/v1/object/{bucket}/{quote(path)}",
            content=content,
            headers=self._headers(
                self.service_key,
                **{"Content-Type": content_type, "x-upsert": "true"},
            ),
        )
        logger.info(f"Uploaded {bucket}/{path} ({len(content)} bytes)")
        return self.public_url(bucket, path)

    def remove(self, bucket: str, paths: list[str]) -> None:
        self._request(
            "DELETE",
            f"/storage/v1/object/{bucket}",
            json={"prefixes": paths},
            headers=self._headers(self.service_key),
        )
        logger.info(f"Removed {len(paths)} object(s) from {bucket}")

    @staticmethod
    def storage_path_from_url(url: str, bucket: str) -> str:
        """
        Object path inside bucket for a stored file URL.

        Public and signed storage URLs carry the path after "/<bucket>/";
        for anything else the last path segment is used.
        """
        clean = url.split("?", 1)[0]
        marker = f"/{bucket}/"
        if marker in clean:
            return unquote(clean.split(marker, 1)[1])
        return unquote(clean.rstrip("/").rsplit("/", 1)[-1])


_client: Optional[SupabaseClient] = None


def get_supabase() -> SupabaseClient:
    """FastAPI dependency returning the process-wide client."""
    global _client
    if _client is None:
        _client = SupabaseClient()
    return _client
