"""Security and caching headers for the site's responses."""

import os

from fastapi import FastAPI, Request
from fastapi.responses import Response


DEFAULT_CSP = (
    "default-src 'self'; "
    "img-src 'self' data: https:; "
    "font-src 'self' data: https:; "
    "script-src 'self' 'unsafe-inline'; "
    "style-src 'self' 'unsafe-inline'; "
    "connect-src 'self' https://*.supabase.co wss://*.supabase.co"
)

HSTS_VALUE = "max-age=31536000; includeSubDomains; preload"
NO_STORE = "no-cache, no-store, must-revalidate"

# Public collection reads may be cached briefly by the browser
PUBLIC_CACHE_SECONDS = int(os.getenv("PUBLIC_CACHE_SECONDS", "60"))
PUBLIC_CACHE_PREFIXES = ("/api/",)


def cache_control_for(path: str, method: str) -> str:
    if method == "GET" and path.startswith(PUBLIC_CACHE_PREFIXES):
        return f"public, max-age={PUBLIC_CACHE_SECONDS}"
    return NO_STORE


def setup_security_headers(app: FastAPI) -> None:
    """Add CSP, HSTS, clickjacking, nosniff and Cache-Control headers."""

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers.setdefault("Content-Security-Policy", DEFAULT_CSP)
        response.headers.setdefault("Strict-Transport-Security", HSTS_VALUE)
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault(
            "Cache-Control",
            cache_control_for(request.url.path, request.method),
        )
        return response
