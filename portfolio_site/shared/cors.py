"""CORS configuration for the site frontend."""

import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware


PRODUCTION_ORIGINS = [
    origin.strip().rstrip("/")
    for origin in os.getenv("PRODUCTION_ORIGINS", "").split(",")
    if origin.strip()
]

# Vite and CRA dev servers
DEV_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:8080",
    "http://localhost:3000",
]


def get_allowed_origins() -> list[str]:
    origins = list(PRODUCTION_ORIGINS)

    frontend_url = os.getenv("FRONTEND_URL")
    if frontend_url:
        clean_url = frontend_url.rstrip("/")
        if clean_url not in origins:
            origins.append(clean_url)

    if os.getenv("ENVIRONMENT", "development") != "production":
        origins.extend(o for o in DEV_ORIGINS if o not in origins)

    return origins


def setup_cors(app: FastAPI) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_allowed_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )
