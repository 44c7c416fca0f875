"""
Portfolio site API

Public page view models, the content API, submissions, the CV export and
the admin dashboard API in one FastAPI app.

Run with:
    uvicorn portfolio_site.main:app --reload
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from portfolio_site.admin.auth_routes import router as auth_router
from portfolio_site.admin.routes import router as admin_router
from portfolio_site.content.live import LIVE_TABLES, live_cache
from portfolio_site.content.routes import router as content_router
from portfolio_site.cv.routes import router as cv_router
from portfolio_site.pages.routes import router as pages_router
from portfolio_site.shared.cors import setup_cors
from portfolio_site.shared.database import Base, check_db_connection, engine, is_postgres
from portfolio_site.shared.errors import register_exception_handlers
from portfolio_site.shared.headers import setup_security_headers
from portfolio_site.shared.limits import limiter
from portfolio_site.shared.realtime import (
    REALTIME_LISTENER_ENABLED,
    PostgresChangeListener,
    install_change_triggers,
)
from portfolio_site.submissions.routes import router as submissions_router

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)

    listener = None
    if is_postgres() and REALTIME_LISTENER_ENABLED:
        install_change_triggers(engine, LIVE_TABLES)
        listener = PostgresChangeListener(engine)
        listener.start()

    live_cache.start()
    try:
        yield
    finally:
        live_cache.stop()
        if listener:
            listener.stop()


app = FastAPI(
    title="Portfolio Site API",
    version="1.0.0",
    description="Portfolio content, page view models and admin dashboard",
    lifespan=lifespan,
)

setup_cors(app)
setup_security_headers(app)
register_exception_handlers(app)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.get("/health")
def health():
    db_connected = check_db_connection()
    return {
        "status": "ok" if db_connected else "degraded",
        "service": "portfolio_site",
        "database": "connected" if db_connected else "disconnected",
        "live_cache": "ready" if live_cache.ready else "not started",
    }


app.include_router(content_router)
app.include_router(submissions_router)
app.include_router(cv_router)
app.include_router(auth_router)
app.include_router(admin_router)
app.include_router(pages_router)
