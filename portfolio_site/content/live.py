"""
Live collections

Projects, experience and social links are served from a RealtimeCache that
re-fetches a collection whenever the change feed reports a write to its
table. Rows are converted to response schemas at load time so snapshots
don't hold on to a database session.
"""
from typing import Callable, Optional

from sqlalchemy.orm import Session, sessionmaker

from portfolio_site.content import service
from portfolio_site.content.schemas import (
    ExperienceResponse,
    ProjectResponse,
    SocialLinkResponse,
)
from portfolio_site.shared.database import SessionLocal
from portfolio_site.shared.realtime import ChangeFeed, RealtimeCache, change_feed

LIVE_TABLES = {
    "projects": (service.get_projects, ProjectResponse),
    "experience": (service.get_experience, ExperienceResponse),
    "social_links": (service.get_social_links, SocialLinkResponse),
}


def _loader(session_factory: sessionmaker, fetch: Callable, schema) -> Callable[[], list]:
    def load() -> list:
        db: Session = session_factory()
        try:
            # unwrap() so a failed fetch keeps the previous snapshot
            return [schema.model_validate(row) for row in fetch(db).unwrap()]
        finally:
            db.close()
    return load


def build_live_cache(
    session_factory: sessionmaker = SessionLocal,
    feed: ChangeFeed = change_feed,
) -> RealtimeCache:
    loaders = {
        table: _loader(session_factory, fetch, schema)
        for table, (fetch, schema) in LIVE_TABLES.items()
    }
    return RealtimeCache(loaders, feed=feed)


live_cache = build_live_cache()


def get_live_cache() -> Optional[RealtimeCache]:
    """Dependency: the started live cache, or None before startup."""
    return live_cache if live_cache.ready else None


def read_collection(live: Optional[RealtimeCache], table: str, db: Session) -> list:
    """
    Current rows of a live table: from the cache once it is started,
    otherwise straight from the database (empty on failure).
    """
    if live is not None:
        return list(live.get(table))
    fetch, schema = LIVE_TABLES[table]
    return [schema.model_validate(row) for row in fetch(db).items]
