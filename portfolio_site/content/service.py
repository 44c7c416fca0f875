"""
Data-access façade for the portfolio content

One function per read. Each returns a FetchResult and never raises: query
failures are rolled back, logged and reported as a failed result. Public
pages read `.items` (empty on failure); the certificate pages call
`.unwrap()` so a failure surfaces as an error response.
"""
import logging
import os
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portfolio_site.content.models import (
    AboutSection,
    Achievement,
    Certificate,
    ContactMessage,
    Experience,
    Project,
    Skill,
    SocialLink,
    Testimonial,
)
from portfolio_site.shared.cache import TTLCache
from portfolio_site.shared.result import FetchResult

logger = logging.getLogger(__name__)

ABOUT_CACHE_TTL_SECONDS = float(os.getenv("ABOUT_CACHE_TTL_SECONDS", "300"))
ABOUT_CACHE_KEY = "about"

about_cache = TTLCache(ttl_seconds=ABOUT_CACHE_TTL_SECONDS)


def _run_query(db: Session, source: str, query: Callable[[], list]) -> FetchResult:
    try:
        rows = query()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Fetching {source} failed: {e}", exc_info=True)
        return FetchResult.failure(e, source=source)
    return FetchResult.success(rows, source=source)


def get_projects(db: Session) -> FetchResult:
    return _run_query(
        db, "projects",
        lambda: db.query(Project).order_by(Project.created_at.desc(), Project.id.desc()).all(),
    )


def get_experience(db: Session) -> FetchResult:
    return _run_query(
        db, "experience",
        lambda: db.query(Experience).order_by(Experience.start_date.desc()).all(),
    )


def get_skills(db: Session) -> FetchResult:
    return _run_query(
        db, "skills",
        lambda: db.query(Skill).order_by(Skill.category.asc(), Skill.id.asc()).all(),
    )


def get_certificates(db: Session) -> FetchResult:
    """Approved certificates, newest first."""
    return _run_query(
        db, "certificates",
        lambda: (
            db.query(Certificate)
            .filter(Certificate.is_approved == True)
            .order_by(Certificate.date.desc())
            .all()
        ),
    )


def get_certificate(db: Session, certificate_id: int) -> FetchResult:
    """
    Single certificate by id. An unknown id is an empty result, not a
    failure; unapproved certificates are treated as unknown.
    """
    return _run_query(
        db, f"certificate {certificate_id}",
        lambda: (
            db.query(Certificate)
            .filter(Certificate.id == certificate_id, Certificate.is_approved == True)
            .limit(1)
            .all()
        ),
    )


def get_achievements(db: Session) -> FetchResult:
    return _run_query(
        db, "achievements",
        lambda: (
            db.query(Achievement)
            .filter(Achievement.is_approved == True)
            .order_by(Achievement.date.desc())
            .all()
        ),
    )


def get_testimonials(db: Session) -> FetchResult:
    return _run_query(
        db, "testimonials",
        lambda: (
            db.query(Testimonial)
            .filter(Testimonial.is_approved == True)
            .order_by(Testimonial.created_at.desc(), Testimonial.id.desc())
            .all()
        ),
    )


def get_social_links(db: Session) -> FetchResult:
    return _run_query(
        db, "social links",
        lambda: db.query(SocialLink).order_by(SocialLink.id.asc()).all(),
    )


def get_about(db: Session) -> FetchResult:
    """The about row (latest by updated_at when more than one exists)."""
    return _run_query(
        db, "about",
        lambda: (
            db.query(AboutSection)
            .order_by(AboutSection.updated_at.desc(), AboutSection.id.desc())
            .limit(1)
            .all()
        ),
    )


def get_about_cached(db: Session) -> FetchResult:
    """
    get_about behind the about cache.

    Only successful, non-empty results are cached; a failed or empty load is
    fetched again on the next call.
    """
    cached = about_cache.get(ABOUT_CACHE_KEY)
    if cached is not None:
        return cached

    result = get_about(db)
    if result.ok and result.data:
        # Detached so the cached row outlives the request session
        for row in result.data:
            db.expunge(row)
        about_cache.set(ABOUT_CACHE_KEY, result)
    return result


def invalidate_about_cache() -> None:
    about_cache.invalidate(ABOUT_CACHE_KEY)


def get_contact_messages(db: Session) -> FetchResult:
    """Admin-only read: every contact message, newest first."""
    return _run_query(
        db, "contact messages",
        lambda: db.query(ContactMessage).order_by(ContactMessage.created_at.desc(), ContactMessage.id.desc()).all(),
    )
