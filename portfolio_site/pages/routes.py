"""
Page view models

One GET route per page of the site. Each composes façade and live-cache
reads into the JSON the page renders. The admin dashboard lives in the admin
router (GET /admin).
"""
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from portfolio_site.content import service
from portfolio_site.content.live import get_live_cache, read_collection
from portfolio_site.content.schemas import (
    AboutResponse,
    AchievementResponse,
    CertificateResponse,
    TestimonialResponse,
)
from portfolio_site.pages import views
from portfolio_site.shared.database import get_db
from portfolio_site.shared.realtime import RealtimeCache

router = APIRouter(tags=["pages"])

HOME_PROJECT_COUNT = 3


def _about(db: Session) -> Optional[AboutResponse]:
    row = service.get_about_cached(db).first
    return AboutResponse.model_validate(row) if row else None


def _social_links(live: Optional[RealtimeCache], db: Session) -> list[dict]:
    return [views.social_link_entry(link) for link in read_collection(live, "social_links", db)]


@router.get("/")
def home_page(
    db: Session = Depends(get_db),
    live: Optional[RealtimeCache] = Depends(get_live_cache),
):
    projects = read_collection(live, "projects", db)
    return {
        "about": _about(db),
        "recent_projects": projects[:HOME_PROJECT_COUNT],
        "social_links": _social_links(live, db),
    }


@router.get("/about")
def about_page(
    category: Optional[str] = None,
    db: Session = Depends(get_db),
    live: Optional[RealtimeCache] = Depends(get_live_cache),
):
    skills = service.get_skills(db).items
    grouped = views.group_skills_by_category(skills)
    shown = skills if not category or category == "all" else grouped.get(category, [])
    return {
        "about": _about(db),
        "skill_categories": list(grouped),
        "selected_category": category or "all",
        "skills": [views.skill_bar(skill) for skill in shown],
        "skills_by_category": {
            name: [views.skill_bar(skill) for skill in members]
            for name, members in grouped.items()
        },
        "social_links": _social_links(live, db),
    }


@router.get("/portfolio")
def portfolio_page(
    tag: Optional[str] = None,
    db: Session = Depends(get_db),
    live: Optional[RealtimeCache] = Depends(get_live_cache),
):
    projects = read_collection(live, "projects", db)
    return {
        "tags": views.collect_tags(projects),
        "selected_tag": tag or "all",
        "projects": views.filter_projects_by_tag(projects, tag),
    }


@router.get("/experience")
def experience_page(
    filter: Literal["all", "work", "education", "volunteer"] = "all",
    db: Session = Depends(get_db),
    live: Optional[RealtimeCache] = Depends(get_live_cache),
):
    entries = views.filter_experience(read_collection(live, "experience", db), filter)
    return {
        "filters": list(views.EXPERIENCE_FILTERS),
        "selected_filter": filter,
        "entries": [views.experience_card(entry) for entry in entries],
    }


@router.get("/certificates")
def certificates_page(db: Session = Depends(get_db)):
    certificates = service.get_certificates(db).unwrap()
    return {
        "certificates": [CertificateResponse.model_validate(c) for c in certificates],
    }


@router.get("/certificates/{certificate_id}")
def certificate_detail_page(certificate_id: int, db: Session = Depends(get_db)):
    certificate = service.get_certificate(db, certificate_id).unwrap_first()
    if not certificate:
        raise HTTPException(
            status_code=404,
            detail={"message": "Certificate not found", "category": "not_found"},
        )
    return {"certificate": CertificateResponse.model_validate(certificate)}


@router.get("/achievements")
def achievements_page(db: Session = Depends(get_db)):
    return {
        "achievements": [
            AchievementResponse.model_validate(a) for a in service.get_achievements(db).items
        ],
    }


@router.get("/testimonials")
def testimonials_page(db: Session = Depends(get_db)):
    return {
        "testimonials": [
            TestimonialResponse.model_validate(t) for t in service.get_testimonials(db).items
        ],
    }


@router.get("/contact")
def contact_page(
    db: Session = Depends(get_db),
    live: Optional[RealtimeCache] = Depends(get_live_cache),
):
    return {
        "social_links": _social_links(live, db),
        "form": {"fields": ["name", "email", "message"], "action": "/contact"},
    }
