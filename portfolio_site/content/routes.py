"""
Public content API

Read-only collection endpoints under /api. Every list degrades to [] when
the database read fails, except certificates, whose failures surface as a
500 with a sanitized message.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from portfolio_site.content import service
from portfolio_site.content.live import get_live_cache, read_collection
from portfolio_site.content.schemas import (
    AboutResponse,
    AchievementResponse,
    CertificateResponse,
    ExperienceResponse,
    ProjectResponse,
    SkillResponse,
    SocialLinkResponse,
    TestimonialResponse,
)
from portfolio_site.shared.database import get_db
from portfolio_site.shared.realtime import RealtimeCache

router = APIRouter(prefix="/api", tags=["content"])


@router.get("/projects", response_model=list[ProjectResponse])
def list_projects(
    db: Session = Depends(get_db),
    live: Optional[RealtimeCache] = Depends(get_live_cache),
):
    """Projects, newest first."""
    return read_collection(live, "projects", db)


@router.get("/experience", response_model=list[ExperienceResponse])
def list_experience(
    db: Session = Depends(get_db),
    live: Optional[RealtimeCache] = Depends(get_live_cache),
):
    return read_collection(live, "experience", db)


@router.get("/social-links", response_model=list[SocialLinkResponse])
def list_social_links(
    db: Session = Depends(get_db),
    live: Optional[RealtimeCache] = Depends(get_live_cache),
):
    return read_collection(live, "social_links", db)


@router.get("/skills", response_model=list[SkillResponse])
def list_skills(db: Session = Depends(get_db)):
    return service.get_skills(db).items


@router.get("/certificates", response_model=list[CertificateResponse])
def list_certificates(db: Session = Depends(get_db)):
    return service.get_certificates(db).unwrap()


@router.get("/certificates/{certificate_id}", response_model=CertificateResponse)
def get_certificate(certificate_id: int, db: Session = Depends(get_db)):
    certificate = service.get_certificate(db, certificate_id).unwrap_first()
    if not certificate:
        raise HTTPException(status_code=404, detail="Certificate not found")
    return certificate


@router.get("/achievements", response_model=list[AchievementResponse])
def list_achievements(db: Session = Depends(get_db)):
    """Approved achievements only."""
    return service.get_achievements(db).items


@router.get("/testimonials", response_model=list[TestimonialResponse])
def list_testimonials(db: Session = Depends(get_db)):
    """Approved testimonials only."""
    return service.get_testimonials(db).items


@router.get("/about", response_model=Optional[AboutResponse])
def get_about(db: Session = Depends(get_db)):
    return service.get_about_cached(db).first
