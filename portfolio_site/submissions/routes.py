"""
Public submission endpoints (rate limited per client address)
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portfolio_site.content.schemas import (
    ContactSubmission,
    TestimonialResponse,
    TestimonialSubmission,
)
from portfolio_site.shared.database import get_db
from portfolio_site.shared.errors import log_and_sanitize_error
from portfolio_site.shared.limits import CONTACT_RATE_LIMIT, limiter
from portfolio_site.submissions import service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["submissions"])


class ContactReceipt(BaseModel):
    id: int
    email_sent: bool
    message: str


@router.post("/contact", response_model=ContactReceipt, status_code=201)
@limiter.limit(CONTACT_RATE_LIMIT)
def submit_contact(
    request: Request,
    submission: ContactSubmission,
    db: Session = Depends(get_db),
):
    try:
        message, email_sent = service.submit_contact(db, submission)
    except SQLAlchemyError as e:
        msg, _ = log_and_sanitize_error(e, "Contact submission", "Your message could not be sent")
        raise HTTPException(status_code=500, detail={"message": msg, "category": "database"})

    return ContactReceipt(
        id=message.id,
        email_sent=email_sent,
        message="Thanks for reaching out! I'll get back to you soon.",
    )


@router.post("/testimonials", response_model=TestimonialResponse, status_code=201)
@limiter.limit(CONTACT_RATE_LIMIT)
def submit_testimonial(
    request: Request,
    submission: TestimonialSubmission,
    db: Session = Depends(get_db),
):
    """Visitor testimonial; published once an admin approves it."""
    try:
        return service.submit_testimonial(db, submission)
    except SQLAlchemyError as e:
        msg, _ = log_and_sanitize_error(e, "Testimonial submission", "Your testimonial could not be saved")
        raise HTTPException(status_code=500, detail={"message": msg, "category": "database"})
