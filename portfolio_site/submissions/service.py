"""
Public submissions: contact messages and visitor testimonials.
"""
import logging

from sqlalchemy.orm import Session

from portfolio_site.content.models import ContactMessage, Testimonial
from portfolio_site.content.schemas import ContactSubmission, TestimonialSubmission
from portfolio_site.submissions import mailer

logger = logging.getLogger(__name__)


def submit_contact(db: Session, submission: ContactSubmission) -> tuple[ContactMessage, bool]:
    """
    Store the message, then notify by email.

    The email is only attempted after the row is committed, so a failed
    insert (which propagates) never sends anything. A failed email leaves
    the stored message in place.

    Returns:
        (stored message, whether the email went out)
    """
    payload = submission.model_dump()

    message = ContactMessage(**payload, read=False)
    db.add(message)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(message)
    logger.info(f"Stored contact message {message.id}")

    email_sent = mailer.send_contact_email(payload)
    if not email_sent:
        logger.warning(f"Contact message {message.id} stored without email notification")
    return message, email_sent


def submit_testimonial(db: Session, submission: TestimonialSubmission) -> Testimonial:
    """Store a visitor testimonial. It stays hidden until an admin approves it."""
    testimonial = Testimonial(**submission.model_dump(), is_approved=False)
    db.add(testimonial)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(testimonial)
    logger.info(f"Stored testimonial {testimonial.id} from {testimonial.name} (pending approval)")
    return testimonial
