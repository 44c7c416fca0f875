"""
Contact email notification through the Supabase edge function
"""
import logging
import os

import requests

from portfolio_site.shared.supabase import SUPABASE_ANON_KEY, SUPABASE_URL

logger = logging.getLogger(__name__)

EMAIL_FUNCTION_URL = os.getenv(
    "EMAIL_FUNCTION_URL",
    f"{SUPABASE_URL.rstrip('/')}/functions/v1/send-contact-email" if SUPABASE_URL else "",
)


def send_contact_email(payload: dict) -> bool:
    """
    POST a contact message to the email function.
    Returns True when the function accepted it; failures are logged, not raised.
    """
    if not EMAIL_FUNCTION_URL:
        logger.warning("EMAIL_FUNCTION_URL not configured, contact email not sent")
        return False

    headers = {"Authorization": f"Bearer {SUPABASE_ANON_KEY}"}

    try:
        response = requests.post(EMAIL_FUNCTION_URL, json=payload, headers=headers, timeout=10)
        response.raise_for_status()
        return True
    except requests.RequestException as e:
        logger.error(f"Failed to send contact email: {e}")
        return False
