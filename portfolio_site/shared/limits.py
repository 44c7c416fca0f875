"""
Rate limiting for the public submission endpoints

Contact messages and testimonials can be posted without an account, so they
are throttled per client address.
"""
import os

from slowapi import Limiter
from slowapi.util import get_remote_address

CONTACT_RATE_LIMIT = os.getenv("CONTACT_RATE_LIMIT", "5/minute")
RATELIMIT_ENABLED = os.getenv("RATELIMIT_ENABLED", "true").lower() == "true"

limiter = Limiter(key_func=get_remote_address, enabled=RATELIMIT_ENABLED)
