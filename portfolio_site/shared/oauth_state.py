"""
OAuth State and PKCE Helpers

Per-request OAuth state (CSRF protection for the admin OAuth sign-in) and
PKCE code verifier/challenge pairs for the Supabase authorization code flow.
"""
import os
import time
import hmac
import hashlib
import secrets
import base64


# State secret for HMAC signing (must be set in production)
STATE_SECRET = os.getenv("STATE_SECRET")

# State expiry time in seconds (10 minutes)
STATE_EXPIRY = 600


def _sign(payload: str) -> str:
    # 32 hex characters (128 bits) per OWASP recommendation for HMAC signatures
    return hmac.new(
        STATE_SECRET.encode(),
        payload.encode(),
        hashlib.sha256
    ).hexdigest()[:32]


def generate_state() -> str:
    """
    Generate a signed, time-bound OAuth state parameter.

    Returns:
        Base64-encoded "timestamp:nonce:signature"

    Raises:
        RuntimeError: If STATE_SECRET is not configured
    """
    if not STATE_SECRET:
        raise RuntimeError(
            "STATE_SECRET environment variable must be set for OAuth security. "
            "Generate one with: python3 -c 'import secrets; print(secrets.token_urlsafe(32))'"
        )

    payload = f"{int(time.time())}:{secrets.token_urlsafe(16)}"
    full_state = f"{payload}:{_sign(payload)}"
    return base64.urlsafe_b64encode(full_state.encode()).decode()


def validate_state(state: str) -> bool:
    """
    Validate an OAuth state parameter: decodable, untampered, not expired.

    Raises:
        RuntimeError: If STATE_SECRET environment variable is not configured
    """
    if not STATE_SECRET:
        raise RuntimeError("STATE_SECRET environment variable must be set")

    try:
        decoded = base64.urlsafe_b64decode(state.encode()).decode()

        parts = decoded.rsplit(":", 2)
        if len(parts) != 3:
            return False

        timestamp_str, nonce, received_signature = parts
        timestamp = int(timestamp_str)

        expected_signature = _sign(f"{timestamp_str}:{nonce}")
        if not hmac.compare_digest(received_signature, expected_signature):
            return False

        if timestamp + STATE_EXPIRY < int(time.time()):
            return False

        return True

    except (ValueError, UnicodeDecodeError, base64.binascii.Error):
        return False


def generate_pkce_pair() -> tuple[str, str]:
    """
    Create a PKCE (verifier, challenge) pair using the S256 method.

    The verifier stays with the server (encrypted cookie); the challenge is
    sent to the authorization endpoint.
    """
    verifier = secrets.token_urlsafe(64)[:96]
    digest = hashlib.sha256(verifier.encode()).digest()
    challenge = base64.urlsafe_b64encode(digest).decode().rstrip("=")
    return verifier, challenge
