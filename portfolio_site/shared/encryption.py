"""
Cookie Encryption Utilities

Symmetric encryption (Fernet, AES-128-CBC + HMAC) for short-lived secrets the
server hands to the browser, such as the OAuth PKCE code verifier.
"""

import os
import base64
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC


ENCRYPTION_KEY = os.getenv("ENCRYPTION_KEY")

# Fixed salt is fine here since the key itself is secret
SALT = b"portfolio_site_cookie_salt_v1"


def _get_fernet() -> Fernet:
    """
    Get Fernet cipher instance.

    Raises:
        RuntimeError: If ENCRYPTION_KEY is not set
    """
    if not ENCRYPTION_KEY:
        raise RuntimeError(
            "ENCRYPTION_KEY environment variable must be set for cookie encryption. "
            "Generate one with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
        )

    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=SALT,
        iterations=100000,
    )
    key = base64.urlsafe_b64encode(kdf.derive(ENCRYPTION_KEY.encode()))
    return Fernet(key)


def encrypt_value(plaintext: str) -> str:
    """Encrypt a value for a cookie. Empty values pass through unchanged."""
    if not plaintext:
        return plaintext

    return _get_fernet().encrypt(plaintext.encode()).decode()


def decrypt_value(ciphertext: str, max_age: Optional[int] = None) -> Optional[str]:
    """
    Decrypt a cookie value.

    Args:
        ciphertext: The encrypted value
        max_age: Reject tokens older than this many seconds

    Returns:
        The plaintext, or None when the value was tampered with or expired
    """
    if not ciphertext:
        return None

    try:
        return _get_fernet().decrypt(ciphertext.encode(), ttl=max_age).decode()
    except InvalidToken:
        return None
