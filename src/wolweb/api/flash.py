"""Signed one-shot flash messages for the dashboard (itsdangerous)."""

import secrets
from typing import Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

COOKIE_NAME = "wolweb_flash"
DEFAULT_MAX_AGE = 60  # seconds
_SALT = "wolweb.flash"


def generate_secret() -> str:
    """Generate a cryptographically secure 32-byte hex secret for cookie signing."""
    return secrets.token_hex(32)


def make_flash_cookie(secret: str, category: str, message: str) -> str:
    """
    Create a signed flash cookie value.

    Args:
        secret: Hex secret (web.session_secret or a per-process one).
        category: "success" or "error"; selects the alert style.
        message: Text shown once on the next dashboard render.

    Returns:
        Signed string to set as the cookie value.
    """
    serializer = URLSafeTimedSerializer(secret, salt=_SALT)
    return serializer.dumps({"category": category, "message": message})


def read_flash_cookie(
    cookie: str, secret: str, max_age: int = DEFAULT_MAX_AGE
) -> Optional[tuple[str, str]]:
    """
    Verify and decode a flash cookie.

    Returns:
        (category, message), or None if the cookie is missing, forged or expired.
    """
    if not cookie:
        return None
    serializer = URLSafeTimedSerializer(secret, salt=_SALT)
    try:
        data = serializer.loads(cookie, max_age=max_age)
    except (BadSignature, SignatureExpired):
        return None
    if not isinstance(data, dict):
        return None
    return str(data.get("category", "error")), str(data.get("message", ""))
