# backend/app/core/security.py

import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional

from app.core.config_loader import settings


ALGORITHM = "HS256"
ANONYMOUS_USER = "anonymous"


# ---------------------------------------------------------------------------
# JWT CREATION
# ---------------------------------------------------------------------------
def create_access_token(subject: str, expires_minutes: int = 7 * 24 * 60) -> str:
    """
    Default expiration = 7 days
    """
    now = datetime.now(timezone.utc)

    payload = {
        "sub": subject,
        "exp": now + timedelta(minutes=expires_minutes),
        "iat": now,
    }

    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=ALGORITHM)


# ---------------------------------------------------------------------------
# JWT VERIFY
# ---------------------------------------------------------------------------
def decode_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.PyJWTError:
        return None


def user_id_from_header(authorization: Optional[str]) -> str:
    """Owner for new conversations: the bearer token subject, else anonymous."""
    if not authorization or not authorization.startswith("Bearer "):
        return ANONYMOUS_USER
    payload = decode_token(authorization.split(" ", 1)[1])
    if not payload or not payload.get("sub"):
        return ANONYMOUS_USER
    return str(payload["sub"])
