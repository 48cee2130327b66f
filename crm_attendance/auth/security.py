from datetime import datetime, timedelta, timezone
from typing import Dict, Optional
from uuid import UUID

from jose import jwt

from crm_attendance.core.config import settings


def create_access_token(user_id: UUID, *, expires_minutes: Optional[int] = None) -> str:
    """Session token for a CRM user, carrying the id in both `id` and `sub`.

    Production tokens come from the identity service; this mirrors their claims
    for scripts and tests.
    """
    ttl = settings.access_token_expire_minutes if expires_minutes is None else expires_minutes
    claims = {
        "id": str(user_id),
        "sub": str(user_id),
        "exp": datetime.now(timezone.utc) + timedelta(minutes=ttl),
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict:
    """Decode and verify a token. Raises jose.JWTError when invalid or expired."""
    return jwt.decode(
        token,
        settings.jwt_secret_key,
        algorithms=[settings.jwt_algorithm],
    )
