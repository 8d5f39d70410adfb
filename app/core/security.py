"""Bearer token helpers used to identify (optional) donors."""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from app.config import get_settings

ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24


def create_access_token(subject: str, expires_minutes: Optional[int] = None) -> str:
    settings = get_settings()
    exp = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes or ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {"sub": str(subject), "exp": exp}
    secret = settings.BACKEND_JWT_SECRET or settings.SECRET_KEY
    return jwt.encode(payload, secret, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    settings = get_settings()
    candidates = []
    if settings.BACKEND_JWT_SECRET:
        candidates.append(settings.BACKEND_JWT_SECRET)
    if settings.SECRET_KEY and settings.SECRET_KEY not in candidates:
        candidates.append(settings.SECRET_KEY)

    for secret in candidates:
        try:
            return jwt.decode(token, secret, algorithms=[settings.ALGORITHM])
        except JWTError:
            continue
    return None
