from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt

from skportal.core.config import get_settings

settings = get_settings()


def create_access_token(profile_id: UUID, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token whose subject is the profile id."""
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.access_token_expire_minutes)

    to_encode = {
        "sub": str(profile_id),
        "exp": expire,
        "type": "access"
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_token(token: str) -> Optional[UUID]:
    """Decode and validate a JWT access token. Returns the profile id if valid."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None

    profile_id = payload.get("sub")
    if profile_id is None or payload.get("type") != "access":
        return None

    try:
        return UUID(profile_id)
    except ValueError:
        return None
