from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from complaint_portal.core.config import HMAC_ALGORITHMS, Settings
from complaint_portal.models.user import Role


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    email: str
    role: Role


def create_access_token(user_id: str, email: str, role: Role | str, settings: Settings) -> str:
    issued_at = datetime.now(timezone.utc)
    expire = issued_at + timedelta(minutes=settings.jwt_expires_minutes)
    payload = {
        "userId": user_id,
        "email": email,
        "role": Role(role).value,
        "iat": issued_at,
        "exp": expire,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> TokenClaims:
    """Verify signature, algorithm family and expiry; raise jwt.InvalidTokenError otherwise."""
    payload = jwt.decode(
        token,
        settings.jwt_secret_key,
        algorithms=list(HMAC_ALGORITHMS),
        options={"require": ["exp", "iat", "userId", "role"]},
    )

    user_id = payload.get("userId")
    if not isinstance(user_id, str) or not user_id:
        raise jwt.InvalidTokenError("Invalid token subject")

    try:
        role = Role(payload["role"])
    except ValueError as exc:
        raise jwt.InvalidTokenError("Invalid role claim") from exc

    return TokenClaims(user_id=user_id, email=payload.get("email", ""), role=role)
