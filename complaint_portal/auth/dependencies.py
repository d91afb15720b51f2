import logging
from dataclasses import dataclass

import jwt
from fastapi import Depends, HTTPException, Request, status

from complaint_portal.auth import jwt_handler
from complaint_portal.core.config import Settings
from complaint_portal.models.user import Role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurrentUser:
    """Identity taken from a verified bearer token for the current request."""

    user_id: str
    email: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def extract_token(request: Request, cookie_name: str) -> str:
    token = request.cookies.get(cookie_name)
    if token:
        return token

    auth_header = request.headers.get("Authorization")
    if not auth_header:
        logger.debug("No token found in cookie or authorization header for %s", request.url.path)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")

    parts = auth_header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        logger.debug("Invalid authorization header format for %s", request.url.path)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
        )
    return parts[1]


def get_current_user(request: Request, settings: Settings = Depends(get_settings)) -> CurrentUser:
    token = extract_token(request, settings.auth_cookie_name)
    try:
        claims = jwt_handler.decode_access_token(token, settings)
    except jwt.InvalidTokenError as exc:
        logger.debug("Rejected token for %s: %s", request.url.path, exc)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc

    return CurrentUser(user_id=claims.user_id, email=claims.email, role=claims.role)


def require_admin(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not current_user.is_admin:
        logger.warning(
            "Non-admin user %s (role=%s) attempted an admin action",
            current_user.user_id,
            current_user.role.value,
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden: admin access required")
    return current_user
