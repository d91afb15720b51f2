import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, field_validator

from complaint_portal.auth.dependencies import CurrentUser, get_current_user
from complaint_portal.core.errors import UserNotFound, UsernameTaken
from complaint_portal.dependencies import get_user_store
from complaint_portal.models.user import User
from complaint_portal.stores.users import UserStore

router = APIRouter(tags=['users'])

logger = logging.getLogger(__name__)


class UserInfoResponse(BaseModel):
    id: str
    email: str
    name: str
    username: str
    role: str

    @classmethod
    def from_user(cls, user: User) -> 'UserInfoResponse':
        return cls(
            id=user.id,
            email=user.email,
            name=user.name or '',
            username=user.username or '',
            role=user.role,
        )


class UpdateUserProfileRequest(BaseModel):
    name: str | None = None
    username: str | None = None

    @field_validator('name', 'username')
    @classmethod
    def strip_blank(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


@router.get('/me', response_model=UserInfoResponse)
def get_user_info(
    current_user: CurrentUser = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
):
    user = users.get_by_id(current_user.user_id)
    if user is None:
        logger.error('User %s from a valid token was not found', current_user.user_id)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='User not found')

    return UserInfoResponse.from_user(user)


@router.put('/me', response_model=UserInfoResponse)
def update_user_profile(
    data: UpdateUserProfileRequest,
    current_user: CurrentUser = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
):
    if data.name is None and data.username is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='At least one field (name or username) must be provided',
        )

    try:
        user = users.update_profile(current_user.user_id, name=data.name, username=data.username)
    except UsernameTaken as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail='Username already exists') from exc
    except UserNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='User not found') from exc

    return UserInfoResponse.from_user(user)
