import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, field_validator

from complaint_portal.auth import jwt_handler
from complaint_portal.auth.dependencies import get_settings
from complaint_portal.auth.passwords import MAX_PASSWORD_BYTES, hash_password, verify_password
from complaint_portal.core.config import Settings
from complaint_portal.core.errors import DuplicateUser
from complaint_portal.dependencies import get_user_store
from complaint_portal.models.user import Role, User
from complaint_portal.stores.users import UserStore

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)

def _normalize_email(value: str) -> str:
    normalized = value.strip().lower()
    if not normalized:
        raise ValueError('Email is required.')
    if '@' not in normalized:
        raise ValueError('Email must be a valid email address.')
    return normalized


def _require_password(value: str) -> str:
    if not value:
        raise ValueError('Password is required.')
    return value


def _validate_password(value: str) -> str:
    _require_password(value)
    if len(value.encode('utf-8')) > MAX_PASSWORD_BYTES:
        raise ValueError(f'Password must be at most {MAX_PASSWORD_BYTES} bytes.')
    return value


class RegisterRequest(BaseModel):
    email: str
    username: str
    name: str
    password: str

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _normalize_email(value)

    @field_validator('username', 'name')
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Field is required.')
        return normalized

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        return _validate_password(value)


class RegisterResponse(BaseModel):
    id: str
    email: str
    username: str
    name: str
    token: str


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _normalize_email(value)

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        return _require_password(value)


class LoginResponse(BaseModel):
    token: str
    role: Role


def set_auth_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=settings.jwt_expires_minutes * 60,
        path='/',
        httponly=True,
        secure=settings.auth_cookie_secure,
        samesite='lax',
    )


def clear_auth_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.auth_cookie_name,
        path='/',
        httponly=True,
        secure=settings.auth_cookie_secure,
        samesite='lax',
    )


@router.post('/register', response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    data: RegisterRequest,
    users: UserStore = Depends(get_user_store),
    settings: Settings = Depends(get_settings),
):
    if users.get_by_email(data.email) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail='User with this email already exists')
    if users.get_by_username(data.username) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail='User with this username already exists')

    user = User(
        email=data.email,
        username=data.username,
        name=data.name,
        hashed_password=hash_password(data.password, rounds=settings.bcrypt_rounds),
        role=Role.STUDENT.value,
    )
    try:
        user = users.create_user(user)
    except DuplicateUser as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    token = jwt_handler.create_access_token(user.id, user.email, user.role, settings)
    logger.info('Registered user %s', user.id)

    return RegisterResponse(id=user.id, email=user.email, username=user.username, name=user.name, token=token)


@router.post('/login', response_model=LoginResponse)
def login(
    data: LoginRequest,
    response: Response,
    users: UserStore = Depends(get_user_store),
    settings: Settings = Depends(get_settings),
):
    user = users.get_by_email(data.email)
    if user is None:
        logger.debug('Login attempt with unknown email %s', data.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Invalid credentials')

    if not verify_password(data.password, user.hashed_password):
        logger.debug('Login attempt with invalid password for %s', data.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Invalid credentials')

    token = jwt_handler.create_access_token(user.id, user.email, user.role, settings)
    set_auth_cookie(response, token, settings)

    logger.info('User %s logged in with role %s', user.id, user.role)
    return LoginResponse(token=token, role=Role(user.role))


@router.post('/logout')
def logout(response: Response, settings: Settings = Depends(get_settings)):
    clear_auth_cookie(response, settings)
    logger.info('User logged out')
    return {'message': 'Logged out successfully'}
