"""User model definitions."""

import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import Column, DateTime, String
from complaint_portal.database import Base


class Role(str, Enum):
    STUDENT = "student"
    ADMIN = "admin"


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """Represents an application user."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String, unique=True, index=True, nullable=False)
    username = Column(String, unique=True, index=True)
    name = Column(String, nullable=False, default="")
    hashed_password = Column(String, nullable=False)
    role = Column(String, nullable=False, default=Role.STUDENT.value)  # student/admin
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
