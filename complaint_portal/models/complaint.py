"""Complaint model definitions."""

from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from complaint_portal.database import Base
from complaint_portal.models.user import new_id, utcnow


class ComplaintStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Complaint(Base):
    """A complaint submitted by a student; rows are grouped by owner."""
    __tablename__ = "complaints"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id"), index=True, nullable=False)
    description = Column(Text, nullable=False)
    status = Column(String, index=True, nullable=False, default=ComplaintStatus.PENDING.value)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    comments = relationship(
        "Comment",
        order_by="Comment.created_at",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    likes = relationship(
        "ComplaintLike",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def like_count(self) -> int:
        return len(self.likes)

    def is_liked_by(self, user_id: str) -> bool:
        return any(like.user_id == user_id for like in self.likes)


class Comment(Base):
    """An admin remark attached to a complaint during review."""
    __tablename__ = "complaint_comments"

    id = Column(String(36), primary_key=True, default=new_id)
    complaint_id = Column(String(36), ForeignKey("complaints.id"), index=True, nullable=False)
    admin_id = Column(String(36), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class ComplaintLike(Base):
    """One row per (complaint, user); the composite key keeps likes a set."""
    __tablename__ = "complaint_likes"

    complaint_id = Column(String(36), ForeignKey("complaints.id"), primary_key=True)
    user_id = Column(String(36), primary_key=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
