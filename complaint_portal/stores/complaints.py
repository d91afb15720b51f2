import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from complaint_portal.core.errors import ComplaintNotFound
from complaint_portal.models.complaint import Comment, Complaint, ComplaintLike, ComplaintStatus
from complaint_portal.models.user import new_id, utcnow

logger = logging.getLogger(__name__)


class ComplaintStore:
    def __init__(self, db: Session):
        self.db = db

    def create(self, complaint: Complaint) -> Complaint:
        if not complaint.id:
            complaint.id = new_id()

        self.db.add(complaint)
        self.db.commit()
        return complaint

    def list_by_owner(self, user_id: str, status: ComplaintStatus | None = None) -> list[Complaint]:
        query = self.db.query(Complaint).filter(Complaint.user_id == user_id)
        if status is not None:
            query = query.filter(Complaint.status == ComplaintStatus(status).value)

        complaints = query.order_by(Complaint.created_at.desc()).all()
        logger.debug("Retrieved %d complaints for user %s (status=%s)", len(complaints), user_id, status)
        return complaints

    def list_all(self, status: ComplaintStatus | None = None) -> list[Complaint]:
        query = self.db.query(Complaint)
        if status is not None:
            query = query.filter(Complaint.status == ComplaintStatus(status).value)

        complaints = query.order_by(Complaint.created_at.desc()).all()
        logger.debug("Retrieved %d complaints across all users (status=%s)", len(complaints), status)
        return complaints

    def get_by_id(self, complaint_id: str) -> Complaint | None:
        return self.db.get(Complaint, complaint_id)

    def update_status(
        self,
        complaint_id: str,
        new_status: ComplaintStatus,
        comment: str | None = None,
        admin_id: str | None = None,
    ) -> Complaint | None:
        """Set the status and optionally append an admin comment.

        A missing complaint is not an error: nothing is written and ``None`` is returned.
        """
        complaint = self.get_by_id(complaint_id)
        if complaint is None:
            logger.debug("Complaint %s not found for update", complaint_id)
            return None

        old_status = complaint.status
        complaint.status = ComplaintStatus(new_status).value
        if comment:
            complaint.comments.append(
                Comment(id=new_id(), admin_id=admin_id or "", content=comment, created_at=utcnow())
            )

        self.db.commit()
        logger.info(
            "Complaint %s status changed %s -> %s%s",
            complaint_id,
            old_status,
            complaint.status,
            " with comment" if comment else "",
        )
        return complaint

    def like(self, complaint_id: str, user_id: str) -> Complaint:
        complaint = self._require(complaint_id)
        if complaint.is_liked_by(user_id):
            logger.debug("User %s already liked complaint %s", user_id, complaint_id)
            return complaint

        complaint.likes.append(ComplaintLike(user_id=user_id, created_at=utcnow()))
        try:
            self.db.commit()
        except IntegrityError:
            # A concurrent request recorded the same like first.
            self.db.rollback()
            complaint = self._require(complaint_id)

        logger.info("User %s liked complaint %s (likes=%d)", user_id, complaint_id, complaint.like_count)
        return complaint

    def unlike(self, complaint_id: str, user_id: str) -> Complaint:
        complaint = self._require(complaint_id)
        remaining = [like for like in complaint.likes if like.user_id != user_id]
        if len(remaining) == len(complaint.likes):
            logger.debug("User %s had not liked complaint %s", user_id, complaint_id)
            return complaint

        complaint.likes = remaining
        self.db.commit()
        logger.info("User %s unliked complaint %s (likes=%d)", user_id, complaint_id, complaint.like_count)
        return complaint

    def delete(self, complaint_id: str) -> None:
        complaint = self._require(complaint_id)
        self.db.delete(complaint)
        self.db.commit()
        logger.info("Deleted complaint %s owned by %s", complaint_id, complaint.user_id)

    def _require(self, complaint_id: str) -> Complaint:
        complaint = self.get_by_id(complaint_id)
        if complaint is None:
            logger.debug("Complaint %s not found", complaint_id)
            raise ComplaintNotFound(complaint_id)
        return complaint
