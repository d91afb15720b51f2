import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from complaint_portal.core.errors import DuplicateUser, InvalidRole, UserNotFound, UsernameTaken
from complaint_portal.models.user import Role, User, new_id

logger = logging.getLogger(__name__)


class UserStore:
    """Credential store. Email and username uniqueness rests on the unique indexes."""

    def __init__(self, db: Session):
        self.db = db

    def create_user(self, user: User) -> User:
        try:
            user.role = Role(user.role).value
        except ValueError as exc:
            logger.error("Invalid user role %r", user.role)
            raise InvalidRole(user.role) from exc

        if not user.id:
            user.id = new_id()

        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateUser(self._conflicting_field(user)) from exc

        logger.info("Created user %s with role %s", user.id, user.role)
        return user

    def get_by_id(self, user_id: str) -> User | None:
        return self.db.get(User, user_id)

    def get_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == email).first()

    def get_by_username(self, username: str) -> User | None:
        return self.db.query(User).filter(User.username == username).first()

    def update_profile(self, user_id: str, name: str | None = None, username: str | None = None) -> User:
        user = self.get_by_id(user_id)
        if user is None:
            logger.debug("User %s not found for update", user_id)
            raise UserNotFound(user_id)

        if name:
            user.name = name

        if username:
            existing = self.get_by_username(username)
            if existing is not None and existing.id != user_id:
                logger.debug("Username %s already taken", username)
                raise UsernameTaken(username)
            user.username = username

        try:
            self.db.commit()
        except IntegrityError as exc:
            # Another request claimed the username between the check and the write.
            self.db.rollback()
            raise UsernameTaken(username or "") from exc

        logger.info("Updated profile for user %s", user_id)
        return user

    def _conflicting_field(self, user: User) -> str:
        existing = self.get_by_email(user.email)
        if existing is not None and existing.id != user.id:
            return "email"
        return "username"
