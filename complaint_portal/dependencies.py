from collections.abc import Iterator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from complaint_portal.services.notifications import NotificationPublisher
from complaint_portal.stores.complaints import ComplaintStore
from complaint_portal.stores.users import UserStore


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_user_store(db: Session = Depends(get_db)) -> UserStore:
    return UserStore(db)


def get_complaint_store(db: Session = Depends(get_db)) -> ComplaintStore:
    return ComplaintStore(db)


def get_publisher(request: Request) -> NotificationPublisher:
    return request.app.state.publisher
