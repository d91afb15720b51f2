import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from complaint_portal.auth.dependencies import CurrentUser, get_current_user, get_settings, require_admin
from complaint_portal.core.config import Settings
from complaint_portal.core.errors import ComplaintNotFound
from complaint_portal.dependencies import get_complaint_store, get_publisher
from complaint_portal.models.complaint import Complaint, ComplaintStatus
from complaint_portal.services.notifications import NotificationPublisher
from complaint_portal.stores.complaints import ComplaintStore

router = APIRouter(tags=['complaints'])

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_LENGTH = 5000
MAX_COMMENT_LENGTH = 2000
NO_STORE_HEADERS = {
    'Cache-Control': 'no-store',
    'Pragma': 'no-cache',
    'Expires': '0',
}


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CommentResponse(CamelModel):
    id: str
    admin_id: str
    content: str
    created_at: datetime


class ComplaintResponse(CamelModel):
    id: str
    user_id: str
    description: str
    status: ComplaintStatus
    comments: list[CommentResponse]
    like_count: int
    is_liked: bool
    created_at: datetime

    @classmethod
    def from_complaint(cls, complaint: Complaint, current_user_id: str) -> 'ComplaintResponse':
        return cls(
            id=complaint.id,
            user_id=complaint.user_id,
            description=complaint.description,
            status=ComplaintStatus(complaint.status),
            comments=[
                CommentResponse(
                    id=comment.id,
                    admin_id=comment.admin_id,
                    content=comment.content,
                    created_at=comment.created_at,
                )
                for comment in complaint.comments
            ],
            like_count=complaint.like_count,
            is_liked=complaint.is_liked_by(current_user_id),
            created_at=complaint.created_at,
        )


class CreateComplaintRequest(BaseModel):
    description: str

    @field_validator('description')
    @classmethod
    def validate_description(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Description cannot be empty')
        if len(normalized) > MAX_DESCRIPTION_LENGTH:
            raise ValueError(f'Description must be {MAX_DESCRIPTION_LENGTH} characters or fewer.')
        return normalized


class UpdateComplaintRequest(BaseModel):
    status: str
    comment: str | None = None

    @field_validator('status')
    @classmethod
    def validate_status(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Status cannot be empty')
        try:
            return ComplaintStatus(normalized).value
        except ValueError as exc:
            raise ValueError('Invalid status value') from exc

    @field_validator('comment')
    @classmethod
    def validate_comment(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        if len(normalized) > MAX_COMMENT_LENGTH:
            raise ValueError(f'Comment must be {MAX_COMMENT_LENGTH} characters or fewer.')
        return normalized or None


class UpdateComplaintResponse(CamelModel):
    message: str
    complaint_id: str
    status: ComplaintStatus


def parse_status_filter(value: str | None) -> ComplaintStatus | None:
    if value is None or not value.strip():
        return None
    try:
        return ComplaintStatus(value.strip())
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Invalid status value') from exc


def apply_no_store_headers(response: Response) -> None:
    response.headers.update(NO_STORE_HEADERS)


@router.post('', response_model=ComplaintResponse, status_code=status.HTTP_201_CREATED)
def create_complaint(
    data: CreateComplaintRequest,
    response: Response,
    current_user: CurrentUser = Depends(get_current_user),
    complaints: ComplaintStore = Depends(get_complaint_store),
    publisher: NotificationPublisher = Depends(get_publisher),
    settings: Settings = Depends(get_settings),
):
    complaint = complaints.create(
        Complaint(
            user_id=current_user.user_id,
            description=data.description,
            status=ComplaintStatus.PENDING.value,
        )
    )

    # The complaint is already stored; a publish failure still fails the request.
    publisher.publish(settings.new_complaint_queue, complaint.id)

    logger.info('Complaint %s created by user %s', complaint.id, current_user.user_id)
    apply_no_store_headers(response)
    return ComplaintResponse.from_complaint(complaint, current_user.user_id)


@router.get('', response_model=list[ComplaintResponse])
def list_complaints(
    response: Response,
    status_filter: str | None = Query(default=None, alias='status'),
    complaint_id: str | None = Query(default=None, alias='id'),
    current_user: CurrentUser = Depends(get_current_user),
    complaints: ComplaintStore = Depends(get_complaint_store),
):
    parsed_status = parse_status_filter(status_filter)
    apply_no_store_headers(response)

    if complaint_id:
        if not current_user.is_admin:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail='Forbidden: admin access required',
            )
        complaint = complaints.get_by_id(complaint_id)
        if complaint is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Complaint not found')
        if parsed_status is not None and complaint.status != parsed_status.value:
            return []
        return [ComplaintResponse.from_complaint(complaint, current_user.user_id)]

    if current_user.is_admin:
        logger.info('Admin %s listing all complaints (status=%s)', current_user.user_id, status_filter)
        results = complaints.list_all(parsed_status)
    else:
        logger.info('User %s listing own complaints (status=%s)', current_user.user_id, status_filter)
        results = complaints.list_by_owner(current_user.user_id, parsed_status)

    return [ComplaintResponse.from_complaint(complaint, current_user.user_id) for complaint in results]


@router.put('/{complaint_id}', response_model=UpdateComplaintResponse)
def update_complaint(
    complaint_id: str,
    data: UpdateComplaintRequest,
    admin: CurrentUser = Depends(require_admin),
    complaints: ComplaintStore = Depends(get_complaint_store),
    publisher: NotificationPublisher = Depends(get_publisher),
    settings: Settings = Depends(get_settings),
):
    new_status = ComplaintStatus(data.status)
    complaints.update_status(complaint_id, new_status, comment=data.comment, admin_id=admin.user_id)
    publisher.publish(settings.status_changed_queue, complaint_id)

    logger.info('Admin %s set complaint %s to %s', admin.user_id, complaint_id, new_status.value)
    return UpdateComplaintResponse(
        message='Complaint status updated successfully',
        complaint_id=complaint_id,
        status=new_status,
    )


@router.post('/{complaint_id}/like', response_model=ComplaintResponse)
def like_complaint(
    complaint_id: str,
    response: Response,
    current_user: CurrentUser = Depends(get_current_user),
    complaints: ComplaintStore = Depends(get_complaint_store),
):
    try:
        complaint = complaints.like(complaint_id, current_user.user_id)
    except ComplaintNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Complaint not found') from exc

    apply_no_store_headers(response)
    return ComplaintResponse.from_complaint(complaint, current_user.user_id)


@router.delete('/{complaint_id}/like', response_model=ComplaintResponse)
def unlike_complaint(
    complaint_id: str,
    response: Response,
    current_user: CurrentUser = Depends(get_current_user),
    complaints: ComplaintStore = Depends(get_complaint_store),
):
    try:
        complaint = complaints.unlike(complaint_id, current_user.user_id)
    except ComplaintNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Complaint not found') from exc

    apply_no_store_headers(response)
    return ComplaintResponse.from_complaint(complaint, current_user.user_id)
