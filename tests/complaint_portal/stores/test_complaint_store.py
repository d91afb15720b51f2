import pytest

from complaint_portal.core.errors import ComplaintNotFound
from complaint_portal.models.complaint import Complaint, ComplaintStatus
from complaint_portal.models.user import User
from complaint_portal.stores.complaints import ComplaintStore


@pytest.fixture
def owners(db_session):
    alice = User(id='alice-id', email='a@x.com', username='alice', name='Alice', hashed_password='h', role='student')
    bob = User(id='bob-id', email='b@x.com', username='bob', name='Bob', hashed_password='h', role='student')
    db_session.add_all([alice, bob])
    db_session.commit()
    return alice, bob


def _create(store: ComplaintStore, user_id: str, description: str = 'desk broken') -> Complaint:
    return store.create(Complaint(user_id=user_id, description=description, status=ComplaintStatus.PENDING.value))


def test_create_assigns_id_and_pending_status(db_session, owners) -> None:
    store = ComplaintStore(db_session)

    complaint = _create(store, 'alice-id')

    assert complaint.id
    assert complaint.created_at is not None
    assert store.get_by_id(complaint.id).status == 'pending'


def test_list_by_owner_returns_only_owned_complaints(db_session, owners) -> None:
    store = ComplaintStore(db_session)
    mine = _create(store, 'alice-id')
    _create(store, 'bob-id', 'projector broken')

    results = store.list_by_owner('alice-id')

    assert [complaint.id for complaint in results] == [mine.id]
    assert results[0].status == ComplaintStatus.PENDING.value


def test_list_by_owner_filters_by_status(db_session, owners) -> None:
    store = ComplaintStore(db_session)
    approved = _create(store, 'alice-id', 'first')
    _create(store, 'alice-id', 'second')
    store.update_status(approved.id, ComplaintStatus.APPROVED)

    results = store.list_by_owner('alice-id', ComplaintStatus.APPROVED)

    assert [complaint.id for complaint in results] == [approved.id]


def test_list_all_spans_owners_and_filters(db_session, owners) -> None:
    store = ComplaintStore(db_session)
    first = _create(store, 'alice-id')
    second = _create(store, 'bob-id')
    store.update_status(second.id, ComplaintStatus.REJECTED)

    assert {complaint.id for complaint in store.list_all()} == {first.id, second.id}
    assert [complaint.id for complaint in store.list_all(ComplaintStatus.REJECTED)] == [second.id]
    assert store.list_all(ComplaintStatus.APPROVED) == []


def test_get_by_id_returns_none_when_missing(db_session) -> None:
    assert ComplaintStore(db_session).get_by_id('missing') is None


def test_update_status_is_idempotent(db_session, owners) -> None:
    store = ComplaintStore(db_session)
    complaint = _create(store, 'alice-id')

    store.update_status(complaint.id, ComplaintStatus.APPROVED)
    assert store.get_by_id(complaint.id).status == 'approved'

    store.update_status(complaint.id, ComplaintStatus.APPROVED)
    assert store.get_by_id(complaint.id).status == 'approved'


def test_update_status_allows_any_transition(db_session, owners) -> None:
    store = ComplaintStore(db_session)
    complaint = _create(store, 'alice-id')

    for status in (ComplaintStatus.REJECTED, ComplaintStatus.APPROVED, ComplaintStatus.PENDING):
        store.update_status(complaint.id, status)
        assert store.get_by_id(complaint.id).status == status.value


def test_update_status_on_missing_complaint_is_a_no_op(db_session) -> None:
    assert ComplaintStore(db_session).update_status('missing', ComplaintStatus.APPROVED) is None


def test_update_status_appends_admin_comments_in_order(db_session, owners) -> None:
    store = ComplaintStore(db_session)
    complaint = _create(store, 'alice-id')

    store.update_status(complaint.id, ComplaintStatus.REJECTED, comment='Need more detail', admin_id='admin-1')
    store.update_status(complaint.id, ComplaintStatus.APPROVED, comment='Fixed', admin_id='admin-2')
    store.update_status(complaint.id, ComplaintStatus.APPROVED)

    db_session.expire_all()
    comments = store.get_by_id(complaint.id).comments
    assert [(comment.admin_id, comment.content) for comment in comments] == [
        ('admin-1', 'Need more detail'),
        ('admin-2', 'Fixed'),
    ]


def test_like_is_a_set_per_user(db_session, owners) -> None:
    store = ComplaintStore(db_session)
    complaint = _create(store, 'alice-id')

    store.like(complaint.id, 'bob-id')
    liked = store.like(complaint.id, 'bob-id')
    liked = store.like(liked.id, 'alice-id')

    assert liked.like_count == 2
    assert liked.is_liked_by('bob-id') is True


def test_unlike_removes_only_that_user(db_session, owners) -> None:
    store = ComplaintStore(db_session)
    complaint = _create(store, 'alice-id')
    store.like(complaint.id, 'bob-id')
    store.like(complaint.id, 'alice-id')

    unliked = store.unlike(complaint.id, 'bob-id')
    unliked = store.unlike(unliked.id, 'bob-id')

    assert unliked.like_count == 1
    assert unliked.is_liked_by('bob-id') is False
    assert unliked.is_liked_by('alice-id') is True


@pytest.mark.parametrize('operation', ['like', 'unlike'])
def test_like_operations_reject_missing_complaint(db_session, operation: str) -> None:
    with pytest.raises(ComplaintNotFound):
        getattr(ComplaintStore(db_session), operation)('missing', 'bob-id')


def test_delete_removes_complaint(db_session, owners) -> None:
    store = ComplaintStore(db_session)
    complaint = _create(store, 'alice-id')
    store.update_status(complaint.id, ComplaintStatus.REJECTED, comment='Duplicate', admin_id='admin-1')
    store.like(complaint.id, 'bob-id')

    store.delete(complaint.id)

    assert store.get_by_id(complaint.id) is None
    with pytest.raises(ComplaintNotFound):
        store.delete(complaint.id)
