# app/routers/contact.py
import uuid

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.repositories.contact_repo import ContactRepository
from app.schemas.contact import (
    ContactCreate,
    ContactCreated,
    ContactListResponse,
    ContactPriority,
    ContactRead,
    ContactReply,
    ContactStatus,
    ContactType,
    ContactUpdate,
    UnreadCount,
)
from app.services.contact_service import ContactService, to_contact_read
from app.services.notification_service import (
    NotificationDispatcher,
    get_notification_dispatcher,
)

router = APIRouter(prefix="/contact", tags=["Contact"])

repo = ContactRepository()
service = ContactService(repo)


# -------- Public endpoint --------


@router.post(
    "",
    response_model=ContactCreated,
    status_code=status.HTTP_201_CREATED,
)
def create_contact(
    payload: ContactCreate,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """
    Submit the contact form. Admins are notified in the background.
    """
    contact = service.create_contact(session, payload)
    background_tasks.add_task(
        service.notify_contact_created, dispatcher, session.get_bind(), contact.id
    )
    return ContactCreated(message="Message sent successfully", id=contact.id)


# -------- Admin endpoints --------


@router.get(
    "",
    response_model=ContactListResponse,
    dependencies=[Depends(require_admin)],
)
def list_contacts(
    session: Session = Depends(get_session),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    status: ContactStatus | None = None,
    type: ContactType | None = None,
    priority: ContactPriority | None = None,
):
    return service.list_contacts(
        session, skip=skip, limit=limit, status=status, type=type, priority=priority
    )


@router.get(
    "/unread-count",
    response_model=UnreadCount,
    dependencies=[Depends(require_admin)],
)
def unread_count(session: Session = Depends(get_session)):
    return UnreadCount(unread=service.unread_count(session))


@router.get(
    "/{contact_id}",
    response_model=ContactRead,
    dependencies=[Depends(require_admin)],
)
def get_contact(
    contact_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    View a contact; a new one is marked read.
    """
    return to_contact_read(service.view_contact(session, contact_id))


@router.post(
    "/{contact_id}/read",
    response_model=ContactRead,
    dependencies=[Depends(require_admin)],
)
def mark_as_read(
    contact_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return to_contact_read(service.mark_as_read(session, contact_id))


@router.post("/{contact_id}/reply", response_model=ContactRead)
def reply_to_contact(
    contact_id: uuid.UUID,
    payload: ContactReply | None = None,
    session: Session = Depends(get_session),
    admin: str = Depends(require_admin),
):
    """
    Mark a contact replied; the calling admin is recorded as `replied_by`.
    """
    admin_notes = payload.admin_notes if payload else None
    return to_contact_read(service.reply(session, contact_id, admin, admin_notes))


@router.post(
    "/{contact_id}/close",
    response_model=ContactRead,
    dependencies=[Depends(require_admin)],
)
def close_contact(
    contact_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return to_contact_read(service.close(session, contact_id))


@router.patch(
    "/{contact_id}",
    response_model=ContactRead,
    dependencies=[Depends(require_admin)],
)
def update_contact(
    contact_id: uuid.UUID,
    payload: ContactUpdate,
    session: Session = Depends(get_session),
):
    return to_contact_read(service.update_contact(session, contact_id, payload))
