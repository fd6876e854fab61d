# app/services/contact_service.py
import logging
import uuid

from sqlalchemy.engine import Engine
from sqlmodel import Session

from app.core.clock import utcnow
from app.core.errors import NotFoundError, ValidationError
from app.models.contact import Contact
from app.repositories.contact_repo import ContactRepository
from app.schemas.contact import (
    ContactCreate,
    ContactListResponse,
    ContactRead,
    ContactUpdate,
)
from app.services.notification_service import NotificationDispatcher

logger = logging.getLogger(__name__)


def to_contact_read(contact: Contact) -> ContactRead:
    return ContactRead.model_validate(contact, from_attributes=True)


class ContactService:
    """
    Contact inbox.

    Status lifecycle: new -> read -> replied, closed from anywhere.
    A closed contact can no longer be replied to.
    """

    def __init__(self, repo: ContactRepository):
        self.repo = repo

    def _get(self, session: Session, contact_id: uuid.UUID) -> Contact:
        contact = self.repo.get_by_id(session, contact_id)
        if not contact:
            raise NotFoundError("Contact", contact_id)
        return contact

    def create_contact(self, session: Session, payload: ContactCreate) -> Contact:
        contact = Contact(**payload.model_dump())
        contact = self.repo.save(session, contact)
        logger.info("Contact saved: %s (%s)", contact.id, contact.type)
        return contact

    def list_contacts(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        status: str | None = None,
        type: str | None = None,
        priority: str | None = None,
    ) -> ContactListResponse:
        contacts = self.repo.list_contacts(
            session, skip=skip, limit=limit, status=status, type=type, priority=priority
        )
        return ContactListResponse(
            contacts=[to_contact_read(c) for c in contacts],
            total=self.repo.count(
                session, status=status, type=type, priority=priority
            ),
        )

    def unread_count(self, session: Session) -> int:
        return self.repo.count_by_status(session, "new")

    def view_contact(self, session: Session, contact_id: uuid.UUID) -> Contact:
        """
        Admin view; opening a new contact marks it read.
        """
        contact = self._get(session, contact_id)
        if contact.status == "new":
            contact.status = "read"
            contact = self.repo.save(session, contact)
        return contact

    def mark_as_read(self, session: Session, contact_id: uuid.UUID) -> Contact:
        contact = self._get(session, contact_id)
        contact.status = "read"
        return self.repo.save(session, contact)

    def reply(
        self,
        session: Session,
        contact_id: uuid.UUID,
        replied_by: str,
        admin_notes: str | None = None,
    ) -> Contact:
        contact = self._get(session, contact_id)
        if contact.status == "closed":
            raise ValidationError("Cannot reply to a closed contact")

        contact.status = "replied"
        contact.replied_at = utcnow()
        contact.replied_by = replied_by
        if admin_notes:
            contact.admin_notes = admin_notes
        return self.repo.save(session, contact)

    def close(self, session: Session, contact_id: uuid.UUID) -> Contact:
        contact = self._get(session, contact_id)
        contact.status = "closed"
        return self.repo.save(session, contact)

    def update_contact(
        self,
        session: Session,
        contact_id: uuid.UUID,
        payload: ContactUpdate,
    ) -> Contact:
        contact = self._get(session, contact_id)
        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(contact, field, value)
        return self.repo.save(session, contact)

    # Background job: runs after the response with its own session.
    def notify_contact_created(
        self,
        dispatcher: NotificationDispatcher,
        bind: Engine,
        contact_id: uuid.UUID,
    ) -> None:
        with Session(bind) as session:
            contact = self.repo.get_by_id(session, contact_id)
            if contact is None:
                logger.warning("Contact %s vanished before notification", contact_id)
                return
            dto = to_contact_read(contact)

        dispatcher.send_contact_notification(dto)
        dispatcher.log_contact(dto)
