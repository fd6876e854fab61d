# app/repositories/contact_repo.py
import uuid

from sqlalchemy import func
from sqlmodel import Session, select

from app.core.clock import utcnow
from app.models.contact import Contact


class ContactRepository:
    """
    Data access layer for Contact.
    """

    def get_by_id(self, session: Session, contact_id: uuid.UUID) -> Contact | None:
        return session.get(Contact, contact_id)

    def _filtered(
        self,
        stmt,
        status: str | None = None,
        type: str | None = None,
        priority: str | None = None,
    ):
        if status:
            stmt = stmt.where(Contact.status == status)
        if type:
            stmt = stmt.where(Contact.type == type)
        if priority:
            stmt = stmt.where(Contact.priority == priority)
        return stmt

    def list_contacts(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        **filters,
    ) -> list[Contact]:
        stmt = self._filtered(select(Contact), **filters)
        stmt = stmt.order_by(Contact.created_at.desc()).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def count(self, session: Session, **filters) -> int:
        stmt = self._filtered(select(func.count()).select_from(Contact), **filters)
        return int(session.exec(stmt).one() or 0)

    def count_by_status(self, session: Session, status: str) -> int:
        return self.count(session, status=status)

    def save(self, session: Session, contact: Contact) -> Contact:
        contact.updated_at = utcnow()
        session.add(contact)
        session.commit()
        session.refresh(contact)
        return contact
