# app/models/contact.py
import uuid
from datetime import datetime

from sqlmodel import SQLModel, Field

from app.core.clock import utcnow


class Contact(SQLModel, table=True):
    """
    Inbound customer inquiry.

    Status lifecycle:
      new -> read      (first admin view / explicit mark)
      new -> replied   (admin reply; stamps replied_at / replied_by)
      any -> closed    (explicit admin action)
    """

    __tablename__ = "contacts"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(max_length=100)
    phone: str
    email: str | None = None
    subject: str | None = Field(default=None, max_length=200)
    message: str = Field(max_length=2000)

    # inquiry | complaint | suggestion | support | other
    type: str = Field(default="inquiry", index=True)
    # new | read | replied | closed
    status: str = Field(default="new", index=True)
    # low | medium | high | urgent
    priority: str = Field(default="medium", index=True)

    admin_notes: str | None = None
    replied_at: datetime | None = None
    replied_by: str | None = None

    created_at: datetime = Field(
        default_factory=utcnow,
        index=True,
        description="Creation timestamp (UTC)",
    )
    updated_at: datetime = Field(default_factory=utcnow)
