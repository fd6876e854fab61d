# app/schemas/contact.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.schemas.common import is_valid_email, is_valid_phone, strip_or_none

ContactType = Literal["inquiry", "complaint", "suggestion", "support", "other"]
ContactStatus = Literal["new", "read", "replied", "closed"]
ContactPriority = Literal["low", "medium", "high", "urgent"]


class ContactCreate(SQLModel):
    """
    Public payload for the contact form.

    Validation rules:
      - phone must match +998XXXXXXXXX
      - email, if given, must look like an address (stored lowercase)
      - name / message cannot be blank
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)
    phone: str
    email: str | None = None
    subject: str | None = Field(default=None, max_length=200)
    message: str = Field(max_length=2000)
    type: ContactType = "inquiry"
    priority: ContactPriority = "medium"

    @field_validator("name", "message")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: str) -> str:
        v = v.strip()
        if not is_valid_phone(v):
            raise ValueError("phone must match +998XXXXXXXXX")
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str | None) -> str | None:
        v = strip_or_none(v)
        if v is None:
            return v
        v = v.lower()
        if not is_valid_email(v):
            raise ValueError("invalid email format")
        return v

    @field_validator("subject")
    @classmethod
    def normalize_subject(cls, v: str | None) -> str | None:
        return strip_or_none(v)


class ContactRead(SQLModel):
    id: uuid.UUID
    name: str
    phone: str
    email: str | None
    subject: str | None
    message: str
    type: ContactType
    status: ContactStatus
    priority: ContactPriority
    admin_notes: str | None
    replied_at: datetime | None
    replied_by: str | None
    created_at: datetime
    updated_at: datetime


class ContactCreated(SQLModel):
    message: str
    id: uuid.UUID


class ContactListResponse(SQLModel):
    contacts: list[ContactRead]
    total: int


class ContactUpdate(SQLModel):
    """
    Admin partial update.
    """

    model_config = ConfigDict(extra="forbid")

    admin_notes: str | None = None
    priority: ContactPriority | None = None


class ContactReply(SQLModel):
    model_config = ConfigDict(extra="forbid")

    admin_notes: str | None = None


class UnreadCount(SQLModel):
    unread: int
