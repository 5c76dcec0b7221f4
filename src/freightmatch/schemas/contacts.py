"""Contact schemas."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from ..models.domain import Contact


class ContactRequest(BaseModel):
    name: Optional[str] = Field(default=None, max_length=200)
    phone: Optional[str] = Field(default=None, max_length=40)


class ContactResponse(BaseModel):
    user_id: str
    name: Optional[str] = None
    phone: Optional[str] = None

    @classmethod
    def from_domain(cls, contact: Contact) -> "ContactResponse":
        return cls(user_id=contact.user_id, name=contact.name, phone=contact.phone)
