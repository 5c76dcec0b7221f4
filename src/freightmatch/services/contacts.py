"""Contact details shared between the parties of an accepted match."""

from __future__ import annotations

import logging
from typing import Optional

from ..errors import NotFound, ValidationFailed
from ..models.domain import Contact
from ..persistence.store import MarketplaceStore

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


def save_contact(user_id: str, name: Optional[str], phone: Optional[str], *, store: MarketplaceStore) -> Contact:
    contact = Contact(user_id=user_id, name=_clean(name), phone=_clean(phone))
    if contact.name is None and contact.phone is None:
        raise ValidationFailed("A contact needs at least a name or a phone number.")
    store.save_contact(contact)
    logger.info(f"Contact details saved for user {user_id}")
    return contact


def get_contact(user_id: str, *, store: MarketplaceStore) -> Contact:
    contact = store.get_contact(user_id)
    if contact is None:
        raise NotFound(f"No contact details for user {user_id}.")
    return contact
