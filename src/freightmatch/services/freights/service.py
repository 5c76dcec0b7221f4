"""Freight creation, updates and closing."""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from ...config import settings
from ...errors import Forbidden, InvalidGeometry, InvalidStateTransition, NotFound, ValidationFailed
from ...models.domain import Freight, FreightStatus, Place
from ...persistence.store import MarketplaceStore
from ..geospatial import validate_point

logger = logging.getLogger(__name__)


def _validate_place(place: Place, role: str) -> Place:
    point = place.to_latlng()
    if point is None:
        raise InvalidGeometry(f"Freight {role} is missing coordinates.")
    validate_point(point)
    if place.radius_m is None or place.radius_m < 0:
        raise ValidationFailed(f"Freight {role} radius must be non-negative.")
    return place


def _non_negative(value: Optional[float]) -> Optional[int]:
    return None if value is None else max(0, round(value))


def _load_owned_freight(store: MarketplaceStore, freight_id: str, acting_shipper_id: str) -> Freight:
    freight = store.get_freight(freight_id)
    if freight is None:
        raise NotFound(f"Freight {freight_id} not found.")
    if freight.shipper_id != acting_shipper_id:
        raise Forbidden(f"Shipper {acting_shipper_id} does not own freight {freight_id}.")
    return freight


def create_freight(
    shipper_id: str,
    pickup: Place,
    dropoff: Place,
    *,
    notes: Optional[str] = None,
    distance_m: Optional[float] = None,
    duration_s: Optional[float] = None,
    price_total_cents: Optional[int] = None,
    driver_payout_cents: Optional[int] = None,
    currency: str = "BRL",
    store: MarketplaceStore,
) -> Freight:
    freight = Freight(
        id=str(uuid.uuid4()),
        shipper_id=shipper_id,
        pickup=_validate_place(pickup, "pickup"),
        dropoff=_validate_place(dropoff, "dropoff"),
        notes=notes,
        distance_m=_non_negative(distance_m),
        duration_s=_non_negative(duration_s),
        price_total_cents=price_total_cents,
        driver_payout_cents=driver_payout_cents,
        currency=currency,
    )
    store.save_freight(freight)
    logger.info(f"Freight {freight.id} created for shipper {shipper_id}")
    return freight


def update_freight(
    freight_id: str,
    acting_shipper_id: str,
    *,
    pickup: Optional[Place] = None,
    dropoff: Optional[Place] = None,
    notes: Optional[str] = None,
    store: MarketplaceStore,
) -> Freight:
    """Edit an OPEN freight's points or notes."""

    freight = _load_owned_freight(store, freight_id, acting_shipper_id)
    if freight.status is not FreightStatus.OPEN:
        raise InvalidStateTransition(f"Freight {freight_id} is {freight.status.value} and cannot be edited.")
    if pickup is not None:
        freight.pickup = _validate_place(pickup, "pickup")
    if dropoff is not None:
        freight.dropoff = _validate_place(dropoff, "dropoff")
    if notes is not None:
        freight.notes = notes
    store.save_freight(freight)
    return freight


def close_freight(freight_id: str, acting_shipper_id: str, *, store: MarketplaceStore) -> Freight:
    """OPEN -> CLOSED. Closed freights are never reopened."""

    freight = _load_owned_freight(store, freight_id, acting_shipper_id)
    if freight.status is FreightStatus.CLOSED:
        raise InvalidStateTransition(f"Freight {freight_id} is already CLOSED.")
    freight.status = FreightStatus.CLOSED
    store.save_freight(freight)
    logger.info(f"Freight {freight_id} closed by shipper {acting_shipper_id}")
    return freight


def get_freight(freight_id: str, *, store: MarketplaceStore) -> Freight:
    freight = store.get_freight(freight_id)
    if freight is None:
        raise NotFound(f"Freight {freight_id} not found.")
    return freight


def list_shipper_freights(
    shipper_id: str,
    *,
    status: Optional[FreightStatus] = None,
    search: Optional[str] = None,
    limit: Optional[int] = None,
    store: MarketplaceStore,
) -> list[Freight]:
    limit = settings.default_list_limit if limit is None else limit
    if limit < 1:
        raise ValidationFailed(f"limit must be at least 1, got {limit}.")
    return store.list_freights(
        shipper_id=shipper_id,
        status=FreightStatus(status) if status is not None else None,
        search=search,
        limit=limit,
    )
