"""Per-user views: a driver's trips, a shipper's freights and contact details."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ...models.domain import FreightStatus, TripStatus
from ...persistence.store import MarketplaceStore
from ...schemas.contacts import ContactRequest, ContactResponse
from ...schemas.freights import FreightResponse
from ...schemas.trips import TripResponse
from ...services import contacts
from ...services.freights import service as freight_service
from ...services.trips import service as trip_service
from ..deps import get_store

router = APIRouter(tags=["accounts"])


@router.get("/drivers/{driver_id}/trips", response_model=list[TripResponse], status_code=status.HTTP_200_OK)
def driver_trips(
    driver_id: str,
    trip_status: Optional[TripStatus] = Query(default=None, alias="status"),
    q: Optional[str] = Query(default=None, max_length=100, description="Search origin/destination labels."),
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    store: MarketplaceStore = Depends(get_store),
) -> list[TripResponse]:
    trips = trip_service.list_driver_trips(driver_id, status=trip_status, search=q, limit=limit, store=store)
    return [TripResponse.from_domain(trip) for trip in trips]


@router.get("/shippers/{shipper_id}/freights", response_model=list[FreightResponse], status_code=status.HTTP_200_OK)
def shipper_freights(
    shipper_id: str,
    freight_status: Optional[FreightStatus] = Query(default=None, alias="status"),
    q: Optional[str] = Query(default=None, max_length=100, description="Search pickup/dropoff labels and notes."),
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    store: MarketplaceStore = Depends(get_store),
) -> list[FreightResponse]:
    freights = freight_service.list_shipper_freights(
        shipper_id, status=freight_status, search=q, limit=limit, store=store
    )
    return [FreightResponse.from_domain(freight) for freight in freights]


@router.put("/users/{user_id}/contact", response_model=ContactResponse, status_code=status.HTTP_200_OK)
def put_contact(
    user_id: str,
    payload: ContactRequest,
    store: MarketplaceStore = Depends(get_store),
) -> ContactResponse:
    return ContactResponse.from_domain(contacts.save_contact(user_id, payload.name, payload.phone, store=store))


@router.get("/users/{user_id}/contact", response_model=ContactResponse, status_code=status.HTTP_200_OK)
def get_contact(user_id: str, store: MarketplaceStore = Depends(get_store)) -> ContactResponse:
    return ContactResponse.from_domain(contacts.get_contact(user_id, store=store))
