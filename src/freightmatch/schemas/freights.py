"""Freight request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ..models.domain import Freight, FreightStatus
from .common import PlaceModel, PlaceOut


class FreightCreateRequest(BaseModel):
    shipper_id: str = Field(..., min_length=1)
    pickup: PlaceModel
    dropoff: PlaceModel
    notes: Optional[str] = None
    distance_m: Optional[float] = Field(default=None, ge=0)
    duration_s: Optional[float] = Field(default=None, ge=0)
    price_total_cents: Optional[int] = Field(default=None, ge=0)
    driver_payout_cents: Optional[int] = Field(default=None, ge=0)
    currency: str = Field(default="BRL", min_length=3, max_length=3)


class FreightUpdateRequest(BaseModel):
    shipper_id: str = Field(..., min_length=1, description="Acting shipper; must own the freight.")
    pickup: Optional[PlaceModel] = None
    dropoff: Optional[PlaceModel] = None
    notes: Optional[str] = None


class FreightActionRequest(BaseModel):
    shipper_id: str = Field(..., min_length=1)


class FreightResponse(BaseModel):
    id: str
    shipper_id: str
    pickup: PlaceOut
    dropoff: PlaceOut
    notes: Optional[str] = None
    status: FreightStatus
    distance_m: Optional[int] = None
    duration_s: Optional[int] = None
    price_total_cents: Optional[int] = None
    driver_payout_cents: Optional[int] = None
    currency: str
    created_at: datetime

    @classmethod
    def from_domain(cls, freight: Freight) -> "FreightResponse":
        return cls(
            id=freight.id,
            shipper_id=freight.shipper_id,
            pickup=PlaceOut.from_domain(freight.pickup),
            dropoff=PlaceOut.from_domain(freight.dropoff),
            notes=freight.notes,
            status=freight.status,
            distance_m=freight.distance_m,
            duration_s=freight.duration_s,
            price_total_cents=freight.price_total_cents,
            driver_payout_cents=freight.driver_payout_cents,
            currency=freight.currency,
            created_at=freight.created_at,
        )
