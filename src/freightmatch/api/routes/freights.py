"""Freight endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...persistence.store import MarketplaceStore
from ...schemas.freights import (
    FreightActionRequest,
    FreightCreateRequest,
    FreightResponse,
    FreightUpdateRequest,
)
from ...services.freights import service as freight_service
from ..deps import get_store

router = APIRouter(prefix="/freights", tags=["freights"])


@router.post("", response_model=FreightResponse, status_code=status.HTTP_201_CREATED)
def create_freight(payload: FreightCreateRequest, store: MarketplaceStore = Depends(get_store)) -> FreightResponse:
    freight = freight_service.create_freight(
        payload.shipper_id,
        payload.pickup.to_domain(),
        payload.dropoff.to_domain(),
        notes=payload.notes,
        distance_m=payload.distance_m,
        duration_s=payload.duration_s,
        price_total_cents=payload.price_total_cents,
        driver_payout_cents=payload.driver_payout_cents,
        currency=payload.currency,
        store=store,
    )
    return FreightResponse.from_domain(freight)


@router.get("/{freight_id}", response_model=FreightResponse, status_code=status.HTTP_200_OK)
def get_freight(freight_id: str, store: MarketplaceStore = Depends(get_store)) -> FreightResponse:
    return FreightResponse.from_domain(freight_service.get_freight(freight_id, store=store))


@router.patch("/{freight_id}", response_model=FreightResponse, status_code=status.HTTP_200_OK)
def update_freight(
    freight_id: str,
    payload: FreightUpdateRequest,
    store: MarketplaceStore = Depends(get_store),
) -> FreightResponse:
    freight = freight_service.update_freight(
        freight_id,
        payload.shipper_id,
        pickup=payload.pickup.to_domain() if payload.pickup else None,
        dropoff=payload.dropoff.to_domain() if payload.dropoff else None,
        notes=payload.notes,
        store=store,
    )
    return FreightResponse.from_domain(freight)


@router.post("/{freight_id}/close", response_model=FreightResponse, status_code=status.HTTP_200_OK)
def close_freight(
    freight_id: str,
    payload: FreightActionRequest,
    store: MarketplaceStore = Depends(get_store),
) -> FreightResponse:
    return FreightResponse.from_domain(freight_service.close_freight(freight_id, payload.shipper_id, store=store))
