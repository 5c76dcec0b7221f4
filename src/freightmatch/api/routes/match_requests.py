"""Match request lifecycle endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from ...persistence.store import MarketplaceStore
from ...schemas.matching import (
    CancelMatchRequest,
    MatchRequestDetailModel,
    MatchRequestModel,
    ProposeMatchRequest,
    RespondMatchRequest,
)
from ...services.requests import (
    cancel_match_proposal,
    get_match_request_detail,
    list_pending_requests_for_shipper,
    propose_match,
    respond_to_match,
)
from ..deps import get_store

router = APIRouter(tags=["match-requests"])


@router.post("/match-requests", response_model=MatchRequestModel, status_code=status.HTTP_201_CREATED)
def propose(payload: ProposeMatchRequest, store: MarketplaceStore = Depends(get_store)) -> MatchRequestModel:
    request = propose_match(payload.trip_id, payload.freight_id, payload.driver_id, store=store)
    return MatchRequestModel.from_domain(request)


@router.post("/match-requests/{request_id}/respond", response_model=MatchRequestModel, status_code=status.HTTP_200_OK)
def respond(
    request_id: str,
    payload: RespondMatchRequest,
    store: MarketplaceStore = Depends(get_store),
) -> MatchRequestModel:
    request = respond_to_match(request_id, payload.decision, payload.shipper_id, store=store)
    return MatchRequestModel.from_domain(request)


@router.post("/match-requests/{request_id}/cancel", response_model=MatchRequestModel, status_code=status.HTTP_200_OK)
def cancel(
    request_id: str,
    payload: CancelMatchRequest,
    store: MarketplaceStore = Depends(get_store),
) -> MatchRequestModel:
    request = cancel_match_proposal(request_id, payload.driver_id, store=store)
    return MatchRequestModel.from_domain(request)


@router.get(
    "/shippers/{shipper_id}/match-requests",
    response_model=list[MatchRequestModel],
    status_code=status.HTTP_200_OK,
)
def shipper_inbox(shipper_id: str, store: MarketplaceStore = Depends(get_store)) -> list[MatchRequestModel]:
    """Pending requests on the shipper's freights, newest first."""
    return [
        MatchRequestModel.from_domain(request)
        for request in list_pending_requests_for_shipper(shipper_id, store=store)
    ]


@router.get("/match-requests/{request_id}", response_model=MatchRequestDetailModel, status_code=status.HTTP_200_OK)
def detail(
    request_id: str,
    user_id: str = Query(..., min_length=1, description="Acting driver or shipper."),
    store: MarketplaceStore = Depends(get_store),
) -> MatchRequestDetailModel:
    """Request with both sides' labels; contacts are filled in once accepted."""
    return MatchRequestDetailModel.from_domain(get_match_request_detail(request_id, user_id, store=store))
