"""Matching and match request schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.domain import (
    MatchCandidate,
    MatchDecision,
    MatchRequest,
    MatchRequestDetail,
    MatchRequestStatus,
)


class MatchModel(BaseModel):
    freight_id: str
    trip_id: str
    pickup_dist_m: float
    dropoff_dist_m: float
    pickup_pos: float
    dropoff_pos: float
    score: float

    @classmethod
    def from_domain(cls, candidate: MatchCandidate) -> "MatchModel":
        return cls(
            freight_id=candidate.freight_id,
            trip_id=candidate.trip_id,
            pickup_dist_m=candidate.pickup_dist_m,
            dropoff_dist_m=candidate.dropoff_dist_m,
            pickup_pos=candidate.pickup_pos,
            dropoff_pos=candidate.dropoff_pos,
            score=candidate.score,
        )


class SkippedModel(BaseModel):
    freight_id: str
    reason: str


class MatchesResponse(BaseModel):
    trip_id: str
    matches: List[MatchModel]
    skipped_count: int
    skipped: List[SkippedModel] = Field(default_factory=list)


class ProposeMatchRequest(BaseModel):
    trip_id: str = Field(..., min_length=1)
    freight_id: str = Field(..., min_length=1)
    driver_id: str = Field(..., min_length=1)


class RespondMatchRequest(BaseModel):
    decision: MatchDecision
    shipper_id: str = Field(..., min_length=1)


class CancelMatchRequest(BaseModel):
    driver_id: str = Field(..., min_length=1)


class MatchRequestModel(BaseModel):
    id: str
    freight_id: str
    trip_id: str
    driver_id: str
    shipper_id: str
    status: MatchRequestStatus
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, request: MatchRequest) -> "MatchRequestModel":
        return cls(
            id=request.id,
            freight_id=request.freight_id,
            trip_id=request.trip_id,
            driver_id=request.driver_id,
            shipper_id=request.shipper_id,
            status=request.status,
            created_at=request.created_at,
            updated_at=request.updated_at,
        )


class MatchRequestDetailModel(BaseModel):
    request: MatchRequestModel
    pickup_label: str
    dropoff_label: str
    origin_label: str
    destination_label: str
    shipper_contact_name: Optional[str] = None
    shipper_contact_phone: Optional[str] = None
    driver_name: Optional[str] = None
    driver_phone: Optional[str] = None

    @classmethod
    def from_domain(cls, detail: MatchRequestDetail) -> "MatchRequestDetailModel":
        return cls(
            request=MatchRequestModel.from_domain(detail.request),
            pickup_label=detail.pickup_label,
            dropoff_label=detail.dropoff_label,
            origin_label=detail.origin_label,
            destination_label=detail.destination_label,
            shipper_contact_name=detail.shipper_contact_name,
            shipper_contact_phone=detail.shipper_contact_phone,
            driver_name=detail.driver_name,
            driver_phone=detail.driver_phone,
        )
