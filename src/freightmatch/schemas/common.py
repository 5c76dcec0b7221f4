"""Shared request/response schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field

from ..models.domain import LatLng, Place


class CoordinateModel(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

    def to_domain(self) -> LatLng:
        return LatLng(lat=self.lat, lng=self.lng)

    @classmethod
    def from_domain(cls, point: LatLng) -> "CoordinateModel":
        return cls(lat=point.lat, lng=point.lng)


class PlaceModel(BaseModel):
    label: str = Field(..., min_length=1)
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    radius_m: float = Field(default=0.0, ge=0, description="Optional collection radius in meters.")

    def to_domain(self) -> Place:
        return Place(label=self.label, lat=self.lat, lng=self.lng, radius_m=self.radius_m)


class PlaceOut(BaseModel):
    label: str
    lat: float | None
    lng: float | None
    radius_m: float

    @classmethod
    def from_domain(cls, place: Place) -> "PlaceOut":
        return cls(label=place.label, lat=place.lat, lng=place.lng, radius_m=place.radius_m)
