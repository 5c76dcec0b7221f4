"""Error taxonomy shared by the matching engine and the request lifecycle."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    INVALID_GEOMETRY = "INVALID_GEOMETRY"
    ROUTE_NOT_READY = "ROUTE_NOT_READY"
    ROUTE_COMPUTATION_FAILED = "ROUTE_COMPUTATION_FAILED"
    FREIGHT_UNAVAILABLE = "FREIGHT_UNAVAILABLE"
    TRIP_UNAVAILABLE = "TRIP_UNAVAILABLE"
    INVALID_STATE_TRANSITION = "INVALID_STATE_TRANSITION"
    DUPLICATE_PENDING_REQUEST = "DUPLICATE_PENDING_REQUEST"
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    VALIDATION = "VALIDATION"


class MatchingError(Exception):
    """Base class for domain errors; ``kind`` identifies the failure for callers."""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.kind.value, "detail": self.message}


class InvalidGeometry(MatchingError):
    kind = ErrorKind.INVALID_GEOMETRY


class RouteNotReady(MatchingError):
    """Trip has no computed route; the caller must recompute it first."""

    kind = ErrorKind.ROUTE_NOT_READY


class RouteComputationFailed(MatchingError):
    """The routing provider could not produce a route. Retryable by the caller."""

    kind = ErrorKind.ROUTE_COMPUTATION_FAILED


class FreightUnavailable(MatchingError):
    kind = ErrorKind.FREIGHT_UNAVAILABLE


class TripUnavailable(MatchingError):
    kind = ErrorKind.TRIP_UNAVAILABLE


class InvalidStateTransition(MatchingError):
    kind = ErrorKind.INVALID_STATE_TRANSITION


class DuplicatePendingRequest(MatchingError):
    kind = ErrorKind.DUPLICATE_PENDING_REQUEST


class NotFound(MatchingError):
    kind = ErrorKind.NOT_FOUND


class Forbidden(MatchingError):
    kind = ErrorKind.FORBIDDEN


class ValidationFailed(MatchingError):
    kind = ErrorKind.VALIDATION
