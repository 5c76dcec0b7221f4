"""Match request lifecycle: propose, accept/reject and cancel."""

from __future__ import annotations

import logging
import uuid

from ...errors import (
    Forbidden,
    FreightUnavailable,
    InvalidStateTransition,
    NotFound,
    TripUnavailable,
)
from ...models.domain import (
    Freight,
    FreightStatus,
    MatchDecision,
    MatchRequest,
    MatchRequestDetail,
    MatchRequestStatus,
    Trip,
    TripStatus,
)
from ...persistence.store import MarketplaceStore

logger = logging.getLogger(__name__)

_DECISION_STATUS = {
    MatchDecision.ACCEPT: MatchRequestStatus.ACCEPTED,
    MatchDecision.REJECT: MatchRequestStatus.REJECTED,
}


def _load_trip(store: MarketplaceStore, trip_id: str) -> Trip:
    trip = store.get_trip(trip_id)
    if trip is None:
        raise NotFound(f"Trip {trip_id} not found.")
    return trip


def _load_freight(store: MarketplaceStore, freight_id: str) -> Freight:
    freight = store.get_freight(freight_id)
    if freight is None:
        raise NotFound(f"Freight {freight_id} not found.")
    return freight


def _load_request(store: MarketplaceStore, request_id: str) -> MatchRequest:
    request = store.get_match_request(request_id)
    if request is None:
        raise NotFound(f"Match request {request_id} not found.")
    return request


def propose_match(trip_id: str, freight_id: str, acting_driver_id: str, *, store: MarketplaceStore) -> MatchRequest:
    """Create a PENDING request for the pair.

    Proposing again after a REJECTED or CANCELLED request creates a new
    record; the store refuses a second PENDING one with DuplicatePendingRequest.
    """
    trip = _load_trip(store, trip_id)
    if trip.driver_id != acting_driver_id:
        raise Forbidden(f"Driver {acting_driver_id} does not own trip {trip_id}.")
    if trip.status is not TripStatus.OPEN:
        raise TripUnavailable(f"Trip {trip_id} is {trip.status.value}.")

    freight = _load_freight(store, freight_id)
    if freight.status is not FreightStatus.OPEN:
        raise FreightUnavailable(f"Freight {freight_id} is {freight.status.value}.")

    request = MatchRequest(
        id=str(uuid.uuid4()),
        freight_id=freight.id,
        trip_id=trip.id,
        driver_id=trip.driver_id,
        shipper_id=freight.shipper_id,
    )
    created = store.insert_match_request(request)
    logger.info(f"Match request {created.id} proposed: freight {freight_id} on trip {trip_id}")
    return created


def respond_to_match(
    request_id: str,
    decision: MatchDecision,
    acting_shipper_id: str,
    *,
    store: MarketplaceStore,
) -> MatchRequest:
    """Apply the shipper's decision to a PENDING request."""

    decision = MatchDecision(decision)
    request = _load_request(store, request_id)
    freight = _load_freight(store, request.freight_id)
    if freight.shipper_id != acting_shipper_id:
        raise Forbidden(f"Shipper {acting_shipper_id} does not own freight {freight.id}.")
    if request.status is not MatchRequestStatus.PENDING:
        raise InvalidStateTransition(
            f"Match request {request_id} is already {request.status.value}."
        )
    if decision is MatchDecision.ACCEPT and freight.status is not FreightStatus.OPEN:
        raise FreightUnavailable(f"Freight {freight.id} is {freight.status.value}.")

    updated = store.transition_match_request(
        request_id,
        expected=MatchRequestStatus.PENDING,
        new_status=_DECISION_STATUS[decision],
    )
    logger.info(f"Match request {request_id} {updated.status.value.lower()} by shipper {acting_shipper_id}")
    return updated


def cancel_match_proposal(request_id: str, acting_driver_id: str, *, store: MarketplaceStore) -> MatchRequest:
    """Withdraw a driver's PENDING request."""

    request = _load_request(store, request_id)
    if request.driver_id != acting_driver_id:
        raise Forbidden(f"Driver {acting_driver_id} did not propose match request {request_id}.")
    if request.status is not MatchRequestStatus.PENDING:
        raise InvalidStateTransition(
            f"Match request {request_id} is already {request.status.value}."
        )

    updated = store.transition_match_request(
        request_id,
        expected=MatchRequestStatus.PENDING,
        new_status=MatchRequestStatus.CANCELLED,
    )
    logger.info(f"Match request {request_id} cancelled by driver {acting_driver_id}")
    return updated


def list_requests_for_trip(trip_id: str, *, store: MarketplaceStore) -> list[MatchRequest]:
    return store.list_match_requests(trip_id=trip_id)


def list_pending_requests_for_shipper(shipper_id: str, *, store: MarketplaceStore) -> list[MatchRequest]:
    """Shipper inbox: PENDING requests on the shipper's freights, newest first."""
    return store.list_match_requests(shipper_id=shipper_id, status=MatchRequestStatus.PENDING)


def get_match_request_detail(request_id: str, acting_user_id: str, *, store: MarketplaceStore) -> MatchRequestDetail:
    """Show a request to either of its parties.

    Contact details of both sides are only disclosed once the shipper has
    accepted the request.
    """
    request = _load_request(store, request_id)
    if acting_user_id not in (request.driver_id, request.shipper_id):
        raise Forbidden(f"User {acting_user_id} is not a party to match request {request_id}.")

    freight = _load_freight(store, request.freight_id)
    trip = _load_trip(store, request.trip_id)
    detail = MatchRequestDetail(
        request=request,
        pickup_label=freight.pickup.label,
        dropoff_label=freight.dropoff.label,
        origin_label=trip.origin.label,
        destination_label=trip.destination.label,
    )
    if request.status is MatchRequestStatus.ACCEPTED:
        shipper = store.get_contact(request.shipper_id)
        driver = store.get_contact(request.driver_id)
        if shipper is not None:
            detail.shipper_contact_name = shipper.name
            detail.shipper_contact_phone = shipper.phone
        if driver is not None:
            detail.driver_name = driver.name
            detail.driver_phone = driver.phone
    return detail
