"""Match request lifecycle helpers."""

from .lifecycle import (
    cancel_match_proposal,
    get_match_request_detail,
    list_pending_requests_for_shipper,
    list_requests_for_trip,
    propose_match,
    respond_to_match,
)

__all__ = [
    "propose_match",
    "respond_to_match",
    "cancel_match_proposal",
    "get_match_request_detail",
    "list_requests_for_trip",
    "list_pending_requests_for_shipper",
]
