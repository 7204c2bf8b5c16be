"""
Status transition tables for item requests and stimulus claims.

Every mutating operation calls ``next_request_status``/``next_claim_status``
before touching the document; a missing entry means the action is rejected.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple

from .errors import InvalidTransition
from .types import ClaimStatus, RequestStatus


class RequestAction(str, Enum):
    FULFILL = "fulfill"
    DENY = "deny"
    FULFILL_ITEMS_PARTIAL = "fulfill_items_partial"
    FULFILL_ITEMS_COMPLETE = "fulfill_items_complete"


class ClaimAction(str, Enum):
    APPROVE = "approve"


_OPEN = (RequestStatus.PENDING, RequestStatus.PARTIALLY_FULFILLED)

REQUEST_TRANSITIONS: Dict[Tuple[RequestStatus, RequestAction], RequestStatus] = {}
for _status in _OPEN:
    REQUEST_TRANSITIONS[(_status, RequestAction.FULFILL)] = RequestStatus.FULFILLED
    REQUEST_TRANSITIONS[(_status, RequestAction.DENY)] = RequestStatus.DENIED
    REQUEST_TRANSITIONS[(_status, RequestAction.FULFILL_ITEMS_PARTIAL)] = RequestStatus.PARTIALLY_FULFILLED
    REQUEST_TRANSITIONS[(_status, RequestAction.FULFILL_ITEMS_COMPLETE)] = RequestStatus.FULFILLED

CLAIM_TRANSITIONS: Dict[Tuple[ClaimStatus, ClaimAction], ClaimStatus] = {
    (ClaimStatus.PENDING, ClaimAction.APPROVE): ClaimStatus.PAID,
}


def is_open(status: RequestStatus) -> bool:
    """True while staff may still act on the request."""
    return status in _OPEN


def next_request_status(current: RequestStatus, action: RequestAction) -> RequestStatus:
    try:
        return REQUEST_TRANSITIONS[(current, action)]
    except KeyError:
        raise InvalidTransition(current.value, action.value) from None


def next_claim_status(current: ClaimStatus, action: ClaimAction) -> ClaimStatus:
    try:
        return CLAIM_TRANSITIONS[(current, action)]
    except KeyError:
        raise InvalidTransition(current.value, action.value) from None
