"""
Type definitions and dataclasses for bank documents.

Documents are stored with the camelCase keys below; ``to_dict``/``from_dict``
are the only places that know about them.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class RequestStatus(str, Enum):
    PENDING = "pending"
    PARTIALLY_FULFILLED = "partially_fulfilled"
    FULFILLED = "fulfilled"
    DENIED = "denied"


class ClaimStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


def _opt_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def split_item_lines(text: str) -> list[RequestItem]:
    """
    One item per input line, in order.

    Blank lines are kept so ``originalIndex`` maps 1:1 onto submitted lines.
    """
    return [
        RequestItem(name=line.strip(), fulfilled=False, original_index=index)
        for index, line in enumerate((text or "").split("\n"))
    ]


@dataclass
class RequestItem:
    """A single requested item line."""
    name: str
    fulfilled: bool = False
    original_index: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "fulfilled": self.fulfilled,
            "originalIndex": self.original_index,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RequestItem:
        return cls(
            name=str(data.get("name", "")),
            fulfilled=bool(data.get("fulfilled", False)),
            original_index=int(data.get("originalIndex", 0)),
        )


@dataclass
class ItemRequest:
    """
    An item request, keyed by the id of the forum thread it lives in.

    Audit fields are only set once the matching transition happens.
    """
    id: str
    requester_id: str
    requester_username: str
    character_name: str
    notes: str = ""
    items: list[RequestItem] = field(default_factory=list)
    status: RequestStatus = RequestStatus.PENDING
    buttons_message_id: str | None = None
    initial_message_id: str | None = None
    thread_url: str | None = None
    timestamp: str = ""
    fulfilled_by: str | None = None
    fulfilled_by_username: str | None = None
    fulfilled_message: str | None = None
    fulfilled_timestamp: str | None = None
    denied_by: str | None = None
    denied_by_username: str | None = None
    denial_reason: str | None = None
    denied_timestamp: str | None = None
    last_updated_by: str | None = None
    last_updated_timestamp: str | None = None

    def pending_items(self) -> list[RequestItem]:
        return [item for item in self.items if not item.fulfilled]

    def to_dict(self) -> dict[str, Any]:
        return {
            "threadId": self.id,
            "requesterId": self.requester_id,
            "requesterUsername": self.requester_username,
            "characterName": self.character_name,
            "notes": self.notes,
            "items": [item.to_dict() for item in self.items],
            "status": self.status.value,
            "buttonsMessageId": self.buttons_message_id,
            "initialMessageId": self.initial_message_id,
            "threadUrl": self.thread_url,
            "timestamp": self.timestamp,
            "fulfilledBy": self.fulfilled_by,
            "fulfilledByUsername": self.fulfilled_by_username,
            "fulfilledMessage": self.fulfilled_message,
            "fulfilledTimestamp": self.fulfilled_timestamp,
            "deniedBy": self.denied_by,
            "deniedByUsername": self.denied_by_username,
            "denialReason": self.denial_reason,
            "deniedTimestamp": self.denied_timestamp,
            "lastUpdatedBy": self.last_updated_by,
            "lastUpdatedTimestamp": self.last_updated_timestamp,
        }

    @classmethod
    def from_dict(cls, doc_id: str, data: dict[str, Any]) -> ItemRequest:
        return cls(
            id=str(data.get("threadId") or doc_id),
            requester_id=str(data.get("requesterId", "")),
            requester_username=str(data.get("requesterUsername", "")),
            character_name=str(data.get("characterName", "")),
            notes=data.get("notes") or "",
            items=[RequestItem.from_dict(item) for item in data.get("items") or []],
            status=RequestStatus(data.get("status", RequestStatus.PENDING.value)),
            buttons_message_id=_opt_str(data.get("buttonsMessageId")),
            initial_message_id=_opt_str(data.get("initialMessageId")),
            thread_url=data.get("threadUrl"),
            timestamp=data.get("timestamp") or "",
            fulfilled_by=_opt_str(data.get("fulfilledBy")),
            fulfilled_by_username=data.get("fulfilledByUsername"),
            fulfilled_message=data.get("fulfilledMessage"),
            fulfilled_timestamp=data.get("fulfilledTimestamp"),
            denied_by=_opt_str(data.get("deniedBy")),
            denied_by_username=data.get("deniedByUsername"),
            denial_reason=data.get("denialReason"),
            denied_timestamp=data.get("deniedTimestamp"),
            last_updated_by=_opt_str(data.get("lastUpdatedBy")),
            last_updated_timestamp=data.get("lastUpdatedTimestamp"),
        )


@dataclass
class StimulusClaim:
    """The one-time new member stimulus claim, keyed by the claimant's user id."""
    id: str
    requester_username: str
    status: ClaimStatus = ClaimStatus.PENDING
    officer_message_id: str | None = None
    officer_channel_id: str | None = None
    timestamp: str = ""
    paid_by: str | None = None
    paid_by_username: str | None = None
    paid_timestamp: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "requesterId": self.id,
            "requesterUsername": self.requester_username,
            "status": self.status.value,
            "officerMessageId": self.officer_message_id,
            "officerChannelId": self.officer_channel_id,
            "timestamp": self.timestamp,
            "paidBy": self.paid_by,
            "paidByUsername": self.paid_by_username,
            "paidTimestamp": self.paid_timestamp,
        }

    @classmethod
    def from_dict(cls, doc_id: str, data: dict[str, Any]) -> StimulusClaim:
        return cls(
            id=str(data.get("requesterId") or doc_id),
            requester_username=str(data.get("requesterUsername", "")),
            status=ClaimStatus(data.get("status", ClaimStatus.PENDING.value)),
            officer_message_id=_opt_str(data.get("officerMessageId")),
            officer_channel_id=_opt_str(data.get("officerChannelId")),
            timestamp=data.get("timestamp") or "",
            paid_by=_opt_str(data.get("paidBy")),
            paid_by_username=data.get("paidByUsername"),
            paid_timestamp=data.get("paidTimestamp"),
        )


@dataclass
class RequestOutcome:
    """Result of a request transition, including side effects that failed."""
    request: ItemRequest
    fulfilled_now: list[str] = field(default_factory=list)
    still_pending: list[str] = field(default_factory=list)
    failed_steps: list[str] = field(default_factory=list)

    @property
    def partial_failure(self) -> bool:
        return bool(self.failed_steps)


@dataclass(frozen=True)
class Actor:
    """The member behind an interaction, reduced to what documents record."""
    id: str
    username: str
    tag: str

    @classmethod
    def from_user(cls, user: Any) -> Actor:
        return cls(id=str(user.id), username=str(user.name), tag=str(user))
