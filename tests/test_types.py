"""Tests for document dataclasses and item line splitting."""

from __future__ import annotations

from core.types import (
    Actor,
    ClaimStatus,
    ItemRequest,
    RequestItem,
    RequestStatus,
    StimulusClaim,
    split_item_lines,
)
from tests.conftest import make_member


class TestSplitItemLines:
    def test_preserves_order_and_count(self) -> None:
        items = split_item_lines("A\nB\nC")
        assert [item.name for item in items] == ["A", "B", "C"]
        assert [item.original_index for item in items] == [0, 1, 2]
        assert not any(item.fulfilled for item in items)

    def test_strips_whitespace_and_keeps_blank_lines(self) -> None:
        items = split_item_lines("  1x Sash  \n\n2x Orb")
        assert [item.name for item in items] == ["1x Sash", "", "2x Orb"]
        assert [item.original_index for item in items] == [0, 1, 2]

    def test_single_line(self) -> None:
        assert split_item_lines("1x Sash") == [RequestItem(name="1x Sash", fulfilled=False, original_index=0)]


class TestItemRequest:
    def _request(self) -> ItemRequest:
        return ItemRequest(
            id="1400000000000000001",
            requester_id="1111111111111111111",
            requester_username="grumpy",
            character_name="Grum",
            items=split_item_lines("1x Sash\n2x Orb"),
            buttons_message_id="1500000000000000001",
            thread_url="https://discord.com/channels/1/1400000000000000001",
            timestamp="2026-10-19T12:00:00Z",
        )

    def test_document_uses_camel_case_keys(self) -> None:
        data = self._request().to_dict()
        assert data["threadId"] == "1400000000000000001"
        assert data["characterName"] == "Grum"
        assert data["status"] == "pending"
        assert data["items"][1] == {"name": "2x Orb", "fulfilled": False, "originalIndex": 1}

    def test_from_dict_restores_request(self) -> None:
        request = self._request()
        restored = ItemRequest.from_dict(request.id, request.to_dict())
        assert restored == request

    def test_from_dict_falls_back_to_document_id(self) -> None:
        restored = ItemRequest.from_dict("1400000000000000009", {"status": "partially_fulfilled"})
        assert restored.id == "1400000000000000009"
        assert restored.status == RequestStatus.PARTIALLY_FULFILLED
        assert restored.items == []

    def test_pending_items(self) -> None:
        request = self._request()
        request.items[0].fulfilled = True
        assert [item.name for item in request.pending_items()] == ["2x Orb"]


class TestStimulusClaim:
    def test_document_is_keyed_by_requester(self) -> None:
        claim = StimulusClaim(id="2222222222222222222", requester_username="newbie", officer_message_id="5")
        data = claim.to_dict()
        assert data["requesterId"] == "2222222222222222222"
        assert data["status"] == "pending"
        restored = StimulusClaim.from_dict("2222222222222222222", data)
        assert restored.status == ClaimStatus.PENDING
        assert restored.officer_message_id == "5"


def test_actor_from_user() -> None:
    actor = Actor.from_user(make_member(42, "banker"))
    assert actor == Actor(id="42", username="banker", tag="banker")
