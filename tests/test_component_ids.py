"""Tests for component custom id encoding."""

from __future__ import annotations

import pytest

from core.component_ids import ComponentId, ComponentIdError
from core.constants import Action

KNOWN = [Action.MANAGE_ITEMS, Action.MANAGE_ITEMS_SELECT, Action.STIMULUS_MARK_PAID, Action.REQUEST_STIMULUS]


def test_plain_action_round_trip() -> None:
    assert ComponentId(Action.MANAGE_ITEMS).encode() == "manage_items"
    assert ComponentId.parse("manage_items", KNOWN) == ComponentId(Action.MANAGE_ITEMS)


def test_plain_action_is_not_confused_with_longer_name() -> None:
    assert ComponentId.parse("manage_items_select", KNOWN) == ComponentId(Action.MANAGE_ITEMS_SELECT)


def test_targeted_action_carries_user_id() -> None:
    encoded = ComponentId(Action.STIMULUS_MARK_PAID, 2222222222222222222).encode()
    assert encoded == "stimulus_mark_paid_2222222222222222222"
    parsed = ComponentId.parse(encoded, KNOWN)
    assert parsed is not None
    assert parsed.action == Action.STIMULUS_MARK_PAID
    assert parsed.target_id == 2222222222222222222


@pytest.mark.parametrize(
    "custom_id",
    [
        "",
        "stimulus_mark_paid",
        "stimulus_mark_paid_",
        "stimulus_mark_paid_abc",
        "stimulus_mark_paid_-5",
        "stimulus_mark_paid_0",
        "request_fulfilled",
        "manage_items_extra",
    ],
)
def test_unknown_or_malformed_ids_are_rejected(custom_id: str) -> None:
    assert ComponentId.parse(custom_id, KNOWN) is None


def test_encode_validates_target() -> None:
    with pytest.raises(ComponentIdError):
        ComponentId(Action.STIMULUS_MARK_PAID).encode()
    with pytest.raises(ComponentIdError):
        ComponentId(Action.MANAGE_ITEMS, 5).encode()
