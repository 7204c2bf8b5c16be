"""Tests for interaction routing and staff gating."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from core.component_ids import ComponentId
from core.constants import STAFF_ACTIONS, Action
from core.errors import RequestNotFound, Unauthorized
from core.interactions import (
    GENERIC_ERROR,
    InteractionKind,
    InteractionRouter,
    interaction_kind,
    modal_values,
    select_values,
)
from core.permissions import is_authorized_staff, resolve_member
from tests.conftest import STAFF_ROLE_ID, make_interaction, make_member, modal_data

MEMBER_ROLE_ID = 1300000000000000001


@pytest.fixture
def router() -> InteractionRouter:
    return InteractionRouter([STAFF_ROLE_ID])


def _handler() -> AsyncMock:
    return AsyncMock(return_value=None)


# ---------------------------------------------------------------------------
# Payload helpers
# ---------------------------------------------------------------------------


def test_interaction_kind() -> None:
    assert interaction_kind(make_interaction("x")) == InteractionKind.BUTTON
    assert interaction_kind(
        make_interaction("x", component_type=discord.ComponentType.string_select)
    ) == InteractionKind.SELECT
    assert interaction_kind(
        make_interaction(data=modal_data("x", {}), interaction_type=discord.InteractionType.modal_submit)
    ) == InteractionKind.MODAL
    assert interaction_kind(
        make_interaction("x", interaction_type=discord.InteractionType.application_command)
    ) is None
    assert interaction_kind(make_interaction("x", component_type=discord.ComponentType.user_select)) is None


def test_modal_values_reads_rows_and_labels() -> None:
    interaction = make_interaction(data={
        "custom_id": Action.ITEM_REQUEST_MODAL,
        "components": [
            {"type": 1, "components": [{"type": 4, "custom_id": "itemsInput", "value": "1x Sash"}]},
            {"type": 18, "component": {"type": 4, "custom_id": "characterNameInput", "value": "Grum"}},
            {"type": 1, "components": [{"type": 4, "custom_id": "additionalNotesInput", "value": None}]},
        ],
    })
    assert modal_values(interaction) == {
        "itemsInput": "1x Sash",
        "characterNameInput": "Grum",
        "additionalNotesInput": "",
    }


def test_select_values() -> None:
    interaction = make_interaction(data={"custom_id": Action.MANAGE_ITEMS_SELECT, "values": ["0", "2"]})
    assert select_values(interaction) == ["0", "2"]


# ---------------------------------------------------------------------------
# Permissions
# ---------------------------------------------------------------------------


def test_is_authorized_staff() -> None:
    assert is_authorized_staff(make_member(1, "banker", (STAFF_ROLE_ID,)), {STAFF_ROLE_ID})
    assert not is_authorized_staff(make_member(1, "member", (MEMBER_ROLE_ID,)), {STAFF_ROLE_ID})
    assert not is_authorized_staff(make_member(1, "banker", (STAFF_ROLE_ID,)), set())
    assert not is_authorized_staff(None, {STAFF_ROLE_ID})


async def test_resolve_member_fetches_plain_user() -> None:
    interaction = make_interaction("x")
    interaction.user = MagicMock(spec=discord.User)
    interaction.user.id = 42
    fetched = make_member(42, "banker", (STAFF_ROLE_ID,))
    interaction.guild.get_member.return_value = None
    interaction.guild.fetch_member = AsyncMock(return_value=fetched)
    assert await resolve_member(interaction) is fetched


async def test_resolve_member_outside_guild() -> None:
    interaction = make_interaction("x")
    interaction.user = MagicMock(spec=discord.User)
    interaction.guild = None
    assert await resolve_member(interaction) is None


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


async def test_dispatch_calls_registered_handler(router: InteractionRouter) -> None:
    handler = _handler()
    router.register(InteractionKind.BUTTON, Action.MANAGE_ITEMS, handler)
    interaction = make_interaction(Action.MANAGE_ITEMS)

    assert await router.dispatch(interaction)
    handler.assert_awaited_once_with(interaction, ComponentId(Action.MANAGE_ITEMS))


async def test_dispatch_decodes_target_id(router: InteractionRouter) -> None:
    handler = _handler()
    router.register(InteractionKind.BUTTON, Action.STIMULUS_MARK_PAID, handler)
    interaction = make_interaction("stimulus_mark_paid_2222222222222222222")

    assert await router.dispatch(interaction)
    component_id = handler.await_args.args[1]
    assert component_id.target_id == 2222222222222222222


async def test_dispatch_ignores_unknown_ids(router: InteractionRouter) -> None:
    router.register(InteractionKind.BUTTON, Action.MANAGE_ITEMS, _handler())
    interaction = make_interaction("some_other_bot_button")
    assert not await router.dispatch(interaction)
    interaction.response.send_message.assert_not_awaited()


async def test_dispatch_matches_kind(router: InteractionRouter) -> None:
    handler = _handler()
    router.register(InteractionKind.SELECT, Action.MANAGE_ITEMS_SELECT, handler)
    assert not await router.dispatch(make_interaction(Action.MANAGE_ITEMS_SELECT))
    handler.assert_not_awaited()


async def test_non_staff_blocked_from_staff_action(router: InteractionRouter) -> None:
    handler = _handler()
    router.register(InteractionKind.BUTTON, Action.REQUEST_FULFILLED, handler)
    interaction = make_interaction(Action.REQUEST_FULFILLED, role_ids=(MEMBER_ROLE_ID,))

    assert await router.dispatch(interaction)
    handler.assert_not_awaited()
    interaction.response.send_message.assert_awaited_once_with(Unauthorized.user_message, ephemeral=True)


async def test_non_staff_may_use_member_actions(router: InteractionRouter) -> None:
    handler = _handler()
    router.register(InteractionKind.BUTTON, Action.REQUEST_STIMULUS, handler)
    assert Action.REQUEST_STIMULUS not in STAFF_ACTIONS
    interaction = make_interaction(Action.REQUEST_STIMULUS, role_ids=())

    assert await router.dispatch(interaction)
    handler.assert_awaited_once()


async def test_bank_error_after_defer_uses_followup(router: InteractionRouter) -> None:
    async def handler(interaction, component_id):
        await interaction.response.defer()
        raise RequestNotFound("gone")

    router.register(InteractionKind.BUTTON, Action.MANAGE_ITEMS, handler)
    interaction = make_interaction(Action.MANAGE_ITEMS)

    assert await router.dispatch(interaction)
    interaction.response.send_message.assert_not_awaited()
    interaction.followup.send.assert_awaited_once_with(RequestNotFound.user_message, ephemeral=True)


async def test_unexpected_error_sends_generic_notice(router: InteractionRouter) -> None:
    router.register(InteractionKind.BUTTON, Action.MAKE_ITEM_REQUEST, AsyncMock(side_effect=KeyError("boom")))
    interaction = make_interaction(Action.MAKE_ITEM_REQUEST)

    assert await router.dispatch(interaction)
    interaction.response.send_message.assert_awaited_once_with(GENERIC_ERROR, ephemeral=True)
