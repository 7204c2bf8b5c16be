"""
Component builders - buttons, select menus and modals used by the bank.

Views are persistent (``timeout=None``) and carry only custom ids; clicks are
routed by ``InteractionRouter`` rather than view callbacks, so they keep
working after a restart.
"""
from __future__ import annotations

from typing import Sequence

import discord

from .component_ids import ComponentId
from .constants import (
    DENY_REASON_MIN_LENGTH,
    SELECT_LABEL_MAX,
    SELECT_OPTIONS_MAX,
    Action,
    FieldId,
)
from .types import RequestItem
from .utils import truncate


def _button(
    action: str,
    label: str,
    style: discord.ButtonStyle,
    target_id: int | None = None,
) -> discord.ui.Button:
    custom_id = ComponentId(action=action, target_id=target_id).encode()
    return discord.ui.Button(label=label, style=style, custom_id=custom_id)


def build_bank_panel_view(website_url: str) -> discord.ui.View:
    view = discord.ui.View(timeout=None)
    view.add_item(discord.ui.Button(label="View Guild Bank Website", style=discord.ButtonStyle.link, url=website_url))
    view.add_item(_button(Action.MAKE_ITEM_REQUEST, "Make an Item Request", discord.ButtonStyle.primary))
    view.add_item(_button(Action.REQUEST_STIMULUS, "Request New Member Stimulus", discord.ButtonStyle.success))
    return view


def build_staff_actions_view() -> discord.ui.View:
    view = discord.ui.View(timeout=None)
    view.add_item(_button(Action.REQUEST_FULFILLED, "Mark Fulfilled", discord.ButtonStyle.success))
    view.add_item(_button(Action.REQUEST_DENY, "Deny Request", discord.ButtonStyle.danger))
    view.add_item(_button(Action.MANAGE_ITEMS, "Manage Items", discord.ButtonStyle.secondary))
    return view


def build_mark_paid_view(claimant_id: int) -> discord.ui.View:
    view = discord.ui.View(timeout=None)
    view.add_item(_button(Action.STIMULUS_MARK_PAID, "Mark Paid", discord.ButtonStyle.success, target_id=claimant_id))
    return view


def build_manage_items_view(pending: Sequence[RequestItem]) -> discord.ui.View:
    """Multi-select over pending items; option values are ``originalIndex``."""
    shown = list(pending)[:SELECT_OPTIONS_MAX]
    options = [
        discord.SelectOption(
            label=truncate(item.name or f"(blank line {item.original_index + 1})", SELECT_LABEL_MAX),
            value=str(item.original_index),
            description="Current Status: Pending",
        )
        for item in shown
    ]
    select = discord.ui.Select(
        custom_id=Action.MANAGE_ITEMS_SELECT,
        placeholder="Select items to mark as fulfilled...",
        min_values=1,
        max_values=len(options),
        options=options,
    )
    view = discord.ui.View(timeout=None)
    view.add_item(select)
    return view


def build_item_request_modal() -> discord.ui.Modal:
    modal = discord.ui.Modal(title="Guild Bank Item Request", custom_id=Action.ITEM_REQUEST_MODAL)
    modal.add_item(discord.ui.TextInput(
        custom_id=FieldId.ITEMS,
        label="Items To Request (One Per Line)",
        style=discord.TextStyle.paragraph,
        placeholder="e.g.,\n1x Flowing Black Silk Sash\n2x Orb of the Infinite Void",
        required=True,
        min_length=1,
    ))
    modal.add_item(discord.ui.TextInput(
        custom_id=FieldId.CHARACTER_NAME,
        label="Character Name (Where To Send Items)",
        style=discord.TextStyle.short,
        placeholder="e.g., Grumpytoon",
        required=True,
        min_length=1,
    ))
    modal.add_item(discord.ui.TextInput(
        custom_id=FieldId.NOTES,
        label="Additional Notes (Optional)",
        style=discord.TextStyle.paragraph,
        placeholder="e.g., Available after 5pm EST, please parcel",
        required=False,
    ))
    return modal


def build_fulfill_modal() -> discord.ui.Modal:
    modal = discord.ui.Modal(title="Mark Request Fulfilled", custom_id=Action.FULFILL_REQUEST_MODAL)
    modal.add_item(discord.ui.TextInput(
        custom_id=FieldId.FULFILL_MESSAGE,
        label="Message to Requester (Optional)",
        style=discord.TextStyle.paragraph,
        placeholder="e.g., Your items have been delivered! Enjoy!",
        required=False,
    ))
    return modal


def build_deny_modal() -> discord.ui.Modal:
    modal = discord.ui.Modal(title="Deny Request", custom_id=Action.DENY_REQUEST_MODAL)
    modal.add_item(discord.ui.TextInput(
        custom_id=FieldId.DENY_REASON,
        label="Reason for Denial (Required)",
        style=discord.TextStyle.paragraph,
        placeholder="e.g., Items out of stock, character not valid, etc.",
        required=True,
        min_length=DENY_REASON_MIN_LENGTH,
    ))
    return modal
