"""
Bank requests module - item request form and banker actions.

Members open the request form from the /bank panel. Bankers work a request
from the buttons posted in its forum thread:
    Mark Fulfilled -> optional message form -> whole request fulfilled
    Deny Request   -> reason form           -> request denied
    Manage Items   -> multi-select          -> selected items fulfilled

The request id is always the id of the thread the interaction happened in.
"""
from __future__ import annotations

import logging

import discord

from core.component_ids import ComponentId
from core.constants import SELECT_OPTIONS_MAX, Action, FieldId
from core.errors import InvalidTransition, RequestNotFound
from core.interactions import InteractionKind, InteractionRouter, modal_values, select_values
from core.transitions import is_open
from core.types import Actor, ItemRequest
from core.utils import safe_int, status_label
from core.views import (
    build_deny_modal,
    build_fulfill_modal,
    build_item_request_modal,
    build_manage_items_view,
)
from services import messages
from services.request_service import RequestService

logger = logging.getLogger("bankbot.bank_requests")


class BankRequestHandlers:
    """Interaction handlers for the item request workflow."""

    def __init__(self, service: RequestService) -> None:
        self.service = service

    def register(self, router: InteractionRouter) -> None:
        router.register(InteractionKind.BUTTON, Action.MAKE_ITEM_REQUEST, self.open_request_form)
        router.register(InteractionKind.BUTTON, Action.REQUEST_FULFILLED, self.open_fulfill_form)
        router.register(InteractionKind.BUTTON, Action.REQUEST_DENY, self.open_deny_form)
        router.register(InteractionKind.BUTTON, Action.MANAGE_ITEMS, self.show_item_select)
        router.register(InteractionKind.MODAL, Action.ITEM_REQUEST_MODAL, self.submit_request)
        router.register(InteractionKind.MODAL, Action.FULFILL_REQUEST_MODAL, self.submit_fulfill)
        router.register(InteractionKind.MODAL, Action.DENY_REQUEST_MODAL, self.submit_deny)
        router.register(InteractionKind.SELECT, Action.MANAGE_ITEMS_SELECT, self.submit_item_select)

    async def _open_request(self, interaction: discord.Interaction, action: str) -> ItemRequest:
        """Load the request for this thread, rejecting closed ones."""
        request = await self.service.get(interaction.channel_id)
        if request is None:
            raise RequestNotFound(str(interaction.channel_id))
        if not is_open(request.status):
            raise InvalidTransition(request.status.value, action)
        return request

    # ─── Buttons ──────────────────────────────────────────────────────────────

    async def open_request_form(self, interaction: discord.Interaction, component_id: ComponentId) -> None:
        await interaction.response.send_modal(build_item_request_modal())
        logger.debug("Item request form shown to %s", interaction.user)

    async def open_fulfill_form(self, interaction: discord.Interaction, component_id: ComponentId) -> None:
        await self._open_request(interaction, "fulfill")
        await interaction.response.send_modal(build_fulfill_modal())
        logger.debug("Fulfill form shown to %s for thread %s", interaction.user, interaction.channel_id)

    async def open_deny_form(self, interaction: discord.Interaction, component_id: ComponentId) -> None:
        await self._open_request(interaction, "deny")
        await interaction.response.send_modal(build_deny_modal())
        logger.debug("Deny form shown to %s for thread %s", interaction.user, interaction.channel_id)

    async def show_item_select(self, interaction: discord.Interaction, component_id: ComponentId) -> None:
        await interaction.response.defer()
        request = await self._open_request(interaction, "manage items")
        pending = request.pending_items()
        if not pending:
            await interaction.followup.send(
                "All items in this request are already marked as fulfilled!",
                ephemeral=True,
            )
            return

        content = f"**Select Items to Mark as Fulfilled for {request.character_name}:**"
        if len(pending) > SELECT_OPTIONS_MAX:
            content += f"\n(Showing the first {SELECT_OPTIONS_MAX} of {len(pending)} pending items.)"
        await interaction.followup.send(content, view=build_manage_items_view(pending), ephemeral=True)
        logger.debug("Item select shown to %s for thread %s", interaction.user, request.id)

    # ─── Forms ────────────────────────────────────────────────────────────────

    async def submit_request(self, interaction: discord.Interaction, component_id: ComponentId) -> None:
        values = modal_values(interaction)
        await interaction.response.defer(ephemeral=True, thinking=True)
        try:
            outcome = await self.service.create(
                Actor.from_user(interaction.user),
                character_name=values.get(FieldId.CHARACTER_NAME, ""),
                item_lines=values.get(FieldId.ITEMS, ""),
                notes=values.get(FieldId.NOTES, ""),
            )
        except discord.HTTPException as exc:
            logger.error("Error creating forum post for %s: %s", interaction.user, exc)
            await interaction.followup.send(messages.discord_error_notice(exc.code, exc.text), ephemeral=True)
            return

        await interaction.followup.send(
            f"Your item request has been submitted! {outcome.request.thread_url}"
            + messages.partial_failure_notice(outcome.failed_steps),
            ephemeral=True,
        )

    async def submit_fulfill(self, interaction: discord.Interaction, component_id: ComponentId) -> None:
        message = modal_values(interaction).get(FieldId.FULFILL_MESSAGE, "")
        await interaction.response.defer()
        outcome = await self.service.mark_fulfilled(
            interaction.channel_id, Actor.from_user(interaction.user), message
        )
        character = outcome.request.character_name or "the requested character"
        await interaction.followup.send(
            f"Request for {character} marked as FULFILLED. Requester has been notified."
            + messages.partial_failure_notice(outcome.failed_steps),
            ephemeral=True,
        )

    async def submit_deny(self, interaction: discord.Interaction, component_id: ComponentId) -> None:
        reason = modal_values(interaction).get(FieldId.DENY_REASON, "")
        await interaction.response.defer()
        outcome = await self.service.mark_denied(
            interaction.channel_id, Actor.from_user(interaction.user), reason
        )
        character = outcome.request.character_name or "the requested character"
        await interaction.followup.send(
            f"Request for {character} marked as DENIED. Requester has been notified."
            + messages.partial_failure_notice(outcome.failed_steps),
            ephemeral=True,
        )

    # ─── Select ───────────────────────────────────────────────────────────────

    async def submit_item_select(self, interaction: discord.Interaction, component_id: ComponentId) -> None:
        raw_values = select_values(interaction)
        indices = [index for index in (safe_int(value) for value in raw_values) if index is not None]
        if len(indices) != len(raw_values):
            logger.warning("Ignoring malformed item selections %s from %s", raw_values, interaction.user)
        await interaction.response.defer()
        outcome = await self.service.mark_items_fulfilled(
            interaction.channel_id, Actor.from_user(interaction.user), indices
        )
        await interaction.followup.send(
            f"Items marked as fulfilled. Status updated to **{status_label(outcome.request.status.value)}**. "
            "Requester notified." + messages.partial_failure_notice(outcome.failed_steps),
            ephemeral=True,
        )
