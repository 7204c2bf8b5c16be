"""
Stimulus module - new member stimulus claim and banker approval.

The claim button lives on the /bank panel; the Mark Paid button is posted to
the officer channel and carries the claimant's user id in its custom id.
"""
from __future__ import annotations

import logging

import discord

from core.component_ids import ComponentId
from core.constants import Action
from core.errors import ClaimNotFound, DownstreamUnavailable
from core.interactions import InteractionKind, InteractionRouter
from core.types import Actor
from services import messages
from services.stimulus_service import StimulusService

logger = logging.getLogger("bankbot.stimulus")


class StimulusHandlers:
    """Interaction handlers for stimulus claims."""

    def __init__(self, service: StimulusService) -> None:
        self.service = service

    def register(self, router: InteractionRouter) -> None:
        router.register(InteractionKind.BUTTON, Action.REQUEST_STIMULUS, self.claim)
        router.register(InteractionKind.BUTTON, Action.STIMULUS_MARK_PAID, self.mark_paid)

    async def claim(self, interaction: discord.Interaction, component_id: ComponentId) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        await self.service.claim(Actor.from_user(interaction.user))
        await interaction.followup.send(
            "Your new member stimulus request has been sent to an officer. "
            "Please wait for them to process it in-game.",
            ephemeral=True,
        )

    async def mark_paid(self, interaction: discord.Interaction, component_id: ComponentId) -> None:
        if component_id.target_id is None:
            raise ClaimNotFound("button carried no claimant id")
        if interaction.guild_id is None:
            raise DownstreamUnavailable("mark paid used outside a guild")
        await interaction.response.defer()
        outcome = await self.service.approve(
            component_id.target_id, Actor.from_user(interaction.user), interaction.guild_id
        )
        notice = f"Stimulus for {messages.mention(outcome.claim.id)} marked as paid."
        await interaction.followup.send(
            notice + messages.partial_failure_notice(outcome.failed_steps),
            ephemeral=True,
        )
