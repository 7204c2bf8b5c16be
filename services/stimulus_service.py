"""
Stimulus service - the one-time new member stimulus claim.

A claim document exists at most once per user, whatever its status, so a
member can only ever claim once. Bankers approve a pending claim with the
Mark Paid button. The claimed role is granted before the claim is marked
paid, so a failed grant leaves the claim pending and the button can be retried.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import discord

from core.config import BankConfig
from core.constants import Collection
from core.document_store import DocumentStore
from core.errors import ClaimAlreadyExists, ClaimNotFound, DownstreamUnavailable
from core.transitions import ClaimAction, next_claim_status
from core.types import Actor, ClaimStatus, StimulusClaim
from core.utils import now_iso
from core.views import build_mark_paid_view

from . import messages
from .notification_service import NotificationService

logger = logging.getLogger("bankbot.stimulus")


@dataclass
class ClaimOutcome:
    claim: StimulusClaim
    failed_steps: List[str] = field(default_factory=list)

    @property
    def partial_failure(self) -> bool:
        return bool(self.failed_steps)


class StimulusService:
    """Business logic for stimulus claims."""

    def __init__(self, store: DocumentStore, notifier: NotificationService, config: BankConfig) -> None:
        self.store = store
        self.notifier = notifier
        self.config = config

    async def get(self, user_id: int | str) -> Optional[StimulusClaim]:
        data = await self.store.get(Collection.STIMULUS_CLAIMS, str(user_id))
        if data is None:
            return None
        return StimulusClaim.from_dict(str(user_id), data)

    async def claim(self, claimant: Actor) -> StimulusClaim:
        """
        Open a claim and post the approval prompt for bankers.

        Raises ``ClaimAlreadyExists`` if the member ever claimed before and
        ``DownstreamUnavailable`` if the review channel is missing.
        """
        if await self.store.exists(Collection.STIMULUS_CLAIMS, claimant.id):
            logger.info("Repeat stimulus claim rejected for %s", claimant.tag)
            raise ClaimAlreadyExists(claimant.id)

        channel_id = self.config.stimulus_channel_id
        await self.notifier.require_channel(channel_id, "Stimulus officer")
        prompt_id = await self.notifier.post(
            channel_id,
            messages.stimulus_prompt(claimant.id, claimant.tag),
            build_mark_paid_view(int(claimant.id)),
        )

        claim = StimulusClaim(
            id=claimant.id,
            requester_username=claimant.username,
            status=ClaimStatus.PENDING,
            officer_message_id=prompt_id,
            officer_channel_id=str(channel_id),
            timestamp=now_iso(),
        )
        if not await self.store.create(Collection.STIMULUS_CLAIMS, claim.id, claim.to_dict()):
            # Lost a race against a concurrent claim from the same member.
            logger.warning("Concurrent stimulus claim for %s; withdrawing duplicate prompt", claimant.tag)
            try:
                await self.notifier.delete_message(channel_id, prompt_id)
            except Exception:
                logger.exception("Failed to delete duplicate stimulus prompt %s", prompt_id)
            raise ClaimAlreadyExists(claimant.id)

        logger.info("Stimulus request from %s sent to officer channel", claimant.tag)
        return claim

    async def approve(self, user_id: int | str, staff: Actor, guild_id: int) -> ClaimOutcome:
        """
        Grant the claimed role, then mark a pending claim paid.

        A claim that is already paid is rejected with ``InvalidTransition``, so
        a double click cannot grant the role or DM the claimant twice. If the
        role cannot be granted, ``DownstreamUnavailable`` is raised and the
        claim stays pending.
        """
        claim = await self.get(user_id)
        if claim is None:
            logger.warning("Stimulus claim not found for user %s", user_id)
            raise ClaimNotFound(str(user_id))
        new_status = next_claim_status(claim.status, ClaimAction.APPROVE)

        try:
            await self.notifier.grant_role(
                guild_id, claim.id, self.config.stimulus_claimed_role_id, reason="New member stimulus paid"
            )
        except discord.HTTPException as exc:
            logger.error("Failed to grant stimulus role to %s: %s", claim.id, exc)
            raise DownstreamUnavailable(
                f"role grant failed for {claim.id}: {exc}",
                user_message="The stimulus role could not be granted (check the bot's permissions and role "
                "position). The claim is still pending; try Mark Paid again once fixed.",
            ) from exc

        claim.status = new_status
        claim.paid_by = staff.id
        claim.paid_by_username = staff.username
        claim.paid_timestamp = now_iso()
        updated = await self.store.update(Collection.STIMULUS_CLAIMS, claim.id, {
            "status": claim.status.value,
            "paidBy": claim.paid_by,
            "paidByUsername": claim.paid_by_username,
            "paidTimestamp": claim.paid_timestamp,
        })
        if not updated:
            raise ClaimNotFound(claim.id)
        logger.info("Stimulus claim for %s marked paid by %s", claim.id, staff.tag)

        outcome = ClaimOutcome(claim=claim)
        if claim.officer_message_id:
            channel_id = claim.officer_channel_id or self.config.stimulus_channel_id
            try:
                await self.notifier.edit_message(
                    channel_id, claim.officer_message_id, messages.stimulus_paid_prompt(claim.id, staff.id)
                )
            except Exception:
                logger.exception("Failed to update stimulus prompt for %s", claim.id)
                outcome.failed_steps.append("review_prompt")
        else:
            logger.warning("No officer message stored for stimulus claim %s", claim.id)

        try:
            await self.notifier.dm_user(claim.id, messages.stimulus_paid_dm(self.config.stimulus_amount, staff.tag))
        except Exception:
            logger.exception("Failed to DM stimulus confirmation to %s", claim.id)
            outcome.failed_steps.append("dm_claimant")
        return outcome
