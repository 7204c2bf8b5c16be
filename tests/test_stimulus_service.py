"""Tests for the one-time stimulus claim."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from core.config import BankConfig
from core.constants import Collection
from core.document_store import DocumentStore
from core.errors import ClaimAlreadyExists, ClaimNotFound, DownstreamUnavailable, InvalidTransition
from core.types import ClaimStatus
from services.stimulus_service import StimulusService
from tests.conftest import (
    BANKER,
    CLAIMANT,
    CLAIMED_ROLE_ID,
    GUILD_ID,
    POSTED_MESSAGE_ID,
    STIMULUS_CHANNEL_ID,
)


@pytest.fixture
def service(store: DocumentStore, notifier: AsyncMock, config: BankConfig) -> StimulusService:
    return StimulusService(store, notifier, config)


async def test_claim_posts_prompt_and_stores_pending(service: StimulusService, notifier: AsyncMock) -> None:
    claim = await service.claim(CLAIMANT)

    assert claim.status == ClaimStatus.PENDING
    assert claim.officer_message_id == POSTED_MESSAGE_ID
    stored = await service.get(CLAIMANT.id)
    assert stored == claim

    channel_id, content, view = notifier.post.await_args.args
    assert channel_id == STIMULUS_CHANNEL_ID
    assert f"<@{CLAIMANT.id}>" in content
    assert view.children[0].custom_id == f"stimulus_mark_paid_{CLAIMANT.id}"


async def test_second_claim_rejected(service: StimulusService, notifier: AsyncMock, store: DocumentStore) -> None:
    await service.claim(CLAIMANT)
    before = await store.get(Collection.STIMULUS_CLAIMS, CLAIMANT.id)

    with pytest.raises(ClaimAlreadyExists):
        await service.claim(CLAIMANT)

    assert await store.get(Collection.STIMULUS_CLAIMS, CLAIMANT.id) == before
    assert await store.list_ids(Collection.STIMULUS_CLAIMS) == [CLAIMANT.id]
    assert notifier.post.await_count == 1


async def test_claim_after_payment_rejected(service: StimulusService) -> None:
    await service.claim(CLAIMANT)
    await service.approve(CLAIMANT.id, BANKER, GUILD_ID)
    with pytest.raises(ClaimAlreadyExists):
        await service.claim(CLAIMANT)


async def test_claim_without_officer_channel(
    service: StimulusService, notifier: AsyncMock, store: DocumentStore
) -> None:
    notifier.require_channel.side_effect = DownstreamUnavailable("channel missing")
    with pytest.raises(DownstreamUnavailable):
        await service.claim(CLAIMANT)
    notifier.post.assert_not_awaited()
    assert await store.list_ids(Collection.STIMULUS_CLAIMS) == []


async def test_concurrent_claim_withdraws_duplicate_prompt(
    service: StimulusService, notifier: AsyncMock, store: DocumentStore
) -> None:
    store.create = AsyncMock(return_value=False)
    with pytest.raises(ClaimAlreadyExists):
        await service.claim(CLAIMANT)
    notifier.delete_message.assert_awaited_once_with(STIMULUS_CHANNEL_ID, POSTED_MESSAGE_ID)


async def test_approve_grants_role_and_notifies(service: StimulusService, notifier: AsyncMock) -> None:
    await service.claim(CLAIMANT)

    outcome = await service.approve(CLAIMANT.id, BANKER, GUILD_ID)

    assert not outcome.partial_failure
    stored = await service.get(CLAIMANT.id)
    assert stored is not None
    assert stored.status == ClaimStatus.PAID
    assert stored.paid_by == BANKER.id
    assert stored.paid_timestamp

    notifier.grant_role.assert_awaited_once_with(
        GUILD_ID, CLAIMANT.id, CLAIMED_ROLE_ID, reason="New member stimulus paid"
    )
    channel_id, message_id, content = notifier.edit_message.await_args.args
    assert (channel_id, message_id) == (str(STIMULUS_CHANNEL_ID), POSTED_MESSAGE_ID)
    assert "__PAID__" in content
    assert "5000p" in notifier.dm_user.await_args.args[1]


async def test_approve_twice_rejected(service: StimulusService, notifier: AsyncMock) -> None:
    await service.claim(CLAIMANT)
    await service.approve(CLAIMANT.id, BANKER, GUILD_ID)
    with pytest.raises(InvalidTransition):
        await service.approve(CLAIMANT.id, BANKER, GUILD_ID)
    assert notifier.grant_role.await_count == 1
    assert notifier.dm_user.await_count == 1


async def test_approve_unknown_claim(service: StimulusService) -> None:
    with pytest.raises(ClaimNotFound):
        await service.approve(CLAIMANT.id, BANKER, GUILD_ID)


async def test_approve_missing_role_leaves_claim_pending(service: StimulusService, notifier: AsyncMock) -> None:
    await service.claim(CLAIMANT)
    notifier.grant_role.side_effect = DownstreamUnavailable(f"member {CLAIMANT.id} or role {CLAIMED_ROLE_ID} not found")

    with pytest.raises(DownstreamUnavailable):
        await service.approve(CLAIMANT.id, BANKER, GUILD_ID)

    stored = await service.get(CLAIMANT.id)
    assert stored is not None
    assert stored.status == ClaimStatus.PENDING
    assert stored.paid_by is None
    notifier.edit_message.assert_not_awaited()
    notifier.dm_user.assert_not_awaited()


async def test_approve_forbidden_grant_can_be_retried(service: StimulusService, notifier: AsyncMock) -> None:
    await service.claim(CLAIMANT)
    response = MagicMock(status=403, reason="Forbidden")
    notifier.grant_role.side_effect = discord.Forbidden(response, "Missing Permissions")

    with pytest.raises(DownstreamUnavailable) as excinfo:
        await service.approve(CLAIMANT.id, BANKER, GUILD_ID)
    assert "still pending" in excinfo.value.user_message
    stored = await service.get(CLAIMANT.id)
    assert stored is not None
    assert stored.status == ClaimStatus.PENDING
    notifier.dm_user.assert_not_awaited()

    notifier.grant_role.side_effect = None
    outcome = await service.approve(CLAIMANT.id, BANKER, GUILD_ID)

    assert outcome.claim.status == ClaimStatus.PAID
    assert notifier.grant_role.await_count == 2
    notifier.dm_user.assert_awaited_once()
