"""Shared fixtures for the bank bot tests.

All Discord objects are mocked; no real Discord connection is required.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from core.config import BankConfig
from core.document_store import DocumentStore
from core.types import Actor
from services.notification_service import CreatedThread, NotificationService

GUILD_ID = 1325000000000000001
FORUM_ID = 1338612236859605072
TAG_ID = 1338627478771728394
STIMULUS_CHANNEL_ID = 1388193773778895039
CLAIMED_ROLE_ID = 1325675917141344267
STAFF_ROLE_ID = 1380709191517212723

THREAD_ID = "1400000000000000001"
THREAD_URL = f"https://discord.com/channels/{GUILD_ID}/{THREAD_ID}"
POSTED_MESSAGE_ID = "1500000000000000001"

REQUESTER = Actor(id="1111111111111111111", username="grumpy", tag="grumpy")
CLAIMANT = Actor(id="2222222222222222222", username="newbie", tag="newbie")
BANKER = Actor(id="3333333333333333333", username="banker", tag="banker")


def make_member(user_id: int, name: str, role_ids: tuple[int, ...] = ()) -> MagicMock:
    member = MagicMock(spec=discord.Member)
    member.id = user_id
    member.name = name
    member.roles = [discord.Object(id=role_id) for role_id in role_ids]
    member.__str__.return_value = name
    return member


def make_interaction(
    custom_id: str = "",
    *,
    interaction_type: discord.InteractionType = discord.InteractionType.component,
    component_type: discord.ComponentType | None = discord.ComponentType.button,
    user_id: int = int(BANKER.id),
    name: str = BANKER.username,
    role_ids: tuple[int, ...] = (STAFF_ROLE_ID,),
    channel_id: int = int(THREAD_ID),
    data: dict | None = None,
) -> MagicMock:
    """Build a fully-configured Discord interaction mock."""
    interaction = MagicMock(spec=discord.Interaction)
    interaction.id = 9000000000000000001
    interaction.type = interaction_type
    if data is None:
        data = {"custom_id": custom_id}
        if component_type is not None and interaction_type == discord.InteractionType.component:
            data["component_type"] = component_type.value
    interaction.data = data
    interaction.user = make_member(user_id, name, role_ids)
    interaction.guild = MagicMock(spec=discord.Guild)
    interaction.guild_id = GUILD_ID
    interaction.channel_id = channel_id

    interaction.response = MagicMock()
    interaction.response.is_done = MagicMock(return_value=False)
    interaction.response.send_message = AsyncMock()
    interaction.response.send_modal = AsyncMock()
    interaction.response.defer = AsyncMock(
        side_effect=lambda *args, **kwargs: interaction.response.is_done.configure_mock(return_value=True)
    )
    interaction.followup = MagicMock()
    interaction.followup.send = AsyncMock()
    return interaction


def modal_data(custom_id: str, values: dict[str, str]) -> dict:
    """Raw modal submit payload with one action row per text input."""
    return {
        "custom_id": custom_id,
        "components": [
            {"type": 1, "components": [{"type": 4, "custom_id": field, "value": value}]}
            for field, value in values.items()
        ],
    }


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def config(tmp_path: Path) -> BankConfig:
    return BankConfig(
        guild_id=GUILD_ID,
        application_id=None,
        request_forum_channel_id=FORUM_ID,
        request_tag_id=TAG_ID,
        stimulus_channel_id=STIMULUS_CHANNEL_ID,
        stimulus_claimed_role_id=CLAIMED_ROLE_ID,
        authorized_staff_role_ids=frozenset({STAFF_ROLE_ID}),
        bank_website_url="https://bank.example.com",
        stimulus_amount="5000p",
        data_dir=tmp_path / "data",
        web_enabled=False,
        web_host="127.0.0.1",
        web_port=8080,
    )


@pytest.fixture
async def store(config: BankConfig) -> DocumentStore:
    store = DocumentStore(config.data_dir)
    await store.initialize()
    return store


@pytest.fixture
def notifier() -> AsyncMock:
    """Notification sink where every Discord call succeeds."""
    notifier = AsyncMock(spec=NotificationService)
    notifier.require_forum.return_value = MagicMock(spec=discord.ForumChannel)
    notifier.require_channel.return_value = MagicMock()
    notifier.create_request_thread.return_value = CreatedThread(
        thread_id=THREAD_ID,
        url=THREAD_URL,
        initial_message_id=THREAD_ID,
    )
    notifier.post.return_value = POSTED_MESSAGE_ID
    notifier.rename_thread.return_value = True
    return notifier
