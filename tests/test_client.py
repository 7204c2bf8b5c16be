"""Tests for bot client wiring."""

from __future__ import annotations

from dataclasses import replace
from unittest.mock import AsyncMock

import discord

from bot import BankBot
from core.config import BankConfig
from core.constants import Action
from core.interactions import InteractionKind
from tests.conftest import make_interaction


async def test_setup_hook_registers_handlers_and_commands(config: BankConfig) -> None:
    bot = BankBot(config)
    bot.tree.sync = AsyncMock(return_value=[])

    await bot.setup_hook()

    assert config.data_dir.is_dir()
    assert Action.MANAGE_ITEMS in bot.router.actions(InteractionKind.BUTTON)
    assert Action.DENY_REQUEST_MODAL in bot.router.actions(InteractionKind.MODAL)
    guild = discord.Object(id=config.guild_id)
    assert {command.name for command in bot.tree.get_commands(guild=guild)} == {"bank", "ping"}
    bot.tree.sync.assert_awaited_once_with(guild=guild)
    assert bot.web is None


async def test_global_sync_without_guild(config: BankConfig) -> None:
    bot = BankBot(replace(config, guild_id=None))
    bot.tree.sync = AsyncMock(return_value=[])
    await bot.setup_hook()
    bot.tree.sync.assert_awaited_once_with()


async def test_on_interaction_dispatches(config: BankConfig) -> None:
    bot = BankBot(config)
    bot.router.dispatch = AsyncMock(return_value=True)
    interaction = make_interaction(Action.MAKE_ITEM_REQUEST)
    await bot.on_interaction(interaction)
    bot.router.dispatch.assert_awaited_once_with(interaction)
