"""Bank panel module - the /bank and /ping slash commands."""
from __future__ import annotations

import logging

import discord
from discord import app_commands

from core.config import BankConfig
from core.views import build_bank_panel_view
from services import messages

logger = logging.getLogger("bankbot.bank_panel")


async def send_bank_panel(interaction: discord.Interaction, config: BankConfig) -> None:
    await interaction.response.send_message(
        messages.BANK_PANEL,
        view=build_bank_panel_view(config.bank_website_url),
    )
    logger.info("Sent Guild Bank panel for %s in channel %s", interaction.user, interaction.channel_id)


def build_commands(config: BankConfig) -> list[app_commands.Command]:
    """Slash commands for the command tree."""

    @app_commands.command(name="bank", description="Displays the Guild Bank information and actions.")
    async def bank_cmd(interaction: discord.Interaction) -> None:
        await send_bank_panel(interaction, config)

    @app_commands.command(name="ping", description="Check that the bank bot is responding.")
    async def ping_cmd(interaction: discord.Interaction) -> None:
        await interaction.response.send_message("Pong!", ephemeral=True)

    return [bank_cmd, ping_cmd]
