"""
Discord bot client - lean event handling and command registration.

All collaborators are built once here and passed down; business logic lives
in the request and stimulus services.
"""
from __future__ import annotations

import logging
from typing import Optional

import discord
from discord import app_commands

from core.config import BankConfig
from core.document_store import DocumentStore
from core.interactions import InteractionRouter
from modules.bank_panel import build_commands
from modules.bank_requests import BankRequestHandlers
from modules.stimulus import StimulusHandlers
from services.notification_service import NotificationService
from services.request_service import RequestService
from services.stimulus_service import StimulusService
from web.server import WebServer

logger = logging.getLogger("bankbot")


class BankBot(discord.Client):
    """
    Main Discord bot client.

    Handles:
    - Discord events (on_ready, on_interaction)
    - Slash command registration
    - Optional status web server
    """

    def __init__(self, config: BankConfig) -> None:
        intents = discord.Intents.default()
        intents.guilds = True
        intents.members = True
        super().__init__(intents=intents, application_id=config.application_id)

        self.config = config
        self.tree = app_commands.CommandTree(self)
        self.store = DocumentStore(config.data_dir)
        self.notifier = NotificationService(self)
        self.requests = RequestService(self.store, self.notifier, config)
        self.stimulus = StimulusService(self.store, self.notifier, config)
        self.router = InteractionRouter(config.authorized_staff_role_ids)
        self.web: Optional[WebServer] = None
        self.ready_once = False

    # ─── Lifecycle ────────────────────────────────────────────────────────────

    async def setup_hook(self) -> None:
        """Called when the bot is starting up."""
        await self.store.initialize()

        BankRequestHandlers(self.requests).register(self.router)
        StimulusHandlers(self.stimulus).register(self.router)

        self._register_commands()
        await self._sync_commands()

        if self.config.web_enabled:
            self.web = WebServer(self, self.store, self.config.web_host, self.config.web_port)
            await self.web.start()

    async def on_ready(self) -> None:
        """Called when the bot is ready."""
        if not self.ready_once:
            logger.info("Bot ready as %s (%s)", self.user, self.user.id if self.user else "?")
            self.ready_once = True

    async def close(self) -> None:
        """Cleanup when shutting down."""
        if self.web:
            await self.web.stop()
        await super().close()

    # ─── Interaction Events ───────────────────────────────────────────────────

    async def on_interaction(self, interaction: discord.Interaction) -> None:
        """Handle interactions (button clicks, selects, forms)."""
        await self.router.dispatch(interaction)

    # ─── Commands ─────────────────────────────────────────────────────────────

    def _register_commands(self) -> None:
        """Register slash commands."""
        for command in build_commands(self.config):
            self.tree.add_command(command)

    async def _sync_commands(self) -> None:
        try:
            if self.config.guild_id:
                guild = discord.Object(id=self.config.guild_id)
                self.tree.copy_global_to(guild=guild)
                synced = await self.tree.sync(guild=guild)
                logger.info("Synced %d commands to guild %s", len(synced), self.config.guild_id)
            else:
                synced = await self.tree.sync()
                logger.info("Synced %d global commands", len(synced))
        except discord.HTTPException as exc:
            logger.error("Error registering slash commands: %s", exc)
