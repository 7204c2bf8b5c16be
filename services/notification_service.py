"""
Notification service - every Discord side effect of the bank workflows.

Posting, editing, DMs, thread renames, reactions and role grants all go through
here so the request and stimulus services can be tested with a mock.
Methods raise on failure; callers decide whether a failure is fatal.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import discord

from core.errors import DownstreamUnavailable

logger = logging.getLogger("bankbot.notifications")


@dataclass
class CreatedThread:
    """A forum post created for a new request."""
    thread_id: str
    url: str
    initial_message_id: Optional[str]


class NotificationService:
    """Discord-backed notification sink."""

    def __init__(self, bot: discord.Client) -> None:
        self.bot = bot

    # ─── Lookups ──────────────────────────────────────────────────────────────

    async def get_channel(self, channel_id: int | str) -> Optional[discord.abc.Snowflake]:
        """Resolve a channel or thread from cache, falling back to the API."""
        channel_id = int(channel_id)
        channel = self.bot.get_channel(channel_id)
        if channel is not None:
            return channel
        try:
            return await self.bot.fetch_channel(channel_id)
        except discord.NotFound:
            return None
        except discord.Forbidden:
            logger.warning("No access to channel %s", channel_id)
            return None

    async def require_channel(self, channel_id: int | str, purpose: str) -> discord.abc.Messageable:
        channel = await self.get_channel(channel_id)
        if channel is None:
            logger.error("%s channel (ID: %s) not found", purpose, channel_id)
            raise DownstreamUnavailable(
                f"{purpose} channel {channel_id} not found",
                user_message=f"There was an error finding the {purpose.lower()} channel. "
                "Please contact a bot administrator.",
            )
        return channel

    async def require_forum(self, channel_id: int | str) -> discord.ForumChannel:
        channel = await self.require_channel(channel_id, "Request forum")
        if not isinstance(channel, discord.ForumChannel):
            logger.error("Channel %s is not a forum channel (type %s)", channel_id, getattr(channel, "type", None))
            raise DownstreamUnavailable(
                f"channel {channel_id} is not a forum",
                user_message="There was an error finding the request forum channel (incorrect channel type). "
                "Please contact a bot administrator.",
            )
        return channel

    # ─── Threads & messages ───────────────────────────────────────────────────

    async def create_request_thread(
        self,
        forum: discord.ForumChannel,
        name: str,
        content: str,
        tag_ids: Sequence[int] = (),
    ) -> CreatedThread:
        tags = [tag for tag in (forum.get_tag(tag_id) for tag_id in tag_ids) if tag is not None]
        if len(tags) != len(tag_ids):
            logger.warning("Some forum tags %s were not found on %s", list(tag_ids), forum.id)
        created = await forum.create_thread(
            name=name,
            content=content,
            applied_tags=tags,
            allowed_mentions=discord.AllowedMentions(users=True, roles=False, everyone=False),
        )
        thread = created.thread
        message = created.message
        initial_message_id = str(message.id) if message is not None else None
        if initial_message_id is None:
            logger.warning("Starter message id missing for thread %s", thread.id)
        logger.info("Created forum thread for item request: %s", thread.jump_url)
        return CreatedThread(thread_id=str(thread.id), url=thread.jump_url, initial_message_id=initial_message_id)

    async def post(
        self,
        channel_id: int | str,
        content: str,
        view: Optional[discord.ui.View] = None,
    ) -> str:
        """Send a message and return its id."""
        channel = await self.require_channel(channel_id, "Target")
        if view is not None:
            message = await channel.send(content=content, view=view)
        else:
            message = await channel.send(content=content)
        return str(message.id)

    async def edit_message(
        self,
        channel_id: int | str,
        message_id: int | str,
        content: str,
        view: Optional[discord.ui.View] = None,
    ) -> None:
        """Edit a message in place; ``view=None`` removes all components."""
        channel = await self.require_channel(channel_id, "Target")
        message = channel.get_partial_message(int(message_id))
        await message.edit(content=content, view=view)

    async def delete_message(self, channel_id: int | str, message_id: int | str) -> None:
        channel = await self.require_channel(channel_id, "Target")
        await channel.get_partial_message(int(message_id)).delete()

    async def rename_thread(self, thread_id: int | str, name: str) -> bool:
        """Rename a thread. Returns False if the channel is not a thread."""
        channel = await self.require_channel(thread_id, "Request thread")
        if not isinstance(channel, discord.Thread):
            logger.warning("Channel %s is not a thread; cannot rename", thread_id)
            return False
        await channel.edit(name=name)
        return True

    async def react(self, channel_id: int | str, message_id: int | str, emoji: str) -> None:
        channel = await self.require_channel(channel_id, "Target")
        await channel.get_partial_message(int(message_id)).add_reaction(emoji)

    # ─── Users & roles ────────────────────────────────────────────────────────

    async def dm_user(self, user_id: int | str, content: str) -> None:
        """DM a user. Raises ``discord.Forbidden`` when their DMs are closed."""
        user = self.bot.get_user(int(user_id))
        if user is None:
            user = await self.bot.fetch_user(int(user_id))
        await user.send(content)
        logger.debug("DM sent to %s", user_id)

    async def grant_role(self, guild_id: int, user_id: int | str, role_id: int, reason: str) -> None:
        """
        Add a role to a member.

        Raises ``DownstreamUnavailable`` when the guild, member or role cannot
        be found; Discord errors from the grant itself propagate.
        """
        guild = self.bot.get_guild(guild_id)
        if guild is None:
            logger.warning("Guild %s not available for role grant", guild_id)
            raise DownstreamUnavailable(f"guild {guild_id} not available")
        role = guild.get_role(role_id)
        try:
            member = guild.get_member(int(user_id)) or await guild.fetch_member(int(user_id))
        except discord.NotFound:
            member = None
        if member is None or role is None:
            logger.warning("Could not find member (%s) or role (%s) for role grant", user_id, role_id)
            raise DownstreamUnavailable(
                f"member {user_id} or role {role_id} not found",
                user_message="The stimulus role or the member could not be found. "
                "Nothing was changed; please contact a bot administrator.",
            )
        await member.add_roles(role, reason=reason)
        logger.info("Added role %s to %s", role.name, member)
