"""
Staff permission checks.

A banker is any member holding at least one of the configured staff roles.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

import discord

logger = logging.getLogger("bankbot.permissions")


def is_authorized_staff(member: Optional[discord.abc.User], role_ids: Iterable[int]) -> bool:
    """
    Check if a member holds at least one of ``role_ids``.

    Returns False for non-members (DMs) and when no roles are configured.
    """
    allowed = set(role_ids)
    if member is None or not allowed:
        return False
    roles = getattr(member, "roles", None)
    if not roles:
        return False
    member_role_ids = {role.id for role in roles}
    return bool(member_role_ids & allowed)


async def resolve_member(interaction: discord.Interaction) -> Optional[discord.Member]:
    """Get the acting member, fetching it when the payload only carried a user."""
    if isinstance(interaction.user, discord.Member):
        return interaction.user
    guild = interaction.guild
    if guild is None:
        return None
    member = guild.get_member(interaction.user.id)
    if member is not None:
        return member
    try:
        return await guild.fetch_member(interaction.user.id)
    except discord.NotFound:
        return None
    except discord.HTTPException as exc:
        logger.warning("Failed to fetch member %s: %s", interaction.user.id, exc)
        return None
