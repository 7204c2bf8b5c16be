"""
Core interaction handling - routes interactions to appropriate handlers.

Handlers are registered per (kind, action) on an ``InteractionRouter`` owned by
the bot. Custom ids are decoded with ``ComponentId`` before lookup, and staff
actions are gated on the configured banker roles before any handler runs.
Slash commands are dispatched by discord.py's command tree, not here.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Coroutine, Dict, Iterable, List, Optional, Tuple

import discord

from .component_ids import ComponentId
from .constants import STAFF_ACTIONS
from .errors import BankError, Unauthorized
from .permissions import is_authorized_staff, resolve_member

logger = logging.getLogger("bankbot.interactions")

# Type alias for interaction handlers
InteractionHandler = Callable[[discord.Interaction, ComponentId], Coroutine[Any, Any, None]]

GENERIC_ERROR = "An error occurred. Please try again later or contact a bot administrator."


class InteractionKind(str, Enum):
    BUTTON = "button"
    SELECT = "select"
    MODAL = "modal"


def interaction_kind(interaction: discord.Interaction) -> Optional[InteractionKind]:
    """Classify an interaction, or None for kinds the router does not handle."""
    if interaction.type == discord.InteractionType.modal_submit:
        return InteractionKind.MODAL
    if interaction.type != discord.InteractionType.component:
        return None
    component_type = (interaction.data or {}).get("component_type")
    if component_type == discord.ComponentType.button.value:
        return InteractionKind.BUTTON
    if component_type == discord.ComponentType.string_select.value:
        return InteractionKind.SELECT
    return None


def modal_values(interaction: discord.Interaction) -> Dict[str, str]:
    """Collect ``custom_id -> value`` for every text input in a submitted modal."""
    values: Dict[str, str] = {}

    def _walk(components: Iterable[Dict[str, Any]]) -> None:
        for component in components or []:
            if "components" in component:
                _walk(component["components"])
            elif "component" in component:
                _walk([component["component"]])
            elif "custom_id" in component:
                values[component["custom_id"]] = component.get("value") or ""

    _walk((interaction.data or {}).get("components", []))
    return values


def select_values(interaction: discord.Interaction) -> List[str]:
    return list((interaction.data or {}).get("values", []))


async def send_ephemeral(interaction: discord.Interaction, content: str) -> None:
    """Reply privately, whether or not the interaction was already acknowledged."""
    if interaction.response.is_done():
        await interaction.followup.send(content, ephemeral=True)
    else:
        await interaction.response.send_message(content, ephemeral=True)


class InteractionRouter:
    """Dispatches component and modal interactions to registered handlers."""

    def __init__(self, staff_role_ids: Iterable[int]) -> None:
        self.staff_role_ids = frozenset(staff_role_ids)
        self._handlers: Dict[Tuple[InteractionKind, str], InteractionHandler] = {}

    def register(self, kind: InteractionKind, action: str, handler: InteractionHandler) -> None:
        """Register the handler for one (kind, action) pair."""
        self._handlers[(kind, action)] = handler
        logger.debug("Registered %s handler for action: %s", kind.value, action)

    def actions(self, kind: InteractionKind) -> List[str]:
        return [action for (k, action) in self._handlers if k == kind]

    def resolve(
        self,
        kind: InteractionKind,
        custom_id: str,
    ) -> Optional[Tuple[ComponentId, InteractionHandler]]:
        component_id = ComponentId.parse(custom_id, self.actions(kind))
        if component_id is None:
            return None
        return component_id, self._handlers[(kind, component_id.action)]

    async def _check_staff(self, interaction: discord.Interaction, component_id: ComponentId) -> None:
        if component_id.action not in STAFF_ACTIONS:
            return
        member = await resolve_member(interaction)
        if not is_authorized_staff(member, self.staff_role_ids):
            logger.warning(
                "Unauthorized staff action attempt by %s (%s) on %s",
                interaction.user,
                interaction.user.id,
                component_id.encode(),
            )
            raise Unauthorized(component_id.action)

    async def dispatch(self, interaction: discord.Interaction) -> bool:
        """
        Route an interaction to the appropriate handler.

        Returns True if the interaction was handled, False otherwise.
        """
        kind = interaction_kind(interaction)
        if kind is None:
            return False

        custom_id = (interaction.data or {}).get("custom_id", "")
        logger.debug(
            "Received %s interaction %s from %s: %s",
            kind.value,
            interaction.id,
            interaction.user,
            custom_id,
        )
        resolved = self.resolve(kind, custom_id)
        if resolved is None:
            logger.debug("No %s handler for custom_id %r", kind.value, custom_id)
            return False
        component_id, handler = resolved

        try:
            await self._check_staff(interaction, component_id)
            await handler(interaction, component_id)
        except BankError as exc:
            logger.info("%s on %s for %s: %s", type(exc).__name__, custom_id, interaction.user, exc)
            await self._reply_error(interaction, exc.user_message)
        except Exception:
            logger.exception("Error in %s handler for %s", kind.value, custom_id)
            await self._reply_error(interaction, GENERIC_ERROR)
        return True

    async def _reply_error(self, interaction: discord.Interaction, content: str) -> None:
        try:
            await send_ephemeral(interaction, content)
        except discord.HTTPException as exc:
            logger.warning("Could not deliver error notice for interaction %s: %s", interaction.id, exc)
