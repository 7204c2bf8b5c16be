"""
Component custom id codec.

Discord only gives us a string per component. ``ComponentId`` turns it into an
action name plus an optional target snowflake, so handlers never slice strings.

Wire format:
    <action>            plain actions, e.g. ``manage_items``
    <action>_<id>       targeted actions, e.g. ``stimulus_mark_paid_1234``
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .constants import TARGETED_ACTIONS
from .utils import is_valid_id, safe_int


class ComponentIdError(ValueError):
    pass


@dataclass(frozen=True)
class ComponentId:
    action: str
    target_id: Optional[int] = None

    def encode(self) -> str:
        if self.action in TARGETED_ACTIONS:
            if self.target_id is None:
                raise ComponentIdError(f"{self.action} requires a target id")
            return f"{self.action}_{self.target_id}"
        if self.target_id is not None:
            raise ComponentIdError(f"{self.action} does not take a target id")
        return self.action

    @classmethod
    def parse(
        cls,
        custom_id: str,
        known_actions: Iterable[str],
    ) -> Optional[ComponentId]:
        """
        Parse ``custom_id`` against the known action names.

        Returns None for ids that belong to no known action or carry a
        malformed target.
        """
        if not isinstance(custom_id, str) or not custom_id:
            return None
        known = set(known_actions)
        if custom_id in known and custom_id not in TARGETED_ACTIONS:
            return cls(action=custom_id)

        # Longest match first so one action name may prefix another.
        for action in sorted(TARGETED_ACTIONS & known, key=len, reverse=True):
            prefix = f"{action}_"
            if not custom_id.startswith(prefix):
                continue
            target = safe_int(custom_id[len(prefix):])
            if target is None or not is_valid_id(target):
                return None
            return cls(action=action, target_id=target)
        return None
