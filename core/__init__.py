"""
Core utilities and infrastructure for the bank bot.

This package contains:
- component_ids: Custom id encoding for buttons, selects and forms
- config: Configuration loading and validation
- constants: Configuration keys, collections and action ids
- document_store: JSON document persistence
- errors: Domain error taxonomy
- interactions: Interaction routing
- io_utils: File I/O helpers
- paths: Path resolution
- permissions: Staff role checks
- transitions: Request and claim state machines
- types: Dataclasses and type definitions
- utils: General utilities
- views: Buttons, selects and modals
"""
from .constants import Action, Collection, ConfigKey, FieldId, K
from .types import (
    Actor,
    ClaimStatus,
    ItemRequest,
    RequestItem,
    RequestOutcome,
    RequestStatus,
    StimulusClaim,
)

__all__ = [
    # Constants
    "Action",
    "Collection",
    "ConfigKey",
    "FieldId",
    "K",
    # Types
    "Actor",
    "ClaimStatus",
    "ItemRequest",
    "RequestItem",
    "RequestOutcome",
    "RequestStatus",
    "StimulusClaim",
]
