"""
Key and identifier constants.

Using constants instead of string literals provides:
- Typo protection (caught at import time)
- Single source of truth for config keys, collection names and component ids
"""
from __future__ import annotations


class ConfigKey:
    """All configuration keys used in the bot config."""

    # Identity
    GUILD_ID = "guild_id"
    APPLICATION_ID = "application_id"

    # Channels
    REQUEST_FORUM_CHANNEL_ID = "request_forum_channel_id"
    REQUEST_TAG_ID = "request_tag_id"
    STIMULUS_CHANNEL_ID = "stimulus_channel_id"

    # Roles
    STIMULUS_CLAIMED_ROLE_ID = "stimulus_claimed_role_id"
    AUTHORIZED_STAFF_ROLE_IDS = "authorized_staff_role_ids"

    # Presentation
    BANK_WEBSITE_URL = "bank_website_url"
    STIMULUS_AMOUNT = "stimulus_amount"

    # Storage
    DATA_DIR = "data_dir"

    # Status web server
    WEB_ENABLED = "web_enabled"
    WEB_HOST = "web_host"
    WEB_PORT = "web_port"


class Collection:
    """Document store collection names."""
    ITEM_REQUESTS = "itemRequests"
    STIMULUS_CLAIMS = "stimulusClaims"


class Action:
    """Component actions carried in custom ids."""

    # Buttons
    MAKE_ITEM_REQUEST = "make_item_request"
    REQUEST_STIMULUS = "request_stimulus"
    REQUEST_FULFILLED = "request_fulfilled"
    REQUEST_DENY = "request_deny"
    MANAGE_ITEMS = "manage_items"
    STIMULUS_MARK_PAID = "stimulus_mark_paid"

    # Select menus
    MANAGE_ITEMS_SELECT = "manage_items_select"

    # Modals
    ITEM_REQUEST_MODAL = "item_request_modal"
    FULFILL_REQUEST_MODAL = "fulfill_request_modal"
    DENY_REQUEST_MODAL = "deny_request_modal"


# Actions whose custom id carries a target snowflake: ``<action>_<id>``.
TARGETED_ACTIONS = frozenset({Action.STIMULUS_MARK_PAID})

# Actions only bankers may trigger. REQUEST_STIMULUS is a member action despite its request_ prefix.
STAFF_ACTIONS = frozenset({
    Action.REQUEST_FULFILLED,
    Action.REQUEST_DENY,
    Action.MANAGE_ITEMS,
    Action.STIMULUS_MARK_PAID,
    Action.MANAGE_ITEMS_SELECT,
    Action.FULFILL_REQUEST_MODAL,
    Action.DENY_REQUEST_MODAL,
})


class FieldId:
    """Text input custom ids inside modals."""
    ITEMS = "itemsInput"
    CHARACTER_NAME = "characterNameInput"
    NOTES = "additionalNotesInput"
    FULFILL_MESSAGE = "fulfillMessageInput"
    DENY_REASON = "denyMessageInput"


DENY_REASON_MIN_LENGTH = 10

FULFILLED_REACTION = "✅"

# Discord limits
THREAD_NAME_MAX = 100
SELECT_OPTIONS_MAX = 25
SELECT_LABEL_MAX = 100


# Shorthand alias for cleaner imports
K = ConfigKey
