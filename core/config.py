"""
Bot configuration loading and validation.

Layers, later wins:
1. ``DEFAULT_CONFIG`` below
2. ``config.default.json`` at the repository root
3. the file named by ``BANKBOT_CONFIG`` (if set)
4. environment variables (``ENV_OVERRIDES``), usually from ``.env``
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple

from .constants import K
from .io_utils import read_json
from .paths import BASE_DIR, DEFAULT_DATA_DIR, resolve_repo_path
from .utils import is_int, is_safe_data_path, is_valid_id, safe_int

DEFAULT_CONFIG_PATH = BASE_DIR / "config.default.json"
CONFIG_PATH_ENV = "BANKBOT_CONFIG"

DEFAULT_CONFIG: Dict[str, Any] = {
    K.GUILD_ID: None,
    K.APPLICATION_ID: None,
    K.REQUEST_FORUM_CHANNEL_ID: None,
    K.REQUEST_TAG_ID: None,
    K.STIMULUS_CHANNEL_ID: None,
    K.STIMULUS_CLAIMED_ROLE_ID: None,
    K.AUTHORIZED_STAFF_ROLE_IDS: [],
    K.BANK_WEBSITE_URL: "",
    K.STIMULUS_AMOUNT: "5000p",
    K.DATA_DIR: str(DEFAULT_DATA_DIR),
    K.WEB_ENABLED: False,
    K.WEB_HOST: "127.0.0.1",
    K.WEB_PORT: 8080,
}

CONFIG_SCHEMA: Dict[str, Tuple[str, bool]] = {
    K.GUILD_ID: ("int_or_none", False),
    K.APPLICATION_ID: ("int_or_none", False),
    K.REQUEST_FORUM_CHANNEL_ID: ("int", True),
    K.REQUEST_TAG_ID: ("int_or_none", False),
    K.STIMULUS_CHANNEL_ID: ("int", True),
    K.STIMULUS_CLAIMED_ROLE_ID: ("int", True),
    K.AUTHORIZED_STAFF_ROLE_IDS: ("list_int", True),
    K.BANK_WEBSITE_URL: ("url", True),
    K.STIMULUS_AMOUNT: ("str", True),
    K.DATA_DIR: ("path", True),
    K.WEB_ENABLED: ("bool", True),
    K.WEB_HOST: ("str", True),
    K.WEB_PORT: ("port", True),
}

# env var -> (config key, parser name)
ENV_OVERRIDES: Dict[str, Tuple[str, str]] = {
    "DISCORD_GUILD_ID": (K.GUILD_ID, "id"),
    "DISCORD_APPLICATION_ID": (K.APPLICATION_ID, "id"),
    "BANK_REQUEST_FORUM_CHANNEL_ID": (K.REQUEST_FORUM_CHANNEL_ID, "id"),
    "GUILD_BANK_TAG_ID": (K.REQUEST_TAG_ID, "id"),
    "STIMULUS_CHANNEL_ID": (K.STIMULUS_CHANNEL_ID, "id"),
    "STIMULUS_CLAIMED_ROLE_ID": (K.STIMULUS_CLAIMED_ROLE_ID, "id"),
    "AUTHORIZED_STAFF_ROLES": (K.AUTHORIZED_STAFF_ROLE_IDS, "id_list"),
    "GUILD_BANK_WEBSITE_URL": (K.BANK_WEBSITE_URL, "str"),
    "BANKBOT_DATA_DIR": (K.DATA_DIR, "str"),
    "BANKBOT_WEB_ENABLED": (K.WEB_ENABLED, "bool"),
    "BANKBOT_WEB_HOST": (K.WEB_HOST, "str"),
    "BANKBOT_WEB_PORT": (K.WEB_PORT, "id"),
}

_TRUE_STRINGS = {"1", "true", "yes", "on"}


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True)
class BankConfig:
    """Validated, typed view of the bot configuration."""
    guild_id: Optional[int]
    application_id: Optional[int]
    request_forum_channel_id: int
    request_tag_id: Optional[int]
    stimulus_channel_id: int
    stimulus_claimed_role_id: int
    authorized_staff_role_ids: FrozenSet[int]
    bank_website_url: str
    stimulus_amount: str
    data_dir: Path
    web_enabled: bool
    web_host: str
    web_port: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> BankConfig:
        """Build from an already validated dict (see ``validate_and_normalize_config``)."""
        return cls(
            guild_id=data[K.GUILD_ID],
            application_id=data[K.APPLICATION_ID],
            request_forum_channel_id=data[K.REQUEST_FORUM_CHANNEL_ID],
            request_tag_id=data[K.REQUEST_TAG_ID],
            stimulus_channel_id=data[K.STIMULUS_CHANNEL_ID],
            stimulus_claimed_role_id=data[K.STIMULUS_CLAIMED_ROLE_ID],
            authorized_staff_role_ids=frozenset(data[K.AUTHORIZED_STAFF_ROLE_IDS]),
            bank_website_url=data[K.BANK_WEBSITE_URL],
            stimulus_amount=data[K.STIMULUS_AMOUNT],
            data_dir=resolve_repo_path(data[K.DATA_DIR]),
            web_enabled=data[K.WEB_ENABLED],
            web_host=data[K.WEB_HOST],
            web_port=data[K.WEB_PORT],
        )


def validate_and_normalize_config(data: Dict[str, Any]) -> Dict[str, Any]:
    errors: List[str] = []
    normalized: Dict[str, Any] = {}

    for key, (type_name, required) in CONFIG_SCHEMA.items():
        value = data.get(key)
        if value is None and type_name != "int_or_none":
            if required:
                errors.append(f"Missing required config key: {key}")
            else:
                normalized[key] = DEFAULT_CONFIG.get(key)
            continue
        if type_name == "int":
            if not is_valid_id(value):
                errors.append(f"{key} must be an integer ID")
                continue
            normalized[key] = int(value)
        elif type_name == "int_or_none":
            if value is None:
                normalized[key] = None
            elif is_valid_id(value):
                normalized[key] = int(value)
            else:
                errors.append(f"{key} must be an integer ID or null")
        elif type_name == "list_int":
            if not isinstance(value, list) or any(not is_valid_id(item) for item in value):
                errors.append(f"{key} must be a list of integer IDs")
                continue
            normalized[key] = [int(item) for item in value]
        elif type_name == "bool":
            if not isinstance(value, bool):
                errors.append(f"{key} must be a boolean")
            else:
                normalized[key] = value
        elif type_name == "str":
            if not isinstance(value, str) or not value.strip():
                errors.append(f"{key} must be a non-empty string")
            else:
                normalized[key] = value.strip()
        elif type_name == "url":
            if not isinstance(value, str) or not value.startswith(("https://", "http://")):
                errors.append(f"{key} must be an http(s) URL")
            else:
                normalized[key] = value
        elif type_name == "path":
            if not isinstance(value, str) or not is_safe_data_path(value):
                errors.append(f"{key} must be a path without '..' segments")
            else:
                normalized[key] = value
        elif type_name == "port":
            if not is_int(value) or not 1 <= value <= 65535:
                errors.append(f"{key} must be a TCP port (1-65535)")
            else:
                normalized[key] = int(value)
        else:
            errors.append(f"Unknown config type for {key}")

    if errors:
        raise ConfigError("; ".join(errors))

    if not normalized[K.AUTHORIZED_STAFF_ROLE_IDS]:
        raise ConfigError(f"{K.AUTHORIZED_STAFF_ROLE_IDS} must list at least one role ID")

    return normalized


def _parse_env_value(name: str, raw: str, parser: str) -> Any:
    raw = raw.strip()
    if parser == "id":
        value = safe_int(raw)
        if value is None:
            raise ConfigError(f"{name} must be an integer")
        return value
    if parser == "id_list":
        items = [part.strip() for part in raw.split(",") if part.strip()]
        values = [safe_int(item) for item in items]
        if any(value is None for value in values):
            raise ConfigError(f"{name} must be a comma separated list of integer IDs")
        return values
    if parser == "bool":
        return raw.lower() in _TRUE_STRINGS
    return raw


def apply_env_overrides(data: Dict[str, Any], environ: Mapping[str, str]) -> Dict[str, Any]:
    merged = dict(data)
    for name, (key, parser) in ENV_OVERRIDES.items():
        raw = environ.get(name)
        if raw is None or raw.strip() == "":
            continue
        merged[key] = _parse_env_value(name, raw, parser)
    return merged


async def _read_config_file(path: Path) -> Dict[str, Any]:
    data = await read_json(path, default=None)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path.name} must be a JSON object")
    return data


async def load_config(
    environ: Optional[Mapping[str, str]] = None,
    default_path: Path = DEFAULT_CONFIG_PATH,
) -> BankConfig:
    """Load, merge and validate configuration. Raises ``ConfigError``."""
    environ = os.environ if environ is None else environ

    merged = dict(DEFAULT_CONFIG)
    merged.update(await _read_config_file(default_path))

    override_path = environ.get(CONFIG_PATH_ENV)
    if override_path:
        path = resolve_repo_path(override_path)
        if not path.exists():
            raise ConfigError(f"Config file from {CONFIG_PATH_ENV} not found: {path}")
        merged.update(await _read_config_file(path))

    merged = apply_env_overrides(merged, environ)
    return BankConfig.from_dict(validate_and_normalize_config(merged))
