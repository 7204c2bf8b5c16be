"""
Main entry point for the bank bot.

Loads configuration from config files and environment and starts the bot.
"""
from __future__ import annotations

import asyncio
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from discord.errors import LoginFailure, PrivilegedIntentsRequired

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)

from bot import BankBot
from core.config import ConfigError, load_config
from core.document_store import DocumentStoreError

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("bankbot")

# Suppress verbose gateway logs unless LOG_LEVEL is DEBUG
if LOG_LEVEL.upper() != "DEBUG":
    logging.getLogger("discord.gateway").setLevel(logging.WARNING)
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)

if not env_path.exists():
    logger.warning(".env file not found at %s", env_path)


async def main() -> int:
    token = os.getenv("DISCORD_BOT_TOKEN") or os.getenv("DISCORD_TOKEN")
    if not token:
        logger.error("Missing bot token. Set DISCORD_BOT_TOKEN in .env or environment.")
        return 1

    try:
        config = await load_config()
    except ConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1

    bot = BankBot(config)
    try:
        await bot.start(token)
    except DocumentStoreError as exc:
        logger.error("Storage unavailable: %s", exc)
        await bot.close()
        return 1
    except PrivilegedIntentsRequired:
        logger.error(
            "Privileged intents required. Enable the SERVER MEMBERS intent "
            "in the Discord developer portal."
        )
        await bot.close()
        return 1
    except LoginFailure:
        logger.error(
            "Token is invalid. Go to https://discord.com/developers/applications, "
            "select your bot, go to Bot tab, and click 'Reset Token' to generate a new one. "
            "Then update DISCORD_BOT_TOKEN in your .env file."
        )
        await bot.close()
        return 1
    return 0


def run() -> None:
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
