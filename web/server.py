"""
Status web server for the bank bot.
Uses aiohttp for async web serving.
"""
from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, Optional

import discord
from aiohttp import web

from core.constants import Collection
from core.document_store import DocumentStore

logger = logging.getLogger("bankbot.web")


async def status_counts(store: DocumentStore, collection: str) -> Dict[str, int]:
    """Count the documents in a collection by their ``status`` field."""
    documents = await store.list_documents(collection)
    counts = Counter(str(doc.get("status", "unknown")) for doc in documents.values())
    return dict(sorted(counts.items()))


class WebServer:
    """Read-only health and stats endpoints."""

    def __init__(self, bot: discord.Client, store: DocumentStore, host: str = "127.0.0.1", port: int = 8080):
        self.bot = bot
        self.store = store
        self.host = host
        self.port = port
        self.app = web.Application()
        self.runner: Optional[web.AppRunner] = None

        self._setup_routes()

    def _setup_routes(self) -> None:
        self.app.router.add_get("/health", self.handle_health)
        self.app.router.add_get("/stats", self.handle_stats)

    async def handle_health(self, request: web.Request) -> web.Response:
        return web.json_response({"status": "ok", "ready": self.bot.is_ready()})

    async def handle_stats(self, request: web.Request) -> web.Response:
        return web.json_response({
            "itemRequests": await status_counts(self.store, Collection.ITEM_REQUESTS),
            "stimulusClaims": await status_counts(self.store, Collection.STIMULUS_CLAIMS),
        })

    async def start(self) -> None:
        """Start the web server."""
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        site = web.TCPSite(self.runner, self.host, self.port)
        await site.start()
        logger.info("Status server started at http://%s:%s", self.host, self.port)

    async def stop(self) -> None:
        """Stop the web server."""
        if self.runner:
            await self.runner.cleanup()
            self.runner = None
            logger.info("Status server stopped")
