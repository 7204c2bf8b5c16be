"""
Status web package for the bank bot.

Exposes health and request statistics over HTTP when enabled in config.
"""

from web.server import WebServer, status_counts

__all__ = ['WebServer', 'status_counts']
