"""Bot package - Discord client."""
from .client import BankBot

__all__ = ["BankBot"]
