"""Services layer - business logic separated from Discord API."""
from .notification_service import CreatedThread, NotificationService
from .request_service import RequestService, apply_item_selection
from .stimulus_service import ClaimOutcome, StimulusService

__all__ = [
    "ClaimOutcome",
    "CreatedThread",
    "NotificationService",
    "RequestService",
    "StimulusService",
    "apply_item_selection",
]
