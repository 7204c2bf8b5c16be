"""
Error taxonomy for bank workflows.

Handlers catch ``BankError`` and show ``user_message`` ephemerally to the actor.
"""
from __future__ import annotations

from typing import Optional


class BankError(Exception):
    """Base class for errors that end an interaction with a user-facing notice."""

    user_message = "Something went wrong. Please contact a bot administrator."

    def __init__(self, detail: str = "", user_message: Optional[str] = None) -> None:
        super().__init__(detail or self.user_message)
        if user_message is not None:
            self.user_message = user_message


class RequestNotFound(BankError):
    user_message = (
        "Could not find this request in the database. "
        "It might have been fulfilled or denied already."
    )


class ClaimNotFound(BankError):
    user_message = "Could not find a stimulus claim for this member."


class ClaimAlreadyExists(BankError):
    user_message = (
        "You have already received your new member stimulus. "
        "This is a one-time claim per account."
    )


class Unauthorized(BankError):
    user_message = "You do not have permission to use this action."


class DownstreamUnavailable(BankError):
    user_message = (
        "A configured channel or role could not be reached. "
        "Please contact a bot administrator."
    )


class InvalidTransition(BankError):
    def __init__(self, current: str, action: str) -> None:
        self.current = current
        self.action = action
        super().__init__(
            f"cannot {action} from status {current}",
            user_message=f"This cannot be done while the status is **{current.upper().replace('_', ' ')}**.",
        )


class ReasonTooShort(BankError):
    def __init__(self, min_length: int) -> None:
        self.min_length = min_length
        super().__init__(
            f"reason must be at least {min_length} characters",
            user_message=f"A reason of at least {min_length} characters is required.",
        )
