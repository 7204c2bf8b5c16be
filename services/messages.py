"""Text for every message the bank posts, edits or DMs."""
from __future__ import annotations

from typing import Optional, Sequence

from core.constants import THREAD_NAME_MAX
from core.types import ItemRequest, RequestStatus
from core.utils import bullet_list, short_id, status_label, truncate

NONE_MARKED = "None explicitly marked."

BANK_PANEL = (
    "**__Guild Bank Information & Actions__**\n\n"
    "Welcome! To access the Guild Bank, please:\n\n"
    "• **View Guild Bank Website** first to see available items.\n"
    "• Then, use **Make an Item Request** below to submit your personalized request.\n"
    "• New members can also claim **New Member Stimulus**."
)

STAFF_ACTIONS_HEADER = "**Banker Actions:**"


def mention(user_id: str | int) -> str:
    return f"<@{user_id}>"


# ─── Request thread ───────────────────────────────────────────────────────────


def thread_title(requester_username: str, character_name: str) -> str:
    return truncate(f"Item Request from {requester_username} ({character_name})", THREAD_NAME_MAX)


def request_post(requester_id: str, character_name: str, item_names: Sequence[str], notes: str) -> str:
    content = (
        "**New Guild Bank Item Request!**\n\n"
        f"**Requested by:** {mention(requester_id)}\n"
        f"**In-Game Character:** `{character_name}`\n\n"
        "**Requested Items:**\n"
    )
    content += bullet_list(item_names, "-")
    if notes:
        content += f"\n\n**Additional Notes:**\n{notes}"
    return content


def closed_thread_name(request: ItemRequest) -> str:
    label = status_label(request.status.value)
    name = f"[{label}] {request.character_name} - {request.requester_username} ({short_id(request.id)}...)"
    return truncate(name, THREAD_NAME_MAX)


def staff_actions_status(status: RequestStatus, staff_id: str) -> str:
    return f"**Banker Actions: __{status_label(status.value)}__ by {mention(staff_id)}!**"


def _itemized(fulfilled_now: Sequence[str], still_pending: Sequence[str]) -> str:
    text = f"**Items delivered in this update:**\n{bullet_list(fulfilled_now, '✅') or NONE_MARKED}\n\n"
    if still_pending:
        text += f"**Items still pending delivery:**\n{bullet_list(still_pending, '•')}"
    return text


def fulfilled_status_update(staff_id: str, message: Optional[str]) -> str:
    text = f"**Status Update:** Request marked **__FULLY FULFILLED__** by {mention(staff_id)}. "
    if message:
        text += f"**Banker's Message:** *\"{message}\"*"
    return text.rstrip()


def denied_status_update(staff_id: str, reason: str) -> str:
    return f"**Status Update:** Request marked **__DENIED__** by {mention(staff_id)}. **Reason:** *\"{reason}\"*"


def items_status_update(
    staff_id: str,
    complete: bool,
    fulfilled_now: Sequence[str],
    still_pending: Sequence[str],
) -> str:
    if complete:
        return f"**Status Update:** Request marked **__FULLY FULFILLED__** by {mention(staff_id)}!"
    return (
        f"**Status Update:** Request marked **__PARTIALLY FULFILLED__** by {mention(staff_id)}.\n\n"
        + _itemized(fulfilled_now, still_pending)
    ).rstrip()


# ─── Requester DMs ────────────────────────────────────────────────────────────


def _dm_header(request: ItemRequest, label: str, staff_tag: str) -> str:
    return (
        f"Your Guild Bank request for **{request.character_name}** has been **{label}** by {staff_tag}!\n"
        f"Request Link: {request.thread_url}\n"
    )


def fulfilled_dm(request: ItemRequest, staff_tag: str, message: Optional[str]) -> str:
    text = _dm_header(request, "FULLY FULFILLED", staff_tag)
    if message:
        text += f"\n**Banker's Message:** *\"{message}\"*"
    return text


def denied_dm(request: ItemRequest, staff_tag: str, reason: str) -> str:
    return _dm_header(request, "DENIED", staff_tag) + f"\n**Reason for Denial:** *\"{reason}\"*"


def items_dm(
    request: ItemRequest,
    staff_tag: str,
    complete: bool,
    fulfilled_now: Sequence[str],
    still_pending: Sequence[str],
) -> str:
    if complete:
        return _dm_header(request, "FULLY FULFILLED", staff_tag) + "\nAll requested items have now been delivered!"
    return (_dm_header(request, "PARTIALLY FULFILLED", staff_tag) + "\n" + _itemized(fulfilled_now, still_pending)).rstrip()


# ─── Stimulus ─────────────────────────────────────────────────────────────────


def stimulus_prompt(claimant_id: str, claimant_tag: str) -> str:
    return (
        "**New Member Stimulus Request!**\n"
        f"**Requester:** {mention(claimant_id)} ({claimant_tag})\n"
        "**Click 'Mark Paid' when plat has been delivered in-game.**"
    )


def stimulus_paid_prompt(claimant_id: str, staff_id: str) -> str:
    return (
        "**New Member Stimulus Request!**\n"
        f"**Requester:** {mention(claimant_id)}\n"
        f"**Status: __PAID__ by {mention(staff_id)}!**"
    )


def stimulus_paid_dm(amount: str, staff_tag: str) -> str:
    return f"Your new member stimulus of {amount} has been processed by {staff_tag}! Thank you for joining."


# ─── Actor feedback ───────────────────────────────────────────────────────────

STEP_LABELS = {
    "staff_actions": "update the banker actions message",
    "status_post": "post the status update",
    "dm_requester": "DM the requester",
    "rename_thread": "rename the thread",
    "react": "react to the original post",
    "review_prompt": "update the officer message",
    "dm_claimant": "DM the member",
}


def partial_failure_notice(failed_steps: Sequence[str]) -> str:
    if not failed_steps:
        return ""
    labels = ", ".join(STEP_LABELS.get(step, step) for step in failed_steps)
    return f"\n⚠️ The change was saved, but the bot could not {labels}. Please check logs."


def discord_error_notice(code: int, detail: str) -> str:
    text = "There was an error processing your request."
    if code == 50001:
        text += " Bot lacks permissions in the target channel."
    elif code == 10003:
        text += " Target channel not found."
    elif code == 50035:
        text += f" Invalid data for Discord API. Details: {detail}"
    return text + " Please try again later or contact a bot administrator."
