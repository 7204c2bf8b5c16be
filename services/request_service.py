"""
Request service - lifecycle of a guild bank item request.

    pending ──► partially_fulfilled ──► fulfilled
       │                 │
       └──────► denied ◄─┘

Each operation checks the transition table, persists the new state, then runs
its Discord side effects one step at a time. A failed step is logged and
recorded on the returned ``RequestOutcome``; later steps still run and the
stored state is never rolled back.
"""
from __future__ import annotations

import logging
from typing import Awaitable, Callable, Iterable, List, Optional, Tuple

from core.config import BankConfig
from core.constants import DENY_REASON_MIN_LENGTH, FULFILLED_REACTION, Collection
from core.document_store import DocumentStore
from core.errors import ReasonTooShort, RequestNotFound
from core.transitions import RequestAction, next_request_status
from core.types import Actor, ItemRequest, RequestItem, RequestOutcome, RequestStatus, split_item_lines
from core.utils import now_iso, strip_control
from core.views import build_staff_actions_view

from . import messages
from .notification_service import NotificationService

logger = logging.getLogger("bankbot.requests")


def apply_item_selection(
    items: Iterable[RequestItem],
    selected_indices: Iterable[int],
) -> Tuple[List[RequestItem], List[str], List[str]]:
    """
    Mark the selected ``originalIndex`` values fulfilled.

    Returns ``(new_items, fulfilled_now, still_pending)``. Items that were
    already fulfilled are left alone and not reported again. The input items
    are not modified.
    """
    selected = set(selected_indices)
    new_items: List[RequestItem] = []
    fulfilled_now: List[str] = []
    still_pending: List[str] = []
    for item in items:
        if item.original_index in selected:
            if not item.fulfilled:
                fulfilled_now.append(item.name)
            new_items.append(RequestItem(name=item.name, fulfilled=True, original_index=item.original_index))
        else:
            if not item.fulfilled:
                still_pending.append(item.name)
            new_items.append(RequestItem(name=item.name, fulfilled=item.fulfilled, original_index=item.original_index))
    return new_items, fulfilled_now, still_pending


class RequestService:
    """Business logic for item requests."""

    def __init__(self, store: DocumentStore, notifier: NotificationService, config: BankConfig) -> None:
        self.store = store
        self.notifier = notifier
        self.config = config

    # ─── Lookups ──────────────────────────────────────────────────────────────

    async def get(self, request_id: int | str) -> Optional[ItemRequest]:
        data = await self.store.get(Collection.ITEM_REQUESTS, str(request_id))
        if data is None:
            return None
        return ItemRequest.from_dict(str(request_id), data)

    async def _require(self, request_id: int | str) -> ItemRequest:
        request = await self.get(request_id)
        if request is None:
            logger.warning("Request document not found for thread %s", request_id)
            raise RequestNotFound(str(request_id))
        return request

    async def list_pending(self, request_id: int | str) -> List[RequestItem]:
        """Items still awaiting delivery; empty if the request is missing or complete."""
        request = await self.get(request_id)
        if request is None:
            return []
        return request.pending_items()

    async def _persist(self, request_id: str, updates: dict) -> None:
        if not await self.store.update(Collection.ITEM_REQUESTS, request_id, updates):
            raise RequestNotFound(request_id)

    # ─── Side-effect steps ────────────────────────────────────────────────────

    async def _run_step(
        self,
        outcome: RequestOutcome,
        name: str,
        step: Callable[[], Awaitable[object]],
    ) -> None:
        try:
            await step()
        except Exception:
            logger.exception("Step %r failed for request %s", name, outcome.request.id)
            outcome.failed_steps.append(name)

    async def _update_staff_actions(self, outcome: RequestOutcome, content: str, keep_buttons: bool) -> None:
        request = outcome.request
        if not request.buttons_message_id:
            logger.warning("No buttons message stored for thread %s; cannot update banker actions", request.id)
            return
        view = build_staff_actions_view() if keep_buttons else None
        await self._run_step(
            outcome,
            "staff_actions",
            lambda: self.notifier.edit_message(request.id, request.buttons_message_id, content, view),
        )

    async def _close_thread(self, outcome: RequestOutcome, react: bool) -> None:
        request = outcome.request
        await self._run_step(
            outcome,
            "rename_thread",
            lambda: self.notifier.rename_thread(request.id, messages.closed_thread_name(request)),
        )
        if not react:
            return
        if not request.initial_message_id:
            logger.warning("No initial message stored for thread %s; cannot add reaction", request.id)
            return
        await self._run_step(
            outcome,
            "react",
            lambda: self.notifier.react(request.id, request.initial_message_id, FULFILLED_REACTION),
        )

    # ─── Operations ───────────────────────────────────────────────────────────

    async def create(
        self,
        requester: Actor,
        character_name: str,
        item_lines: str,
        notes: str = "",
    ) -> RequestOutcome:
        """
        Open a forum thread for a new request and store it.

        Raises ``DownstreamUnavailable`` before anything is written when the
        forum channel is missing or not a forum.
        """
        character_name = strip_control(character_name).strip()
        notes = strip_control(notes).strip()
        items = split_item_lines(strip_control(item_lines))

        forum = await self.notifier.require_forum(self.config.request_forum_channel_id)
        tag_ids = [self.config.request_tag_id] if self.config.request_tag_id else []
        created = await self.notifier.create_request_thread(
            forum,
            name=messages.thread_title(requester.username, character_name),
            content=messages.request_post(requester.id, character_name, [item.name for item in items], notes),
            tag_ids=tag_ids,
        )

        request = ItemRequest(
            id=created.thread_id,
            requester_id=requester.id,
            requester_username=requester.username,
            character_name=character_name,
            notes=notes,
            items=items,
            status=RequestStatus.PENDING,
            initial_message_id=created.initial_message_id,
            thread_url=created.url,
            timestamp=now_iso(),
        )
        await self.store.set(Collection.ITEM_REQUESTS, request.id, request.to_dict())
        logger.info("Item request %s stored for %s (%d items)", request.id, requester.tag, len(items))

        outcome = RequestOutcome(request=request, still_pending=[item.name for item in items])

        async def _post_staff_actions() -> None:
            message_id = await self.notifier.post(
                request.id, messages.STAFF_ACTIONS_HEADER, build_staff_actions_view()
            )
            request.buttons_message_id = message_id
            await self._persist(request.id, {"buttonsMessageId": message_id})

        await self._run_step(outcome, "staff_actions", _post_staff_actions)
        return outcome

    async def mark_fulfilled(
        self,
        request_id: int | str,
        staff: Actor,
        message: Optional[str] = None,
    ) -> RequestOutcome:
        """Mark every item delivered and close the request."""
        request = await self._require(request_id)
        new_status = next_request_status(request.status, RequestAction.FULFILL)
        message = (message or "").strip() or None

        fulfilled_now = [item.name for item in request.items if not item.fulfilled]
        for item in request.items:
            item.fulfilled = True
        request.status = new_status
        request.fulfilled_by = staff.id
        request.fulfilled_by_username = staff.tag
        request.fulfilled_message = message
        request.fulfilled_timestamp = now_iso()

        await self._persist(request.id, {
            "items": [item.to_dict() for item in request.items],
            "status": request.status.value,
            "fulfilledBy": request.fulfilled_by,
            "fulfilledByUsername": request.fulfilled_by_username,
            "fulfilledMessage": request.fulfilled_message,
            "fulfilledTimestamp": request.fulfilled_timestamp,
        })
        logger.info("Request %s marked fulfilled by %s", request.id, staff.tag)

        outcome = RequestOutcome(request=request, fulfilled_now=fulfilled_now)
        await self._update_staff_actions(
            outcome, messages.staff_actions_status(RequestStatus.FULFILLED, staff.id), keep_buttons=False
        )
        await self._run_step(
            outcome,
            "status_post",
            lambda: self.notifier.post(request.id, messages.fulfilled_status_update(staff.id, message)),
        )
        await self._run_step(
            outcome,
            "dm_requester",
            lambda: self.notifier.dm_user(request.requester_id, messages.fulfilled_dm(request, staff.tag, message)),
        )
        await self._close_thread(outcome, react=True)
        return outcome

    async def mark_denied(self, request_id: int | str, staff: Actor, reason: str) -> RequestOutcome:
        """Deny the request. The reason is mandatory and shown to the requester."""
        reason = (reason or "").strip()
        if len(reason) < DENY_REASON_MIN_LENGTH:
            raise ReasonTooShort(DENY_REASON_MIN_LENGTH)

        request = await self._require(request_id)
        new_status = next_request_status(request.status, RequestAction.DENY)

        request.status = new_status
        request.denied_by = staff.id
        request.denied_by_username = staff.tag
        request.denial_reason = reason
        request.denied_timestamp = now_iso()

        await self._persist(request.id, {
            "status": request.status.value,
            "deniedBy": request.denied_by,
            "deniedByUsername": request.denied_by_username,
            "denialReason": request.denial_reason,
            "deniedTimestamp": request.denied_timestamp,
        })
        logger.info("Request %s denied by %s", request.id, staff.tag)

        outcome = RequestOutcome(
            request=request,
            still_pending=[item.name for item in request.items if not item.fulfilled],
        )
        await self._update_staff_actions(
            outcome, messages.staff_actions_status(RequestStatus.DENIED, staff.id), keep_buttons=False
        )
        await self._run_step(
            outcome,
            "status_post",
            lambda: self.notifier.post(request.id, messages.denied_status_update(staff.id, reason)),
        )
        await self._run_step(
            outcome,
            "dm_requester",
            lambda: self.notifier.dm_user(request.requester_id, messages.denied_dm(request, staff.tag, reason)),
        )
        await self._close_thread(outcome, react=False)
        return outcome

    async def mark_items_fulfilled(
        self,
        request_id: int | str,
        staff: Actor,
        selected_indices: Iterable[int],
    ) -> RequestOutcome:
        """
        Mark the selected items delivered.

        The request becomes ``fulfilled`` once nothing is pending, otherwise
        ``partially_fulfilled``. The thread is only renamed and reacted to when
        the request completes.
        """
        request = await self._require(request_id)
        new_items, fulfilled_now, still_pending = apply_item_selection(request.items, selected_indices)
        action = RequestAction.FULFILL_ITEMS_PARTIAL if still_pending else RequestAction.FULFILL_ITEMS_COMPLETE
        new_status = next_request_status(request.status, action)

        request.items = new_items
        request.status = new_status
        request.last_updated_by = staff.id
        request.last_updated_timestamp = now_iso()
        updates = {
            "items": [item.to_dict() for item in new_items],
            "status": new_status.value,
            "lastUpdatedBy": request.last_updated_by,
            "lastUpdatedTimestamp": request.last_updated_timestamp,
        }
        complete = new_status == RequestStatus.FULFILLED
        if complete:
            request.fulfilled_by = staff.id
            request.fulfilled_by_username = staff.tag
            request.fulfilled_timestamp = request.last_updated_timestamp
            updates.update({
                "fulfilledBy": request.fulfilled_by,
                "fulfilledByUsername": request.fulfilled_by_username,
                "fulfilledTimestamp": request.fulfilled_timestamp,
            })

        await self._persist(request.id, updates)
        logger.info(
            "Request %s items updated by %s. New status: %s. Items fulfilled this update: %d",
            request.id,
            staff.tag,
            new_status.value,
            len(fulfilled_now),
        )

        outcome = RequestOutcome(request=request, fulfilled_now=fulfilled_now, still_pending=still_pending)
        await self._update_staff_actions(
            outcome, messages.staff_actions_status(new_status, staff.id), keep_buttons=not complete
        )
        await self._run_step(
            outcome,
            "status_post",
            lambda: self.notifier.post(
                request.id, messages.items_status_update(staff.id, complete, fulfilled_now, still_pending)
            ),
        )
        await self._run_step(
            outcome,
            "dm_requester",
            lambda: self.notifier.dm_user(
                request.requester_id,
                messages.items_dm(request, staff.tag, complete, fulfilled_now, still_pending),
            ),
        )
        if complete:
            await self._close_thread(outcome, react=True)
        return outcome
