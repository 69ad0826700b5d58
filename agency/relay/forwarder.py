"""Trigger processor: move forward triggers onto the send queue for the external sender."""

import logging
from typing import Any

from agency.errors import ConflictError, NotFoundError, StoreIOError
from agency.lib.queue import Queue
from agency.lib.store import DocumentStore
from agency.models import ForwardStatus, ForwardTrigger, QueueItem, TriggerStatus

from .pipeline import TRIGGER_QUEUE

logger = logging.getLogger(__name__)

FORWARD_QUEUE = "forward_queue"


class TriggerProcessor:
    def __init__(self, store: DocumentStore):
        self.triggers = Queue(store, TRIGGER_QUEUE)
        self.outbox = Queue(store, FORWARD_QUEUE)

    def poll_once(self) -> list[str]:
        """Forward every `needs_forward` trigger. Returns the forwarded ids."""
        pending = self.triggers.list_by_status(TriggerStatus.NEEDS_FORWARD)
        if not pending:
            logger.debug("No pending triggers")
            return []

        logger.info(f"Found {len(pending)} pending triggers")
        forwarded = []
        for doc in pending:
            trigger = ForwardTrigger.from_dict(doc)
            try:
                self._forward(trigger)
            except ConflictError as e:
                logger.info(f"Trigger {trigger.id} taken by another processor: {e}")
                continue
            except (NotFoundError, StoreIOError) as e:
                logger.error(f"Trigger {trigger.id} not forwarded: {e}")
                continue
            forwarded.append(trigger.id)
        return forwarded

    def _forward(self, trigger: ForwardTrigger) -> None:
        # Outbox first: a crash between the two writes leaves the trigger
        # pending, and the retried enqueue is a no-op.
        self.outbox.enqueue(
            QueueItem(
                id=trigger.id,
                status=ForwardStatus.NEEDS_SEND.value,
                payload={
                    "agentId": trigger.agent_id,
                    "agentName": trigger.agent_name,
                    "sessionKey": trigger.session_key,
                    "message": trigger.full_message,
                },
            )
        )
        self.triggers.transition(trigger.id, TriggerStatus.NEEDS_FORWARD, TriggerStatus.FORWARDED)
        logger.info(f"Queued {trigger.agent_name} message for send: {trigger.message[:50]}")

    def pending_sends(self) -> list[dict[str, Any]]:
        return self.outbox.list_by_status(ForwardStatus.NEEDS_SEND)

    def mark_sent(self, item_id: str) -> dict[str, Any]:
        """Called by the external sender after delivery."""
        return self.outbox.transition(item_id, ForwardStatus.NEEDS_SEND, ForwardStatus.SENT)
