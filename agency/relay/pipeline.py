"""Chat relay: turn unanswered user messages into forward triggers."""

import logging

from agency.errors import CorruptionError, StoreIOError
from agency.identities import get_identity
from agency.lib.dedup import DedupGuard
from agency.lib.queue import Queue
from agency.lib.store import DocumentStore
from agency.models import ForwardTrigger

from . import chat

logger = logging.getLogger(__name__)

TRIGGER_QUEUE = "chat_triggers"


class ChatRelay:
    """Sole writer of the trigger queue's `needs_forward` entries.

    Deduplication is in-memory: one trigger per message id per process
    lifetime. A restarted relay sees every id as new again; the trigger
    queue's idempotent enqueue drops the repeat as long as the earlier trigger
    is still in the document.
    """

    def __init__(self, store: DocumentStore, dedup: DedupGuard | None = None):
        self.store = store
        self.dedup = dedup or DedupGuard()
        self.triggers = Queue(store, TRIGGER_QUEUE)

    def poll_once(self) -> list[ForwardTrigger]:
        created: list[ForwardTrigger] = []
        for key in self.store.keys(chat.CHAT_HISTORY_PREFIX):
            agent_id = chat.agent_from_key(key)
            try:
                self._poll_agent(agent_id, key, created)
            except Exception as e:
                logger.error(f"Skipping {agent_id}: {e}", exc_info=True)
        return created

    def _poll_agent(self, agent_id: str, key: str, created: list[ForwardTrigger]) -> None:
        try:
            history = self.store.read(key)
        except CorruptionError as e:
            logger.warning(f"Skipping {agent_id}: {e}")
            return
        except StoreIOError as e:
            logger.error(f"Skipping {agent_id}: {e}")
            return
        if not isinstance(history, list):
            logger.warning(f"Skipping {agent_id}: chat history is not a list")
            return

        for pending in chat.find_pending(agent_id, history):
            trigger = self._relay(pending)
            if trigger is not None:
                created.append(trigger)

    def _relay(self, pending: chat.PendingReply) -> ForwardTrigger | None:
        if self.dedup.seen(pending.message_id):
            return None

        identity = get_identity(pending.agent_id)
        trigger = ForwardTrigger(
            id=pending.message_id,
            agent_id=pending.agent_id,
            agent_name=identity.name,
            agent_emoji=identity.emoji,
            session_key=pending.session_key,
            message=pending.message,
            full_message=chat.compose_display_message(identity, pending.message),
        )
        self.dedup.mark_seen(pending.message_id)
        try:
            appended = self.triggers.enqueue(trigger.to_item())
        except StoreIOError as e:
            # Not delivered; let the next poll try again.
            self.dedup.forget(pending.message_id)
            logger.error(f"Trigger for {pending.message_id} not queued: {e}")
            return None

        if not appended:
            logger.info(f"Trigger {pending.message_id} already queued")
            return None
        logger.info(f"Trigger created for {pending.agent_id}: {pending.message[:50]}")
        return trigger
