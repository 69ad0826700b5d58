from .chat import CHAT_HISTORY_PREFIX, PendingReply, find_pending, history_key
from .forwarder import FORWARD_QUEUE, TriggerProcessor
from .pipeline import TRIGGER_QUEUE, ChatRelay

__all__ = [
    "CHAT_HISTORY_PREFIX",
    "FORWARD_QUEUE",
    "TRIGGER_QUEUE",
    "ChatRelay",
    "PendingReply",
    "TriggerProcessor",
    "find_pending",
    "history_key",
]
