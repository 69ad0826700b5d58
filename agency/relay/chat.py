"""Per-agent chat history documents and the scan for unanswered user messages."""

from dataclasses import dataclass
from typing import Any

from agency.identities import AgentIdentity
from agency.models import ChatMessage, Sender

CHAT_HISTORY_PREFIX = "chat_history"


def history_key(agent_id: str) -> str:
    return f"{CHAT_HISTORY_PREFIX}/{agent_id.lower()}"


def agent_from_key(key: str) -> str:
    return key.rsplit("/", 1)[-1]


@dataclass
class PendingReply:
    """A user message whose paired agent placeholder is still empty."""

    agent_id: str
    message_id: str
    message: str
    session_key: str | None
    reply_index: int


def find_pending(agent_id: str, history: list[Any]) -> list[PendingReply]:
    """Scan adjacent entries for (user message, empty agent placeholder) pairs.

    A user message without a well-formed placeholder right after it is skipped;
    the chat UI may still be writing it.
    """
    pending = []
    for i in range(len(history) - 1):
        current, following = history[i], history[i + 1]
        if not isinstance(current, dict) or not isinstance(following, dict):
            continue
        user_msg = ChatMessage.from_dict(current)
        if user_msg.sender != Sender.USER.value or not _is_text(user_msg.message_id):
            continue
        if user_msg.message is not None and not isinstance(user_msg.message, str):
            continue
        placeholder = ChatMessage.from_dict(following)
        if not placeholder.is_reply_placeholder_for(user_msg):
            continue
        pending.append(
            PendingReply(
                agent_id=agent_id,
                message_id=user_msg.message_id,
                message=user_msg.message or "",
                session_key=placeholder.session_key or user_msg.session_key,
                reply_index=i + 1,
            )
        )
    return pending


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def compose_display_message(identity: AgentIdentity, message: str) -> str:
    return f'{identity.emoji} [{identity.name}] Can says: "{message}"'
