"""Shared data models for queue documents, sessions and usage baselines."""

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class Sender(str, Enum):
    USER = "user"
    AGENT = "agent"


class ChatStatus(str, Enum):
    PENDING = "pending"
    FORWARDING = "forwarding"
    ANSWERED = "answered"


class TriggerStatus(str, Enum):
    NEEDS_FORWARD = "needs_forward"
    FORWARDED = "forwarded"


class ForwardStatus(str, Enum):
    NEEDS_SEND = "needs_send"
    SENT = "sent"


class SpawnStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


SPAWN_OPEN_STATUSES = frozenset({SpawnStatus.PENDING.value, SpawnStatus.PROCESSING.value})


class SessionStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ERROR = "error"


class BudgetStatus(str, Enum):
    OK = "ok"
    WARNING = "warning"
    CRITICAL = "critical"
    EXCEEDED = "exceeded"
    UNKNOWN = "unknown"


@dataclass
class QueueItem:
    """Generic queue envelope. Payload fields are stored flat beside the envelope."""

    id: str
    status: str
    created_at: str = field(default_factory=lambda: utc_now().isoformat())
    payload: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        doc = dict(self.payload)
        doc.update({"id": self.id, "status": self.status, "createdAt": self.created_at})
        return doc

    @classmethod
    def from_dict(cls, doc: dict[str, Any]) -> "QueueItem":
        payload = {k: v for k, v in doc.items() if k not in ("id", "status", "createdAt")}
        return cls(
            id=str(doc["id"]),
            status=str(doc.get("status", "")),
            created_at=doc.get("createdAt") or "",
            payload=payload,
        )


@dataclass
class ChatMessage:
    sender: str
    message_id: str | None
    message: str | None
    status: str | None = None
    session_key: str | None = None
    timestamp: str | None = None

    @classmethod
    def from_dict(cls, doc: dict[str, Any]) -> "ChatMessage":
        return cls(
            sender=doc.get("sender", ""),
            message_id=doc.get("messageId"),
            message=doc.get("message"),
            status=doc.get("status"),
            session_key=doc.get("sessionKey"),
            timestamp=doc.get("timestamp"),
        )

    def is_reply_placeholder_for(self, user_msg: "ChatMessage") -> bool:
        return (
            self.sender == Sender.AGENT.value
            and self.message_id == user_msg.message_id
            and self.message is None
            and self.status in (ChatStatus.PENDING.value, ChatStatus.FORWARDING.value)
        )


@dataclass
class ForwardTrigger:
    """A chat message ready to be forwarded into an agent session."""

    id: str
    agent_id: str
    agent_name: str
    agent_emoji: str
    session_key: str | None
    message: str
    full_message: str
    status: str = TriggerStatus.NEEDS_FORWARD.value

    def to_item(self) -> QueueItem:
        return QueueItem(
            id=self.id,
            status=self.status,
            payload={
                "agentId": self.agent_id,
                "agentName": self.agent_name,
                "agentEmoji": self.agent_emoji,
                "sessionKey": self.session_key,
                "message": self.message,
                "fullMessage": self.full_message,
            },
        )

    @classmethod
    def from_dict(cls, doc: dict[str, Any]) -> "ForwardTrigger":
        return cls(
            id=doc["id"],
            agent_id=doc.get("agentId", ""),
            agent_name=doc.get("agentName") or doc.get("agentId", ""),
            agent_emoji=doc.get("agentEmoji", ""),
            session_key=doc.get("sessionKey"),
            message=doc.get("message") or "",
            full_message=doc.get("fullMessage") or doc.get("message") or "",
            status=doc.get("status", TriggerStatus.NEEDS_FORWARD.value),
        )


@dataclass
class SpawnRequest:
    id: str
    agent_id: str
    task: str
    status: str = SpawnStatus.PENDING.value
    requested_at: str | None = None
    session_key: str | None = None
    error: str | None = None

    def to_item(self) -> QueueItem:
        payload: dict[str, Any] = {
            "agentId": self.agent_id,
            "task": self.task,
            "requestedAt": self.requested_at,
        }
        if self.session_key is not None:
            payload["sessionKey"] = self.session_key
        if self.error is not None:
            payload["error"] = self.error
        return QueueItem(
            id=self.id,
            status=self.status,
            created_at=self.requested_at or utc_now().isoformat(),
            payload=payload,
        )

    @classmethod
    def from_dict(cls, doc: dict[str, Any]) -> "SpawnRequest":
        return cls(
            id=doc["id"],
            agent_id=doc.get("agentId", ""),
            task=doc.get("task", ""),
            status=doc.get("status", SpawnStatus.PENDING.value),
            requested_at=doc.get("requestedAt") or doc.get("createdAt"),
            session_key=doc.get("sessionKey"),
            error=doc.get("error"),
        )


@dataclass
class Session:
    uuid: str
    agent_id: str
    session_key: str
    task: str
    spawned_at: str
    expires_at: str
    status: str = SessionStatus.ACTIVE.value

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now or utc_now()
        try:
            return now > parse_timestamp(self.expires_at)
        except (ValueError, TypeError):
            return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "uuid": self.uuid,
            "agentId": self.agent_id,
            "sessionKey": self.session_key,
            "task": self.task,
            "spawnedAt": self.spawned_at,
            "expiresAt": self.expires_at,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, doc: dict[str, Any]) -> "Session":
        return cls(
            uuid=doc.get("uuid", ""),
            agent_id=doc.get("agentId", ""),
            session_key=doc.get("sessionKey", ""),
            task=doc.get("task", ""),
            spawned_at=doc.get("spawnedAt", ""),
            expires_at=doc.get("expiresAt", ""),
            status=doc.get("status", SessionStatus.ACTIVE.value),
        )


@dataclass
class ToolCall:
    tool: str
    estimated_tokens: int | None = None

    @classmethod
    def from_value(cls, value: Any) -> "ToolCall":
        if isinstance(value, str):
            return cls(tool=value)
        return cls(tool=str(value.get("tool", "")), estimated_tokens=value.get("estimated_tokens"))


@dataclass
class SessionStats:
    input_tokens: int = 0
    output_tokens: int = 0
    context_tokens: int = 0
    duration_ms: int = 0
    tool_calls: list[ToolCall] = field(default_factory=list)


@dataclass(frozen=True)
class SessionRecord:
    """Immutable line of the daily usage log."""

    timestamp: str
    session_id: str
    agent_id: str
    input_tokens: int
    output_tokens: int
    total_tokens: int
    context_tokens: int
    tool_calls: tuple[str, ...]
    tool_tokens: int
    duration_ms: int

    def to_dict(self) -> dict[str, Any]:
        doc = asdict(self)
        doc["tool_calls"] = list(self.tool_calls)
        return doc


@dataclass
class AgentUsage:
    total_sessions: int = 0
    total_tokens: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    tool_calls: int = 0
    tool_tokens: int = 0
    avg_session_cost: float = 0
    last_active: str | None = None


@dataclass
class ToolUsage:
    invocations: int = 0
    total_tokens: int = 0
    avg_cost: float = 0
    agents: dict[str, int] = field(default_factory=dict)


@dataclass
class UsageSummary:
    total_sessions: int = 0
    total_tokens: int = 0
    total_tool_calls: int = 0
    avg_tokens_per_session: int = 0


@dataclass
class UsageBaseline:
    timestamp: str | None = None
    agents: dict[str, AgentUsage] = field(default_factory=dict)
    tools: dict[str, ToolUsage] = field(default_factory=dict)
    summary: UsageSummary = field(default_factory=UsageSummary)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, doc: dict[str, Any]) -> "UsageBaseline":
        agents = {
            name: AgentUsage(**_known(AgentUsage, data)) for name, data in doc.get("agents", {}).items()
        }
        tools = {
            name: ToolUsage(**_known(ToolUsage, data)) for name, data in doc.get("tools", {}).items()
        }
        summary = UsageSummary(**_known(UsageSummary, doc.get("summary", {})))
        return cls(timestamp=doc.get("timestamp"), agents=agents, tools=tools, summary=summary)


def _known(dataclass_type, data: dict[str, Any]) -> dict[str, Any]:
    names = {f.name for f in fields(dataclass_type)}
    return {k: v for k, v in data.items() if k in names}
