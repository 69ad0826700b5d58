"""Spawn lifecycle: request queue, session registration, active session registry.

The spawn queue is written by the external request submitter (pending
entries only) and otherwise only by this module. Every status change goes
through Queue.transition so two workers racing on one request get a
ConflictError instead of both registering a session.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from agency import config
from agency.errors import AlreadyCompletedError, ConflictError, NotFoundError, StoreIOError
from agency.identities import find_identity, get_identity
from agency.lib.queue import Queue
from agency.lib.store import DocumentStore
from agency.lib.uuid7 import session_uuid, uuid7
from agency.models import (
    SPAWN_OPEN_STATUSES,
    Session,
    SessionStatus,
    SpawnRequest,
    SpawnStatus,
    utc_now,
)

logger = logging.getLogger(__name__)

SPAWN_QUEUE = "spawn_queue"
SESSION_REGISTRY = "active_sessions"
SPAWN_LOG = "session_logs/spawns"


@dataclass
class WorkOrder:
    """A pending request expanded with everything the orchestrator needs to spawn it."""

    request_id: str
    agent_id: str
    agent_name: str
    agent_emoji: str
    task: str
    identity_context: str
    full_task: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "requestId": self.request_id,
            "agentId": self.agent_id,
            "agentName": self.agent_name,
            "agentEmoji": self.agent_emoji,
            "task": self.task,
            "identityContext": self.identity_context,
            "fullTask": self.full_task,
        }


@dataclass
class SleepResult:
    agent_id: str
    success: bool
    message: str
    session_key: str | None = None


def session_ttl() -> timedelta:
    return timedelta(minutes=config.get("session_ttl_minutes"))


def build_identity_context(agent_id: str, ttl_minutes: int | None = None) -> str:
    identity = find_identity(agent_id)
    if identity is None:
        raise NotFoundError(f"Unknown agent: {agent_id}")
    ttl_minutes = ttl_minutes if ttl_minutes is not None else config.get("session_ttl_minutes")

    return f"""You are {identity.name} {identity.emoji}

ROLE: {identity.role}
PERSONALITY: {identity.personality}
SKILLS: {identity.skills}

CRITICAL RULES:
1. ALWAYS stay in character as {identity.name}
2. Start EVERY response with {identity.emoji}
3. Use your professional expertise
4. Be proactive and suggest next steps
5. NEVER break character

You have been spawned as a subagent session. Your session will auto-terminate after {ttl_minutes} minutes.

Your task will be provided in the next message."""


class SpawnManager:
    def __init__(self, store: DocumentStore):
        self.store = store
        self.requests = Queue(store, SPAWN_QUEUE)

    def queue_request(self, agent_id: str, task: str) -> SpawnRequest:
        request = SpawnRequest(
            id=uuid7(),
            agent_id=agent_id.lower(),
            task=task,
            requested_at=utc_now().isoformat(),
        )
        self.requests.enqueue(request.to_item())
        logger.info(f"Spawn request {request.id} queued for {request.agent_id}")
        return request

    def get_request(self, request_id: str) -> SpawnRequest:
        return SpawnRequest.from_dict(self.requests.get(request_id))

    def list_requests(self, status: str | None = None) -> list[SpawnRequest]:
        docs = self.requests.items() if status is None else self.requests.list_by_status(status)
        return [SpawnRequest.from_dict(d) for d in docs]

    def list_pending(self) -> list[WorkOrder]:
        orders = []
        for request in self.list_requests(SpawnStatus.PENDING):
            try:
                orders.append(self._work_order(request))
            except NotFoundError as e:
                logger.warning(f"Request {request.id} skipped: {e}")
        return orders

    def _work_order(self, request: SpawnRequest) -> WorkOrder:
        identity = get_identity(request.agent_id)
        context = build_identity_context(request.agent_id)
        full_task = (
            f"{context}\n\n[TASK FROM CAN]\n{request.task}\n\n"
            f"Execute this task as {identity.name}. Provide your response in character. "
            "When complete, report back to the main session."
        )
        return WorkOrder(
            request_id=request.id,
            agent_id=request.agent_id,
            agent_name=identity.name,
            agent_emoji=identity.emoji,
            task=request.task,
            identity_context=context,
            full_task=full_task,
        )

    def claim(self, request_id: str) -> SpawnRequest:
        """pending -> processing. ConflictError if someone else claimed it."""
        doc = self.requests.claim(request_id, SpawnStatus.PENDING, SpawnStatus.PROCESSING)
        return SpawnRequest.from_dict(doc)

    def fail(self, request_id: str, error: str) -> SpawnRequest:
        doc = self.requests.transition(
            request_id, SPAWN_OPEN_STATUSES, SpawnStatus.ERROR, patch={"error": error}
        )
        logger.warning(f"Spawn request {request_id} failed: {error}")
        return SpawnRequest.from_dict(doc)

    def register_session(
        self, request_id: str, session_key: str, now: datetime | None = None
    ) -> Session:
        """Record the real session created for a request and complete the request.

        Raises:
            NotFoundError: no such request
            AlreadyCompletedError: request already completed or errored
        """
        if not session_key:
            raise ValueError("session_key is required")
        now = now or utc_now()

        request = self.get_request(request_id)
        if request.status not in SPAWN_OPEN_STATUSES:
            raise AlreadyCompletedError(request_id, SPAWN_OPEN_STATUSES, request.status)

        session = Session(
            uuid=session_uuid(session_key),
            agent_id=request.agent_id.lower(),
            session_key=session_key,
            task=request.task,
            spawned_at=now.isoformat(),
            expires_at=(now + session_ttl()).isoformat(),
        )
        # Session first: a failed registry write leaves the request open for a retry.
        previous = self._load_sessions()
        self._save_sessions([s for s in previous if s.agent_id != session.agent_id] + [session])

        try:
            self.requests.transition(
                request_id,
                SPAWN_OPEN_STATUSES,
                SpawnStatus.COMPLETED,
                patch={"sessionKey": session_key},
                conflict_cls=AlreadyCompletedError,
            )
        except (ConflictError, NotFoundError):
            # Lost the race to another registration; put the registry back.
            self._save_sessions(previous)
            raise

        self._log_event("spawn", session.agent_id, session_key, task=request.task)
        logger.info(f"Registered session {session_key} for {session.agent_id}")
        return session

    def _load_sessions(self) -> list[Session]:
        docs = self.store.load(SESSION_REGISTRY, [])
        return [Session.from_dict(d) for d in docs if isinstance(d, dict)]

    def _save_sessions(self, sessions: list[Session]) -> None:
        self.store.write(SESSION_REGISTRY, [s.to_dict() for s in sessions])

    def active_sessions(self, now: datetime | None = None) -> list[Session]:
        """Sessions still active and not past expiresAt. Expiry is never written back."""
        now = now or utc_now()
        return [
            s
            for s in self._load_sessions()
            if s.status == SessionStatus.ACTIVE.value and not s.is_expired(now)
        ]

    def get_session(self, agent_id: str, now: datetime | None = None) -> Session | None:
        agent_id = agent_id.lower()
        return next((s for s in self.active_sessions(now) if s.agent_id == agent_id), None)

    def is_awake(self, agent_id: str, now: datetime | None = None) -> bool:
        return self.get_session(agent_id, now) is not None

    def sleep(self, agent_id: str, now: datetime | None = None) -> SleepResult:
        agent_id = agent_id.lower()
        now = now or utc_now()
        sessions = self._load_sessions()
        target = next(
            (
                s
                for s in sessions
                if s.agent_id == agent_id
                and s.status == SessionStatus.ACTIVE.value
                and not s.is_expired(now)
            ),
            None,
        )
        if target is None:
            return SleepResult(agent_id, False, f"{agent_id} is already sleeping (no active session)")

        target.status = SessionStatus.COMPLETED.value
        self._save_sessions(sessions)
        self._log_event("sleep", agent_id, target.session_key)
        return SleepResult(
            agent_id, True, f"{agent_id} put to sleep (session terminated)", target.session_key
        )

    def sleep_all(self, now: datetime | None = None) -> list[SleepResult]:
        return [self.sleep(s.agent_id, now) for s in self.active_sessions(now)]

    def events(self) -> list[dict[str, Any]]:
        return self.store.load(SPAWN_LOG, [])

    def _log_event(self, event: str, agent_id: str, session_key: str, task: str | None = None):
        entry = {
            "timestamp": utc_now().isoformat(),
            "event": event,
            "agentId": agent_id,
            "sessionKey": session_key,
        }
        if task is not None:
            entry["task"] = task[:100] + ("..." if len(task) > 100 else "")
        logs = self.store.load(SPAWN_LOG, [])
        logs.append(entry)
        try:
            self.store.write(SPAWN_LOG, logs[-config.get("spawn_log_limit") :])
        except StoreIOError as e:
            logger.warning(f"{event} event for {agent_id} not logged: {e}")
