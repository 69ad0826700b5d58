"""Token usage aggregation: daily session log plus a cumulative baseline document.

The aggregator is the only writer of the baseline. Counters are incremented
per session; every derived figure (averages, summary) is rebuilt from the
counters on each write so it cannot drift.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from agency import config
from agency.identities import TRACKED_AGENTS
from agency.lib.store import DocumentStore
from agency.models import (
    AgentUsage,
    BudgetStatus,
    SessionRecord,
    SessionStats,
    ToolUsage,
    UsageBaseline,
    UsageSummary,
    utc_now,
)

from . import costs

logger = logging.getLogger(__name__)

BASELINE_KEY = "usage/baseline_metrics"

WARNING_PCT = 50
CRITICAL_PCT = 80
EXCEEDED_PCT = 100


def daily_log_key(day: datetime) -> str:
    return f"usage/daily_{day.date().isoformat()}"


@dataclass
class BudgetReport:
    agent_id: str
    status: BudgetStatus
    pct: float


def seed_baseline() -> UsageBaseline:
    return UsageBaseline(
        agents={agent: AgentUsage() for agent in TRACKED_AGENTS},
        tools={tool: ToolUsage() for tool in costs.TOOL_COSTS},
    )


def recompute(baseline: UsageBaseline) -> UsageBaseline:
    """Rebuild every derived field from the raw counters."""
    for usage in baseline.agents.values():
        usage.avg_session_cost = (
            usage.total_tokens / usage.total_sessions if usage.total_sessions else 0
        )
    for usage in baseline.tools.values():
        usage.avg_cost = round(usage.total_tokens / usage.invocations) if usage.invocations else 0

    agents = baseline.agents.values()
    total_sessions = sum(a.total_sessions for a in agents)
    total_tokens = sum(a.total_tokens for a in agents)
    baseline.summary = UsageSummary(
        total_sessions=total_sessions,
        total_tokens=total_tokens,
        total_tool_calls=sum(a.tool_calls for a in agents),
        avg_tokens_per_session=round(total_tokens / total_sessions) if total_sessions else 0,
    )
    return baseline


class UsageAggregator:
    def __init__(self, store: DocumentStore):
        self.store = store

    def load_baseline(self) -> UsageBaseline:
        doc = self.store.load(BASELINE_KEY, {})
        if not doc:
            return seed_baseline()
        try:
            return UsageBaseline.from_dict(doc)
        except (TypeError, AttributeError) as e:
            logger.warning(f"Baseline unreadable ({e}); starting from a fresh baseline")
            return seed_baseline()

    def baseline_exists(self) -> bool:
        return self.store.exists(BASELINE_KEY)

    def record_session(
        self,
        session_id: str,
        agent_id: str,
        stats: SessionStats,
        now: datetime | None = None,
    ) -> SessionRecord:
        now = now or utc_now()
        agent_id = agent_id.lower()
        record = SessionRecord(
            timestamp=now.isoformat(),
            session_id=session_id,
            agent_id=agent_id,
            input_tokens=stats.input_tokens,
            output_tokens=stats.output_tokens,
            total_tokens=stats.input_tokens + stats.output_tokens,
            context_tokens=stats.context_tokens,
            tool_calls=tuple(call.tool for call in stats.tool_calls),
            tool_tokens=costs.tool_tokens(stats.tool_calls),
            duration_ms=stats.duration_ms,
        )
        self.store.append(daily_log_key(now), record.to_dict())

        baseline = self.load_baseline()
        usage = baseline.agents.setdefault(agent_id, AgentUsage())
        usage.total_sessions += 1
        usage.total_tokens += record.total_tokens
        usage.input_tokens += record.input_tokens
        usage.output_tokens += record.output_tokens
        usage.tool_calls += len(stats.tool_calls)
        usage.tool_tokens += record.tool_tokens
        usage.last_active = record.timestamp

        for call in stats.tool_calls:
            tool = baseline.tools.setdefault(call.tool, ToolUsage())
            tool.invocations += 1
            tool.total_tokens += costs.invocation_tokens(call)
            tool.agents[agent_id] = tool.agents.get(agent_id, 0) + 1

        baseline.timestamp = record.timestamp
        self.store.write(BASELINE_KEY, recompute(baseline).to_dict())
        logger.info(
            f"Recorded session {session_id} for {agent_id}: {record.total_tokens} tokens, "
            f"{len(stats.tool_calls)} tool calls"
        )
        return record

    def session_log(self, day: datetime | None = None) -> list[dict]:
        return self.store.read_lines(daily_log_key(day or utc_now()))

    def get_budget_status(self, agent_id: str, daily_limit: int | None = None) -> BudgetReport:
        limit = daily_limit if daily_limit is not None else config.get("daily_token_limit")
        if limit <= 0:
            raise ValueError("daily_limit must be positive")

        agent_id = agent_id.lower()
        doc = self.store.load(BASELINE_KEY, {})
        agents = doc.get("agents")
        stats = agents.get(agent_id) if isinstance(agents, dict) else None
        total = stats.get("total_tokens") if isinstance(stats, dict) else None
        if not isinstance(total, int):
            if stats is not None:
                logger.warning(f"Baseline entry for {agent_id} is malformed; status unknown")
            return BudgetReport(agent_id, BudgetStatus.UNKNOWN, 0.0)

        # Integer comparison keeps the threshold boundaries exact.
        if total * 100 >= EXCEEDED_PCT * limit:
            status = BudgetStatus.EXCEEDED
        elif total * 100 >= CRITICAL_PCT * limit:
            status = BudgetStatus.CRITICAL
        elif total * 100 >= WARNING_PCT * limit:
            status = BudgetStatus.WARNING
        else:
            status = BudgetStatus.OK
        return BudgetReport(agent_id, status, total / limit * 100)
