"""Read-only rankings and savings hints derived from a usage baseline."""

from dataclasses import dataclass, field

from agency.models import UsageBaseline

HIGH_COST_TOOL_TOKENS = 5000
HIGH_BURNER_FACTOR = 1.5


@dataclass
class AgentRank:
    agent: str
    tokens: int
    sessions: int
    avg_per_session: int
    tool_calls: int
    pct_of_total: float


@dataclass
class ToolRank:
    tool: str
    invocations: int
    total_tokens: int
    avg_cost: int


@dataclass
class Opportunity:
    type: str
    severity: str
    description: str
    savings_potential: str | None = None
    agents: list[str] = field(default_factory=list)


@dataclass
class UsageReport:
    baseline: UsageBaseline
    agent_ranking: list[AgentRank]
    tool_ranking: list[ToolRank]
    opportunities: list[Opportunity]


def agent_ranking(baseline: UsageBaseline) -> list[AgentRank]:
    total = baseline.summary.total_tokens
    ranked = sorted(baseline.agents.items(), key=lambda kv: kv[1].total_tokens, reverse=True)
    return [
        AgentRank(
            agent=agent,
            tokens=usage.total_tokens,
            sessions=usage.total_sessions,
            avg_per_session=round(usage.avg_session_cost),
            tool_calls=usage.tool_calls,
            pct_of_total=round(usage.total_tokens / total * 100, 1) if total else 0.0,
        )
        for agent, usage in ranked
    ]


def tool_ranking(baseline: UsageBaseline) -> list[ToolRank]:
    ranked = sorted(baseline.tools.items(), key=lambda kv: kv[1].invocations, reverse=True)
    return [
        ToolRank(
            tool=tool,
            invocations=usage.invocations,
            total_tokens=usage.total_tokens,
            avg_cost=round(usage.total_tokens / usage.invocations) if usage.invocations else 0,
        )
        for tool, usage in ranked
    ]


def optimization_opportunities(
    agents: list[AgentRank], tools: list[ToolRank]
) -> list[Opportunity]:
    opportunities = []

    high_cost = [t for t in tools if t.total_tokens > HIGH_COST_TOOL_TOKENS]
    if high_cost:
        savings = sum(t.total_tokens for t in high_cost) * 0.5
        opportunities.append(
            Opportunity(
                type="high_cost_tools",
                severity="high",
                description=f"{len(high_cost)} tools consuming >5K tokens",
                savings_potential=f"{savings:.0f} tokens",
            )
        )

    if len(agents) > 1:
        mean = sum(a.avg_per_session for a in agents) / len(agents)
        burners = [a.agent for a in agents if a.avg_per_session > mean * HIGH_BURNER_FACTOR]
        if burners:
            opportunities.append(
                Opportunity(
                    type="agent_inefficiency",
                    severity="medium",
                    description=f"{len(burners)} agents burning >50% above average",
                    agents=burners,
                )
            )

    return opportunities


def generate_report(baseline: UsageBaseline) -> UsageReport:
    agents = agent_ranking(baseline)
    tools = tool_ranking(baseline)
    return UsageReport(
        baseline=baseline,
        agent_ranking=agents,
        tool_ranking=tools,
        opportunities=optimization_opportunities(agents, tools),
    )
