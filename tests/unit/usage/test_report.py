from agency.models import AgentUsage, ToolUsage, UsageBaseline
from agency.usage.aggregator import recompute
from agency.usage.report import agent_ranking, generate_report, optimization_opportunities, tool_ranking


def _baseline():
    return recompute(
        UsageBaseline(
            agents={
                "scout": AgentUsage(total_sessions=2, total_tokens=300),
                "henry": AgentUsage(total_sessions=1, total_tokens=900),
                "pixel": AgentUsage(),
            },
            tools={
                "read": ToolUsage(invocations=5, total_tokens=500),
                "browser": ToolUsage(invocations=2, total_tokens=10000),
                "tts": ToolUsage(),
            },
        )
    )


def test_agent_ranking_by_tokens():
    ranks = agent_ranking(_baseline())

    assert [r.agent for r in ranks] == ["henry", "scout", "pixel"]
    assert ranks[0].pct_of_total == 75.0
    assert ranks[1].avg_per_session == 150


def test_agent_ranking_empty_total():
    ranks = agent_ranking(UsageBaseline(agents={"scout": AgentUsage()}))

    assert ranks[0].pct_of_total == 0.0


def test_tool_ranking_by_invocations():
    ranks = tool_ranking(_baseline())

    assert [r.tool for r in ranks] == ["read", "browser", "tts"]
    assert ranks[1].avg_cost == 5000
    assert ranks[2].avg_cost == 0


def test_high_cost_tools_opportunity():
    rep = generate_report(_baseline())

    [high_cost] = [o for o in rep.opportunities if o.type == "high_cost_tools"]
    assert high_cost.savings_potential == "5000 tokens"


def test_agent_inefficiency_opportunity():
    rep = generate_report(_baseline())

    [inefficient] = [o for o in rep.opportunities if o.type == "agent_inefficiency"]
    assert inefficient.agents == ["henry"]


def test_no_opportunities_for_empty_baseline():
    assert optimization_opportunities([], []) == []
