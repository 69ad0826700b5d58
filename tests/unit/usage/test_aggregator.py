"""Usage aggregation: session log, cumulative baseline, budget thresholds."""

import pytest

from agency.lib.store import DocumentStore
from agency.models import BudgetStatus, SessionStats, ToolCall
from agency.usage import costs
from agency.usage.aggregator import BASELINE_KEY, UsageAggregator, daily_log_key


@pytest.fixture
def aggregator(store):
    return UsageAggregator(store)


def _stats(inp=0, out=0, tools=()):
    return SessionStats(input_tokens=inp, output_tokens=out, tool_calls=[ToolCall(t) for t in tools])


def test_tool_tokens_uses_cost_table():
    calls = [ToolCall("web_search"), ToolCall("read"), ToolCall("mystery_tool")]

    assert costs.tool_tokens(calls) == 2000 + 100 + 500


def test_invocation_tokens_prefers_estimate():
    assert costs.invocation_tokens(ToolCall("browser", estimated_tokens=42)) == 42
    assert costs.invocation_tokens(ToolCall("browser")) == 5000


def test_record_session(aggregator, store, fixed_now):
    record = aggregator.record_session("s1", "Scout", _stats(1200, 300, ["web_search", "read"]), now=fixed_now)

    assert record.agent_id == "scout"
    assert record.total_tokens == 1500
    assert record.tool_tokens == 2100
    assert record.tool_calls == ("web_search", "read")

    baseline = aggregator.load_baseline()
    scout = baseline.agents["scout"]
    assert scout.total_sessions == 1
    assert scout.total_tokens == 1500
    assert scout.tool_calls == 2
    assert scout.last_active == fixed_now.isoformat()
    assert baseline.tools["web_search"].invocations == 1
    assert baseline.tools["web_search"].agents == {"scout": 1}
    assert baseline.summary.total_tokens == 1500


def test_record_appends_daily_log(aggregator, fixed_now):
    aggregator.record_session("s1", "scout", _stats(10, 5), now=fixed_now)
    aggregator.record_session("s2", "henry", _stats(20, 5), now=fixed_now)

    log = aggregator.session_log(fixed_now)
    assert [r["session_id"] for r in log] == ["s1", "s2"]
    assert daily_log_key(fixed_now) == "usage/daily_2025-03-01"


def test_averages(aggregator, fixed_now):
    aggregator.record_session("s1", "scout", _stats(100, 0, ["read"]), now=fixed_now)
    aggregator.record_session("s2", "scout", _stats(200, 0, ["read", "exec"]), now=fixed_now)

    baseline = aggregator.load_baseline()
    assert baseline.agents["scout"].avg_session_cost == 150
    assert baseline.tools["read"].avg_cost == 100
    assert baseline.summary.total_sessions == 2
    assert baseline.summary.avg_tokens_per_session == 150
    assert baseline.summary.total_tool_calls == 3


def test_summary_independent_of_order(store, fixed_now, tmp_path):
    sessions = [("s1", "scout", _stats(100, 50)), ("s2", "pixel", _stats(300, 0)), ("s3", "scout", _stats(7, 3))]
    forward = UsageAggregator(store)
    backward = UsageAggregator(DocumentStore(tmp_path / "other"))
    for sid, agent, stats in sessions:
        forward.record_session(sid, agent, stats, now=fixed_now)
    for sid, agent, stats in reversed(sessions):
        backward.record_session(sid, agent, stats, now=fixed_now)

    assert forward.load_baseline().summary == backward.load_baseline().summary


def test_unknown_agent_and_tool_added(aggregator, fixed_now):
    aggregator.record_session("s1", "nova", _stats(10, 0, ["teleport"]), now=fixed_now)

    baseline = aggregator.load_baseline()
    assert baseline.agents["nova"].total_tokens == 10
    assert baseline.tools["teleport"].total_tokens == 500


def test_fresh_baseline_seeded(aggregator):
    baseline = aggregator.load_baseline()

    assert "henry" in baseline.agents
    assert set(costs.TOOL_COSTS) <= set(baseline.tools)
    assert not aggregator.baseline_exists()


@pytest.mark.parametrize(
    "total, expected",
    [
        (0, BudgetStatus.OK),
        (499, BudgetStatus.OK),
        (500, BudgetStatus.WARNING),
        (799, BudgetStatus.WARNING),
        (800, BudgetStatus.CRITICAL),
        (999, BudgetStatus.CRITICAL),
        (1000, BudgetStatus.EXCEEDED),
        (2500, BudgetStatus.EXCEEDED),
    ],
)
def test_budget_thresholds(aggregator, store, total, expected):
    store.write(BASELINE_KEY, {"agents": {"scout": {"total_tokens": total}}})

    report = aggregator.get_budget_status("scout", daily_limit=1000)

    assert report.status == expected
    assert report.pct == pytest.approx(total / 10)


def test_budget_unknown_agent(aggregator):
    report = aggregator.get_budget_status("scout", daily_limit=1000)

    assert report.status == BudgetStatus.UNKNOWN
    assert report.pct == 0.0


def test_budget_default_limit(aggregator, fixed_now):
    aggregator.record_session("s1", "scout", _stats(1072, 0), now=fixed_now)

    assert aggregator.get_budget_status("scout").status == BudgetStatus.WARNING


def test_budget_rejects_nonpositive_limit(aggregator):
    with pytest.raises(ValueError):
        aggregator.get_budget_status("scout", daily_limit=0)


def test_corrupt_baseline_reseeded(aggregator, agency_home, fixed_now):
    (agency_home / "usage").mkdir()
    (agency_home / "usage" / "baseline_metrics.json").write_text("{{{")

    aggregator.record_session("s1", "scout", _stats(10, 0), now=fixed_now)

    assert aggregator.load_baseline().agents["scout"].total_sessions == 1


@pytest.mark.parametrize(
    "doc",
    [
        {"agents": ["scout"]},
        {"agents": {"scout": 1500}},
        {"agents": {"scout": {"total_tokens": "lots"}}},
        {"agents": {"scout": {}}},
    ],
)
def test_budget_malformed_baseline_is_unknown(aggregator, store, doc):
    store.write(BASELINE_KEY, doc)

    report = aggregator.get_budget_status("scout", daily_limit=1000)

    assert report.status == BudgetStatus.UNKNOWN
