"""Usage commands: record sessions, budget status, analytics report."""

import typer

from agency.lib import output
from agency.lib.store import DocumentStore
from agency.models import BudgetStatus, SessionStats, ToolCall

from . import report as usage_report
from .aggregator import UsageAggregator

app = typer.Typer(no_args_is_help=True)

BUDGET_COLORS = {
    BudgetStatus.OK: typer.colors.GREEN,
    BudgetStatus.WARNING: typer.colors.YELLOW,
    BudgetStatus.CRITICAL: typer.colors.RED,
    BudgetStatus.EXCEEDED: typer.colors.RED,
    BudgetStatus.UNKNOWN: typer.colors.WHITE,
}


def _header(title: str) -> None:
    rule = "═" * 51
    typer.echo()
    typer.echo(typer.style(rule, fg=typer.colors.CYAN, bold=True))
    typer.echo(typer.style(f"  📊 {title}", fg=typer.colors.CYAN, bold=True))
    typer.echo(typer.style(rule, fg=typer.colors.CYAN, bold=True))
    typer.echo()


def _metric(label: str, value, color: str = typer.colors.WHITE) -> None:
    typer.echo(f"  {label:<25} {typer.style(str(value), fg=color)}")


def _tier(avg: int) -> tuple[str, str]:
    if avg > 3000:
        return "VERY_HIGH", typer.colors.RED
    if avg > 1000:
        return "HIGH", typer.colors.YELLOW
    if avg > 500:
        return "MEDIUM", typer.colors.CYAN
    return "LOW", typer.colors.GREEN


def show_baseline(rep: usage_report.UsageReport) -> None:
    _header("BASELINE METRICS")
    summary = rep.baseline.summary
    _metric("Timestamp:", rep.baseline.timestamp or "never")
    _metric("Total Sessions:", f"{summary.total_sessions:,}")
    _metric("Total Tokens:", f"{summary.total_tokens:,}")
    _metric("Avg Tokens/Session:", f"{summary.avg_tokens_per_session:,}")
    _metric("Total Tool Calls:", f"{summary.total_tool_calls:,}")


def show_agents(rep: usage_report.UsageReport) -> None:
    _header("AGENT TOKEN BREAKDOWN")
    typer.echo(typer.style(f"  {'Agent':<10} {'Tokens':<10} {'Sessions':<10} {'Avg':<8} Share", bold=True))
    typer.echo(f"  {'-' * 50}")
    tracked = [a for a in rep.agent_ranking if a.tokens > 0]
    if not tracked:
        typer.echo(typer.style("  ⚠️  No session data collected yet", fg=typer.colors.YELLOW))
        return
    for a in tracked:
        typer.echo(
            f"  {a.agent:<10} {a.tokens:<10,} {a.sessions:<10} {a.avg_per_session:<8,} {a.pct_of_total}%"
        )


def show_tools(rep: usage_report.UsageReport) -> None:
    _header("TOOL COST ANALYSIS")
    typer.echo(
        typer.style(f"  {'Tool':<15} {'Invocations':<12} {'Tokens':<12} {'Avg Cost':<12} Tier", bold=True)
    )
    typer.echo(f"  {'-' * 60}")
    for t in rep.tool_ranking:
        tier, color = _tier(t.avg_cost)
        typer.echo(
            f"  {t.tool:<15} {t.invocations:<12} {t.total_tokens:<12,} {t.avg_cost:<12,} "
            + typer.style(tier, fg=color)
        )


def show_recommendations(rep: usage_report.UsageReport) -> None:
    _header("OPTIMIZATION RECOMMENDATIONS")
    if not rep.opportunities:
        typer.echo(typer.style("  ✓ No obvious waste detected", fg=typer.colors.GREEN))
        return
    for opp in rep.opportunities:
        color = typer.colors.RED if opp.severity == "high" else typer.colors.YELLOW
        typer.echo(f"  {typer.style(f'[{opp.severity.upper()}]', fg=color)} {opp.description}")
        if opp.agents:
            typer.echo(f"    Agents:  {', '.join(opp.agents)}")
        if opp.savings_potential:
            typer.echo(typer.style(f"    Savings: {opp.savings_potential}", fg=typer.colors.GREEN))
        typer.echo()


@app.command("report")
def report(
    ctx: typer.Context,
    baseline: bool = typer.Option(False, "--baseline", help="Show summary statistics."),
    agents: bool = typer.Option(False, "--agents", help="Show per-agent breakdown."),
    tools: bool = typer.Option(False, "--tools", help="Show per-tool breakdown."),
    recommendations: bool = typer.Option(False, "--recommendations", help="Show savings hints."),
):
    """Render the usage analytics report. No flags renders every section."""
    aggregator = UsageAggregator(DocumentStore())
    if not aggregator.baseline_exists():
        output.fail("No baseline metrics found. Record a session first.")

    rep = usage_report.generate_report(aggregator.load_baseline())
    if output.echo_json(rep, ctx):
        return

    show_all = not (baseline or agents or tools or recommendations)
    typer.echo(typer.style("AGENT AGENCY TOKEN ANALYTICS", fg=typer.colors.MAGENTA, bold=True))
    if show_all or baseline:
        show_baseline(rep)
    if show_all or agents:
        show_agents(rep)
    if show_all or tools:
        show_tools(rep)
    if show_all or recommendations:
        show_recommendations(rep)


@app.command("budget")
def budget(
    ctx: typer.Context,
    agent_id: str = typer.Argument(..., help="Agent to check."),
    limit: int = typer.Option(None, "--limit", "-l", help="Daily token limit."),
):
    """Show an agent's budget status against the daily limit."""
    aggregator = UsageAggregator(DocumentStore())
    try:
        result = aggregator.get_budget_status(agent_id, limit)
    except ValueError as e:
        output.fail(str(e))
    if output.echo_json({"agentId": result.agent_id, "status": result.status.value, "pct": result.pct}, ctx):
        return
    color = BUDGET_COLORS[result.status]
    typer.echo(f"{result.agent_id}: {typer.style(result.status.value, fg=color)} ({result.pct:.1f}%)")


@app.command("record")
def record(
    ctx: typer.Context,
    session_id: str = typer.Argument(..., help="Session id."),
    agent_id: str = typer.Argument(..., help="Agent that ran the session."),
    input_tokens: int = typer.Option(0, "--input", help="Input tokens."),
    output_tokens: int = typer.Option(0, "--output", help="Output tokens."),
    context_tokens: int = typer.Option(0, "--context", help="Context tokens."),
    duration_ms: int = typer.Option(0, "--duration-ms", help="Session duration."),
    tool: list[str] = typer.Option(None, "--tool", "-t", help="Tool invoked (repeatable)."),
):
    """Record a completed session into the usage baseline."""
    stats = SessionStats(
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        context_tokens=context_tokens,
        duration_ms=duration_ms,
        tool_calls=[ToolCall(tool=t) for t in tool or []],
    )
    rec = UsageAggregator(DocumentStore()).record_session(session_id, agent_id, stats)
    if output.echo_json(rec.to_dict(), ctx):
        return
    output.echo_text(
        f"✓ Recorded {rec.agent_id} session {rec.session_id}: {rec.total_tokens:,} tokens "
        f"(+{rec.tool_tokens:,} tool)",
        ctx,
    )
