"""Spawn commands: request, pending, claim, complete, fail, sessions, sleep."""

import json

import typer

from agency.errors import AgencyError
from agency.lib import output
from agency.lib.store import DocumentStore
from agency.lib.uuid7 import short_id

from .manager import SpawnManager

app = typer.Typer(no_args_is_help=True)


def _manager() -> SpawnManager:
    return SpawnManager(DocumentStore())


@app.command("request")
def request(
    ctx: typer.Context,
    agent_id: str = typer.Argument(..., help="Agent to spawn."),
    task: str = typer.Argument(..., help="Task for the agent."),
):
    """Queue a spawn request."""
    req = _manager().queue_request(agent_id, task)
    if output.echo_json(req, ctx):
        return
    typer.echo(f"✓ Queued {req.agent_id} spawn: {req.id}")


@app.command("pending")
def pending():
    """Print pending requests as JSON work orders for the orchestrator."""
    orders = [o.to_dict() for o in _manager().list_pending()]
    typer.echo(json.dumps(orders, indent=2, ensure_ascii=False))


@app.command("list")
def list_requests(
    ctx: typer.Context,
    status: str = typer.Option(None, "--status", "-s", help="Filter by status."),
):
    """List spawn requests."""
    requests = _manager().list_requests(status)
    if output.echo_json(requests, ctx):
        return
    if not requests:
        typer.echo("No spawn requests")
        return
    typer.echo(f"{'ID':<8} {'Agent':<8} {'Status':<12} Task")
    typer.echo("-" * 70)
    for r in requests:
        typer.echo(f"{short_id(r.id):<8} {r.agent_id:<8} {r.status:<12} {r.task[:40]}")


@app.command("claim")
def claim(request_id: str = typer.Argument(..., help="Spawn request id.")):
    """Mark a pending request as processing."""
    try:
        _manager().claim(request_id)
    except AgencyError as e:
        output.fail(str(e))
    typer.echo(f"✓ Claimed {request_id}")


@app.command("complete")
def complete(
    request_id: str = typer.Argument(..., help="Spawn request id."),
    session_key: str = typer.Argument(..., help="Key of the session that was created."),
):
    """Register the session created for a request."""
    manager = _manager()
    try:
        session = manager.register_session(request_id, session_key)
    except AgencyError as e:
        output.fail(str(e))
    typer.echo(
        json.dumps(
            {
                "success": True,
                "agentId": session.agent_id,
                "sessionKey": session.session_key,
                "uuid": session.uuid,
                "expiresAt": session.expires_at,
            },
            indent=2,
        )
    )


@app.command("fail")
def fail(
    request_id: str = typer.Argument(..., help="Spawn request id."),
    error: str = typer.Argument(..., help="Failure reason."),
):
    """Mark a request as errored."""
    try:
        _manager().fail(request_id, error)
    except AgencyError as e:
        output.fail(str(e))
    typer.echo(f"✓ Marked {request_id} as error")


@app.command("sessions")
def sessions(ctx: typer.Context):
    """Show active (unexpired) sessions."""
    active = _manager().active_sessions()
    if output.echo_json([s.to_dict() for s in active], ctx):
        return
    if not active:
        typer.echo("No active sessions")
        return
    typer.echo(f"{'Agent':<8} {'Session':<40} Expires")
    typer.echo("-" * 70)
    for s in active:
        typer.echo(f"{s.agent_id:<8} {s.session_key[:39]:<40} {s.expires_at[:19]}")


@app.command("sleep")
def sleep(
    agent_id: str = typer.Argument(None, help="Agent to put to sleep."),
    all_agents: bool = typer.Option(False, "--all", "-a", help="Sleep every active agent."),
):
    """Terminate an agent's active session."""
    manager = _manager()
    if all_agents:
        results = manager.sleep_all()
    elif agent_id:
        results = [manager.sleep(agent_id)]
    else:
        output.fail("Provide an agent id or --all")

    if not results:
        typer.echo("No active sessions")
    for result in results:
        icon = "✓" if result.success else "⚠️"
        typer.echo(f"{icon} {result.message}")
