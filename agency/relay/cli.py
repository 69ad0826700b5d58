"""Relay commands: chat watcher daemon, trigger processor, outbox."""

import typer

from agency import config
from agency.errors import AgencyError
from agency.lib import output
from agency.lib.poller import Poller
from agency.lib.store import DocumentStore

from .forwarder import TriggerProcessor
from .pipeline import ChatRelay

app = typer.Typer(no_args_is_help=True)


@app.command("run")
def run(
    once: bool = typer.Option(False, "--once", help="Run a single poll and exit."),
    interval: float = typer.Option(None, "--interval", "-i", help="Poll interval in seconds."),
):
    """Watch chat histories and queue forward triggers for unanswered messages."""
    relay = ChatRelay(DocumentStore())
    if once:
        created = relay.poll_once()
        typer.echo(f"✓ {len(created)} trigger(s) created")
        return
    seconds = interval if interval is not None else config.get("poll_interval_seconds")
    typer.echo(f"👀 Chat relay watching every {seconds}s (Ctrl+C to stop)")
    Poller("relay", relay.poll_once, seconds).run()


@app.command("forward")
def forward(
    once: bool = typer.Option(False, "--once", help="Process pending triggers once and exit."),
    interval: float = typer.Option(None, "--interval", "-i", help="Poll interval in seconds."),
):
    """Move pending triggers onto the send queue."""
    processor = TriggerProcessor(DocumentStore())
    if once:
        forwarded = processor.poll_once()
        typer.echo(f"✓ Forwarded {len(forwarded)} message(s)")
        return
    seconds = interval if interval is not None else config.get("forward_poll_interval_seconds")
    Poller("forwarder", processor.poll_once, seconds).run()


@app.command("outbox")
def outbox(ctx: typer.Context):
    """List messages waiting for the external sender."""
    items = TriggerProcessor(DocumentStore()).pending_sends()
    if output.echo_json(items, ctx):
        return
    if not items:
        typer.echo("No messages waiting to be sent")
        return
    for item in items:
        typer.echo(f"{item['id'][:12]:<12} {item.get('agentName', ''):<8} {item.get('message', '')[:60]}")


@app.command("sent")
def sent(item_id: str = typer.Argument(..., help="Forward queue item id.")):
    """Mark an outbox message as delivered."""
    try:
        TriggerProcessor(DocumentStore()).mark_sent(item_id)
    except AgencyError as e:
        output.fail(str(e))
    typer.echo(f"✓ Marked {item_id} sent")
