import logging

import typer

from agency import config, paths
from agency.errors import AgencyError
from agency.lib import output
from agency.relay import cli as relay_cli
from agency.spawn import cli as spawn_cli
from agency.usage import cli as usage_cli

app = typer.Typer(invoke_without_command=True, no_args_is_help=False, add_completion=False)


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.callback(invoke_without_command=True)
def common_options_callback(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", "-j", help="Output in JSON format."),
    quiet_output: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
):
    """Agent Agency coordination

    Relay chat messages, track spawned sessions and account token usage
    through shared queue documents."""
    output.init_context(ctx, json_output, quiet_output)
    setup_logging("DEBUG" if verbose else config.get("logging_level"))

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


@app.command("init")
def init():
    """Create config.yaml in the agency root if missing."""
    created = config.init_config()
    state = "Created" if created else "Exists"
    typer.echo(f"✓ {state}: {paths.config_file()}")


app.add_typer(relay_cli.app, name="relay", help="Chat relay and trigger processing.")
app.add_typer(spawn_cli.app, name="spawn", help="Spawn requests and sessions.")
app.add_typer(usage_cli.app, name="usage", help="Token usage tracking and reports.")


def main() -> None:
    """Entry point for the agency command.

    Store and coordination errors that escape a command (a daemon whose store
    vanished, say) end the run with a one-line message instead of a traceback.
    """
    try:
        app()
    except AgencyError as e:
        output.error(str(e))
        raise SystemExit(1) from e
