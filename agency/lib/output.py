"""Output helpers shared by every command: --json / --quiet flags and failures."""

import dataclasses
import json as json_lib
from typing import Any, NoReturn

import typer

JSON_FLAG = "json_output"
QUIET_FLAG = "quiet_output"


def init_context(ctx: typer.Context, json_output: bool = False, quiet_output: bool = False) -> None:
    if not isinstance(ctx.obj, dict):
        ctx.obj = {}
    ctx.obj[JSON_FLAG] = json_output
    ctx.obj[QUIET_FLAG] = quiet_output


def _flag(ctx: typer.Context, name: str) -> bool:
    # Sub-app contexts inherit obj from the root callback.
    return bool(ctx.obj and ctx.obj.get(name))


def is_json_mode(ctx: typer.Context) -> bool:
    return _flag(ctx, JSON_FLAG)


def is_quiet_mode(ctx: typer.Context) -> bool:
    return _flag(ctx, QUIET_FLAG)


def to_jsonable(data: Any) -> Any:
    """Dataclasses (and lists of them) become plain dicts; everything else passes through."""
    if dataclasses.is_dataclass(data) and not isinstance(data, type):
        return dataclasses.asdict(data)
    if isinstance(data, list):
        return [to_jsonable(item) for item in data]
    return data


def echo_json(data: Any, ctx: typer.Context) -> bool:
    """Print data as JSON when --json is set. Returns True if printed."""
    if not is_json_mode(ctx):
        return False
    typer.echo(json_lib.dumps(to_jsonable(data), indent=2, ensure_ascii=False))
    return True


def echo_text(msg: str, ctx: typer.Context) -> None:
    if is_quiet_mode(ctx):
        return
    typer.echo(msg)


def error(msg: str) -> None:
    typer.echo(typer.style(f"❌ {msg}", fg=typer.colors.RED), err=True)


def fail(msg: str) -> NoReturn:
    error(msg)
    raise typer.Exit(1)
