from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, List, Optional, TypeAlias

import typer

from hackcheck import config, modes
from hackcheck.channel import Channel, ChannelError, connect
from hackcheck.dispatch import ClientCheckEnv, SourceReader, dispatch, read_source
from hackcheck.exit_status import CHANNEL_ERROR_EXIT_CODE, PathNotFound, exit_code_for
from hackcheck.observer import NULL_OBSERVER, InvocationObserver
from hackcheck.render import ConsoleSink, OutputSink

app = typer.Typer(add_completion=False, no_args_is_help=True)

Connector: TypeAlias = Callable[[Path], Channel]


@dataclass(frozen=True)
class ClientOverrides:
    connector: Connector | None = None
    sink: OutputSink | None = None
    read_source: SourceReader | None = None
    observer: InvocationObserver | None = None


_CLIENT_OVERRIDES: ContextVar[ClientOverrides] = ContextVar(
    "hackcheck_client_overrides",
    default=ClientOverrides(),
)


@contextmanager
def client_overrides_scope(overrides: ClientOverrides) -> Iterator[None]:
    token = _CLIENT_OVERRIDES.set(overrides)
    try:
        yield
    finally:
        _CLIENT_OVERRIDES.reset(token)


@dataclass(frozen=True)
class CliState:
    socket_path: Path
    env: ClientCheckEnv
    overrides: ClientOverrides = field(default_factory=ClientOverrides)


def _execute(ctx: typer.Context, mode: modes.Mode) -> None:
    state: CliState = ctx.obj
    overrides = state.overrides
    connector = overrides.connector or connect
    try:
        with connector(state.socket_path) as channel:
            outcome = dispatch(
                mode,
                channel,
                state.env,
                sink=overrides.sink or ConsoleSink(),
                read_source=overrides.read_source or read_source,
                observer=overrides.observer or NULL_OBSERVER,
            )
    except ChannelError as exc:
        typer.secho(f"hackcheck: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=CHANNEL_ERROR_EXIT_CODE) from exc
    if isinstance(outcome, PathNotFound):
        typer.echo(f"File not found: {outcome.path}", err=True)
    raise typer.Exit(code=exit_code_for(outcome))


@app.callback()
def main(
    ctx: typer.Context,
    output_json: bool = typer.Option(False, "--json", help="Emit machine-readable JSON."),
    from_: Optional[str] = typer.Option(
        None, "--from", help="Identity of the calling tool (for example an editor)."
    ),
    socket_path: Optional[Path] = typer.Option(
        None, "--socket", help="Server socket; defaults to $HACKCHECK_SOCKET or the config."
    ),
    root: Path = typer.Option(Path("."), "--root"),
    config_path: Optional[Path] = typer.Option(None, "--config"),
) -> None:
    """Query a running hackcheck server."""
    section = config.client_defaults(root=root, config_path=config_path)
    ctx.obj = CliState(
        socket_path=config.resolve_socket_path(
            root=root, option=socket_path, section=section
        ),
        env=ClientCheckEnv(
            output_json=config.resolve_output_json(output_json, section),
            from_=config.resolve_from(from_, section),
            cwd=Path.cwd(),
        ),
        overrides=_CLIENT_OVERRIDES.get(),
    )


@app.command("list-files")
def list_files(ctx: typer.Context) -> None:
    """List every file the server tracks."""
    _execute(ctx, modes.ListFiles())


@app.command("list-modes")
def list_modes(ctx: typer.Context) -> None:
    """List every file with its mode."""
    _execute(ctx, modes.ListModes())


@app.command("color")
def color(
    ctx: typer.Context,
    file: str = typer.Argument(..., help="File to color, or '-' for stdin."),
) -> None:
    """Show type coverage levels for a file."""
    _execute(ctx, modes.Coloring(file=file))


@app.command("coverage")
def coverage(ctx: typer.Context, file: str = typer.Argument(...)) -> None:
    """Count expressions per coverage level."""
    _execute(ctx, modes.Coverage(file=file))


@app.command("find-class-refs")
def find_class_refs(ctx: typer.Context, class_name: str = typer.Argument(...)) -> None:
    _execute(ctx, modes.FindClassRefs(class_name=class_name))


@app.command("find-refs")
def find_refs(
    ctx: typer.Context,
    reference: str = typer.Argument(..., help="Function name or Class::method."),
) -> None:
    _execute(ctx, modes.FindRefs(reference=reference))


@app.command("dump-symbol-info")
def dump_symbol_info(
    ctx: typer.Context,
    files: List[str] = typer.Argument(..., help="Files, or '-' to read a list from stdin."),
) -> None:
    _execute(ctx, modes.DumpSymbolInfo(files=tuple(files)))


@app.command("dump-ai-info")
def dump_ai_info(
    ctx: typer.Context,
    files: List[str] = typer.Argument(..., help="Files, or '-' to read a list from stdin."),
) -> None:
    _execute(ctx, modes.DumpAiInfo(files=tuple(files)))


@app.command("refactor")
def refactor(
    ctx: typer.Context,
    kind: str = typer.Argument(..., help="Class, Function or Method."),
    before: str = typer.Argument(...),
    after: str = typer.Argument(...),
) -> None:
    """Rename a class, function or method across the project."""
    _execute(ctx, modes.Refactor(kind=kind, before=before, after=after))


@app.command("identify-function")
def identify_function(
    ctx: typer.Context, position: str = typer.Argument(..., metavar="LINE:CHAR")
) -> None:
    """Name the function called at a position in stdin."""
    _execute(ctx, modes.IdentifyFunction(position=position))


@app.command("type-at-pos")
def type_at_pos(
    ctx: typer.Context, position: str = typer.Argument(..., metavar="[FILE:]LINE:CHAR")
) -> None:
    """Show the type at a position; without FILE the source is read from stdin."""
    _execute(ctx, modes.TypeAtPos(position=position))


@app.command("argument-info")
def argument_info(
    ctx: typer.Context, position: str = typer.Argument(..., metavar="LINE:CHAR")
) -> None:
    _execute(ctx, modes.ArgumentInfo(position=position))


@app.command("auto-complete")
def auto_complete(ctx: typer.Context) -> None:
    """Complete at the AUTO332 marker in stdin."""
    _execute(ctx, modes.AutoComplete())


@app.command("outline")
def outline(ctx: typer.Context) -> None:
    _execute(ctx, modes.Outline())


@app.command("method-jump-children")
def method_jump_children(ctx: typer.Context, class_name: str = typer.Argument(...)) -> None:
    _execute(ctx, modes.MethodJumpChildren(class_name=class_name))


@app.command("method-jump-ancestors")
def method_jump_ancestors(ctx: typer.Context, class_name: str = typer.Argument(...)) -> None:
    _execute(ctx, modes.MethodJumpAncestors(class_name=class_name))


@app.command("status")
def status(ctx: typer.Context) -> None:
    """Report type errors; exits 2 when there are any."""
    _execute(ctx, modes.Status())


@app.command("show")
def show(ctx: typer.Context, symbol: str = typer.Argument(...)) -> None:
    _execute(ctx, modes.Show(symbol=symbol))


@app.command("search")
def search(
    ctx: typer.Context,
    query: str = typer.Argument(...),
    search_type: str = typer.Option("", "--search-type"),
) -> None:
    _execute(ctx, modes.Search(query=query, search_type=search_type))


@app.command("lint")
def lint(ctx: typer.Context, files: List[str] = typer.Argument(...)) -> None:
    _execute(ctx, modes.Lint(files=tuple(files)))


@app.command("lint-all")
def lint_all(ctx: typer.Context, code: int = typer.Argument(...)) -> None:
    _execute(ctx, modes.LintAll(code=code))


@app.command("create-checkpoint")
def create_checkpoint(ctx: typer.Context, label: str = typer.Argument(...)) -> None:
    _execute(ctx, modes.CreateCheckpoint(label=label))


@app.command("retrieve-checkpoint")
def retrieve_checkpoint(ctx: typer.Context, label: str = typer.Argument(...)) -> None:
    """Print files changed since the checkpoint; exits 8 if it does not exist."""
    _execute(ctx, modes.RetrieveCheckpoint(label=label))


@app.command("delete-checkpoint")
def delete_checkpoint(ctx: typer.Context, label: str = typer.Argument(...)) -> None:
    _execute(ctx, modes.DeleteCheckpoint(label=label))


@app.command("stats")
def stats(ctx: typer.Context) -> None:
    _execute(ctx, modes.Stats())


@app.command("find-lvar-refs")
def find_lvar_refs(
    ctx: typer.Context, position: str = typer.Argument(..., metavar="LINE:CHAR")
) -> None:
    _execute(ctx, modes.FindLvarRefs(position=position))


@app.command("get-method-name")
def get_method_name(
    ctx: typer.Context, position: str = typer.Argument(..., metavar="LINE:CHAR")
) -> None:
    _execute(ctx, modes.GetMethodName(position=position))


@app.command("format")
def format_(
    ctx: typer.Context,
    start: int = typer.Argument(..., metavar="FROM"),
    end: int = typer.Argument(..., metavar="TO"),
) -> None:
    """Format the byte range FROM..TO of stdin."""
    _execute(ctx, modes.Format(start=start, end=end))
