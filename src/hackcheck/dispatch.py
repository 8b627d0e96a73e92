"""Mode dispatch: turn one command into one request on the server channel.

Every mode goes through the same steps. Location arguments are parsed
first, so a malformed one never causes channel traffic. Paths are resolved
and source text is read next. Then exactly one request is made, either
streamed to end-of-stream or answered by a single response. The result is
handed to the output sink and an exit status is derived from it.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
import sys
from typing import Callable

from pydantic import TypeAdapter, ValidationError

from hackcheck import modes
from hackcheck.channel import Channel, ChannelError
from hackcheck.exceptions import InputError
from hackcheck.exit_status import ExitStatus, PathNotFound, resolve_exit_status
from hackcheck.invariants import never
from hackcheck.json_types import JSONValue
from hackcheck.observer import NULL_OBSERVER, InvocationObserver
from hackcheck.position import (
    STDIN_SOURCE,
    parse_compound_ref,
    parse_file_position,
    parse_position,
    parse_refactor_action,
    resolve_path,
)
from hackcheck.render import OutputSink
from hackcheck import schema

SourceReader = Callable[[str], str]
Outcome = ExitStatus | PathNotFound


def read_source(source: str) -> str:
    """Read all of ``source``: a file path, or ``-`` for standard input."""
    if source == STDIN_SOURCE:
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


@dataclass(frozen=True)
class ClientCheckEnv:
    output_json: bool = False
    from_: str = ""
    cwd: Path | None = None


@dataclass(frozen=True)
class _Invocation:
    channel: Channel
    env: ClientCheckEnv
    sink: OutputSink
    read_source: SourceReader


def _validated(adapter: TypeAdapter, raw: JSONValue, *, method: str):
    try:
        return adapter.validate_python(raw)
    except ValidationError as exc:
        raise ChannelError(f"unexpected {method} response: {exc}") from exc


def _strip_ns(name: str) -> str:
    return name[1:] if name.startswith("\\") else name


def _expand_file_list(files: tuple[str, ...], inv: _Invocation) -> list[str] | PathNotFound:
    if files == (STDIN_SOURCE,):
        files = tuple(
            line.strip()
            for line in inv.read_source(STDIN_SOURCE).splitlines()
            if line.strip()
        )
    expanded: list[str] = []
    for name in files:
        resolved = resolve_path(name, cwd=inv.env.cwd)
        if isinstance(resolved, PathNotFound):
            return resolved
        expanded.append(resolved)
    return expanded


def _lint_paths(files: tuple[str, ...], inv: _Invocation) -> list[str]:
    paths: list[str] = []
    for name in files:
        candidate = Path(name)
        if not candidate.is_absolute() and inv.env.cwd is not None:
            candidate = inv.env.cwd / candidate
        if candidate.exists():
            paths.append(os.path.realpath(candidate))
        else:
            inv.sink.diagnostic(f"Could not find file '{name}'")
    return paths


def _content_request(
    mode: modes.IdentifyFunction | modes.ArgumentInfo | modes.FindLvarRefs | modes.GetMethodName,
    inv: _Invocation,
) -> schema.WireRequest:
    position = parse_position(mode.position)
    content = inv.read_source(STDIN_SOURCE)
    match mode:
        case modes.IdentifyFunction() | modes.GetMethodName():
            return schema.IdentifyFunctionRequest(
                content=content, line=position.line, char=position.column
            )
        case modes.ArgumentInfo():
            return schema.ArgumentInfoRequest(
                content=content, line=position.line, char=position.column
            )
        case modes.FindLvarRefs():
            return schema.FindLvarRefsRequest(
                content=content, line=position.line, char=position.column
            )
        case _:
            never("position mode without request", mode=type(mode).__name__)


def _streamed(mode: modes.Mode, inv: _Invocation) -> Outcome:
    match mode:
        case modes.ListFiles():
            lines = list(inv.channel.stream(schema.ListFilesRequest()))
            for text in lines:
                inv.sink.line(text)
        case modes.ListModes():
            for text in inv.channel.stream(schema.ListModesRequest()):
                inv.sink.line(text)
        case modes.Show():
            for text in inv.channel.stream(schema.ShowRequest(name=mode.symbol)):
                inv.sink.line(text)
        case _:
            never("streaming mode without request", mode=type(mode).__name__)
    return ExitStatus.OK


def _status(inv: _Invocation) -> Outcome:
    raw = inv.channel.rpc(schema.StatusRequest())
    errors = _validated(schema.STATUS_RESPONSE, raw, method="STATUS")
    env = inv.env
    if env.output_json or env.from_ != "" or not errors:
        # JSON goes to stderr; editor integrations read it from there.
        inv.sink.errors(errors, output_json=env.output_json, err=env.output_json)
    else:
        inv.sink.errors_colored(errors)
    return resolve_exit_status(modes.Status(), errors)


def _retrieve_checkpoint(mode: modes.RetrieveCheckpoint, inv: _Invocation) -> Outcome:
    raw = inv.channel.rpc(schema.RetrieveCheckpointRequest(label=mode.label))
    result = _validated(
        schema.RETRIEVE_CHECKPOINT_RESPONSE, raw, method="RETRIEVE_CHECKPOINT"
    )
    if result is not None:
        for entry in result:
            inv.sink.line(entry)
    return resolve_exit_status(mode, result)


def _delete_checkpoint(mode: modes.DeleteCheckpoint, inv: _Invocation) -> Outcome:
    raw = inv.channel.rpc(schema.DeleteCheckpointRequest(label=mode.label))
    result = _validated(schema.DELETE_CHECKPOINT_RESPONSE, raw, method="DELETE_CHECKPOINT")
    return resolve_exit_status(mode, result)


def _identify_function(mode: modes.IdentifyFunction, inv: _Invocation) -> Outcome:
    raw = inv.channel.rpc(_content_request(mode, inv))
    symbol = _validated(schema.IDENTIFY_FUNCTION_RESPONSE, raw, method="IDENTIFY_FUNCTION")
    inv.sink.line(_strip_ns(symbol.name) if symbol is not None else "")
    return ExitStatus.OK


def _build_request(mode: modes.Mode, inv: _Invocation) -> schema.WireRequest | PathNotFound:
    """Request for the modes whose result goes straight to the sink."""
    match mode:
        case modes.Coloring(file=file) if file == STDIN_SOURCE:
            return schema.CoverageLevelsRequest(
                file_input=schema.FileContent(content=inv.read_source(STDIN_SOURCE))
            )
        case modes.Coloring(file=file):
            resolved = resolve_path(file, cwd=inv.env.cwd)
            if isinstance(resolved, PathNotFound):
                return resolved
            return schema.CoverageLevelsRequest(file_input=schema.FileName(path=resolved))
        case modes.Coverage(file=file):
            resolved = resolve_path(file, cwd=inv.env.cwd)
            if isinstance(resolved, PathNotFound):
                return resolved
            return schema.CoverageCountsRequest(path=resolved)
        case modes.FindClassRefs(class_name=class_name):
            return schema.FindRefsRequest(action=schema.ClassRef(name=class_name))
        case modes.FindRefs(reference=reference):
            return schema.FindRefsRequest(action=parse_compound_ref(reference))
        case modes.DumpSymbolInfo(files=files):
            expanded = _expand_file_list(files, inv)
            if isinstance(expanded, PathNotFound):
                return expanded
            return schema.DumpSymbolInfoRequest(files=expanded)
        case modes.DumpAiInfo(files=files):
            expanded = _expand_file_list(files, inv)
            if isinstance(expanded, PathNotFound):
                return expanded
            return schema.DumpAiInfoRequest(files=expanded)
        case modes.Refactor(kind=kind, before=before, after=after):
            return schema.RefactorRequest(action=parse_refactor_action(kind, before, after))
        case modes.TypeAtPos(position=text):
            parsed = parse_file_position(
                text, cwd=inv.env.cwd, read_source=inv.read_source
            )
            if isinstance(parsed, PathNotFound):
                return parsed
            file_input, position = parsed
            return schema.InferTypeRequest(
                file_input=file_input, line=position.line, char=position.column
            )
        case modes.ArgumentInfo() | modes.FindLvarRefs() | modes.GetMethodName():
            return _content_request(mode, inv)
        case modes.AutoComplete():
            return schema.AutocompleteRequest(content=inv.read_source(STDIN_SOURCE))
        case modes.Outline():
            return schema.OutlineRequest(content=inv.read_source(STDIN_SOURCE))
        case modes.MethodJumpChildren(class_name=class_name):
            return schema.MethodJumpRequest(class_name=class_name, find_children=True)
        case modes.MethodJumpAncestors(class_name=class_name):
            return schema.MethodJumpRequest(class_name=class_name, find_children=False)
        case modes.Search(query=query, search_type=search_type):
            return schema.SearchRequest(query=query, search_type=search_type)
        case modes.Lint(files=files):
            return schema.LintRequest(files=_lint_paths(files, inv))
        case modes.LintAll(code=code):
            return schema.LintAllRequest(code=code)
        case modes.Stats():
            return schema.StatsRequest()
        case modes.Format(start=start, end=end):
            return schema.FormatRequest(
                content=inv.read_source(STDIN_SOURCE), start=start, end=end
            )
        case _:
            never("unhandled mode", mode=type(mode).__name__)


def _run(mode: modes.Mode, inv: _Invocation) -> Outcome:
    if modes.pattern_for(mode) == "stream":
        return _streamed(mode, inv)
    match mode:
        case modes.Status():
            return _status(inv)
        case modes.RetrieveCheckpoint():
            return _retrieve_checkpoint(mode, inv)
        case modes.DeleteCheckpoint():
            return _delete_checkpoint(mode, inv)
        case modes.IdentifyFunction():
            return _identify_function(mode, inv)
        case modes.CreateCheckpoint(label=label):
            # The server answer carries nothing; the label is stored or replaced.
            inv.channel.rpc(schema.CreateCheckpointRequest(label=label))
            return ExitStatus.OK
    request = _build_request(mode, inv)
    if isinstance(request, PathNotFound):
        return request
    result = inv.channel.rpc(request)
    inv.sink.result(mode, result, output_json=inv.env.output_json)
    return resolve_exit_status(mode, result)


def dispatch(
    mode: modes.Mode,
    channel: Channel,
    env: ClientCheckEnv,
    *,
    sink: OutputSink,
    read_source: SourceReader = read_source,
    observer: InvocationObserver = NULL_OBSERVER,
) -> Outcome:
    """Run one command over ``channel``.

    Returns the exit status, or ``PathNotFound`` when a named file does not
    exist; in that case nothing was written to the channel. ``ChannelError``
    propagates unchanged, after the observer has seen it as the outcome.
    """
    observer.client_check(mode.name, env.from_)
    inv = _Invocation(channel=channel, env=env, sink=sink, read_source=read_source)
    try:
        outcome = _run(mode, inv)
    except InputError as exc:
        sink.diagnostic(str(exc))
        outcome = ExitStatus.INPUT_ERROR
    except ChannelError as exc:
        observer.client_check_finish(mode.name, exc)
        raise
    observer.client_check_finish(mode.name, outcome)
    return outcome
