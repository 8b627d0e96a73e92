"""Output sinks: where command results end up.

The dispatcher never prints directly. It hands each result to an
``OutputSink`` together with the machine-readable flag, and streams verbatim
lines through ``line``.
"""

from __future__ import annotations

import json
from typing import Protocol, Sequence, runtime_checkable

import typer

from hackcheck import modes
from hackcheck.schema import ErrorMessageDTO, StatusErrorDTO


@runtime_checkable
class OutputSink(Protocol):
    def line(self, text: str) -> None: ...

    def diagnostic(self, text: str) -> None: ...

    def result(self, mode: modes.Mode, result: object, *, output_json: bool) -> None: ...

    def errors(
        self, errors: Sequence[StatusErrorDTO], *, output_json: bool, err: bool
    ) -> None: ...

    def errors_colored(self, errors: Sequence[StatusErrorDTO]) -> None: ...


def _message_header(message: ErrorMessageDTO) -> str:
    return (
        f'File "{message.path}", line {message.line}, '
        f"characters {message.start}-{message.end}:"
    )


def _error_lines(error: StatusErrorDTO) -> list[str]:
    lines: list[str] = []
    for message in error.messages:
        lines.append(_message_header(message))
        lines.append(message.message)
    return lines


def errors_payload(errors: Sequence[StatusErrorDTO]) -> dict[str, object]:
    return {
        "passed": not errors,
        "errors": [error.model_dump() for error in errors],
    }


def _human_text(result: object) -> list[str]:
    if result is None:
        return []
    if isinstance(result, str):
        return [result]
    if isinstance(result, list):
        return [
            item if isinstance(item, str) else json.dumps(item, sort_keys=True)
            for item in result
        ]
    return [json.dumps(result, indent=2, sort_keys=True)]


class ConsoleSink:
    """Default sink: stdout for results, stderr for diagnostics."""

    def line(self, text: str) -> None:
        # Streamed lines may carry surrogate-escaped bytes; write them back raw.
        typer.echo(text.encode("utf-8", errors="surrogateescape"))

    def diagnostic(self, text: str) -> None:
        typer.echo(text, err=True)

    def result(self, mode: modes.Mode, result: object, *, output_json: bool) -> None:
        if isinstance(mode, modes.Stats):
            typer.echo(json.dumps(result, indent=2, sort_keys=True))
            return
        if output_json:
            typer.echo(json.dumps(result, sort_keys=True))
            return
        if isinstance(mode, modes.Refactor) and isinstance(result, list):
            typer.echo(f"Rewrote {len(result)} patch(es)")
            return
        for text in _human_text(result):
            typer.echo(text)

    def errors(
        self, errors: Sequence[StatusErrorDTO], *, output_json: bool, err: bool
    ) -> None:
        if output_json:
            typer.echo(json.dumps(errors_payload(errors), sort_keys=True), err=err)
            return
        if not errors:
            typer.echo("No errors!", err=err)
            return
        for error in errors:
            for text in _error_lines(error):
                typer.echo(text, err=err)

    def errors_colored(self, errors: Sequence[StatusErrorDTO]) -> None:
        for error in errors:
            for message in error.messages:
                typer.secho(_message_header(message), fg=typer.colors.RED, bold=True)
                typer.echo(message.message)
