from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Literal, TypeAlias, Union

# One variant per command. Each carries exactly the arguments its command
# accepts on the command line; location strings stay raw until dispatch.


@dataclass(frozen=True)
class ListFiles:
    name: ClassVar[str] = "list-files"


@dataclass(frozen=True)
class ListModes:
    name: ClassVar[str] = "list-modes"


@dataclass(frozen=True)
class Coloring:
    name: ClassVar[str] = "color"
    file: str


@dataclass(frozen=True)
class Coverage:
    name: ClassVar[str] = "coverage"
    file: str


@dataclass(frozen=True)
class FindClassRefs:
    name: ClassVar[str] = "find-class-refs"
    class_name: str


@dataclass(frozen=True)
class FindRefs:
    name: ClassVar[str] = "find-refs"
    reference: str


@dataclass(frozen=True)
class DumpSymbolInfo:
    name: ClassVar[str] = "dump-symbol-info"
    files: tuple[str, ...]


@dataclass(frozen=True)
class DumpAiInfo:
    name: ClassVar[str] = "dump-ai-info"
    files: tuple[str, ...]


@dataclass(frozen=True)
class Refactor:
    name: ClassVar[str] = "refactor"
    kind: str
    before: str
    after: str


@dataclass(frozen=True)
class IdentifyFunction:
    name: ClassVar[str] = "identify-function"
    position: str


@dataclass(frozen=True)
class TypeAtPos:
    name: ClassVar[str] = "type-at-pos"
    position: str


@dataclass(frozen=True)
class ArgumentInfo:
    name: ClassVar[str] = "argument-info"
    position: str


@dataclass(frozen=True)
class AutoComplete:
    name: ClassVar[str] = "auto-complete"


@dataclass(frozen=True)
class Outline:
    name: ClassVar[str] = "outline"


@dataclass(frozen=True)
class MethodJumpChildren:
    name: ClassVar[str] = "method-jump-children"
    class_name: str


@dataclass(frozen=True)
class MethodJumpAncestors:
    name: ClassVar[str] = "method-jump-ancestors"
    class_name: str


@dataclass(frozen=True)
class Status:
    name: ClassVar[str] = "status"


@dataclass(frozen=True)
class Show:
    name: ClassVar[str] = "show"
    symbol: str


@dataclass(frozen=True)
class Search:
    name: ClassVar[str] = "search"
    query: str
    search_type: str = ""


@dataclass(frozen=True)
class Lint:
    name: ClassVar[str] = "lint"
    files: tuple[str, ...]


@dataclass(frozen=True)
class LintAll:
    name: ClassVar[str] = "lint-all"
    code: int


@dataclass(frozen=True)
class CreateCheckpoint:
    name: ClassVar[str] = "create-checkpoint"
    label: str


@dataclass(frozen=True)
class RetrieveCheckpoint:
    name: ClassVar[str] = "retrieve-checkpoint"
    label: str


@dataclass(frozen=True)
class DeleteCheckpoint:
    name: ClassVar[str] = "delete-checkpoint"
    label: str


@dataclass(frozen=True)
class Stats:
    name: ClassVar[str] = "stats"


@dataclass(frozen=True)
class FindLvarRefs:
    name: ClassVar[str] = "find-lvar-refs"
    position: str


@dataclass(frozen=True)
class GetMethodName:
    name: ClassVar[str] = "get-method-name"
    position: str


@dataclass(frozen=True)
class Format:
    name: ClassVar[str] = "format"
    start: int
    end: int


Mode: TypeAlias = Union[
    ListFiles,
    ListModes,
    Coloring,
    Coverage,
    FindClassRefs,
    FindRefs,
    DumpSymbolInfo,
    DumpAiInfo,
    Refactor,
    IdentifyFunction,
    TypeAtPos,
    ArgumentInfo,
    AutoComplete,
    Outline,
    MethodJumpChildren,
    MethodJumpAncestors,
    Status,
    Show,
    Search,
    Lint,
    LintAll,
    CreateCheckpoint,
    RetrieveCheckpoint,
    DeleteCheckpoint,
    Stats,
    FindLvarRefs,
    GetMethodName,
    Format,
]

ChannelPattern: TypeAlias = Literal["stream", "rpc"]

ALL_MODES: tuple[type, ...] = Mode.__args__

# Streaming modes read response lines until end-of-stream; every other mode
# is a single request/response exchange.
MODE_PATTERNS: dict[type, ChannelPattern] = {
    ListFiles: "stream",
    ListModes: "stream",
    Coloring: "rpc",
    Coverage: "rpc",
    FindClassRefs: "rpc",
    FindRefs: "rpc",
    DumpSymbolInfo: "rpc",
    DumpAiInfo: "rpc",
    Refactor: "rpc",
    IdentifyFunction: "rpc",
    TypeAtPos: "rpc",
    ArgumentInfo: "rpc",
    AutoComplete: "rpc",
    Outline: "rpc",
    MethodJumpChildren: "rpc",
    MethodJumpAncestors: "rpc",
    Status: "rpc",
    Show: "stream",
    Search: "rpc",
    Lint: "rpc",
    LintAll: "rpc",
    CreateCheckpoint: "rpc",
    RetrieveCheckpoint: "rpc",
    DeleteCheckpoint: "rpc",
    Stats: "rpc",
    FindLvarRefs: "rpc",
    GetMethodName: "rpc",
    Format: "rpc",
}


def pattern_for(mode: Mode) -> ChannelPattern:
    return MODE_PATTERNS[type(mode)]


def missing_pattern_modes() -> tuple[str, ...]:
    return tuple(
        mode_type.name for mode_type in ALL_MODES if mode_type not in MODE_PATTERNS
    )


def extra_pattern_modes() -> tuple[str, ...]:
    return tuple(
        mode_type.__name__ for mode_type in MODE_PATTERNS if mode_type not in ALL_MODES
    )


def mode_names() -> tuple[str, ...]:
    return tuple(mode_type.name for mode_type in ALL_MODES)
