from __future__ import annotations

from typing import Annotated, ClassVar, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, TypeAdapter


class WireModel(BaseModel):
    model_config = ConfigDict(frozen=True)


# Source text to operate on.


class FileName(WireModel):
    kind: Literal["name"] = "name"
    path: str


class FileContent(WireModel):
    kind: Literal["content"] = "content"
    content: str


FileInput = Annotated[Union[FileName, FileContent], Field(discriminator="kind")]


# find-refs targets.


class ClassRef(WireModel):
    kind: Literal["class"] = "class"
    name: str


class MethodRef(WireModel):
    kind: Literal["method"] = "method"
    class_name: str
    method_name: str


class FunctionRef(WireModel):
    kind: Literal["function"] = "function"
    name: str


FindRefsAction = Annotated[
    Union[ClassRef, MethodRef, FunctionRef], Field(discriminator="kind")
]


# refactor actions.


class ClassRename(WireModel):
    kind: Literal["class"] = "class"
    before: str
    after: str


class FunctionRename(WireModel):
    kind: Literal["function"] = "function"
    before: str
    after: str


class MethodRename(WireModel):
    kind: Literal["method"] = "method"
    class_name: str
    before: str
    after: str


RefactorAction = Annotated[
    Union[ClassRename, FunctionRename, MethodRename], Field(discriminator="kind")
]


# Requests. `method` is the wire name the server dispatches on.


class WireRequest(WireModel):
    method: ClassVar[str]

    def params(self) -> dict:
        return self.model_dump(mode="json")


class ListFilesRequest(WireRequest):
    method: ClassVar[str] = "LIST_FILES"


class ListModesRequest(WireRequest):
    method: ClassVar[str] = "LIST_MODES"


class ShowRequest(WireRequest):
    method: ClassVar[str] = "SHOW"
    name: str


class CoverageLevelsRequest(WireRequest):
    method: ClassVar[str] = "COVERAGE_LEVELS"
    file_input: FileInput


class CoverageCountsRequest(WireRequest):
    method: ClassVar[str] = "COVERAGE_COUNTS"
    path: str


class FindRefsRequest(WireRequest):
    method: ClassVar[str] = "FIND_REFS"
    action: FindRefsAction


class DumpSymbolInfoRequest(WireRequest):
    method: ClassVar[str] = "DUMP_SYMBOL_INFO"
    files: List[str]


class DumpAiInfoRequest(WireRequest):
    method: ClassVar[str] = "DUMP_AI_INFO"
    files: List[str]


class RefactorRequest(WireRequest):
    method: ClassVar[str] = "REFACTOR"
    action: RefactorAction


class IdentifyFunctionRequest(WireRequest):
    method: ClassVar[str] = "IDENTIFY_FUNCTION"
    content: str
    line: int
    char: int


class InferTypeRequest(WireRequest):
    method: ClassVar[str] = "INFER_TYPE"
    file_input: FileInput
    line: int
    char: int


class ArgumentInfoRequest(WireRequest):
    method: ClassVar[str] = "ARGUMENT_INFO"
    content: str
    line: int
    char: int


class AutocompleteRequest(WireRequest):
    method: ClassVar[str] = "AUTOCOMPLETE"
    content: str


class OutlineRequest(WireRequest):
    method: ClassVar[str] = "OUTLINE"
    content: str


class MethodJumpRequest(WireRequest):
    method: ClassVar[str] = "METHOD_JUMP"
    class_name: str
    find_children: bool


class StatusRequest(WireRequest):
    method: ClassVar[str] = "STATUS"


class SearchRequest(WireRequest):
    method: ClassVar[str] = "SEARCH"
    query: str
    search_type: str = ""


class LintRequest(WireRequest):
    method: ClassVar[str] = "LINT"
    files: List[str]


class LintAllRequest(WireRequest):
    method: ClassVar[str] = "LINT_ALL"
    code: int


class CreateCheckpointRequest(WireRequest):
    method: ClassVar[str] = "CREATE_CHECKPOINT"
    label: str


class RetrieveCheckpointRequest(WireRequest):
    method: ClassVar[str] = "RETRIEVE_CHECKPOINT"
    label: str


class DeleteCheckpointRequest(WireRequest):
    method: ClassVar[str] = "DELETE_CHECKPOINT"
    label: str


class StatsRequest(WireRequest):
    method: ClassVar[str] = "STATS"


class FindLvarRefsRequest(WireRequest):
    method: ClassVar[str] = "FIND_LVAR_REFS"
    content: str
    line: int
    char: int


class FormatRequest(WireRequest):
    method: ClassVar[str] = "FORMAT"
    content: str
    start: int
    end: int


Request = Union[
    ListFilesRequest,
    ListModesRequest,
    ShowRequest,
    CoverageLevelsRequest,
    CoverageCountsRequest,
    FindRefsRequest,
    DumpSymbolInfoRequest,
    DumpAiInfoRequest,
    RefactorRequest,
    IdentifyFunctionRequest,
    InferTypeRequest,
    ArgumentInfoRequest,
    AutocompleteRequest,
    OutlineRequest,
    MethodJumpRequest,
    StatusRequest,
    SearchRequest,
    LintRequest,
    LintAllRequest,
    CreateCheckpointRequest,
    RetrieveCheckpointRequest,
    DeleteCheckpointRequest,
    StatsRequest,
    FindLvarRefsRequest,
    FormatRequest,
]


# Responses the client interprets itself. Everything else is handed to the
# output sink as a plain JSON value.


class ErrorMessageDTO(BaseModel):
    path: str
    line: int
    start: int
    end: int
    message: str


class StatusErrorDTO(BaseModel):
    messages: List[ErrorMessageDTO]


class IdentifiedSymbolDTO(BaseModel):
    name: str
    full_name: Optional[str] = None


STATUS_RESPONSE: TypeAdapter[List[StatusErrorDTO]] = TypeAdapter(List[StatusErrorDTO])
RETRIEVE_CHECKPOINT_RESPONSE: TypeAdapter[Optional[List[str]]] = TypeAdapter(
    Optional[List[str]]
)
DELETE_CHECKPOINT_RESPONSE: TypeAdapter[bool] = TypeAdapter(StrictBool)
IDENTIFY_FUNCTION_RESPONSE: TypeAdapter[Optional[IdentifiedSymbolDTO]] = TypeAdapter(
    Optional[IdentifiedSymbolDTO]
)
