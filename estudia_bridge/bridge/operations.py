"""Declarative table of the bridge operations.

Each `OperationDescriptor` fully describes one backend tool: which parameters
it takes and how they are checked, how the tool arguments are shaped, which
metadata goes into a successful envelope, which hint accompanies a failure,
and which request paths route to it. The adapter runs one generic validated
call routine over this table; no operation has its own control flow.

The table is built at import time and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from .envelope import preview

MAX_SEARCH_LIMIT = 50
DEFAULT_SEARCH_LIMIT = 5
RESOURCE_TYPES = ("pdf", "ppt")


class FieldKind(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    ENUM = "enum"
    LIST = "list"
    ANY = "any"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    kind: FieldKind = FieldKind.STRING
    required: bool = False
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    choices: Tuple[str, ...] = ()
    default: Any = None
    # send an explicit null to the tool when the caller omits the field
    null_when_absent: bool = False
    # an explicit null counts as an invalid value rather than an omission
    reject_null: bool = False
    hint: Optional[str] = None
    invalid_hint: Optional[str] = None
    usage: str = ""

    def describe(self) -> str:
        """Short human description for the info page, e.g. ``string (required)``."""
        if self.usage:
            return self.usage
        kind = "array" if self.kind is FieldKind.LIST else ("string" if self.kind is FieldKind.ENUM else self.kind.value)
        return f"{kind} ({'required' if self.required else 'optional'})"


MetadataBuilder = Callable[[Mapping[str, Any]], Dict[str, Any]]


@dataclass(frozen=True)
class OperationDescriptor:
    key: str
    tool_name: str
    fields: Tuple[FieldSpec, ...]
    failure_hint: str
    routes: Tuple[str, ...]
    description: str = ""
    nest_under: Optional[str] = None
    metadata: Optional[MetadataBuilder] = None
    http_method: str = "POST"
    legacy: bool = False

    @property
    def path(self) -> str:
        return self.routes[0]

    @property
    def required(self) -> list[str]:
        return [f.name for f in self.fields if f.required]

    @property
    def optional(self) -> list[str]:
        return [f.name for f in self.fields if not f.required]

    def get_field(self, name: str) -> FieldSpec:
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(name)

    def build_arguments(self, values: Mapping[str, Any]) -> Dict[str, Any]:
        """Shape validated values into the tool's argument object.

        Absent optional fields are dropped, except those flagged
        `null_when_absent`. Tools with `nest_under` receive
        ``{nest_under: {...}}`` instead of the flat object.
        """
        args: Dict[str, Any] = {}
        for f in self.fields:
            value = values.get(f.name)
            if value is None:
                if f.null_when_absent:
                    args[f.name] = None
                continue
            args[f.name] = value
        if self.nest_under:
            return {self.nest_under: args}
        return args

    def build_metadata(self, values: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        return self.metadata(values) if self.metadata else None

    def usage(self) -> Dict[str, Any]:
        return {
            "method": self.http_method,
            "path": self.path,
            "body": {f.name: f.describe() for f in self.fields},
        }


# ---------------------------------------------------------------------------
# shared field specs
# ---------------------------------------------------------------------------


def _classroom_id(required: bool = True, **kwargs: Any) -> FieldSpec:
    return FieldSpec(
        "classroom_id",
        required=required,
        hint="The classroom ID is required",
        usage="string (required, classroom UUID)" if required else "string (optional, classroom UUID)",
        **kwargs,
    )


def _limit() -> FieldSpec:
    return FieldSpec(
        "limit",
        FieldKind.INTEGER,
        minimum=1,
        maximum=MAX_SEARCH_LIMIT,
        default=DEFAULT_SEARCH_LIMIT,
        invalid_hint="Use a numeric value to limit the number of results",
        usage=f"number (optional, 1-{MAX_SEARCH_LIMIT}, default: {DEFAULT_SEARCH_LIMIT})",
    )


def _threshold(**overrides: Any) -> FieldSpec:
    return FieldSpec(
        "threshold",
        FieldKind.NUMBER,
        minimum=0,
        maximum=1,
        invalid_hint="The threshold is the minimum similarity (0 = any similarity, 1 = identical)",
        usage="number (optional, 0-1)",
        **overrides,
    )


def _or(value: Any, fallback: Any) -> Any:
    return fallback if value is None else value


# ---------------------------------------------------------------------------
# metadata builders
# ---------------------------------------------------------------------------


def _text_metadata(v: Mapping[str, Any]) -> Dict[str, Any]:
    return {"text_length": len(v["text"]), "text_preview": preview(v["text"])}


def _document_metadata(v: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "text_length": len(v["text"]),
        "classroom_id": v.get("classroom_id"),
        "text_preview": preview(v["text"]),
    }


def _document_search_metadata(v: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "query_length": len(v["query_text"]),
        "query_preview": preview(v["query_text"]),
        "classroom_id": v.get("classroom_id"),
        "limit_used": v["limit"],
        "threshold_used": _or(v.get("threshold"), "default"),
    }


def _chunk_metadata(v: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "classroom_document_id": v["classroom_document_id"],
        "chunk_index": v["chunk_index"],
        "content_length": len(v["content"]),
        "token_count": _or(v.get("token_count"), "auto"),
    }


def _chunk_search_metadata(v: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "query_text": v["query_text"],
        "classroom_id": v["classroom_id"],
        "limit": v["limit"],
        "threshold": _or(v.get("threshold"), "default"),
    }


def _chat_metadata(v: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "message_length": len(v["message"]),
        "classroom_id": v["classroom_id"],
        "user_id": _or(v.get("user_id"), "anonymous"),
        "session_id": _or(v.get("session_id"), "none"),
    }


def _create_embedding_metadata(v: Mapping[str, Any]) -> Dict[str, Any]:
    return {"text_length": len(v["text"]), "classroom_id": v["classroom_id"]}


def _professor_metadata(v: Mapping[str, Any]) -> Dict[str, Any]:
    return {"question_length": len(v["question"]), "classroom_id": v["classroom_id"]}


def _resources_metadata(v: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "classroom_id": v["classroom_id"],
        "resource_type": v["resource_type"],
        "user_id": v["user_id"],
        "topic": v.get("topic"),
    }


def _user_context_metadata(v: Mapping[str, Any]) -> Dict[str, Any]:
    return {"user_id": v["user_id"], "session_id": v["session_id"]}


# ---------------------------------------------------------------------------
# the table
# ---------------------------------------------------------------------------

_DESCRIPTORS: Tuple[OperationDescriptor, ...] = (
    OperationDescriptor(
        key="fiscal-advice",
        tool_name="get_fiscal_advice",
        nest_under="request",
        routes=("/fiscal-advice", "/fiscaladvice"),
        description="Fiscal advice for a business activity",
        legacy=True,
        fields=(
            FieldSpec("actividad", required=True, hint="Describe the business activity to get fiscal advice"),
            FieldSpec("ingresos_anuales", FieldKind.ANY, usage="number (optional)"),
            FieldSpec("estado", FieldKind.ANY, usage="string (optional)"),
            FieldSpec("regimen_actual", FieldKind.ANY, usage="string (optional)"),
            FieldSpec("tiene_rfc", FieldKind.ANY, usage="boolean (optional)"),
            FieldSpec("contexto_adicional", FieldKind.ANY, usage="string (optional)"),
        ),
        failure_hint="Check that the MCP server is running and that the fiscal advice tool is configured",
    ),
    OperationDescriptor(
        key="store-document-chunk",
        tool_name="store_document_chunk",
        routes=("/store-document-chunk", "/store-chunk"),
        description="Store one chunk of a classroom document",
        metadata=_chunk_metadata,
        fields=(
            FieldSpec(
                "classroom_document_id",
                required=True,
                hint="The document ID is required",
                usage="string (required, document UUID)",
            ),
            FieldSpec(
                "chunk_index",
                FieldKind.INTEGER,
                required=True,
                minimum=0,
                hint="The chunk index is required (0, 1, 2, ...)",
                invalid_hint="The chunk index must be a non-negative integer (0, 1, 2, ...)",
                usage="number (required, chunk index: 0, 1, 2...)",
            ),
            FieldSpec(
                "content",
                required=True,
                hint="The chunk content cannot be empty",
                usage="string (required, chunk content)",
            ),
            FieldSpec(
                "token_count",
                FieldKind.INTEGER,
                minimum=0,
                invalid_hint="The token count must be a non-negative integer",
                usage="number (optional, number of tokens)",
            ),
        ),
        failure_hint="Check that the document exists and that Supabase is configured correctly",
    ),
    OperationDescriptor(
        key="store-document",
        tool_name="store_document",
        routes=("/store-document",),
        description="Store a document and its embedding",
        metadata=_document_metadata,
        fields=(
            FieldSpec("text", required=True, hint="The document text cannot be empty"),
            _classroom_id(required=False, null_when_absent=True),
        ),
        failure_hint="Check that the MCP server is running and that Supabase is configured correctly",
    ),
    OperationDescriptor(
        key="search-chunks",
        tool_name="search_similar_chunks",
        routes=("/search-chunks", "/chunks"),
        description="Semantic search over the chunks of one classroom",
        metadata=_chunk_search_metadata,
        fields=(
            FieldSpec("query_text", required=True, hint="The query text cannot be empty"),
            _classroom_id(),
            _limit(),
            _threshold(),
        ),
        failure_hint="Check that the classroom exists and that the match_classroom_chunks RPC function is created",
    ),
    OperationDescriptor(
        key="search-similar-documents",
        tool_name="search_similar_documents",
        routes=("/search-similar-documents", "/search-documents"),
        description="Semantic search over stored documents, optionally within one classroom",
        metadata=_document_search_metadata,
        fields=(
            FieldSpec("query_text", required=True, hint="The query text cannot be empty"),
            _classroom_id(required=False),
            _limit(),
            _threshold(reject_null=True),
        ),
        failure_hint="Check that the MCP server is running and that the Supabase functions are configured",
    ),
    OperationDescriptor(
        key="create-embedding",
        tool_name="create_embedding",
        routes=("/create-embedding",),
        description="Create and store an embedding for a classroom",
        metadata=_create_embedding_metadata,
        fields=(
            FieldSpec("text", required=True, hint="The text cannot be empty"),
            _classroom_id(),
        ),
        failure_hint="Check the Gemini and Supabase configuration",
    ),
    OperationDescriptor(
        key="generate-embedding",
        tool_name="generate_embedding",
        routes=("/generate-embedding", "/embedding"),
        description="Generate an embedding vector for a text",
        metadata=_text_metadata,
        fields=(FieldSpec("text", required=True, hint="The text cannot be empty to generate the embedding"),),
        failure_hint="Check that the MCP server is running and that the Gemini API is configured correctly",
    ),
    OperationDescriptor(
        key="chat-classroom",
        tool_name="chat_with_classroom_assistant",
        nest_under="request",
        routes=("/chat-classroom",),
        description="Chat with the classroom assistant",
        metadata=_chat_metadata,
        fields=(
            FieldSpec(
                "message",
                required=True,
                hint="The user message cannot be empty",
                usage="string (required, user message)",
            ),
            _classroom_id(),
            FieldSpec("user_id", null_when_absent=True, usage="string (optional, user UUID)"),
            FieldSpec("session_id", null_when_absent=True, usage="string (optional, session ID)"),
        ),
        failure_hint="Check that the classroom exists and has documents loaded",
    ),
    OperationDescriptor(
        key="classroom-info",
        tool_name="get_classroom_info",
        routes=("/classroom-info", "/classroom"),
        description="Classroom details",
        http_method="GET/POST",
        fields=(_classroom_id(),),
        failure_hint="Check that the classroom exists",
    ),
    OperationDescriptor(
        key="professor-assistant",
        tool_name="professor_assistant",
        routes=("/professor-assistant", "/professor"),
        description="Ask the professor assistant a question about the classroom material",
        metadata=_professor_metadata,
        fields=(
            FieldSpec(
                "question",
                required=True,
                hint="The question cannot be empty",
                usage="string (required, student question)",
            ),
            _classroom_id(),
        ),
        failure_hint="Check that the classroom has documents loaded",
    ),
    OperationDescriptor(
        key="generate-resources",
        tool_name="generate_resources",
        routes=("/generate-resources", "/resources"),
        description="Generate a PDF or PPT study resource from the classroom documents",
        metadata=_resources_metadata,
        fields=(
            _classroom_id(),
            FieldSpec(
                "resource_type",
                FieldKind.ENUM,
                required=True,
                choices=RESOURCE_TYPES,
                hint='The resource type is required: "pdf" or "ppt"',
                invalid_hint='The resource type must be "pdf" or "ppt"',
                usage='string (required, "pdf" or "ppt")',
            ),
            FieldSpec("user_id", required=True, hint="The user ID is required", usage="string (required, user UUID)"),
            FieldSpec("topic", usage="string (optional, specific topic for the resource)"),
            FieldSpec("source_document_ids", FieldKind.LIST, usage="array (optional, UUIDs of specific documents)"),
        ),
        failure_hint=(
            "Check that the classroom has documents loaded and that the generation dependencies are installed"
        ),
    ),
    OperationDescriptor(
        key="analyze-user-context",
        tool_name="analyze_and_update_user_context",
        routes=("/analyze-user-context", "/analyze-context"),
        description="Analyze a study session and update the user's context",
        metadata=_user_context_metadata,
        fields=(
            FieldSpec("user_id", required=True, hint="The user ID is required", usage="string (required, user UUID)"),
            FieldSpec(
                "session_id",
                required=True,
                hint="The session ID is required",
                usage="string (required, session UUID)",
            ),
        ),
        failure_hint="Check that the user and the session exist",
    ),
)

# Route matching is by substring, in this order: specific aliases first
# (/store-document-chunk before /store-document, /create-embedding before /embedding).
ROUTE_ORDER: Tuple[str, ...] = tuple(d.key for d in _DESCRIPTORS)

OPERATIONS: Mapping[str, OperationDescriptor] = MappingProxyType({d.key: d for d in _DESCRIPTORS})


def get_operation(key: str) -> OperationDescriptor:
    return OPERATIONS[key]
