"""
Data models for the Assistant Cloner.

Provider payloads are parsed into these types at the client edge; everything
past the client works on the typed values only.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

TOOL_TYPES = ("function", "file_search", "code_interpreter")

# Keys the assistants API accepts on create/update
_PAYLOAD_FIELDS = (
    "name",
    "description",
    "instructions",
    "model",
    "temperature",
    "top_p",
    "response_format",
)


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class FunctionTool:
    """Function declaration of a ``function`` tool."""

    name: str
    description: Optional[str] = None
    parameters: Dict[str, Any] = field(default_factory=dict)
    strict: Optional[bool] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "FunctionTool":
        return cls(
            name=data["name"],
            description=data.get("description"),
            parameters=dict(data.get("parameters") or {}),
            strict=data.get("strict"),
        )

    def to_api(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name, "parameters": self.parameters}
        if self.description is not None:
            out["description"] = self.description
        if self.strict is not None:
            out["strict"] = self.strict
        return out


@dataclass(frozen=True)
class Tool:
    """One entry of an assistant's tool list."""

    type: str  # "function", "file_search" or "code_interpreter"
    function: Optional[FunctionTool] = None
    options: Dict[str, Any] = field(default_factory=dict)  # e.g. file_search settings

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Tool":
        tool_type = data["type"]
        if tool_type not in TOOL_TYPES:
            raise ValueError(f"Unknown tool type: {tool_type}")
        function = None
        if tool_type == "function":
            function = FunctionTool.from_api(data["function"])
        options = {k: v for k, v in data.items() if k not in ("type", "function")}
        return cls(type=tool_type, function=function, options=options)

    def to_api(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": self.type}
        if self.function is not None:
            out["function"] = self.function.to_api()
        out.update(self.options)
        return out


@dataclass(frozen=True)
class ToolResources:
    """Files and vector stores attached to an assistant's tools."""

    vector_store_ids: Tuple[str, ...] = ()
    file_ids: Tuple[str, ...] = ()  # code_interpreter files

    @classmethod
    def from_api(cls, data: Optional[Dict[str, Any]]) -> Optional["ToolResources"]:
        if not data:
            return None
        file_search = data.get("file_search") or {}
        code_interpreter = data.get("code_interpreter") or {}
        return cls(
            vector_store_ids=tuple(file_search.get("vector_store_ids") or ()),
            file_ids=tuple(code_interpreter.get("file_ids") or ()),
        )

    def to_api(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.vector_store_ids:
            out["file_search"] = {"vector_store_ids": list(self.vector_store_ids)}
        if self.file_ids:
            out["code_interpreter"] = {"file_ids": list(self.file_ids)}
        return out


@dataclass(frozen=True)
class AssistantSnapshot:
    """Provider-agnostic copy of one assistant definition."""

    id: Optional[str]
    name: str
    model: str
    instructions: str = ""
    description: Optional[str] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    response_format: Optional[Any] = None  # "auto" or a structured dict
    tools: Tuple[Tool, ...] = ()
    tool_resources: Optional[ToolResources] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "AssistantSnapshot":
        """
        Build a snapshot from an assistants API object (or an export entry).

        Raises:
            KeyError, TypeError, ValueError: If the payload is malformed
        """
        return cls(
            id=data.get("id"),
            name=data.get("name") or "",
            model=data["model"],
            instructions=data.get("instructions") or "",
            description=data.get("description"),
            temperature=data.get("temperature"),
            top_p=data.get("top_p"),
            response_format=data.get("response_format"),
            tools=tuple(Tool.from_api(t) for t in data.get("tools") or []),
            tool_resources=ToolResources.from_api(data.get("tool_resources")),
            metadata={str(k): str(v) for k, v in (data.get("metadata") or {}).items()},
        )

    @property
    def vector_store_ids(self) -> Tuple[str, ...]:
        return self.tool_resources.vector_store_ids if self.tool_resources else ()

    @property
    def code_interpreter_file_ids(self) -> Tuple[str, ...]:
        return self.tool_resources.file_ids if self.tool_resources else ()

    def to_payload(self) -> Dict[str, Any]:
        """
        Create/update body for this assistant.

        The id and tool_resources are never included: ids are assigned by the
        provider and tool resources reference scope-local files.
        """
        payload: Dict[str, Any] = {}
        for key in _PAYLOAD_FIELDS:
            value = getattr(self, key)
            if value is not None:
                payload[key] = value
        payload["tools"] = [t.to_api() for t in self.tools]
        payload["metadata"] = dict(self.metadata)
        return payload

    def to_dict(self) -> Dict[str, Any]:
        """Full serialisation, used for exports."""
        data = self.to_payload()
        data["id"] = self.id
        data["tool_resources"] = (
            self.tool_resources.to_api() if self.tool_resources else None
        )
        return data


@dataclass(frozen=True)
class FileObject:
    """Uploaded file as reported by the files API."""

    id: str
    filename: str
    bytes: int = 0
    purpose: str = "assistants"
    status: Optional[str] = None  # "uploaded", "processed" or "error"

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "FileObject":
        return cls(
            id=data["id"],
            filename=data["filename"],
            bytes=int(data.get("bytes") or 0),
            purpose=data.get("purpose") or "assistants",
            status=data.get("status"),
        )


@dataclass(frozen=True)
class VectorStoreFile:
    """Membership of a file in a vector store."""

    id: str  # same id as the underlying file
    vector_store_id: str
    status: Optional[str] = None  # "in_progress", "completed", "cancelled", "failed"

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "VectorStoreFile":
        return cls(
            id=data["id"],
            vector_store_id=data.get("vector_store_id") or "",
            status=data.get("status"),
        )


@dataclass(frozen=True)
class VectorStore:
    """Vector store grouping files for file_search."""

    id: str
    name: str = ""
    status: Optional[str] = None
    file_counts: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "VectorStore":
        return cls(
            id=data["id"],
            name=data.get("name") or "",
            status=data.get("status"),
            file_counts=dict(data.get("file_counts") or {}),
        )


@dataclass
class CloneOutcome:
    """Result of cloning (or planning) one source assistant."""

    src_id: str
    name: str
    status: str = "success"  # "success", "failed", "skipped"
    dst_id: Optional[str] = None
    operations: Dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None
    timestamp: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "src_id": self.src_id,
            "dst_id": self.dst_id,
            "name": self.name,
            "status": self.status,
            "operations": dict(self.operations),
            "error": self.error,
            "timestamp": self.timestamp,
        }


def count_statuses(outcomes: List[CloneOutcome]) -> Dict[str, int]:
    """Summary counts of a list of outcomes."""
    return {
        "total": len(outcomes),
        "success": sum(1 for o in outcomes if o.status == "success"),
        "failed": sum(1 for o in outcomes if o.status == "failed"),
        "skipped": sum(1 for o in outcomes if o.status == "skipped"),
    }
