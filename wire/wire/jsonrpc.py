"""JSON-RPC 2.0 wire-format models.

Pure data — no I/O, no business logic.  Both the server and the client
import these for serialisation only.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from typing import Any

# ── Standard error codes (JSON-RPC 2.0 §5.1) ────────────────────────
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

VERSION = "2.0"

# Top-level request keys that request attributes may not overwrite.
RESERVED_KEYS = frozenset({"jsonrpc", "method", "params", "id"})

RequestId = str | int | None
Params = list[Any] | dict[str, Any]


def new_request_id() -> str:
    """Process-unique request id."""
    return uuid.uuid4().hex


# ── Models ───────────────────────────────────────────────────────────
@dataclass(slots=True)
class JsonRpcError:
    """JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            d["data"] = self.data
        return d


@dataclass(slots=True)
class JsonRpcRequest:
    """JSON-RPC 2.0 request envelope.

    ``params`` is either a list (positional) or a dict (named).  A request
    whose ``id`` is ``None`` is a notification and is never answered.
    ``attributes`` are extra top-level members sent along with the call.
    """

    method: str
    params: Params | None = None
    id: RequestId = None
    attributes: dict[str, Any] = field(default_factory=dict)
    jsonrpc: str = VERSION

    @property
    def is_notification(self) -> bool:
        return self.id is None

    # -- Convenience ---------------------------------------------------
    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            k: v for k, v in self.attributes.items() if k not in RESERVED_KEYS
        }
        d["jsonrpc"] = self.jsonrpc
        d["method"] = self.method
        if self.params:
            d["params"] = self.params
        if self.id is not None:
            d["id"] = self.id
        return d

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "JsonRpcRequest":
        """Build a request from an envelope that passed ``validate_rpc_format``."""
        extra = {k: v for k, v in raw.items() if k not in RESERVED_KEYS}
        return cls(
            method=raw["method"],
            params=raw.get("params"),
            id=raw.get("id"),
            attributes=extra,
            jsonrpc=raw["jsonrpc"],
        )


@dataclass(slots=True)
class JsonRpcResponse:
    """Outbound JSON-RPC 2.0 response."""

    id: RequestId
    result: Any = None
    error: JsonRpcError | None = None
    jsonrpc: str = VERSION

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"jsonrpc": self.jsonrpc}
        if self.error is not None:
            d["error"] = self.error.to_dict()
        else:
            d["result"] = self.result
        d["id"] = self.id
        return d

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    # -- Factories -----------------------------------------------------
    @classmethod
    def success(cls, req_id: RequestId, result: Any) -> "JsonRpcResponse":
        return cls(id=req_id, result=result)

    @classmethod
    def fail(
        cls, req_id: RequestId, code: int, message: str, data: Any = None
    ) -> "JsonRpcResponse":
        return cls(
            id=req_id,
            error=JsonRpcError(code=code, message=message, data=data),
        )
