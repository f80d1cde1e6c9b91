"""JSON-RPC error taxonomy.

Every protocol-level failure is a ``JsonRpcException`` carrying the numeric
``code`` it is reported with.  The server turns these into error objects
with ``to_error()``; the client turns error objects back into exceptions
with ``error_for_code()``.
"""

from __future__ import annotations

from typing import Any

from wire.jsonrpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    JsonRpcError,
)


class JsonRpcException(Exception):
    """Base class for all protocol errors."""

    code: int = INTERNAL_ERROR
    default_message: str = "Internal error"

    def __init__(self, message: str | None = None, data: Any = None) -> None:
        self.message = message or self.default_message
        self.data = data
        super().__init__(self.message)

    def to_error(self) -> JsonRpcError:
        return JsonRpcError(code=self.code, message=self.message, data=self.data)


class ParseError(JsonRpcException):
    """The payload was not valid JSON (or not a JSON object/array)."""

    code = PARSE_ERROR
    default_message = "Parse error"


class InvalidRequestError(JsonRpcException):
    """The payload decoded fine but is not a JSON-RPC 2.0 envelope."""

    code = INVALID_REQUEST
    default_message = "Invalid Request"


class ProcedureNotFoundError(JsonRpcException):
    """No registry entry matches the method name."""

    code = METHOD_NOT_FOUND
    default_message = "Method not found"


class InvalidArgumentsError(JsonRpcException):
    """Parameters could not be bound to the procedure's signature."""

    code = INVALID_PARAMS
    default_message = "Invalid params"


class ResponseError(JsonRpcException):
    """Application error with an arbitrary code, message and data."""

    def __init__(self, message: str, code: int = INTERNAL_ERROR, data: Any = None) -> None:
        self.code = code
        super().__init__(message, data)


# ── Gate / transport errors (never sent as error objects) ───────────


class AccessDeniedError(JsonRpcException):
    """Remote host or user is not allowed (HTTP 403)."""

    default_message = "Forbidden"


class AuthenticationFailureError(JsonRpcException):
    """Credentials are missing or wrong (HTTP 401)."""

    default_message = "Unauthorized"


class ConnectionFailureError(JsonRpcException):
    """The transport could not reach the server."""

    default_message = "Unable to establish a connection"


class ServerError(JsonRpcException):
    """The server answered with an HTTP 5xx status."""

    default_message = "Server error"


# ── Code → exception mapping (client side) ──────────────────────────

_PREFIXED: dict[int, tuple[type[JsonRpcException], str]] = {
    PARSE_ERROR: (ParseError, "Parse error"),
    INVALID_REQUEST: (InvalidRequestError, "Invalid Request"),
    METHOD_NOT_FOUND: (ProcedureNotFoundError, "Procedure not found"),
    INVALID_PARAMS: (InvalidArgumentsError, "Invalid arguments"),
}


def error_for_code(code: int, message: str = "", data: Any = None) -> JsonRpcException:
    """Return the exception an error object with *code* stands for.

    The four reserved codes map to their own kinds regardless of the
    message text; everything else becomes a ``ResponseError``.
    """
    if code in _PREFIXED:
        cls, prefix = _PREFIXED[code]
        return cls(f"{prefix}: {message}", data)
    return ResponseError(message, code, data)
