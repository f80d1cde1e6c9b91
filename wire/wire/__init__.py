"""wire — JSON-RPC 2.0 wire-format models, errors and validation."""

from wire.errors import (
    AccessDeniedError,
    AuthenticationFailureError,
    ConnectionFailureError,
    InvalidArgumentsError,
    InvalidRequestError,
    JsonRpcException,
    ParseError,
    ProcedureNotFoundError,
    ResponseError,
    ServerError,
    error_for_code,
)
from wire.jsonrpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
)

__all__ = [
    "JsonRpcRequest",
    "JsonRpcResponse",
    "JsonRpcError",
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    "JsonRpcException",
    "ParseError",
    "InvalidRequestError",
    "ProcedureNotFoundError",
    "InvalidArgumentsError",
    "ResponseError",
    "AccessDeniedError",
    "AuthenticationFailureError",
    "ConnectionFailureError",
    "ServerError",
    "error_for_code",
]
