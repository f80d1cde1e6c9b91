"""Envelope validation shared by the server and the client."""

from __future__ import annotations

import json
from typing import Any

from wire.errors import InvalidRequestError, ParseError
from wire.jsonrpc import VERSION


def decode(raw: bytes | str) -> Any:
    """Decode a raw body, raising ``ParseError`` when it is not JSON."""
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ParseError("Parse error", data=str(exc)) from exc


def validate_json_format(payload: Any) -> None:
    """A decoded payload must be a JSON object or a JSON array."""
    if not isinstance(payload, (dict, list)):
        raise ParseError("Malformed payload")


def validate_rpc_format(payload: Any) -> None:
    """Check the shape of a single request envelope."""
    if (
        not isinstance(payload, dict)
        or payload.get("jsonrpc") != VERSION
        or not isinstance(payload.get("method"), str)
        or not payload["method"]
        or not isinstance(payload.get("params", []), (list, dict))
        or not is_valid_id(payload.get("id"))
    ):
        raise InvalidRequestError("Invalid JSON RPC payload")


def is_valid_id(value: Any) -> bool:
    """Ids are strings, numbers or null."""
    return value is None or (
        isinstance(value, (str, int, float)) and not isinstance(value, bool)
    )


def is_batch(payload: Any) -> bool:
    """An array with at least one element is a batch; ``[]`` is not."""
    return isinstance(payload, list) and len(payload) > 0
