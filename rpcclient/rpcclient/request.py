"""Outgoing request construction.  No I/O."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from wire.jsonrpc import JsonRpcRequest, RequestId, new_request_id


def build_request(
    procedure: str,
    params: Sequence[Any] | Mapping[str, Any] | None = None,
    attributes: Mapping[str, Any] | None = None,
    request_id: RequestId = None,
    notification: bool = False,
) -> JsonRpcRequest:
    """Assemble one request envelope.

    A mapping in *params* is sent as named arguments, any other sequence as
    positional ones.  *attributes* become extra top-level members but never
    replace ``jsonrpc``, ``method``, ``params`` or ``id``.  Without an
    explicit *request_id* a fresh one is generated, unless the call is a
    *notification*, which carries no id at all.
    """
    if isinstance(params, Mapping):
        body: list[Any] | dict[str, Any] | None = dict(params)
    elif params is None:
        body = None
    elif isinstance(params, (str, bytes)):
        raise TypeError("params must be a sequence or a mapping, not a string")
    else:
        body = list(params)

    if notification:
        request_id = None
    elif request_id is None:
        request_id = new_request_id()

    return JsonRpcRequest(
        method=procedure,
        params=body,
        id=request_id,
        attributes=dict(attributes or {}),
    )
