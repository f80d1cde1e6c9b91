"""Single and batch request processing.

``RequestParser`` turns one decoded envelope into at most one response;
``BatchRequestParser`` runs it once per batch element.  Neither touches
bytes: decoding and encoding belong to ``Server``.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from wire.errors import JsonRpcException
from wire.jsonrpc import JsonRpcRequest, JsonRpcResponse
from wire.validator import validate_rpc_format

from rpcserver.dispatcher import Registry
from rpcserver.logger import NullRequestLogger, RequestLogger
from rpcserver.middleware import AuthContext, MiddlewareChain
from rpcserver.response import ResponseBuilder

log = logging.getLogger(__name__)


class RequestParser:
    """Validate → middleware → dispatch → envelope, for one request.

    Exceptions whose class is listed in *local_exceptions* are re-raised
    untouched instead of being reported to the caller.  They are still
    recorded by the request logger, with no response.
    """

    def __init__(
        self,
        registry: Registry,
        middleware: MiddlewareChain | None = None,
        responses: ResponseBuilder | None = None,
        request_logger: RequestLogger | None = None,
        local_exceptions: tuple[type[BaseException], ...] = (),
    ) -> None:
        self.registry = registry
        self.middleware = middleware or MiddlewareChain()
        self.responses = responses or ResponseBuilder()
        self.request_logger = request_logger or NullRequestLogger()
        self.local_exceptions = local_exceptions

    def parse(
        self,
        payload: Any,
        auth: AuthContext | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> JsonRpcResponse | None:
        """Process one envelope.  Returns ``None`` for notifications."""
        auth = auth or AuthContext()
        started = time.perf_counter()
        request: JsonRpcRequest | None = None
        response: JsonRpcResponse | None = None

        try:
            validate_rpc_format(payload)
            request = JsonRpcRequest.from_dict(payload)
            self.middleware.run(auth, request.method, request.params)
            result = self.registry.dispatch(request.method, request.params)
            if not request.is_notification:
                response = self.responses.success(request.id, result)
        except Exception as exc:
            if isinstance(exc, self.local_exceptions):
                self._report(payload, request, None, time.perf_counter() - started, metadata)
                raise
            response = self._handle_exception(request, exc)

        self._report(payload, request, response, time.perf_counter() - started, metadata)
        return response

    def _handle_exception(
        self, request: JsonRpcRequest | None, exc: Exception
    ) -> JsonRpcResponse | None:
        if request is None:
            # the envelope itself is broken, so its id cannot be trusted
            return self.responses.failure(None, exc)

        if not isinstance(exc, JsonRpcException):
            log.exception("procedure error for %s", request.method)

        if request.is_notification:
            error = self.responses.error_for(exc)
            log.warning(
                "notification %s failed: [%s] %s", request.method, error.code, error.message
            )
            return None

        return self.responses.failure(request.id, exc)

    def _report(
        self,
        payload: Any,
        request: JsonRpcRequest | None,
        response: JsonRpcResponse | None,
        elapsed: float,
        metadata: dict[str, Any] | None,
    ) -> None:
        if request is not None:
            req_id, method, params = request.id, request.method, request.params
        elif isinstance(payload, dict):
            req_id, method, params = payload.get("id"), payload.get("method"), payload.get("params")
        else:
            req_id, method, params = None, None, None
        try:
            self.request_logger.log(
                req_id,
                method,
                params,
                response.to_dict() if response is not None else None,
                elapsed,
                metadata or {},
            )
        except Exception:
            log.warning("request logger failed for %s(id=%s)", method, req_id, exc_info=True)


class BatchRequestParser:
    """Runs every batch element through a ``RequestParser`` independently."""

    def __init__(self, parser: RequestParser) -> None:
        self.parser = parser

    def parse(
        self,
        payload: list[Any],
        auth: AuthContext | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> list[JsonRpcResponse]:
        """Return responses in input order; notifications contribute nothing."""
        responses: list[JsonRpcResponse] = []
        for item in payload:
            response = self.parser.parse(item, auth, metadata)
            if response is not None:
                responses.append(response)
        return responses
