"""Response envelopes and exception → error-object mapping."""

from __future__ import annotations

import json
import logging

from wire.errors import (
    AccessDeniedError,
    AuthenticationFailureError,
    JsonRpcException,
)
from wire.jsonrpc import INTERNAL_ERROR, JsonRpcError, JsonRpcResponse, RequestId

log = logging.getLogger(__name__)

WWW_AUTHENTICATE = 'Basic realm="JsonRPC"'


class ResponseBuilder:
    """Builds success and error envelopes.

    Parameters
    ----------
    default_code : int
        Code given to exceptions that are not ``JsonRpcException`` and
        carry no integer ``code`` attribute of their own.
    diagnostics : logging.Logger | None
        Receives a traceback for every such unexpected exception.
    """

    def __init__(
        self,
        default_code: int = INTERNAL_ERROR,
        diagnostics: logging.Logger | None = None,
    ) -> None:
        self.default_code = default_code
        self.diagnostics = diagnostics

    # -- Envelopes -----------------------------------------------------
    def success(self, req_id: RequestId, result) -> JsonRpcResponse:
        return JsonRpcResponse.success(req_id, result)

    def failure(self, req_id: RequestId, exc: Exception) -> JsonRpcResponse:
        return JsonRpcResponse(id=req_id, error=self.error_for(exc))

    def error_for(self, exc: Exception) -> JsonRpcError:
        if isinstance(exc, JsonRpcException):
            return exc.to_error()
        if self.diagnostics is not None:
            self.diagnostics.error("unhandled procedure error: %s", exc, exc_info=exc)
        code = getattr(exc, "code", None)
        if not isinstance(code, int) or isinstance(code, bool):
            code = self.default_code
        return JsonRpcError(code=code, message=str(exc) or type(exc).__name__)

    # -- Serialisation -------------------------------------------------
    def encode(self, resp: JsonRpcResponse) -> str:
        """Serialise *resp*; an unencodable result becomes an -32603 error."""
        try:
            return json.dumps(resp.to_dict())
        except (TypeError, ValueError) as exc:
            log.warning("unable to encode response for id=%s: %s", resp.id, exc)
            fallback = JsonRpcResponse.fail(
                resp.id, INTERNAL_ERROR, "Unable to encode response", str(exc)
            )
            return json.dumps(fallback.to_dict())

    # -- HTTP mapping --------------------------------------------------
    @staticmethod
    def status_for(exc: Exception | None) -> int:
        if isinstance(exc, AuthenticationFailureError):
            return 401
        if isinstance(exc, AccessDeniedError):
            return 403
        return 200

    @staticmethod
    def headers_for(exc: Exception | None) -> dict[str, str]:
        if isinstance(exc, AuthenticationFailureError):
            return {"WWW-Authenticate": WWW_AUTHENTICATE}
        return {}
