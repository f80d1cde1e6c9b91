"""Reply interpretation on the client side."""

from __future__ import annotations

from typing import Any

from wire.errors import JsonRpcException, error_for_code
from wire.validator import validate_json_format


class ResponseParser:
    """Turns a decoded reply into a result or a typed error.

    With ``return_exception=False`` (the default) an error reply raises the
    mapped exception.  With ``True`` the exception is returned instead, so a
    batch yields a list mixing results and exceptions.

    In raising mode a batch reply stops at its first error element, even
    though the server processed the other elements independently.
    """

    def __init__(self, return_exception: bool = False) -> None:
        self.return_exception = return_exception

    def parse(self, payload: Any) -> Any:
        validate_json_format(payload)

        if isinstance(payload, list):
            return [self.parse(item) for item in payload]

        error = payload.get("error")
        if isinstance(error, dict) and "code" in error:
            exc = self._exception_for(error)
            if self.return_exception:
                return exc
            raise exc

        return payload.get("result")

    @staticmethod
    def _exception_for(error: dict[str, Any]) -> JsonRpcException:
        return error_for_code(error["code"], error.get("message", ""), error.get("data"))
