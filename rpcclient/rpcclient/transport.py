"""HTTP transport for the client.

Anything with ``send(payload, headers) -> decoded reply`` can stand in
for ``HttpTransport``; tests use that to skip the network.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Protocol

import httpx
from wire.errors import (
    AccessDeniedError,
    ConnectionFailureError,
    ParseError,
    ServerError,
)

log = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
    "Connection": "close",
}


class Transport(Protocol):
    def send(self, payload: str, headers: Mapping[str, str] | None = None) -> Any: ...


class HttpTransport:
    """POSTs serialised payloads with ``httpx.Client``.

    Parameters
    ----------
    url : str
        Full endpoint URL, e.g. ``http://127.0.0.1:8100/rpc``.
    timeout : float
        Request timeout in seconds.
    headers : mapping
        Sent with every request, on top of ``DEFAULT_HEADERS``.
    verify : bool | str
        TLS verification flag or CA bundle path, passed to httpx.
    client : httpx.Client
        Pre-built client to use instead of creating one.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 5.0,
        headers: Mapping[str, str] | None = None,
        verify: bool | str = True,
        client: httpx.Client | None = None,
    ) -> None:
        self.url = url
        self.headers = {**DEFAULT_HEADERS, **(headers or {})}
        self.auth: tuple[str, str] | None = None
        self._client = client or httpx.Client(timeout=httpx.Timeout(timeout), verify=verify)

    # -- Lifecycle -----------------------------------------------------

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpTransport":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # -- Configuration -------------------------------------------------

    def with_credentials(self, username: str, password: str) -> "HttpTransport":
        self.auth = (username, password)
        return self

    # -- Send ----------------------------------------------------------

    def send(self, payload: str, headers: Mapping[str, str] | None = None) -> Any:
        """POST *payload* and return the decoded reply (``None`` if empty)."""
        try:
            resp = self._client.post(
                self.url,
                content=payload.encode("utf-8"),
                headers={**self.headers, **(headers or {})},
                auth=self.auth,
            )
        except httpx.TransportError as exc:
            raise ConnectionFailureError(f"Unable to establish a connection: {exc}") from exc

        self._raise_for_status(resp)

        if not resp.content.strip():
            return None
        try:
            return resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ParseError("Malformed payload", data=str(exc)) from exc

    @staticmethod
    def _raise_for_status(resp: httpx.Response) -> None:
        if resp.status_code in (401, 403):
            raise AccessDeniedError(f"Access denied (HTTP {resp.status_code})")
        if resp.status_code == 404:
            raise ConnectionFailureError(f"Endpoint not found: {resp.request.url}")
        if resp.status_code >= 500:
            raise ServerError(f"Server error (HTTP {resp.status_code})")
