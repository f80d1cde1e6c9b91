"""Transport-independent JSON-RPC server.

``Server.execute(body, env)`` takes the raw request body plus a snapshot of
the HTTP environment and returns the ``Reply`` to send back.  The ASGI
endpoint in ``rpcserver.server`` is a thin wrapper around it.
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from wire.jsonrpc import INTERNAL_ERROR
from wire.validator import decode, is_batch, validate_json_format

from rpcserver.dispatcher import ProcedureFn, Registry
from rpcserver.logger import RequestLogger
from rpcserver.middleware import AuthContext, MiddlewareChain
from rpcserver.requests import BatchRequestParser, RequestParser
from rpcserver.response import ResponseBuilder
from rpcserver.validators import validate_host, validate_user

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Environment:
    """What the transport knows about the caller.

    Header names are matched case-insensitively.
    """

    remote_addr: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)

    def header(self, name: str) -> str | None:
        name = name.lower()
        for key, value in self.headers.items():
            if key.lower() == name:
                return value
        return None


@dataclass(slots=True)
class Reply:
    """Serialised response plus the HTTP status and headers to send.

    ``body`` is empty when nothing must be answered (notifications only).
    """

    body: str
    status_code: int = 200
    headers: dict[str, str] = field(default_factory=dict)


def _decode_credentials(value: str) -> AuthContext:
    try:
        decoded = base64.b64decode(value, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return AuthContext()
    username, sep, password = decoded.partition(":")
    if not sep:
        return AuthContext()
    return AuthContext(username, password)


class Server:
    """JSON-RPC 2.0 server.

    Parameters
    ----------
    registry : Registry
        Procedure bindings.  A fresh one is created when omitted.
    middleware : MiddlewareChain
        Pre-dispatch hooks.
    allowed_hosts : iterable of str
        Remote addresses allowed to call; empty allows all.
    users : mapping of str to str
        HTTP Basic users (name → password); empty disables the check.
    auth_header : str | None
        Alternative header carrying base64 ``user:password``.
    local_exceptions : iterable of exception classes
        Raised straight to the hosting process instead of being reported.
    request_logger : RequestLogger
        Receives one record per processed request.
    diagnostics : logging.Logger | None
        Receives unexpected procedure errors.
    """

    def __init__(
        self,
        registry: Registry | None = None,
        middleware: MiddlewareChain | None = None,
        *,
        allowed_hosts: Iterable[str] = (),
        users: Mapping[str, str] | None = None,
        auth_header: str | None = None,
        local_exceptions: Iterable[type[BaseException]] = (),
        request_logger: RequestLogger | None = None,
        diagnostics: logging.Logger | None = None,
        default_error_code: int = INTERNAL_ERROR,
    ) -> None:
        self.registry = registry or Registry()
        self.middleware = middleware or MiddlewareChain()
        self.allowed_hosts = frozenset(allowed_hosts)
        self.users = dict(users or {})
        self.auth_header = auth_header
        self.local_exceptions = tuple(local_exceptions)
        self.responses = ResponseBuilder(default_error_code, diagnostics)
        self.request_logger = request_logger

    # -- Setup shortcuts -----------------------------------------------
    def register(self, name: str, fn: ProcedureFn) -> "Server":
        self.registry.register(name, fn)
        return self

    def bind(self, name: str, owner: type | object, method: str | None = None) -> "Server":
        self.registry.bind(name, owner, method)
        return self

    def attach(self, instance: object) -> "Server":
        self.registry.attach(instance)
        return self

    def with_local_exception(self, exc_type: type[BaseException]) -> "Server":
        self.local_exceptions = (*self.local_exceptions, exc_type)
        return self

    # -- Credentials ---------------------------------------------------
    def credentials(self, env: Environment) -> AuthContext:
        """Username and password sent with the request, if any."""
        if self.auth_header:
            value = env.header(self.auth_header)
            if value:
                return _decode_credentials(value.strip())

        authorization = env.header("Authorization") or ""
        scheme, _, value = authorization.partition(" ")
        if scheme.lower() == "basic" and value:
            return _decode_credentials(value.strip())
        return AuthContext()

    # -- Entry point ---------------------------------------------------
    def execute(self, body: bytes | str, env: Environment | None = None) -> Reply:
        """Process a raw request body and return the reply to send."""
        env = env or Environment()
        parser = RequestParser(
            self.registry,
            self.middleware,
            self.responses,
            self.request_logger,
            self.local_exceptions,
        )

        try:
            payload = decode(body)
            validate_json_format(payload)
            validate_host(self.allowed_hosts, env.remote_addr)
            auth = self.credentials(env)
            validate_user(self.users, auth.username, auth.password)
            return self._parse(parser, payload, auth, env)
        except Exception as exc:
            if isinstance(exc, self.local_exceptions):
                raise
            log.info("rpc rejected: %s", exc)
            resp = self.responses.failure(None, exc)
            return Reply(
                self.responses.encode(resp),
                self.responses.status_for(exc),
                self.responses.headers_for(exc),
            )

    def _parse(
        self, parser: RequestParser, payload: Any, auth: AuthContext, env: Environment
    ) -> Reply:
        metadata = {"remote_addr": env.remote_addr, "batch": is_batch(payload)}

        if is_batch(payload):
            log.info("rpc ← batch of %d", len(payload))
            responses = BatchRequestParser(parser).parse(payload, auth, metadata)
            if not responses:
                return Reply("")
            return Reply("[" + ", ".join(self.responses.encode(r) for r in responses) + "]")

        if isinstance(payload, dict):
            log.info("rpc ← %s(id=%s)", payload.get("method"), payload.get("id"))
        resp = parser.parse(payload, auth, metadata)
        if resp is None:
            return Reply("")
        return Reply(self.responses.encode(resp))
