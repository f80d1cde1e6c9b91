"""JSON-RPC 2.0 client.

* ``execute(procedure, params)`` → result (or typed error)
* ``notify(procedure, params)``  → fire and forget
* ``client.some.procedure(...)`` → attribute proxy for ``execute``
* ``batch()``                    → collect calls, ``send()`` them at once

Run directly for a quick demo against ``python -m rpcserver.server``::

    python -m rpcclient.client
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from wire.jsonrpc import JsonRpcRequest, RequestId

from rpcclient.request import build_request
from rpcclient.response import ResponseParser
from rpcclient.transport import HttpTransport, Transport

log = logging.getLogger(__name__)

ParamsArg = Sequence[Any] | Mapping[str, Any] | None


class _Procedure:
    """Callable stand-in for a remote procedure; dots nest."""

    def __init__(self, call, name: str) -> None:
        self._call = call
        self._name = name

    def __getattr__(self, name: str) -> "_Procedure":
        if name.startswith("_"):
            raise AttributeError(name)
        return _Procedure(self._call, f"{self._name}.{name}")

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self._call(self._name, args, kwargs)


class Client:
    """Synchronous JSON-RPC client.

    Parameters
    ----------
    url : str
        Server endpoint; ignored when *transport* is given.
    return_exception : bool
        Return error replies as exception objects instead of raising them.
    transport : Transport
        Anything with ``send(payload, headers)``; defaults to ``HttpTransport``.
    timeout : float
        Timeout for the default transport.

    Named-argument inference: when the proxy is called with exactly one
    positional argument and that argument is a mapping, it is sent as named
    params (``client.sum({"a": 1, "b": 2})``).  Keyword arguments are always
    named.  ``with_positional_arguments()`` turns the inference off, for
    procedures whose only parameter is itself an object.
    """

    def __init__(
        self,
        url: str = "",
        return_exception: bool = False,
        transport: Transport | None = None,
        timeout: float = 5.0,
    ) -> None:
        self.transport = transport or HttpTransport(url, timeout=timeout)
        self.return_exception = return_exception
        self.named_arguments = True

    # -- Lifecycle -----------------------------------------------------

    def close(self) -> None:
        close = getattr(self.transport, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # -- Configuration -------------------------------------------------

    def with_positional_arguments(self) -> "Client":
        self.named_arguments = False
        return self

    def authentication(self, username: str, password: str) -> "Client":
        """HTTP Basic credentials for every following call."""
        self.transport.with_credentials(username, password)  # type: ignore[attr-defined]
        return self

    @property
    def response_parser(self) -> ResponseParser:
        return ResponseParser(return_exception=self.return_exception)

    # -- Calls ---------------------------------------------------------

    def execute(
        self,
        procedure: str,
        params: ParamsArg = None,
        attributes: Mapping[str, Any] | None = None,
        request_id: RequestId = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Call *procedure* and return its result.

        Error replies raise (or, with ``return_exception``, return) the
        exception mapped from their code.
        """
        req = build_request(procedure, params, attributes, request_id)
        log.debug("rpc → %s(id=%s)", procedure, req.id)
        reply = self.transport.send(req.to_json(), headers)
        return self.response_parser.parse(reply)

    def notify(
        self,
        procedure: str,
        params: ParamsArg = None,
        attributes: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        """Send a notification; the server sends nothing back."""
        req = build_request(procedure, params, attributes, notification=True)
        log.debug("rpc → %s(notification)", procedure)
        self.transport.send(req.to_json(), headers)

    def batch(self) -> "Batch":
        return Batch(self)

    # -- Proxy ---------------------------------------------------------

    def params_from_call(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> ParamsArg:
        if kwargs:
            if args:
                raise TypeError("cannot mix positional and keyword arguments in one call")
            return kwargs
        if self.named_arguments and len(args) == 1 and isinstance(args[0], Mapping):
            return args[0]
        return list(args)

    def _call_proxy(self, name: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
        return self.execute(name, self.params_from_call(args, kwargs))

    def __getattr__(self, name: str) -> _Procedure:
        if name.startswith("_"):
            raise AttributeError(name)
        return _Procedure(self._call_proxy, name)


class Batch:
    """Calls collected for a single batch round trip.

    Usage::

        batch = client.batch()
        batch.sum(1, 2)
        batch.echo("hi")
        batch.notify("audit.touch")
        results = batch.send()   # [3, "hi"]
    """

    def __init__(self, client: Client) -> None:
        self._client = client
        self._requests: list[JsonRpcRequest] = []

    def __len__(self) -> int:
        return len(self._requests)

    def execute(
        self,
        procedure: str,
        params: ParamsArg = None,
        attributes: Mapping[str, Any] | None = None,
        request_id: RequestId = None,
    ) -> "Batch":
        self._requests.append(build_request(procedure, params, attributes, request_id))
        return self

    def notify(
        self,
        procedure: str,
        params: ParamsArg = None,
        attributes: Mapping[str, Any] | None = None,
    ) -> "Batch":
        self._requests.append(build_request(procedure, params, attributes, notification=True))
        return self

    def send(self, headers: Mapping[str, str] | None = None) -> list[Any]:
        """Send every collected call; results come back in call order."""
        if not self._requests:
            return []
        payload = "[" + ", ".join(req.to_json() for req in self._requests) + "]"
        log.debug("rpc → batch of %d", len(self._requests))
        self._requests = []
        reply = self._client.transport.send(payload, headers)
        if reply is None:
            return []
        return self._client.response_parser.parse(reply)

    def _call_proxy(self, name: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> "Batch":
        return self.execute(name, self._client.params_from_call(args, kwargs))

    def __getattr__(self, name: str) -> _Procedure:
        if name.startswith("_"):
            raise AttributeError(name)
        return _Procedure(self._call_proxy, name)


# ── Demo entrypoint ──────────────────────────────────────────────────


def _demo() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    with Client("http://127.0.0.1:8100/rpc") as client:
        print("── echo ──")
        print(f"  result: {client.echo('hello from the client')}")

        print("── sum (named) ──")
        print(f"  result: {client.sum(a=17, b=25)}")

        print("── batch ──")
        batch = client.batch()
        batch.sum(1, 2)
        batch.inventory.count("apples")
        batch.ping()
        print(f"  results: {batch.send()}")


if __name__ == "__main__":
    _demo()
