"""Starlette ASGI front end.

Single ``/rpc`` POST endpoint handing the raw body to ``Server.execute``.
Procedures are plain (blocking) callables, so execution happens on a
worker thread.

Run directly::

    python -m rpcserver.server --port 8100
"""

from __future__ import annotations

import logging

import anyio.to_thread
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route

from rpcserver.rpc import Environment, Server

log = logging.getLogger(__name__)

MEDIA_TYPE = "application/json"


# ── RPC endpoint ─────────────────────────────────────────────────────


def make_endpoint(server: Server):
    async def rpc_endpoint(request: Request) -> Response:
        """Handle a JSON-RPC 2.0 POST to ``/rpc``."""
        body = await request.body()
        env = Environment(
            remote_addr=request.client.host if request.client else None,
            headers=dict(request.headers),
        )
        reply = await anyio.to_thread.run_sync(server.execute, body, env)
        if not reply.body:
            return Response(status_code=reply.status_code, headers=reply.headers)
        return Response(
            reply.body,
            status_code=reply.status_code,
            headers=reply.headers,
            media_type=MEDIA_TYPE,
        )

    return rpc_endpoint


# ── App factory ──────────────────────────────────────────────────────


def create_app(server: Server | None = None, path: str = "/rpc") -> Starlette:
    if server is None:
        from rpcserver.handlers import registry

        server = Server(registry)
    return Starlette(
        debug=False,
        routes=[Route(path, make_endpoint(server), methods=["POST"])],
    )


# ── Runnable entrypoint ──────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn

    from rpcserver.config import ServerSettings
    from rpcserver.handlers import registry
    from rpcserver.logger import LoggingRequestLogger

    settings = ServerSettings.from_args()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    server = Server(
        registry,
        allowed_hosts=settings.allowed_hosts,
        users=settings.users,
        auth_header=settings.auth_header,
        request_logger=LoggingRequestLogger(),
        diagnostics=logging.getLogger("rpcserver.diagnostics"),
    )
    uvicorn.run(
        create_app(server),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
