"""rpcserver — JSON-RPC 2.0 server: registry, middleware, request processing."""

from rpcserver.dispatcher import Registry
from rpcserver.logger import DebugRequestLogger, LoggingRequestLogger, NullRequestLogger
from rpcserver.middleware import AuthContext, MiddlewareChain
from rpcserver.rpc import Environment, Reply, Server

__all__ = [
    "Registry",
    "MiddlewareChain",
    "AuthContext",
    "Server",
    "Environment",
    "Reply",
    "NullRequestLogger",
    "DebugRequestLogger",
    "LoggingRequestLogger",
]
