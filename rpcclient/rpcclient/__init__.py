"""rpcclient — JSON-RPC 2.0 client."""

from rpcclient.client import Batch, Client
from rpcclient.request import build_request
from rpcclient.response import ResponseParser
from rpcclient.transport import HttpTransport, Transport

__all__ = [
    "Client",
    "Batch",
    "build_request",
    "ResponseParser",
    "HttpTransport",
    "Transport",
]
