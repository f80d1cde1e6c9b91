"""Request loggers.

The server reports every processed request once, after its response is
built.  Loggers are best effort: whatever they raise is logged and
dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol


class RequestLogger(Protocol):
    def log(
        self,
        id: Any,
        method: str | None,
        params: Any,
        response: dict[str, Any] | None,
        elapsed: float = 0.0,
        metadata: dict[str, Any] | None = None,
    ) -> None: ...


class NullRequestLogger:
    """Discards everything.  The default."""

    def log(self, id, method, params, response, elapsed=0.0, metadata=None) -> None:
        pass


@dataclass(slots=True)
class LogRecord:
    id: Any
    method: str | None
    params: Any
    response: dict[str, Any] | None
    elapsed: float
    metadata: dict[str, Any] = field(default_factory=dict)


class DebugRequestLogger:
    """Keeps every record in memory; handy in tests and REPL sessions."""

    def __init__(self) -> None:
        self.records: list[LogRecord] = []

    def log(self, id, method, params, response, elapsed=0.0, metadata=None) -> None:
        self.records.append(
            LogRecord(id, method, params, response, elapsed, dict(metadata or {}))
        )


class LoggingRequestLogger:
    """Writes one line per request to a stdlib logger."""

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self._logger = logger or logging.getLogger("rpcserver.requests")
        self._level = level

    def log(self, id, method, params, response, elapsed=0.0, metadata=None) -> None:
        outcome = "error" if response and "error" in response else "ok"
        self._logger.log(
            self._level,
            "rpc %s(id=%s) %s in %.1fms",
            method,
            id,
            outcome,
            elapsed * 1000,
        )
