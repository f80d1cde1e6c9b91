"""Pre-dispatch middleware.

A middleware is any callable ``(username, password, procedure, params)``.
It vetoes a call by raising; its return value is ignored.  Hooks are
registered during setup and run in registration order for every request.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable

from wire.jsonrpc import Params

log = logging.getLogger(__name__)

MiddlewareFn = Callable[[str | None, str | None, str, Params | None], Any]


@dataclass(frozen=True, slots=True)
class AuthContext:
    """Credentials of the caller, fixed for the whole ``execute()``."""

    username: str | None = None
    password: str | None = None


class MiddlewareChain:
    """Ordered list of pre-dispatch hooks."""

    def __init__(self, hooks: list[MiddlewareFn] | None = None) -> None:
        self._lock = threading.Lock()
        self._hooks: tuple[MiddlewareFn, ...] = ()
        for hook in hooks or []:
            self.register(hook)

    def register(self, hook: MiddlewareFn) -> MiddlewareFn:
        """Append *hook*.  Returns it so this also works as a decorator."""
        if not callable(hook):
            raise TypeError("middleware must be callable")
        with self._lock:
            self._hooks = (*self._hooks, hook)
        log.debug("registered middleware %s", getattr(hook, "__qualname__", hook))
        return hook

    def run(self, auth: AuthContext, procedure: str, params: Params | None) -> None:
        """Run every hook; the first exception aborts the chain."""
        for hook in self._hooks:
            hook(auth.username, auth.password, procedure, params)

    def __len__(self) -> int:
        return len(self._hooks)
