"""Example procedures.

Registered on the module-level ``registry`` which the runnable server
exposes when no other registry is given.
"""

from __future__ import annotations

import logging

from wire.errors import ResponseError

from rpcserver.dispatcher import Registry

log = logging.getLogger(__name__)

registry = Registry()


@registry.procedure("echo")
def echo(value):
    """Return the argument unchanged."""
    return value


@registry.procedure("sum")
def add(a, b, c=0):
    """Add two or three numbers."""
    return a + b + c


@registry.procedure("divide")
def divide(dividend, divisor):
    if divisor == 0:
        raise ResponseError("Division by zero", code=-32000, data={"dividend": dividend})
    return dividend / divisor


class Inventory:
    """Bound as ``inventory.count`` / ``inventory.list``, one instance per call."""

    items = {"apples": 3, "pears": 5}

    def count(self, name):
        return self.items.get(name, 0)

    def names(self):
        return sorted(self.items)


registry.bind("inventory.count", Inventory, "count")
registry.bind("inventory.list", Inventory, "names")


class System:
    """Attached instance: each public method is a procedure."""

    def ping(self):
        return "pong"

    def methods(self):
        return registry.methods


registry.attach(System())
