"""Procedure registry and dispatch.

A procedure name resolves to one of three target kinds:

* ``FunctionTarget``    — a plain callable registered under a name;
* ``ClassMethodTarget`` — a class and method name, instantiated per call;
* ``BoundMethodTarget`` — an existing instance and method name.

Explicit callbacks win over class/method bindings, which win over the
scan of attached instances.  Each target carries a ``ParameterSpec``
describing its formal parameters so arguments are checked before the call.
"""

from __future__ import annotations

import inspect
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable

from wire.errors import InvalidArgumentsError, ProcedureNotFoundError
from wire.jsonrpc import Params

log = logging.getLogger(__name__)

ProcedureFn = Callable[..., Any]

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
_KEYWORD = (inspect.Parameter.POSITIONAL_OR_KEYWORD, inspect.Parameter.KEYWORD_ONLY)


# ── Parameter metadata ───────────────────────────────────────────────
@dataclass(frozen=True, slots=True)
class ParameterSpec:
    """Formal parameters of a procedure target."""

    positional: tuple[str, ...]
    keyword: frozenset[str]
    required: tuple[str, ...]
    required_positional: int
    var_positional: bool = False
    var_keyword: bool = False

    @classmethod
    def from_signature(cls, sig: inspect.Signature) -> "ParameterSpec":
        params = list(sig.parameters.values())
        positional = [p for p in params if p.kind in _POSITIONAL]
        required_positional = 0
        for p in positional:
            if p.default is not p.empty:
                break
            required_positional += 1
        return cls(
            positional=tuple(p.name for p in positional),
            keyword=frozenset(p.name for p in params if p.kind in _KEYWORD),
            required=tuple(
                p.name
                for p in params
                if p.default is p.empty
                and p.kind not in (p.VAR_POSITIONAL, p.VAR_KEYWORD)
            ),
            required_positional=required_positional,
            var_positional=any(p.kind is p.VAR_POSITIONAL for p in params),
            var_keyword=any(p.kind is p.VAR_KEYWORD for p in params),
        )

    @classmethod
    def from_callable(cls, fn: ProcedureFn) -> "ParameterSpec":
        return cls.from_signature(inspect.signature(fn))

    @classmethod
    def from_class_attribute(cls, klass: type, method: str) -> "ParameterSpec":
        """Spec of *method* as seen on an instance of *klass* (``self`` dropped)."""
        sig = inspect.signature(getattr(klass, method))
        raw = inspect.getattr_static(klass, method)
        params = list(sig.parameters.values())
        if (
            not isinstance(raw, (staticmethod, classmethod))
            and params
            and params[0].kind in _POSITIONAL
        ):
            sig = sig.replace(parameters=params[1:])
        return cls.from_signature(sig)

    # -- Binding -------------------------------------------------------
    def bind(self, params: Params | None) -> tuple[list[Any], dict[str, Any]]:
        """Map request params onto ``(args, kwargs)`` for the target.

        Raises ``InvalidArgumentsError`` on any arity or name mismatch.
        """
        if params is None:
            params = []
        if isinstance(params, dict):
            return [], self._bind_named(params)
        return self._bind_positional(list(params)), {}

    def _bind_positional(self, args: list[Any]) -> list[Any]:
        if len(args) < self.required_positional:
            raise InvalidArgumentsError("Wrong number of arguments")
        if len(args) > len(self.positional) and not self.var_positional:
            raise InvalidArgumentsError("Too many arguments")
        for name in self.required:
            if name not in self.positional:
                # keyword-only without a default, unreachable by position
                raise InvalidArgumentsError(f"Missing argument: {name}")
        return args

    def _bind_named(self, kwargs: dict[str, Any]) -> dict[str, Any]:
        if not self.var_keyword:
            for name in kwargs:
                if name not in self.keyword:
                    raise InvalidArgumentsError(f"Unknown argument: {name}")
        for name in self.required:
            # positional-only names cannot be passed by name
            if name not in kwargs or name not in self.keyword:
                raise InvalidArgumentsError(f"Missing argument: {name}")
        return dict(kwargs)


# ── Targets ──────────────────────────────────────────────────────────
def _run_before(instance: object, hook: str | None, procedure: str) -> None:
    if hook:
        fn = getattr(instance, hook, None)
        if callable(fn):
            fn(procedure)


@dataclass(frozen=True, slots=True)
class FunctionTarget:
    fn: ProcedureFn
    spec: ParameterSpec

    def resolve(self, procedure: str, before: str | None) -> ProcedureFn:
        return self.fn


@dataclass(frozen=True, slots=True)
class BoundMethodTarget:
    instance: object
    method: str
    spec: ParameterSpec

    def resolve(self, procedure: str, before: str | None) -> ProcedureFn:
        _run_before(self.instance, before, procedure)
        return getattr(self.instance, self.method)


@dataclass(frozen=True, slots=True)
class ClassMethodTarget:
    cls: type
    method: str
    spec: ParameterSpec

    def resolve(self, procedure: str, before: str | None) -> ProcedureFn:
        instance = self.cls()
        _run_before(instance, before, procedure)
        return getattr(instance, self.method)


Target = FunctionTarget | BoundMethodTarget | ClassMethodTarget


# ── Registry ─────────────────────────────────────────────────────────
class Registry:
    """Procedure name → target mapping.

    Usage::

        registry = Registry()

        @registry.procedure("echo")
        def echo(value):
            return value

        registry.bind("math.sum", Calculator, "sum")
        registry.attach(MaintenanceApi())

        result = registry.dispatch("echo", ["hi"])

    Writers take a lock and swap in new containers; ``dispatch`` reads
    whatever containers are current, so a lookup never sees a half-applied
    registration.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._callbacks: dict[str, FunctionTarget] = {}
        self._classes: dict[str, BoundMethodTarget | ClassMethodTarget] = {}
        self._instances: tuple[object, ...] = ()
        self._before: str | None = None

    # -- Registration --------------------------------------------------
    def register(self, name: str, fn: ProcedureFn) -> None:
        """Register *fn* under *name*, replacing any previous callback."""
        if not callable(fn):
            raise TypeError(f"procedure {name!r} must be callable")
        target = FunctionTarget(fn, ParameterSpec.from_callable(fn))
        with self._lock:
            if name in self._callbacks:
                log.warning("overwriting procedure %r", name)
            self._callbacks = {**self._callbacks, name: target}
        log.debug("registered procedure %r → %s", name, getattr(fn, "__qualname__", fn))

    def procedure(self, name: str | None = None) -> Callable[[ProcedureFn], ProcedureFn]:
        """Decorator that registers *fn* under *name* (default: its own name)."""

        def decorator(fn: ProcedureFn) -> ProcedureFn:
            self.register(name or fn.__name__, fn)
            return fn

        return decorator

    def bind(self, name: str, owner: type | object, method: str | None = None) -> None:
        """Bind *name* to ``owner.method``.

        *owner* is either a class, instantiated without arguments on every
        call, or an instance.  *method* defaults to *name*.
        """
        method = method or name
        if not callable(getattr(owner, method, None)):
            raise ValueError(f"{owner!r} has no method {method!r}")
        target: BoundMethodTarget | ClassMethodTarget
        if isinstance(owner, type):
            target = ClassMethodTarget(
                owner, method, ParameterSpec.from_class_attribute(owner, method)
            )
        else:
            target = BoundMethodTarget(
                owner, method, ParameterSpec.from_callable(getattr(owner, method))
            )
        with self._lock:
            if name in self._classes:
                log.warning("overwriting binding %r", name)
            self._classes = {**self._classes, name: target}
        log.debug("bound procedure %r → %r.%s", name, owner, method)

    def attach(self, instance: object) -> None:
        """Expose every public method of *instance* as a procedure."""
        with self._lock:
            self._instances = (*self._instances, instance)
        log.debug("attached %r", instance)

    def before(self, method_name: str) -> None:
        """Call ``instance.<method_name>(procedure)`` before class/instance targets."""
        self._before = method_name

    # -- Resolution ----------------------------------------------------
    def resolve(self, name: str) -> Target:
        """Return the target for *name* or raise ``ProcedureNotFoundError``."""
        target = self._callbacks.get(name) or self._classes.get(name)
        if target is not None:
            return target
        if not name.startswith("_"):
            for instance in self._instances:
                fn = getattr(instance, name, None)
                if callable(fn):
                    return BoundMethodTarget(instance, name, ParameterSpec.from_callable(fn))
        raise ProcedureNotFoundError("Unable to find procedure")

    # -- Dispatch ------------------------------------------------------
    def dispatch(self, name: str, params: Params | None = None) -> Any:
        """Call the procedure registered as *name* and return its result.

        Raises ``ProcedureNotFoundError`` or ``InvalidArgumentsError``;
        anything the procedure itself raises propagates unchanged.
        """
        target = self.resolve(name)
        args, kwargs = target.spec.bind(params)
        fn = target.resolve(name, self._before)
        return fn(*args, **kwargs)

    # -- Introspection -------------------------------------------------
    @property
    def methods(self) -> list[str]:
        """Explicitly registered names (attached instances are not listed)."""
        return [*self._callbacks, *(n for n in self._classes if n not in self._callbacks)]

    def is_registered(self, name: str) -> bool:
        try:
            self.resolve(name)
        except ProcedureNotFoundError:
            return False
        return True
