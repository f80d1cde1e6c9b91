"""Tests for the procedure registry and argument binding."""

import threading

import pytest
from rpcserver.dispatcher import (
    BoundMethodTarget,
    ClassMethodTarget,
    FunctionTarget,
    ParameterSpec,
    Registry,
)
from wire.errors import InvalidArgumentsError, ProcedureNotFoundError


def subtract(minuend, subtrahend):
    return minuend - subtrahend


def greet(name, greeting="Hello"):
    return f"{greeting}, {name}"


class Calculator:
    instances = 0

    def __init__(self):
        Calculator.instances += 1

    def add(self, a, b):
        return a + b

    @staticmethod
    def double(x):
        return 2 * x

    @classmethod
    def name(cls):
        return cls.__name__


class Api:
    def __init__(self):
        self.calls = []

    def ping(self):
        return "pong"

    def add(self, a, b):
        return f"api:{a + b}"

    def _secret(self):
        return "hidden"

    def before_call(self, procedure):
        self.calls.append(procedure)


@pytest.fixture
def registry():
    return Registry()


class TestRegistration:
    def test_decorator_registers_under_name(self, registry):
        @registry.procedure("math.subtract")
        def fn(a, b):
            return a - b

        assert registry.dispatch("math.subtract", [5, 3]) == 2
        assert registry.methods == ["math.subtract"]

    def test_decorator_defaults_to_function_name(self, registry):
        registry.procedure()(subtract)
        assert registry.is_registered("subtract")

    def test_register_twice_replaces(self, registry):
        registry.register("f", lambda: 1)
        registry.register("f", lambda: 2)
        assert registry.dispatch("f") == 2

    def test_register_rejects_non_callables(self, registry):
        with pytest.raises(TypeError):
            registry.register("f", 42)

    def test_bind_unknown_method_fails_early(self, registry):
        with pytest.raises(ValueError):
            registry.bind("x", Calculator, "nope")

    def test_targets_are_tagged(self, registry):
        registry.register("sub", subtract)
        registry.bind("calc.add", Calculator, "add")
        registry.bind("api.ping", Api(), "ping")
        registry.attach(Api())
        assert isinstance(registry.resolve("sub"), FunctionTarget)
        assert isinstance(registry.resolve("calc.add"), ClassMethodTarget)
        assert isinstance(registry.resolve("api.ping"), BoundMethodTarget)
        assert isinstance(registry.resolve("ping"), BoundMethodTarget)


class TestResolution:
    def test_missing_procedure(self, registry):
        with pytest.raises(ProcedureNotFoundError):
            registry.dispatch("missing")

    def test_callback_wins_over_class_binding_and_instances(self, registry):
        registry.attach(Api())
        registry.bind("add", Calculator)
        registry.register("add", lambda a, b: f"callback:{a + b}")
        assert registry.dispatch("add", [1, 2]) == "callback:3"

    def test_class_binding_wins_over_instances(self, registry):
        registry.attach(Api())
        registry.bind("add", Calculator)
        assert registry.dispatch("add", [1, 2]) == 3

    def test_instance_scan_in_attach_order(self, registry):
        class Other:
            def ping(self):
                return "other"

        registry.attach(Other())
        registry.attach(Api())
        assert registry.dispatch("ping") == "other"

    def test_private_methods_are_not_exposed(self, registry):
        registry.attach(Api())
        with pytest.raises(ProcedureNotFoundError):
            registry.dispatch("_secret")

    def test_class_binding_instantiates_per_call(self, registry):
        registry.bind("calc.add", Calculator, "add")
        before = Calculator.instances
        registry.dispatch("calc.add", [1, 1])
        registry.dispatch("calc.add", [2, 2])
        assert Calculator.instances == before + 2

    def test_static_and_class_methods(self, registry):
        registry.bind("double", Calculator)
        registry.bind("calc.name", Calculator, "name")
        assert registry.dispatch("double", [21]) == 42
        assert registry.dispatch("calc.name") == "Calculator"

    def test_before_hook_runs_for_instances(self, registry):
        api = Api()
        registry.attach(api)
        registry.before("before_call")
        registry.dispatch("ping")
        assert api.calls == ["ping"]

    def test_before_hook_skipped_for_callbacks(self, registry):
        registry.before("before_call")
        registry.register("sub", subtract)
        assert registry.dispatch("sub", [3, 1]) == 2


class TestBinding:
    def test_positional(self, registry):
        registry.register("sub", subtract)
        assert registry.dispatch("sub", [42, 23]) == 19

    def test_named(self, registry):
        registry.register("sub", subtract)
        assert registry.dispatch("sub", {"subtrahend": 23, "minuend": 42}) == 19

    def test_optional_positional_omitted(self, registry):
        registry.register("greet", greet)
        assert registry.dispatch("greet", ["Ada"]) == "Hello, Ada"
        assert registry.dispatch("greet", ["Ada", "Hi"]) == "Hi, Ada"

    def test_optional_named_omitted(self, registry):
        registry.register("greet", greet)
        assert registry.dispatch("greet", {"name": "Ada"}) == "Hello, Ada"

    def test_too_few_positional(self, registry):
        registry.register("sub", subtract)
        with pytest.raises(InvalidArgumentsError, match="Wrong number of arguments"):
            registry.dispatch("sub", [1])

    def test_too_many_positional(self, registry):
        registry.register("sub", subtract)
        with pytest.raises(InvalidArgumentsError, match="Too many arguments"):
            registry.dispatch("sub", [1, 2, 3])

    def test_missing_named(self, registry):
        registry.register("sub", subtract)
        with pytest.raises(InvalidArgumentsError, match="Missing argument: subtrahend"):
            registry.dispatch("sub", {"minuend": 1})

    def test_unknown_named(self, registry):
        registry.register("sub", subtract)
        with pytest.raises(InvalidArgumentsError, match="Unknown argument: extra"):
            registry.dispatch("sub", {"minuend": 1, "subtrahend": 2, "extra": 3})

    def test_no_params_means_no_arguments(self, registry):
        registry.register("sub", subtract)
        with pytest.raises(InvalidArgumentsError):
            registry.dispatch("sub")

    def test_varargs_and_kwargs(self, registry):
        registry.register("pack", lambda *args, **kwargs: [list(args), kwargs])
        assert registry.dispatch("pack", [1, 2, 3]) == [[1, 2, 3], {}]
        assert registry.dispatch("pack", {"x": 1}) == [[], {"x": 1}]

    def test_required_keyword_only_cannot_be_positional(self, registry):
        def fn(a, *, flag):
            return a, flag

        registry.register("fn", fn)
        assert registry.dispatch("fn", {"a": 1, "flag": True}) == (1, True)
        with pytest.raises(InvalidArgumentsError, match="Missing argument: flag"):
            registry.dispatch("fn", [1])

    def test_positional_only_cannot_be_named(self, registry):
        registry.register("f", lambda a, /, **kw: a)
        assert registry.dispatch("f", [1]) == 1
        with pytest.raises(InvalidArgumentsError, match="Missing argument: a"):
            registry.dispatch("f", {"a": 1})

    def test_optional_positional_only_named_goes_to_kwargs(self, registry):
        registry.register("f", lambda a=0, /, **kw: [a, kw])
        assert registry.dispatch("f", {"a": 1}) == [0, {"a": 1}]

    def test_type_error_inside_procedure_is_not_a_binding_error(self, registry):
        registry.register("sub", subtract)
        with pytest.raises(TypeError):
            registry.dispatch("sub", ["a", 1])


class TestParameterSpec:
    def test_metadata(self):
        spec = ParameterSpec.from_callable(greet)
        assert spec.positional == ("name", "greeting")
        assert spec.required == ("name",)
        assert spec.required_positional == 1
        assert not spec.var_positional and not spec.var_keyword

    def test_class_attribute_drops_self(self):
        spec = ParameterSpec.from_class_attribute(Calculator, "add")
        assert spec.positional == ("a", "b")

    def test_static_method_keeps_first_parameter(self):
        spec = ParameterSpec.from_class_attribute(Calculator, "double")
        assert spec.positional == ("x",)

    def test_varargs_method_keeps_its_varargs(self):
        class Varargs:
            def total(*args):
                return len(args)

        spec = ParameterSpec.from_class_attribute(Varargs, "total")
        assert spec.var_positional
        assert spec.positional == ()

        registry = Registry()
        registry.bind("total", Varargs)
        # the instance arrives as the first element
        assert registry.dispatch("total", [1, 2]) == 3


def test_concurrent_registration_and_dispatch(registry):
    registry.register("base", lambda: "ok")
    errors = []

    def writer():
        for i in range(200):
            registry.register(f"p{i}", lambda i=i: i)

    def reader():
        for _ in range(200):
            try:
                assert registry.dispatch("base") == "ok"
            except Exception as exc:
                errors.append(exc)

    threads = [threading.Thread(target=writer), threading.Thread(target=reader)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert registry.dispatch("p199") == 199
