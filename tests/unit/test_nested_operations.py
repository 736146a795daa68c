from opie.operation.base import Operation
from opie.operation.failure import Failure


class Normalise(Operation):
    steps = ("strip", "lower")

    def strip(self, text):
        return text.strip()

    def lower(self, text):
        return text.lower()


class RejectEmpty(Operation):
    steps = ("check",)

    def check(self, text):
        if not text:
            self.fail("empty", {"field": "email"})
        return text


class Register(Operation):
    steps = ("prepare", Normalise, RejectEmpty, "wrap")

    def prepare(self, payload):
        return payload["email"]

    def wrap(self, email):
        return {"email": email}


def test_nested_output_becomes_current_value():
    inner = Normalise.call("  Bob@Example.COM ")
    outer = Register.call({"email": "  Bob@Example.COM "})
    assert outer.is_success
    assert outer.output == {"email": inner.output}


def test_nested_failure_propagates_unchanged():
    calls = []

    class Tracked(Register):
        steps = ("prepare", Normalise, RejectEmpty, "wrap")

        def wrap(self, email):
            calls.append(email)
            return email

    inner = RejectEmpty.call("")
    outer = Tracked.call({"email": "   "})
    assert outer.is_failure
    assert outer.failure == inner.failure == Failure("empty", {"field": "email"})
    assert calls == []


def test_nested_failure_is_the_same_object():
    captured = {}

    class Capture(Operation):
        steps = ("boom",)

        def boom(self, _):
            captured["inner"] = self
            self.fail("denied")

    class Outer(Operation):
        steps = (Capture,)

    result = Outer.call(None)
    assert result.failure is captured["inner"].failure


def test_context_is_not_propagated_to_nested_operations():
    seen = []

    class Inner(Operation):
        steps = ("look",)

        def look(self, value, context=None):
            seen.append(context)
            return value

    class Outer(Operation):
        steps = ("look", Inner)

        def look(self, value, context=None):
            seen.append(context)
            return value

    result = Outer.call("v", {"user": 1})
    assert result.output == "v"
    assert seen == [{"user": 1}, None]


def test_nested_operation_receives_unpacked_values_as_its_input():
    class Sum(Operation):
        steps = ("add",)

        def add(self, a, b):
            return a + b

    class Outer(Operation):
        steps = ("pair", Sum)

        def pair(self, _):
            return (2, 3)

    assert Outer.call(None).output == 5
