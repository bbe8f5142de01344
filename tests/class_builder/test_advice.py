"""Tests for advice adapters, short-circuits and CallRecorder."""

from __future__ import annotations

import pytest

from shmock.class_builder.advice import (
    CallRecorder,
    Invocation,
    after,
    after_returning,
    after_throwing,
    before,
    raising,
    returning,
)
from shmock.class_builder.builder import ClassBuilder


def _calculator(*decorators) -> object:
    builder = ClassBuilder()
    builder.add_method("add", lambda a, b: a + b)
    builder.add_method("divide", lambda a, b: a / b)
    builder.add_static_method("multiply", lambda a, b: a * b)
    for decorator in decorators:
        builder.add_decorator(decorator)
    return builder.instantiate()


# ---------------------------------------------------------------------------
# Advice adapters
# ---------------------------------------------------------------------------


class TestAdvice:
    def test_before_runs_before_the_call(self) -> None:
        calls: list[str] = []
        calc = _calculator(before(lambda jp: calls.append(f"before:{jp.method_name}")))

        assert calc.add(1, 2) == 3
        assert calls == ["before:add"]

    def test_after_returning_sees_return_value(self) -> None:
        captured: list = []
        calc = _calculator(after_returning(lambda jp, result: captured.append(result)))

        assert calc.add(2, 2) == 4
        assert captured == [4]

    def test_after_returning_skipped_on_failure(self) -> None:
        captured: list = []
        calc = _calculator(after_returning(lambda jp, result: captured.append(result)))

        with pytest.raises(ZeroDivisionError):
            calc.divide(1, 0)
        assert captured == []

    def test_after_throwing_sees_exception_and_reraises(self) -> None:
        captured: list = []
        calc = _calculator(after_throwing(lambda jp, exc: captured.append(type(exc).__name__)))

        with pytest.raises(ZeroDivisionError):
            calc.divide(1, 0)
        assert captured == ["ZeroDivisionError"]

    def test_after_runs_on_success_and_failure(self) -> None:
        calls: list[str] = []
        calc = _calculator(after(lambda jp: calls.append(jp.method_name)))

        calc.add(1, 1)
        with pytest.raises(ZeroDivisionError):
            calc.divide(1, 0)
        assert calls == ["add", "divide"]


class TestShortCircuits:
    def test_returning_replaces_result(self) -> None:
        calc = _calculator(returning(99))
        assert calc.add(1, 2) == 99
        assert calc.multiply(2, 5) == 99

    def test_raising_raises_for_every_call(self) -> None:
        calc = _calculator(raising(PermissionError("read only")))
        with pytest.raises(PermissionError, match="read only"):
            calc.add(1, 2)


# ---------------------------------------------------------------------------
# CallRecorder
# ---------------------------------------------------------------------------


class TestCallRecorder:
    def test_records_every_call(self) -> None:
        recorder = CallRecorder()
        calc = _calculator(recorder)

        calc.add(1, 2)
        calc.add(3, b=4)
        type(calc).multiply(2, 5)

        assert recorder.count() == 3
        assert recorder.count("add") == 2
        assert recorder.calls("add")[1] == Invocation("add", (3,), {"b": 4}, False)
        assert recorder.calls("multiply") == [Invocation("multiply", (2, 5), {}, True)]

    def test_records_failed_calls(self) -> None:
        recorder = CallRecorder()
        calc = _calculator(recorder)

        with pytest.raises(ZeroDivisionError):
            calc.divide(1, 0)
        assert recorder.count("divide") == 1

    def test_reset(self) -> None:
        recorder = CallRecorder()
        calc = _calculator(recorder)
        calc.add(1, 2)
        recorder.reset()
        assert recorder.count() == 0

    def test_recorder_inside_short_circuit_sees_nothing(self) -> None:
        recorder = CallRecorder()
        calc = _calculator(returning(0), recorder)
        calc.add(1, 2)
        assert recorder.count() == 0
