"""Tests for policies and PolicyDecorator."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import pytest

from shmock.class_builder.builder import ClassBuilder
from shmock.kernel.exceptions import PolicyViolationError
from shmock.policy import (
    Policy,
    PolicyDecorator,
    PolicyRegistry,
    add_policy,
    clear_policies,
    get_policies,
)


class Account:
    def balance(self) -> int:
        return 0


class SavingsAccount(Account):
    def interest(self) -> float:
        return 0.0


class NoNegativeArguments(Policy):
    def check_method_parameters(self, cls: Any, method: str, parameters: tuple, static: bool) -> None:
        if any(isinstance(p, int) and p < 0 for p in parameters):
            raise PolicyViolationError(f"{method} called with a negative argument", code="POLICY_001")


class NoNoneReturns(Policy):
    def check_method_return_value(self, cls: Any, method: str, return_value: Any, static: bool) -> None:
        if return_value is None:
            raise PolicyViolationError(f"{method} must not return None", code="POLICY_001")


class RecordingPolicy(Policy):
    def __init__(self) -> None:
        self.events: list[tuple] = []

    def check_method_parameters(self, cls, method, parameters, static):
        self.events.append(("params", cls, method, parameters, static))

    def check_method_return_value(self, cls, method, return_value, static):
        self.events.append(("return", cls, method, return_value, static))

    def check_method_throws(self, cls, method, exception, static):
        self.events.append(("throws", cls, method, type(exception), static))


@pytest.fixture(autouse=True)
def _clean_policies() -> Iterator[None]:
    clear_policies()
    yield
    clear_policies()


def _account(*policies: Policy, use_registry: bool = False) -> Any:
    builder = ClassBuilder()
    builder.set_extends(Account)
    builder.add_method("balance", lambda: 100)
    builder.add_method("withdraw", lambda amount: 100 - amount)
    builder.add_method("close", lambda: None)
    builder.add_static_method("fail", lambda: 1 / 0)
    builder.add_decorator(PolicyDecorator() if use_registry else PolicyDecorator(policies=policies))
    return builder.instantiate()


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestPolicyRegistry:
    def test_register_keeps_order(self) -> None:
        first, second = Policy(), Policy()
        registry = PolicyRegistry()
        registry.register(first)
        registry.register(second)
        assert registry.get_all() == [first, second]
        assert len(registry) == 2

    def test_register_rejects_non_policies(self) -> None:
        with pytest.raises(TypeError):
            PolicyRegistry().register(object())  # type: ignore[arg-type]

    def test_module_level_registry(self) -> None:
        policy = Policy()
        add_policy(policy)
        assert get_policies() == [policy]
        clear_policies()
        assert get_policies() == []

    def test_default_hooks_accept_everything(self) -> None:
        policy = Policy()
        policy.check_method_parameters(Account, "balance", (), False)
        policy.check_method_return_value(Account, "balance", None, False)
        policy.check_method_throws(Account, "balance", ValueError(), False)


# ---------------------------------------------------------------------------
# PolicyDecorator
# ---------------------------------------------------------------------------


class TestPolicyDecorator:
    def test_parameter_violation_stops_the_call(self) -> None:
        account = _account(NoNegativeArguments())
        assert account.withdraw(10) == 90
        with pytest.raises(PolicyViolationError, match="negative"):
            account.withdraw(-5)

    def test_return_value_violation(self) -> None:
        account = _account(NoNoneReturns())
        assert account.balance() == 100
        with pytest.raises(PolicyViolationError):
            account.close()

    def test_hooks_receive_mocked_class_and_static_flag(self) -> None:
        recorder = RecordingPolicy()
        account = _account(recorder)

        account.withdraw(amount=30)
        with pytest.raises(ZeroDivisionError):
            type(account).fail()

        assert recorder.events == [
            ("params", Account, "withdraw", (30,), False),
            ("return", Account, "withdraw", 70, False),
            ("params", Account, "fail", (), True),
            ("throws", Account, "fail", ZeroDivisionError, True),
        ]

    def test_explicit_mocked_class(self) -> None:
        recorder = RecordingPolicy()
        builder = ClassBuilder()
        builder.add_method("ping", lambda: "pong")
        builder.add_decorator(PolicyDecorator("myapp.Pinger", policies=[recorder]))
        builder.instantiate().ping()
        assert recorder.events[0][1] == "myapp.Pinger"

    def test_uses_process_wide_registry(self) -> None:
        account = _account(use_registry=True)
        assert account.withdraw(-5) == 105

        add_policy(NoNegativeArguments())
        with pytest.raises(PolicyViolationError):
            account.withdraw(-5)

    def test_without_superclass_policies_see_synthesized_class(self) -> None:
        recorder = RecordingPolicy()
        builder = ClassBuilder()
        builder.add_method("ping", lambda: "pong")
        builder.add_decorator(PolicyDecorator(policies=[recorder]))
        cls = builder.create()
        cls().ping()
        assert recorder.events[0][1] is cls

    def test_superclass_reported_when_interface_extends_it(self) -> None:
        recorder = RecordingPolicy()
        builder = ClassBuilder()
        builder.set_extends(Account)
        builder.add_interface(SavingsAccount)
        builder.add_method("interest", lambda: 1.5)
        builder.add_decorator(PolicyDecorator(policies=[recorder]))

        assert builder.instantiate().interest() == 1.5
        assert recorder.events[0][1] is Account
