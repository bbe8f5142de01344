# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Tests for the JoinPoint dataclass."""

from __future__ import annotations

import dataclasses

import pytest

from shmock.class_builder.types import JoinPoint


def _join_point(**overrides) -> JoinPoint:
    fields = {
        "method_name": "add",
        "args": (1, 2),
        "kwargs": {},
        "target": object(),
        "is_static": False,
        "implementation": lambda a, b: a + b,
    }
    fields.update(overrides)
    return JoinPoint(**fields)


class TestJoinPoint:
    """JoinPoint construction and execution."""

    def test_creation_with_all_fields(self) -> None:
        target = object()

        def _impl(*args, **kwargs) -> str:
            return "ok"

        jp = JoinPoint(
            method_name="do_work",
            args=(1, 2),
            kwargs={"key": "val"},
            target=target,
            is_static=False,
            implementation=_impl,
        )

        assert jp.target is target
        assert jp.method_name == "do_work"
        assert jp.args == (1, 2)
        assert jp.kwargs == {"key": "val"}
        assert jp.implementation is _impl
        assert jp.remaining == ()

    def test_is_frozen(self) -> None:
        jp = _join_point()
        with pytest.raises(dataclasses.FrozenInstanceError):
            jp.method_name = "other"  # type: ignore[misc]

    def test_execute_without_handlers_calls_implementation(self) -> None:
        assert _join_point().execute() == 3

    def test_execute_passes_kwargs(self) -> None:
        jp = _join_point(args=(1,), kwargs={"b": 5})
        assert jp.execute() == 6

    def test_execute_delegates_to_next_handler(self) -> None:
        seen: list[tuple] = []

        def handler(inner: JoinPoint) -> int:
            seen.append(inner.remaining)
            return inner.execute() * 10

        assert _join_point(remaining=(handler,)).execute() == 30
        assert seen == [()]

    def test_execute_propagates_failure(self) -> None:
        def boom(a, b):
            raise ValueError("boom")

        with pytest.raises(ValueError, match="boom"):
            _join_point(implementation=boom).execute()

    def test_execute_may_be_called_repeatedly(self) -> None:
        calls: list[int] = []

        def impl(a, b):
            calls.append(a)
            return a + b

        jp = _join_point(implementation=impl)
        assert jp.execute() == jp.execute() == 3
        assert calls == [1, 1]

    def test_with_arguments_replaces_args(self) -> None:
        jp = _join_point().with_arguments(10, b=20)
        assert jp.args == (10,)
        assert jp.kwargs == {"b": 20}
        assert jp.execute() == 30

    def test_owner_of_instance_call(self) -> None:
        class Service:
            pass

        assert _join_point(target=Service()).owner is Service

    def test_owner_of_static_call(self) -> None:
        class Service:
            pass

        assert _join_point(target=Service, is_static=True).owner is Service
