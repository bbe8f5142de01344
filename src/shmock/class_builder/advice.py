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
"""Ready-made chain decorators — advice adapters, short-circuits and spying."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from shmock.class_builder.types import JoinPoint

Handler = Callable[[JoinPoint], Any]


# ---------------------------------------------------------------------------
# Advice adapters
# ---------------------------------------------------------------------------


def before(advice: Callable[[JoinPoint], Any]) -> Handler:
    """Run *advice* before proceeding. Its return value is ignored."""

    def decorator(join_point: JoinPoint) -> Any:
        advice(join_point)
        return join_point.execute()

    return decorator


def after_returning(advice: Callable[[JoinPoint, Any], Any]) -> Handler:
    """Run ``advice(join_point, result)`` once the call returned normally."""

    def decorator(join_point: JoinPoint) -> Any:
        result = join_point.execute()
        advice(join_point, result)
        return result

    return decorator


def after_throwing(advice: Callable[[JoinPoint, Exception], Any]) -> Handler:
    """Run ``advice(join_point, exc)`` when the call raised, then re-raise."""

    def decorator(join_point: JoinPoint) -> Any:
        try:
            return join_point.execute()
        except Exception as exc:
            advice(join_point, exc)
            raise

    return decorator


def after(advice: Callable[[JoinPoint], Any]) -> Handler:
    """Run *advice* after the call, whether it returned or raised."""

    def decorator(join_point: JoinPoint) -> Any:
        try:
            return join_point.execute()
        finally:
            advice(join_point)

    return decorator


# ---------------------------------------------------------------------------
# Short-circuits
# ---------------------------------------------------------------------------


def returning(value: Any) -> Handler:
    """Answer every call with *value* without running the implementation."""

    def decorator(join_point: JoinPoint) -> Any:
        return value

    return decorator


def raising(exc: BaseException | type[BaseException]) -> Handler:
    """Raise *exc* for every call without running the implementation."""

    def decorator(join_point: JoinPoint) -> Any:
        raise exc

    return decorator


# ---------------------------------------------------------------------------
# Spying
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Invocation:
    """A call observed by :class:`CallRecorder`."""

    method_name: str
    args: tuple
    kwargs: dict[str, Any]
    is_static: bool


@dataclass
class CallRecorder:
    """Decorator that records every call before proceeding.

    Usage::

        recorder = CallRecorder()
        builder.add_decorator(recorder)
        ...
        assert recorder.count("add") == 1
        assert recorder.calls("add")[0].args == (1, 2)
    """

    invocations: list[Invocation] = field(default_factory=list)

    def decorate(self, join_point: JoinPoint) -> Any:
        self.invocations.append(
            Invocation(
                method_name=join_point.method_name,
                args=join_point.args,
                kwargs=dict(join_point.kwargs),
                is_static=join_point.is_static,
            )
        )
        return join_point.execute()

    def calls(self, method_name: str | None = None) -> list[Invocation]:
        if method_name is None:
            return list(self.invocations)
        return [i for i in self.invocations if i.method_name == method_name]

    def count(self, method_name: str | None = None) -> int:
        return len(self.calls(method_name))

    def reset(self) -> None:
        self.invocations.clear()
