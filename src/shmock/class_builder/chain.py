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
"""DecoratorChain — composes interceptors around a method implementation."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import Any

from shmock.class_builder.types import Decorator, JoinPoint

Handler = Callable[[JoinPoint], Any]


def as_handler(decorator: Decorator | Handler) -> Handler:
    """Normalize a decorator object or plain callable into a chain handler.

    Objects implementing :class:`Decorator` contribute their bound
    ``decorate`` method; any other callable is used as is.
    """
    if isinstance(decorator, Decorator):
        return decorator.decorate
    if callable(decorator):
        return decorator
    raise TypeError(f"Decorator must be callable or define decorate(join_point), got {decorator!r}")


class DecoratorChain:
    """An immutable, ordered sequence of interceptors.

    The first handler is the outermost frame: it observes the call first
    and finalizes the result last. Each handler continues the chain by
    calling ``join_point.execute()``; an empty chain calls the
    implementation directly.

    Failures are not caught here. Whatever a handler or the implementation
    raises reaches the caller as the same exception object.
    """

    __slots__ = ("_handlers",)

    def __init__(self, decorators: Iterable[Decorator | Handler] = ()) -> None:
        self._handlers: tuple[Handler, ...] = tuple(as_handler(d) for d in decorators)

    def __len__(self) -> int:
        return len(self._handlers)

    def __iter__(self) -> Iterator[Handler]:
        return iter(self._handlers)

    def __repr__(self) -> str:
        return f"DecoratorChain({len(self._handlers)} handlers)"

    def invoke(
        self,
        target: Any,
        method_name: str,
        implementation: Callable[..., Any],
        args: tuple,
        kwargs: dict[str, Any],
        *,
        is_static: bool = False,
    ) -> Any:
        """Run one call through the chain and return its result."""
        join_point = JoinPoint(
            method_name=method_name,
            args=args,
            kwargs=kwargs,
            target=target,
            is_static=is_static,
            implementation=implementation,
            remaining=self._handlers,
        )
        return join_point.execute()
