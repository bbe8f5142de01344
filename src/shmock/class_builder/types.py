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
"""Class builder core types — parameter descriptors, specs and JoinPoint."""

from __future__ import annotations

import dataclasses
import inspect
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

_VARIADIC_PREFIX = {
    inspect.Parameter.VAR_POSITIONAL: "*",
    inspect.Parameter.VAR_KEYWORD: "**",
}


@dataclass(frozen=True)
class ParameterDescriptor:
    """One formal parameter of a generated method.

    Attributes:
        name: The parameter name, without any ``*`` prefix.
        type_constraint: Rendered constraint, e.g. ``"list"`` or
            ``"myapp.orders.Order"``; ``None`` when unconstrained.
        kind: The :class:`inspect.Parameter` kind.
        default: The default value, or ``inspect.Parameter.empty``.
        annotation: The annotation object placed on the generated
            signature. Falls back to *type_constraint* when empty.
    """

    name: str
    type_constraint: str | None = None
    kind: inspect._ParameterKind = inspect.Parameter.POSITIONAL_OR_KEYWORD
    default: Any = inspect.Parameter.empty
    annotation: Any = inspect.Parameter.empty

    def __str__(self) -> str:
        name = _VARIADIC_PREFIX.get(self.kind, "") + self.name
        if self.type_constraint is None:
            return name
        return f"{self.type_constraint} {name}"

    def to_parameter(self) -> inspect.Parameter:
        """Build the :class:`inspect.Parameter` this descriptor stands for."""
        annotation = self.annotation
        if annotation is inspect.Parameter.empty and self.type_constraint is not None:
            annotation = self.type_constraint
        return inspect.Parameter(self.name, self.kind, default=self.default, annotation=annotation)


@dataclass(frozen=True)
class MethodSpec:
    """A method registered on a :class:`~shmock.class_builder.builder.ClassBuilder`.

    ``parameters`` is ``None`` until synthesis infers it from
    *implementation*.
    """

    name: str
    implementation: Callable[..., Any]
    is_static: bool = False
    parameters: tuple[ParameterDescriptor, ...] | None = None

    @property
    def key(self) -> tuple[str, bool]:
        return (self.name, self.is_static)

    def signature(self) -> inspect.Signature:
        """The call signature of the method, without ``self``."""
        return inspect.Signature([p.to_parameter() for p in self.parameters or ()])


@dataclass(frozen=True)
class ClassSpec:
    """Snapshot of everything a builder knows when ``create()`` runs."""

    superclass: str | type | None = None
    interfaces: tuple[str | type, ...] = ()
    methods: Mapping[tuple[str, bool], MethodSpec] = field(default_factory=dict)
    decorators: tuple[Decorator | Callable[[JoinPoint], Any], ...] = ()


@runtime_checkable
class Decorator(Protocol):
    """Interceptor around every method call of a synthesized class.

    Return ``join_point.execute()`` to leave the call untouched. Returning
    anything else, or raising, short-circuits the rest of the chain.
    """

    def decorate(self, join_point: JoinPoint) -> Any: ...


@dataclass(frozen=True)
class JoinPoint:
    """A single in-flight invocation of a synthesized method.

    Attributes:
        method_name: Name of the method being called.
        args: Positional arguments passed to the method.
        kwargs: Keyword arguments passed to the method.
        target: The instance, or the class for a static call.
        is_static: Whether a static method was invoked.
        implementation: The registered closure at the end of the chain.
        remaining: Decorator handlers that have not run yet, outermost first.
    """

    method_name: str
    args: tuple
    kwargs: dict[str, Any]
    target: Any
    is_static: bool
    implementation: Callable[..., Any]
    remaining: tuple[Callable[[JoinPoint], Any], ...] = ()

    @property
    def owner(self) -> type:
        """The synthesized class the method belongs to."""
        return self.target if self.is_static else type(self.target)

    def execute(self) -> Any:
        """Proceed to the next decorator, or to the implementation.

        May be called any number of times; each call re-runs the rest of
        the chain.
        """
        if not self.remaining:
            return self.implementation(*self.args, **self.kwargs)
        handler, *rest = self.remaining
        return handler(dataclasses.replace(self, remaining=tuple(rest)))

    def with_arguments(self, *args: Any, **kwargs: Any) -> JoinPoint:
        """Return a copy whose ``execute()`` proceeds with other arguments."""
        return dataclasses.replace(self, args=args, kwargs=kwargs)
