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
"""ClassBuilder — synthesizes classes whose methods run through a decorator chain."""

from __future__ import annotations

import dataclasses
import inspect
import types
from collections.abc import Callable, Iterable, Mapping
from typing import Any

import structlog

from shmock.class_builder import generated
from shmock.class_builder.chain import DecoratorChain, Handler, as_handler
from shmock.class_builder.inspector import ClosureInspector, coerce_signature, resolve_type_name
from shmock.class_builder.types import ClassSpec, Decorator, MethodSpec, ParameterDescriptor
from shmock.config.properties.builder import BuilderProperties
from shmock.core.config import Config
from shmock.kernel.exceptions import (
    ClassBuilderException,
    ReservedNameError,
    StructuralConstraintError,
    UninspectableCallableError,
)

logger = structlog.get_logger("shmock.class_builder.builder")

SignatureLike = inspect.Signature | Iterable[str | ParameterDescriptor]

RESERVED_PREFIX = "__shmock_"

RESERVED_NAMES = frozenset(
    {
        "__abstractmethods__",
        "__annotations__",
        "__bases__",
        "__class__",
        "__class_getitem__",
        "__dict__",
        "__doc__",
        "__init_subclass__",
        "__module__",
        "__mro__",
        "__name__",
        "__new__",
        "__qualname__",
        "__slots__",
        "__weakref__",
        "_abc_impl",
    }
)

# Bases whose own members are plumbing, not declarations to conform to.
_PLUMBING_MODULES = frozenset({"builtins", "abc", "typing"})

_P = inspect.Parameter
_POSITIONAL = (_P.POSITIONAL_ONLY, _P.POSITIONAL_OR_KEYWORD)


class ClassBuilder:
    """Accumulates a class specification and synthesizes classes from it.

    Usage::

        builder = ClassBuilder()
        builder.set_extends("myapp.billing.Calculator")
        builder.add_method("add", lambda a, b: a + b)
        builder.add_static_method("multiply", lambda a, b: a * b)
        builder.add_decorator(CallRecorder())

        Calculator = builder.create()
        Calculator().add(1, 2)      # 3, after passing through the recorder
        Calculator.multiply(2, 5)   # 10

    Nothing is validated until :meth:`create`. Each ``create()`` call
    snapshots the current configuration and produces a new, uniquely
    named class; the builder can keep being modified afterwards without
    affecting classes already created.

    Synthesis is not thread-safe. Create classes from a single setup path
    before using them concurrently.
    """

    def __init__(self, config: Config | None = None) -> None:
        self._properties = (config or Config.from_defaults()).bind(BuilderProperties)
        self._superclass: str | type | None = None
        self._interfaces: list[str | type] = []
        self._methods: dict[tuple[str, bool], MethodSpec] = {}
        self._decorators: list[Decorator | Handler] = []

    @property
    def properties(self) -> BuilderProperties:
        return self._properties

    @property
    def spec(self) -> ClassSpec:
        """Snapshot of the current configuration."""
        return ClassSpec(
            superclass=self._superclass,
            interfaces=tuple(self._interfaces),
            methods=types.MappingProxyType(dict(self._methods)),
            decorators=tuple(self._decorators),
        )

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_extends(self, superclass: str | type) -> None:
        """Set the superclass, as a class or a dotted import path. Last call wins."""
        self._superclass = superclass

    def add_interface(self, interface: str | type) -> None:
        """Add an interface (ABC, Protocol or any class) the class must satisfy."""
        if interface not in self._interfaces:
            self._interfaces.append(interface)

    def add_method(
        self,
        name: str,
        implementation: Callable[..., Any],
        signature: SignatureLike | None = None,
    ) -> None:
        """Register an instance method.

        *implementation* is called with the call arguments only, never
        with the instance. Without *signature* the parameters are inferred
        from *implementation* when the class is created. Registering the
        same name again replaces the earlier method.
        """
        self._register(name, implementation, signature, is_static=False)

    def add_static_method(
        self,
        name: str,
        implementation: Callable[..., Any],
        signature: SignatureLike | None = None,
    ) -> None:
        """Register a static method. Static and instance names do not collide."""
        self._register(name, implementation, signature, is_static=True)

    def add_decorator(self, decorator: Decorator | Handler) -> None:
        """Append a decorator; the first one added is the outermost."""
        as_handler(decorator)
        self._decorators.append(decorator)

    def _register(
        self,
        name: str,
        implementation: Callable[..., Any],
        signature: SignatureLike | None,
        *,
        is_static: bool,
    ) -> None:
        if not callable(implementation):
            raise TypeError(f"Implementation of {name!r} must be callable, got {implementation!r}")
        parameters = coerce_signature(signature) if signature is not None else None
        spec = MethodSpec(name=name, implementation=implementation, is_static=is_static, parameters=parameters)
        self._methods[spec.key] = spec

    # ------------------------------------------------------------------
    # Synthesis
    # ------------------------------------------------------------------

    def create(self) -> type:
        """Synthesize a new class from the current configuration.

        Raises:
            ReservedNameError: a method name is reserved for synthesis.
            UninspectableCallableError: parameters could not be inferred.
            StructuralConstraintError: a base cannot be resolved or
                subclassed, abstract methods remain, or a method does not
                fit its base declaration.
        """
        spec = self.spec
        try:
            cls = self._synthesize(spec)
        except ClassBuilderException as exc:
            logger.warning("class_synthesis_failed", error=str(exc), code=exc.code)
            raise

        if self._properties.publish:
            generated.publish(cls)
        logger.debug(
            "class_synthesized",
            class_name=cls.__name__,
            bases=[base.__qualname__ for base in cls.__bases__],
            methods=sorted(f"{'static ' if s else ''}{n}" for n, s in spec.methods),
            decorators=len(spec.decorators),
        )
        return cls

    def instantiate(self, *args: Any, **kwargs: Any) -> Any:
        """Create a class and return an instance of it."""
        return self.create()(*args, **kwargs)

    def _synthesize(self, spec: ClassSpec) -> type:
        for name, _ in spec.methods:
            _check_name(name)

        superclass, bases = _resolve_bases(spec)
        mro = _linearize(bases)
        methods = {key: _with_parameters(method) for key, method in spec.methods.items()}

        # All structural checks run before the class exists.
        _check_final(mro, methods)
        if self._properties.check_signatures:
            _check_overrides(mro, methods)
        if self._properties.require_concrete:
            missing = _unimplemented(mro, methods)
            if missing:
                raise StructuralConstraintError(
                    f"Synthesized class leaves abstract methods unimplemented: {', '.join(missing)}",
                    code="STRUCTURE_004",
                    context={"missing": missing},
                )

        chain = DecoratorChain(spec.decorators)
        class_name = generated.next_name(
            self._properties.class_prefix, superclass.__name__ if superclass is not None else None
        )

        namespace: dict[str, Any] = {
            "__module__": generated.__name__,
            "__qualname__": class_name,
            "__shmock_spec__": dataclasses.replace(spec, methods=types.MappingProxyType(methods)),
            "__shmock_superclass__": superclass,
            "__shmock_methods__": types.MappingProxyType(methods),
            "__shmock_chain__": chain,
        }
        namespace.update(_method_slots(methods, chain, class_name))

        try:
            return types.new_class(class_name, bases, {}, lambda ns: ns.update(namespace))
        except TypeError as exc:
            raise _unsynthesizable(bases, exc) from exc


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _check_name(name: str) -> None:
    if name in RESERVED_NAMES or name.startswith(RESERVED_PREFIX):
        raise ReservedNameError(
            f"Method name {name!r} is reserved for class synthesis",
            code="RESERVED_001",
            context={"method": name},
        )


def _resolve_class(ref: str | type, role: str) -> type:
    resolved: Any = ref
    if isinstance(ref, str):
        try:
            resolved = resolve_type_name(ref)
        except Exception as exc:
            raise StructuralConstraintError(
                f"Cannot resolve {role} {ref!r}: {exc}",
                code="STRUCTURE_001",
                context={role: ref},
            ) from exc
    if not isinstance(resolved, type):
        raise StructuralConstraintError(
            f"Cannot resolve {role} {ref!r} to a class",
            code="STRUCTURE_001",
            context={role: repr(ref)},
        )
    if getattr(resolved, "__final__", False):
        raise StructuralConstraintError(
            f"{role.capitalize()} {resolved.__qualname__} is final and cannot be extended",
            code="STRUCTURE_002",
            context={role: resolved.__qualname__},
        )
    return resolved


def _resolve_bases(spec: ClassSpec) -> tuple[type | None, tuple[type, ...]]:
    """Resolve the superclass and the bases to synthesize from.

    A base that another listed base already subclasses is left out; the
    subclass brings it along.
    """
    superclass = _resolve_class(spec.superclass, "superclass") if spec.superclass is not None else None
    listed: list[type] = [superclass] if superclass is not None else []
    for interface in spec.interfaces:
        resolved = _resolve_class(interface, "interface")
        if resolved not in listed:
            listed.append(resolved)
    bases = tuple(b for b in listed if not any(other is not b and issubclass(other, b) for other in listed))
    return superclass, bases or (object,)


def _unsynthesizable(bases: tuple[type, ...], exc: Exception) -> StructuralConstraintError:
    names = [b.__qualname__ for b in bases]
    return StructuralConstraintError(
        f"Cannot synthesize a class from bases {names}: {exc}",
        code="STRUCTURE_003",
        context={"bases": names},
    )


def _linearize(bases: tuple[type, ...]) -> tuple[type, ...]:
    """C3 linearization of *bases*: the new class's ``__mro__`` without itself."""
    sequences = [list(base.__mro__) for base in bases] + [list(bases)]
    result: list[type] = []
    while True:
        sequences = [seq for seq in sequences if seq]
        if not sequences:
            return tuple(result)
        for seq in sequences:
            head = seq[0]
            if not any(head in other[1:] for other in sequences):
                break
        else:
            raise _unsynthesizable(bases, TypeError("Cannot create a consistent method resolution order"))
        result.append(head)
        for seq in sequences:
            if seq[0] is head:
                del seq[0]


def _with_parameters(method: MethodSpec) -> MethodSpec:
    if method.parameters is not None:
        return method
    try:
        parameters = ClosureInspector(method.implementation).parameters()
    except UninspectableCallableError as exc:
        exc.context["method"] = method.name
        raise
    return dataclasses.replace(method, parameters=parameters)


def _find_declaration(mro: tuple[type, ...], name: str) -> tuple[type, Any] | None:
    for klass in mro:
        if klass.__module__ in _PLUMBING_MODULES:
            continue
        if name in vars(klass):
            return klass, vars(klass)[name]
    return None


def _is_final(attr: Any) -> bool:
    return bool(getattr(attr, "__final__", False) or getattr(getattr(attr, "__func__", None), "__final__", False))


def _check_final(mro: tuple[type, ...], methods: Mapping[tuple[str, bool], MethodSpec]) -> None:
    for name in dict.fromkeys(n for n, _ in methods):
        declaration = _find_declaration(mro, name)
        if declaration is not None and _is_final(declaration[1]):
            owner = declaration[0]
            raise StructuralConstraintError(
                f"{owner.__qualname__}.{name} is final and cannot be overridden",
                code="STRUCTURE_002",
                context={"method": name, "declared_by": owner.__qualname__},
            )


def _unimplemented(mro: tuple[type, ...], methods: Mapping[tuple[str, bool], MethodSpec]) -> list[str]:
    """Abstract methods the bases declare that nothing registered or inherited implements."""
    registered = {name for name, _ in methods}
    candidates: set[str] = set()
    for klass in mro:
        candidates.update(getattr(klass, "__abstractmethods__", ()))

    missing = []
    for name in sorted(candidates - registered):
        nearest = next((vars(klass)[name] for klass in mro if name in vars(klass)), None)
        if getattr(nearest, "__isabstractmethod__", False):
            missing.append(name)
    return missing


def _check_overrides(mro: tuple[type, ...], methods: Mapping[tuple[str, bool], MethodSpec]) -> None:
    """Check each method against the declaration it overrides, if any."""
    for name in {n for n, _ in methods}:
        if name.startswith("__") and name.endswith("__"):
            continue
        declaration = _find_declaration(mro, name)
        if declaration is None:
            continue
        owner, attr = declaration

        if isinstance(attr, (staticmethod, classmethod)):
            declared_static, fn = True, attr.__func__
        elif inspect.isfunction(attr):
            declared_static, fn = False, attr
        else:
            continue

        method = methods.get((name, declared_static))
        if method is None:
            expected = "a static" if declared_static else "an instance"
            raise StructuralConstraintError(
                f"{owner.__qualname__}.{name} is {expected} method and must be registered as one",
                code="STRUCTURE_005",
                context={"method": name, "declared_by": owner.__qualname__},
            )

        try:
            required = ClosureInspector(fn).signature
        except UninspectableCallableError:
            continue
        if not isinstance(attr, staticmethod):
            required = required.replace(parameters=list(required.parameters.values())[1:])

        problem = _signature_mismatch(required, method.signature())
        if problem is not None:
            raise StructuralConstraintError(
                f"Method {name}{method.signature()} is incompatible with {owner.__qualname__}.{name}{required}: {problem}",
                code="STRUCTURE_006",
                context={"method": name, "declared_by": owner.__qualname__},
            )


def _signature_mismatch(required: inspect.Signature, provided: inspect.Signature) -> str | None:
    """Describe why *provided* cannot accept every call *required* accepts, or None."""
    req = list(required.parameters.values())
    prov = list(provided.parameters.values())
    prov_varargs = any(p.kind is _P.VAR_POSITIONAL for p in prov)
    prov_varkw = any(p.kind is _P.VAR_KEYWORD for p in prov)

    req_positional = [p for p in req if p.kind in _POSITIONAL]
    prov_positional = [p for p in prov if p.kind in _POSITIONAL]

    if not prov_varargs:
        if len(prov_positional) < len(req_positional):
            return f"accepts {len(prov_positional)} positional parameters, declaration has {len(req_positional)}"
        if any(p.kind is _P.VAR_POSITIONAL for p in req):
            return "declaration accepts *args"

    req_mandatory = [p for p in req_positional if p.default is _P.empty]
    prov_mandatory = [p for p in prov_positional if p.default is _P.empty]
    if len(prov_mandatory) > len(req_mandatory):
        return f"requires {len(prov_mandatory)} positional arguments, declaration requires {len(req_mandatory)}"

    req_keywords = {p.name for p in req if p.kind in (_P.POSITIONAL_OR_KEYWORD, _P.KEYWORD_ONLY)}
    prov_keywords = {p.name for p in prov if p.kind in (_P.POSITIONAL_OR_KEYWORD, _P.KEYWORD_ONLY)}
    if not prov_varkw:
        for p in req:
            if p.kind is _P.KEYWORD_ONLY and p.name not in prov_keywords:
                return f"missing keyword-only parameter {p.name!r}"
        if any(p.kind is _P.VAR_KEYWORD for p in req):
            return "declaration accepts **kwargs"
    for p in prov:
        if p.kind is _P.KEYWORD_ONLY and p.default is _P.empty and p.name not in req_keywords:
            return f"requires keyword-only parameter {p.name!r} the declaration does not have"

    for position, (declared, given) in enumerate(zip(req_positional, prov_positional)):
        if declared.annotation is _P.empty or given.annotation is _P.empty:
            continue
        if (
            isinstance(declared.annotation, type)
            and isinstance(given.annotation, type)
            and not issubclass(declared.annotation, given.annotation)
        ):
            return (
                f"parameter {position} accepts {given.annotation.__qualname__}, "
                f"declaration passes {declared.annotation.__qualname__}"
            )
    return None


# ---------------------------------------------------------------------------
# Dispatchers
# ---------------------------------------------------------------------------


class _SharedNameMethod:
    """Slot for a name registered both as a static and as an instance method.

    Access through the class yields the static method; access through an
    instance yields the instance method.
    """

    __slots__ = ("_instance_fn", "_static_fn")

    def __init__(self, instance_fn: Callable[..., Any], static_fn: Callable[..., Any]) -> None:
        self._instance_fn = instance_fn
        self._static_fn = static_fn

    def __get__(self, obj: Any, objtype: type | None = None) -> Any:
        if obj is None:
            return types.MethodType(self._static_fn, objtype)
        return types.MethodType(self._instance_fn, obj)


def _receiver(name: str, signature: inspect.Signature) -> inspect.Parameter:
    while name in signature.parameters:
        name = f"_{name}"
    return inspect.Parameter(name, _P.POSITIONAL_ONLY)


def _make_dispatcher(method: MethodSpec, chain: DecoratorChain, class_name: str) -> Callable[..., Any]:
    """Build the function that routes one method's calls through *chain*.

    The receiver is the instance, or the class for static methods (which
    are installed as classmethods so they need no instance).
    """
    signature = method.signature()
    name, implementation, is_static = method.name, method.implementation, method.is_static
    qualname = f"{class_name}.{name}"

    def dispatch(receiver: Any, /, *args: Any, **kwargs: Any) -> Any:
        try:
            signature.bind(*args, **kwargs)
        except TypeError as exc:
            raise TypeError(f"{qualname}(): {exc}") from None
        return chain.invoke(receiver, name, implementation, args, kwargs, is_static=is_static)

    receiver = _receiver("cls" if is_static else "self", signature)
    dispatch.__signature__ = signature.replace(  # type: ignore[attr-defined]
        parameters=[receiver, *signature.parameters.values()]
    )
    dispatch.__name__ = name
    dispatch.__qualname__ = qualname
    dispatch.__module__ = generated.__name__
    dispatch.__doc__ = getattr(implementation, "__doc__", None)
    return dispatch


def _method_slots(
    methods: Mapping[tuple[str, bool], MethodSpec],
    chain: DecoratorChain,
    class_name: str,
) -> dict[str, Any]:
    slots: dict[str, Any] = {}
    for name in dict.fromkeys(n for n, _ in methods):
        instance = methods.get((name, False))
        static = methods.get((name, True))
        instance_fn = _make_dispatcher(instance, chain, class_name) if instance else None
        static_fn = _make_dispatcher(static, chain, class_name) if static else None

        if instance_fn and static_fn:
            slots[name] = _SharedNameMethod(instance_fn, static_fn)
        elif static_fn:
            slots[name] = classmethod(static_fn)
        else:
            slots[name] = instance_fn
    return slots
