"""Closure inspection — derive parameter descriptors from a callable."""

from __future__ import annotations

import builtins
import importlib
import inspect
import types
import typing
from collections.abc import Callable, Iterable
from typing import Any

from shmock.class_builder.types import ParameterDescriptor
from shmock.kernel.exceptions import UninspectableCallableError

_UNION_ORIGINS = (typing.Union, types.UnionType)


def describe_annotation(annotation: Any) -> str | None:
    """Render an annotation as a type constraint string.

    ``None`` means the parameter is unconstrained. Builtin types render
    bare (``list``), other classes by module and qualified name, and
    subscripted generics by their origin (``list[int]`` -> ``list``).
    """
    if annotation is inspect.Parameter.empty or annotation is Any:
        return None
    if annotation is None or annotation is type(None):
        return "None"
    if isinstance(annotation, str):
        return annotation

    origin = typing.get_origin(annotation)
    if origin in _UNION_ORIGINS:
        return " | ".join(describe_annotation(arg) or "Any" for arg in typing.get_args(annotation))
    if origin is not None:
        return describe_annotation(origin)

    if isinstance(annotation, type):
        if annotation.__module__ == "builtins":
            return annotation.__qualname__
        return f"{annotation.__module__}.{annotation.__qualname__}"
    return repr(annotation)


def resolve_type_name(name: str) -> Any:
    """Resolve a rendered type constraint back to an object where possible.

    Returns the name unchanged when it does not resolve, so explicit
    signatures can mention types that are not importable here.
    """
    if "." not in name:
        return getattr(builtins, name, name)

    module_name, _, attr_path = name.partition(".")
    parts = attr_path.split(".")
    # Find the longest importable module prefix, then walk attributes.
    for split in range(len(parts), -1, -1):
        candidate = ".".join([module_name, *parts[:split]])
        try:
            obj: Any = importlib.import_module(candidate)
        except ImportError:
            continue
        for attr in parts[split:]:
            obj = getattr(obj, attr, None)
            if obj is None:
                return name
        return obj
    return name


def parse_descriptor(text: str) -> ParameterDescriptor:
    """Parse ``"name"``, ``"list name"``, ``"pkg.Cls *args"`` and the like."""
    pieces = text.strip().rsplit(None, 1)
    if not pieces:
        raise ValueError(f"Invalid parameter descriptor: {text!r}")
    if len(pieces) == 2:
        constraint, name = pieces
    else:
        constraint, name = None, pieces[0]

    kind = inspect.Parameter.POSITIONAL_OR_KEYWORD
    if name.startswith("**"):
        kind, name = inspect.Parameter.VAR_KEYWORD, name[2:]
    elif name.startswith("*"):
        kind, name = inspect.Parameter.VAR_POSITIONAL, name[1:]

    if not name.isidentifier():
        raise ValueError(f"Invalid parameter descriptor: {text!r}")

    annotation: Any = inspect.Parameter.empty
    if constraint is not None:
        annotation = resolve_type_name(constraint)
    return ParameterDescriptor(name=name, type_constraint=constraint, kind=kind, annotation=annotation)


def descriptors_from_signature(signature: inspect.Signature) -> tuple[ParameterDescriptor, ...]:
    """Convert every parameter of *signature* into a descriptor."""
    return tuple(
        ParameterDescriptor(
            name=param.name,
            type_constraint=describe_annotation(param.annotation),
            kind=param.kind,
            default=param.default,
            annotation=param.annotation,
        )
        for param in signature.parameters.values()
    )


def coerce_signature(
    signature: inspect.Signature | Iterable[str | ParameterDescriptor],
) -> tuple[ParameterDescriptor, ...]:
    """Normalize an explicit signature given to the builder."""
    if isinstance(signature, inspect.Signature):
        return descriptors_from_signature(signature)
    if isinstance(signature, str):
        raise TypeError("signature must be a sequence of descriptors, not a single string")

    descriptors = tuple(
        item if isinstance(item, ParameterDescriptor) else parse_descriptor(item) for item in signature
    )
    # Let inspect validate ordering and duplicates.
    try:
        inspect.Signature([d.to_parameter() for d in descriptors])
    except ValueError as exc:
        raise ValueError(f"Invalid explicit signature {[str(d) for d in descriptors]}: {exc}") from exc
    return descriptors


class ClosureInspector:
    """Derives the formal parameter list of a callable.

    Usage::

        inspector = ClosureInspector(lambda a, b: a + b)
        inspector.signature_args()   # ["a", "b"]

    Raises:
        UninspectableCallableError: if no signature is available, e.g. for
            some builtins implemented in C.
    """

    def __init__(self, fn: Callable[..., Any]) -> None:
        self._fn = fn
        self._signature = self._inspect(fn)

    @staticmethod
    def _inspect(fn: Callable[..., Any]) -> inspect.Signature:
        try:
            return inspect.signature(fn, eval_str=True)
        except (NameError, AttributeError, SyntaxError):
            # Forward references that do not resolve stay as strings.
            return inspect.signature(fn)
        except (ValueError, TypeError) as exc:
            raise UninspectableCallableError(
                f"Cannot inspect the parameters of {fn!r}; supply an explicit signature",
                code="INSPECT_001",
                context={"callable": repr(fn)},
            ) from exc

    @property
    def signature(self) -> inspect.Signature:
        return self._signature

    def parameters(self) -> tuple[ParameterDescriptor, ...]:
        """Descriptors for every parameter, in declaration order."""
        return descriptors_from_signature(self._signature)

    def signature_args(self) -> list[str]:
        """Rendered descriptors, e.g. ``["list a", "myapp.Order order"]``."""
        return [str(descriptor) for descriptor in self.parameters()]


def signature_args(fn: Callable[..., Any]) -> list[str]:
    """Shortcut for ``ClosureInspector(fn).signature_args()``."""
    return ClosureInspector(fn).signature_args()
