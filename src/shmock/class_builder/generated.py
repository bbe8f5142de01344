"""Namespace that synthesized classes are published into.

Every class created by :class:`~shmock.class_builder.builder.ClassBuilder`
gets a unique name from a process-wide counter and, when publishing is
enabled, becomes reachable as an attribute of this module. Published
classes are held weakly: a class nothing else references is dropped.
"""

from __future__ import annotations

import itertools
import weakref

_counter = itertools.count(1)
_published: weakref.WeakValueDictionary[str, type] = weakref.WeakValueDictionary()


def next_name(prefix: str, base_name: str | None = None) -> str:
    """Return a class name no earlier call has returned."""
    number = next(_counter)
    if base_name:
        return f"{prefix}_{base_name}_{number}"
    return f"{prefix}_{number}"


def publish(cls: type) -> None:
    """Make *cls* reachable as ``shmock.class_builder.generated.<name>``."""
    _published[cls.__name__] = cls


def lookup(name: str) -> type:
    """Return the published class called *name*.

    Raises:
        LookupError: if no live class of that name was published.
    """
    try:
        return _published[name]
    except KeyError:
        raise LookupError(f"No synthesized class named {name!r}") from None


def __getattr__(name: str) -> type:
    try:
        return _published[name]
    except KeyError:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}") from None
