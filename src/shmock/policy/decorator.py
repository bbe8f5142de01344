"""PolicyDecorator — applies registered policies to live calls."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from shmock.class_builder.types import JoinPoint
from shmock.policy.registry import Policy, get_policies


class PolicyDecorator:
    """Chain decorator that runs policy hooks around every call.

    Parameters are checked before proceeding, the return value after a
    normal return, and the exception after a failure, which is then
    re-raised unchanged.

    Args:
        mocked_class: What policies see as the class. Defaults to the
            superclass of the synthesized class (or the class itself when
            it has no superclass).
        policies: Fixed policies to apply. Defaults to the process-wide
            registry, read on every call.
    """

    def __init__(self, mocked_class: Any = None, policies: Iterable[Policy] | None = None) -> None:
        self._mocked_class = mocked_class
        self._policies = list(policies) if policies is not None else None

    def _current_policies(self) -> list[Policy]:
        return self._policies if self._policies is not None else get_policies()

    def _class_for(self, join_point: JoinPoint) -> Any:
        if self._mocked_class is not None:
            return self._mocked_class
        owner = join_point.owner
        superclass = getattr(owner, "__shmock_superclass__", None)
        return superclass if superclass is not None else owner

    def decorate(self, join_point: JoinPoint) -> Any:
        policies = self._current_policies()
        if not policies:
            return join_point.execute()

        cls = self._class_for(join_point)
        name, static = join_point.method_name, join_point.is_static
        parameters = (*join_point.args, *join_point.kwargs.values())

        for policy in policies:
            policy.check_method_parameters(cls, name, parameters, static)

        try:
            result = join_point.execute()
        except Exception as exc:
            for policy in policies:
                policy.check_method_throws(cls, name, exc, static)
            raise

        for policy in policies:
            policy.check_method_return_value(cls, name, result, static)
        return result
