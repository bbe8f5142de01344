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
"""Policies, the rules mocked calls must satisfy, and their registry."""

from __future__ import annotations

from typing import Any


class Policy:
    """Base class for mock policies.

    Override the hooks you need; each one fails by raising (typically
    :class:`~shmock.kernel.exceptions.PolicyViolationError`). The default
    hooks accept everything.

    Every hook receives the mocked class, the method name and whether the
    method is static.
    """

    def check_method_parameters(self, cls: Any, method: str, parameters: tuple, static: bool) -> None:
        """Inspect the arguments a method is called with."""

    def check_method_return_value(self, cls: Any, method: str, return_value: Any, static: bool) -> None:
        """Inspect the value a method returns."""

    def check_method_throws(self, cls: Any, method: str, exception: BaseException, static: bool) -> None:
        """Inspect the exception a method raises."""


class PolicyRegistry:
    """Ordered collection of policies.

    Usage::

        registry = PolicyRegistry()
        registry.register(NoNonePolicy())
        for policy in registry.get_all():
            ...
    """

    def __init__(self) -> None:
        self._policies: list[Policy] = []

    def register(self, policy: Policy) -> None:
        if not isinstance(policy, Policy):
            raise TypeError(f"Expected a Policy, got {policy!r}")
        self._policies.append(policy)

    def clear(self) -> None:
        self._policies.clear()

    def get_all(self) -> list[Policy]:
        """Return registered policies in registration order."""
        return list(self._policies)

    def __len__(self) -> int:
        return len(self._policies)


default_registry = PolicyRegistry()


def add_policy(policy: Policy) -> None:
    """Register *policy* in the process-wide registry."""
    default_registry.register(policy)


def clear_policies() -> None:
    """Remove every policy from the process-wide registry."""
    default_registry.clear()


def get_policies() -> list[Policy]:
    return default_registry.get_all()
