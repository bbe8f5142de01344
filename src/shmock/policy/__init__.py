"""Mock policies — checks applied to the calls a synthesized class receives."""

from shmock.policy.decorator import PolicyDecorator
from shmock.policy.registry import Policy, PolicyRegistry, add_policy, clear_policies, get_policies

__all__ = [
    "Policy",
    "PolicyDecorator",
    "PolicyRegistry",
    "add_policy",
    "clear_policies",
    "get_policies",
]
