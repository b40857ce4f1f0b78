"""Version resolvers for supported ecosystems."""

from .npm import NpmPolicyResolver, find_by_range

__all__ = [
    "NpmPolicyResolver",
    "find_by_range",
]
