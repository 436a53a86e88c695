"""Dependency sets — which top-level keys a subscriber watches.

An empty set is a wildcard: the subscriber hears every update.
Matching is exact key-name equality; nested fields are not inspected.
"""

from __future__ import annotations

from collections.abc import Iterable

DependencySet = frozenset[str]

WILDCARD: DependencySet = frozenset()


def dependency_set(dependencies: Iterable[str] | str | None) -> DependencySet:
    """Normalize a subscriber's declared dependencies.

    A bare string is one key, not a sequence of one-character keys.
    Raises TypeError for non-str entries, which could never match a key.
    """
    if not dependencies:
        return WILDCARD
    if isinstance(dependencies, str):
        return frozenset((dependencies,))
    keys = frozenset(dependencies)
    for key in keys:
        if not isinstance(key, str):
            raise TypeError(f"dependency keys must be str, found {key!r}")
    return keys


def matches(dependencies: DependencySet, changed: DependencySet) -> bool:
    """Does a subscriber with these dependencies care about the changed keys?"""
    return not dependencies or not dependencies.isdisjoint(changed)
