"""StateObservable — one keyed record, broadcast to subscribers by dependency.

Subscribers declare the top-level keys they care about. next() merges (or
overwrites) the record and calls back only the subscribers whose keys were
part of the update. pipe() hands out a view that can subscribe and reset but
cannot write.

Dispatch is synchronous. Each broadcast walks a snapshot of the registry, so
callbacks may subscribe, unsubscribe or call next() without disturbing the
pass in flight. A callback that raises is logged and skipped; the others
still run.
"""

from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Iterable, Mapping
from typing import Any, Callable

from keystate._dependencies import DependencySet, dependency_set, matches
from keystate.update import Record, Update, as_update, validate

logger = logging.getLogger("keystate.state")

Callback = Callable[[Record], Any]

DEFAULT_KEY = "main"


class Subscriber:
    """A registered callback and the keys it watches."""

    __slots__ = ("func", "dependencies")

    def __init__(self, func: Callback, dependencies: DependencySet) -> None:
        self.func = func
        self.dependencies = dependencies

    def __repr__(self) -> str:
        deps = sorted(self.dependencies) or "*"
        return f"Subscriber({getattr(self.func, '__name__', self.func)!r}, {deps})"


class StateObservable:
    """A mutable keyed record that notifies subscribers of the keys they watch.

    With behavior=True new subscribers are called with the current record
    as soon as they register, unless they pass is_immediate=False.

    Usage:
        state = StateObservable({"count": 0})
        log = []

        state.subscribe(log.append, ["count"], key="counter")
        state.next({"count": 1})    # log == [{"count": 1}]
        state.next({"other": 5})    # not a watched key, log unchanged
        state.reset()               # log == [{"count": 1}, {"count": 0}]
    """

    def __init__(self, value: Mapping[str, Any] | None = None, behavior: bool = False) -> None:
        self._initial = copy.deepcopy(validate({} if value is None else value))
        self._value: Record = copy.deepcopy(self._initial)
        self._behavior = behavior
        self._subscribers: dict[str, Subscriber] = {}
        self._lock = threading.RLock()

    @property
    def value(self) -> Record:
        """A copy of the current record."""
        with self._lock:
            return dict(self._value)

    @property
    def initial_value(self) -> Record:
        return copy.deepcopy(self._initial)

    @property
    def behavior(self) -> bool:
        return self._behavior

    def next(
        self,
        value: Mapping[str, Any] | Callable[[Record], Mapping[str, Any]] | Update,
        overwrite: bool = False,
    ) -> None:
        """Apply an update and notify the subscribers it concerns.

        value is a mapping, a function of the current record returning a
        mapping, or a Replacement/Computed. Raises InvalidValueError before
        anything changes if the mapping is not valid. With overwrite=True
        the record is replaced and every subscriber is notified.
        """
        update = as_update(value)
        with self._lock:
            payload = update.resolve(self._value)
            if overwrite:
                self._value = payload
            else:
                self._value = {**self._value, **payload}
            targets = self._targets(None if overwrite else frozenset(payload))
        self._broadcast(targets)

    def subscribe(
        self,
        func: Callback,
        dependencies: Iterable[str] | str = (),
        *,
        is_immediate: bool | None = None,
        key: str = DEFAULT_KEY,
    ) -> None:
        """Register func under key, replacing any subscriber already there.

        func is called with the full record whenever an update touches one
        of dependencies. No dependencies means every update. When
        is_immediate (default: the container's behavior flag) is true, func
        is also called right away with the current record.
        """
        if is_immediate is None:
            is_immediate = self._behavior
        with self._lock:
            replaced = key in self._subscribers
            self._subscribers[key] = Subscriber(func, dependency_set(dependencies))
            current = dict(self._value)
        if replaced:
            logger.debug("Replaced subscriber %r", key)
        if is_immediate:
            func(current)

    def unsubscribe(self, key: str = DEFAULT_KEY) -> None:
        """Remove the subscriber registered under key. Missing keys are ignored."""
        with self._lock:
            self._subscribers.pop(key, None)

    def dispose(self) -> None:
        """Remove every subscriber. The record is kept."""
        with self._lock:
            count = len(self._subscribers)
            self._subscribers.clear()
        logger.debug("Disposed %d subscribers", count)

    def reset(self) -> None:
        """Restore the record to the value given at construction.

        Subscribers watching any key of the initial value, or any key the
        reset drops, are notified.
        """
        with self._lock:
            dropped = self._value.keys() - self._initial.keys()
            self._value = copy.deepcopy(self._initial)
            targets = self._targets(frozenset(self._initial) | dropped)
        self._broadcast(targets)

    def pipe(self) -> PipedState:
        """A view of this container that can subscribe and reset, but not write."""
        return PipedState(self)

    def _targets(self, changed: DependencySet | None) -> list[tuple[str, Subscriber]]:
        """Snapshot the subscribers to notify. changed=None means everyone."""
        return [
            (key, sub)
            for key, sub in self._subscribers.items()
            if changed is None or matches(sub.dependencies, changed)
        ]

    def _broadcast(self, targets: list[tuple[str, Subscriber]]) -> None:
        """Call each target with the record as it stands when its turn comes.

        A nested next() from an earlier callback has already committed, so
        later targets see its result rather than the record this pass began with.
        """
        for key, sub in targets:
            with self._lock:
                current = dict(self._value)
            try:
                sub.func(current)
            except Exception:
                logger.exception("Subscriber %r failed during broadcast", key)

    def __contains__(self, key: object) -> bool:
        return key in self._subscribers

    def __len__(self) -> int:
        return len(self._subscribers)

    def __repr__(self) -> str:
        return f"StateObservable({self._value!r}, subscribers={list(self._subscribers)})"


class PipedState:
    """Restricted view of a StateObservable: subscribe, unsubscribe, reset.

    Shares the container's record and registry. next() and dispose() stay
    with whoever holds the container itself.
    """

    __slots__ = ("__source",)

    def __init__(self, source: StateObservable) -> None:
        self.__source = source

    def subscribe(
        self,
        func: Callback,
        dependencies: Iterable[str] | str = (),
        *,
        is_immediate: bool | None = None,
        key: str = DEFAULT_KEY,
    ) -> None:
        self.__source.subscribe(func, dependencies, is_immediate=is_immediate, key=key)

    def unsubscribe(self, key: str = DEFAULT_KEY) -> None:
        self.__source.unsubscribe(key)

    def reset(self) -> None:
        self.__source.reset()

    def __repr__(self) -> str:
        return f"PipedState({self.__source!r})"
