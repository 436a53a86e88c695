"""Textual widget bindings for keystate. Opt-in — requires textual.

bind() mirrors one key of a StateObservable, or of the PipedState handed to
a view, onto an attribute of a mounted widget. The binding subscribes with
that key as its only dependency, so the widget is written only when an
update touches the key (or on overwrite). Broadcasts from other threads are
marshaled through app.call_from_thread.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

from textual.css.query import NoMatches

from keystate.update import Record

logger = logging.getLogger("keystate.textual")


class Binding:
    """One state key written to one widget attribute."""

    __slots__ = ("app", "selector", "field", "attribute", "transform", "default", "key", "_thread")

    def __init__(
        self,
        app,
        selector: str,
        field: str,
        *,
        attribute: str = "value",
        transform: Callable[[Any], Any] | None = None,
        default: Any = None,
        key: str | None = None,
    ) -> None:
        self.app = app
        self.selector = selector
        self.field = field
        self.attribute = attribute
        self.transform = transform
        self.default = default
        self.key = key or f"{selector}:{field}"
        self._thread = threading.get_ident()

    def apply(self, record: Record) -> None:
        """Subscriber callback: push record[field] to the widget."""
        if not self.app.is_running:
            return
        value = record.get(self.field, self.default)
        if threading.get_ident() != self._thread:
            self.app.call_from_thread(self._write, value)
        else:
            self._write(value)

    def _write(self, value: Any) -> None:
        try:
            widget = self.app.query_one(self.selector)
        except NoMatches:
            # Not mounted (yet, or any more); the next update will retry.
            logger.debug("No widget for %r, skipped %r", self.selector, self.field)
            return
        if self.transform is not None:
            value = self.transform(value)
        setattr(widget, self.attribute, value)

    def __repr__(self) -> str:
        return f"Binding({self.field!r} -> {self.selector}.{self.attribute})"


def bind(app, source, selector: str, field: str, **options) -> Binding:
    """Keep widget `selector`'s attribute in sync with state key `field`.

    source is a StateObservable or a PipedState. The widget is written
    immediately with the current value, then on every update of field.
    Options are passed to Binding (attribute, transform, default, key).
    The subscriber key defaults to "<selector>:<field>".

    Usage:
        state = StateObservable({"count": 0})

        class CounterApp(App):
            def on_mount(self):
                bind(self, state.pipe(), "#count", "count",
                     attribute="renderable", transform=str)
    """
    binding = Binding(app, selector, field, **options)
    source.subscribe(binding.apply, [field], is_immediate=True, key=binding.key)
    return binding


def unbind(source, binding: Binding) -> None:
    """Stop syncing. The widget keeps its last value."""
    source.unsubscribe(binding.key)
