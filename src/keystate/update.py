"""Updates — what next() accepts, resolved into a mapping before it is applied.

An update is either a Replacement (a ready mapping) or a Computed (a function
of the current record). Plain mappings and callables handed to next() are
converted by as_update(), so the container only ever deals with the union.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable

Record = dict[str, Any]


class InvalidValueError(TypeError):
    """Raised when a value that is not a string-keyed mapping reaches the record."""

    def __init__(self, value: object, reason: str = "expected a mapping") -> None:
        super().__init__(f"{reason}, got {type(value).__name__}: {value!r}")
        self.value = value


def validate(value: object) -> Record:
    """Return a dict copy of value, or raise InvalidValueError.

    Strings, bytes, sequences, None and scalars are all rejected; only
    Mapping instances with str keys pass.
    """
    if not isinstance(value, Mapping):
        raise InvalidValueError(value)
    for key in value:
        if not isinstance(key, str):
            raise InvalidValueError(value, f"keys must be str, found {key!r}")
    return dict(value)


class Replacement:
    """A literal mapping to merge onto (or overwrite) the record."""

    __slots__ = ("mapping",)

    def __init__(self, mapping: Mapping[str, Any]) -> None:
        self.mapping = mapping

    def resolve(self, current: Record) -> Record:
        return validate(self.mapping)

    def __repr__(self) -> str:
        return f"Replacement({self.mapping!r})"


class Computed:
    """An update computed from the current record.

    fn is called once per next() with a copy of the record and must return
    the mapping to apply. It should not call back into the container.
    """

    __slots__ = ("fn",)

    def __init__(self, fn: Callable[[Record], Mapping[str, Any]]) -> None:
        self.fn = fn

    def resolve(self, current: Record) -> Record:
        return validate(self.fn(dict(current)))

    def __repr__(self) -> str:
        name = getattr(self.fn, "__name__", type(self.fn).__name__)
        return f"Computed({name})"


Update = Replacement | Computed


def as_update(value: object) -> Update:
    """Wrap whatever was passed to next() into an Update.

    Anything that is neither an Update nor callable becomes a Replacement;
    validation happens later, in resolve().
    """
    if isinstance(value, (Replacement, Computed)):
        return value
    if callable(value) and not isinstance(value, Mapping):
        return Computed(value)
    return Replacement(value)
