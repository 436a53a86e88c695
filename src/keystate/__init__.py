"""keystate: a keyed observable record with dependency-filtered subscribers."""

from importlib.metadata import version as _version

__version__ = _version("keystate")

from keystate.update import InvalidValueError, Replacement, Computed, Update, as_update
from keystate.state import StateObservable, PipedState, Subscriber
# textual NOT auto-imported — opt-in only

__all__ = [
    "StateObservable",
    "PipedState",
    "Subscriber",
    "InvalidValueError",
    "Replacement",
    "Computed",
    "Update",
    "as_update",
]
