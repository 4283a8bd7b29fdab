from __future__ import annotations


class InvariantError(RuntimeError):
    """Programming-contract failure inside the engine.

    Raised for out-of-range squares, seed records without a matching marker,
    unmake calls without a matching make, and AI searches that find nothing to
    play. These are never game events and are not meant to be recovered.
    """


class IllegalActionError(ValueError):
    """An interactive caller attempted an action outside the legal set."""


class AIBusyError(RuntimeError):
    """A second AI request arrived while one is still in flight."""


class SearchCancelled(Exception):
    """The cancel token was set while the search was running."""
