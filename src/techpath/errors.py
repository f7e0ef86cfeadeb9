"""Error taxonomy shared by the progress engine and its collaborators."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import DisconnectionError, InterfaceError, OperationalError


class EngineError(Exception):
    """Base class for errors surfaced to callers of the engine."""


class NotFound(EngineError):
    """A referenced course, trophy, user or row does not exist."""


class InvalidState(EngineError):
    """The operation's preconditions are violated. Not retried automatically."""


class StoreUnavailable(EngineError):
    """The data store failed to read or write. Safe to retry the whole event."""


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """Translate driver/connection failures into StoreUnavailable."""
    try:
        yield
    except (OperationalError, InterfaceError, DisconnectionError, OSError) as exc:
        raise StoreUnavailable(f"{operation} failed: {exc}") from exc
