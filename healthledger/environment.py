"""Execution environment shared by the ledger contracts: clock, auth and events."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any


class AuthError(PermissionError):
    """Raised when an address that must authorize a call has not done so."""

    def __init__(self, address: str) -> None:
        super().__init__(f"{address} requires authentication")
        self.address = address


@dataclass(frozen=True)
class Event:
    """A published contract event: a tuple of topics and a data payload."""

    topics: tuple
    data: Any


@dataclass
class Environment:
    """Ledger context: current timestamp, authorization state and event log."""

    timestamp: int = 0
    events: list[Event] = field(default_factory=list)
    auths: list[str] = field(default_factory=list)
    _mock_all: bool = field(default=False, repr=False)
    _authorized: set[str] = field(default_factory=set, repr=False)
    _counter: Any = field(default_factory=lambda: itertools.count(1), repr=False)

    def generate_address(self) -> str:
        """Return a fresh address that no earlier call has returned."""
        return f"G{next(self._counter):055d}"

    def mock_all_auths(self) -> None:
        """Treat every address as having authorized every call."""
        self._mock_all = True

    def authorize(self, *args: str) -> None:
        """Mark the given addresses as having authorized calls."""
        self._authorized.update(args)

    def require_auth(self, address: str) -> None:
        """Raise AuthError unless ``address`` has authorized the call."""
        if not (self._mock_all or address in self._authorized):
            raise AuthError(address)
        self.auths.append(address)

    def publish(self, topics, data) -> Event:
        """Record an event and return it."""
        event = Event(tuple(topics), data)
        self.events.append(event)
        return event