"""Outcome events produced by dependency graph operations.

Every engine operation returns the events it produced instead of printing
them. The console renders events as transcript lines; tests assert on them
directly.
"""

from dataclasses import dataclass
from enum import Enum


class EventKind(str, Enum):
    """Kinds of outcomes a graph operation can report."""

    DECLARED = "declared"
    CYCLE_REJECTED = "cycle_rejected"
    INSTALLED = "installed"
    ALREADY_INSTALLED = "already_installed"
    REMOVED = "removed"
    NOT_INSTALLED = "not_installed"
    STILL_NEEDED = "still_needed"
    CYCLE_SKIPPED = "cycle_skipped"


@dataclass(frozen=True)
class GraphEvent:
    """A single outcome of a graph operation.

    Attributes:
        kind: What happened
        component: The component the event is about
        related: The other end of the edge for DECLARED, CYCLE_REJECTED
            and CYCLE_SKIPPED
    """

    kind: EventKind
    component: str
    related: str | None = None

    def render(self) -> str:
        """Render the event as a transcript line."""
        if self.kind is EventKind.DECLARED:
            return f"{self.component} depends on {self.related}"
        if self.kind is EventKind.CYCLE_REJECTED:
            return f"{self.related} depends on {self.component}, ignoring command"
        if self.kind is EventKind.INSTALLED:
            return f"Installing {self.component}"
        if self.kind is EventKind.ALREADY_INSTALLED:
            return f"{self.component} is already installed."
        if self.kind is EventKind.REMOVED:
            return f"Removed {self.component}"
        if self.kind is EventKind.NOT_INSTALLED:
            return f"{self.component} is not installed."
        if self.kind is EventKind.CYCLE_SKIPPED:
            return f"{self.component} depends on {self.related} in a cycle, skipping"
        return f"{self.component} is still needed."
