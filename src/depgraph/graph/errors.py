"""Error types for dependency graph input and mutation.

Input errors are raised when a snapshot violates the graph's referential
rules, similar to foreign key or check constraint violations in a database.
Each input error identifies the offending record and can render itself as a
single structured error document for the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from difflib import get_close_matches
from typing import Any, Literal


class GraphInputError(Exception):
    """Base class for malformed analysis input.

    Subclasses must implement to_dict() to describe the offending record.
    """

    def to_dict(self) -> dict[str, Any]:
        """Format the error as a structured document.

        Returns:
            JSON-serializable dict with at least ``error`` and ``message``.
        """
        raise NotImplementedError


EdgeProblem = Literal["self_loop", "unknown_type", "dangling_endpoint", "duplicate_id"]


@dataclass
class InvalidEdgeError(GraphInputError):
    """Raised when a connection cannot become a graph edge.

    Attributes:
        connection_id: The offending connection.
        source_id: Source work item id.
        target_id: Target work item id.
        connection_type: Type as given in the input.
        problem: ``self_loop``, ``unknown_type``, ``dangling_endpoint`` or
            ``duplicate_id``.
        missing: For dangling endpoints, ``source``, ``target`` or ``both``.
        available: Known work item ids, used for "did you mean" hints.
    """

    connection_id: str
    source_id: str
    target_id: str
    connection_type: str
    problem: EdgeProblem
    missing: str = ""
    available: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        prefix = f"Connection '{self.connection_id}'"
        if self.problem == "self_loop":
            return f"{prefix} links work item '{self.source_id}' to itself"
        if self.problem == "unknown_type":
            return f"{prefix} has unknown connection type '{self.connection_type}'"
        if self.problem == "duplicate_id":
            return f"{prefix} appears more than once"
        if self.missing == "both":
            return f"{prefix} endpoints not found: '{self.source_id}' and '{self.target_id}'"
        if self.missing == "source":
            return f"{prefix} source not found: '{self.source_id}'"
        return f"{prefix} target not found: '{self.target_id}'"

    def _missing_ids(self) -> list[str]:
        if self.missing == "both":
            return [self.source_id, self.target_id]
        if self.missing == "source":
            return [self.source_id]
        if self.missing == "target":
            return [self.target_id]
        return []

    def suggestions(self) -> dict[str, list[str]]:
        """Find similar work item ids that might be typos of missing endpoints."""
        return {
            missing_id: get_close_matches(missing_id, self.available, n=3, cutoff=0.6)
            for missing_id in self._missing_ids()
        }

    def to_dict(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "error": "invalid_edge",
            "problem": self.problem,
            "message": str(self),
            "connectionId": self.connection_id,
            "sourceItemId": self.source_id,
            "targetItemId": self.target_id,
            "connectionType": self.connection_type,
        }
        if self.problem == "dangling_endpoint":
            doc["missing"] = self.missing
            hints = {k: v for k, v in self.suggestions().items() if v}
            if hints:
                doc["didYouMean"] = hints
        return doc


@dataclass
class InvalidWorkItemError(GraphInputError):
    """Raised when the work item list itself is inconsistent.

    Attributes:
        work_item_id: The offending work item.
        problem: Short machine-readable problem code.
    """

    work_item_id: str
    problem: str = "duplicate_id"

    def __post_init__(self) -> None:
        if self.problem == "duplicate_id":
            msg = f"Work item '{self.work_item_id}' appears more than once"
        else:
            msg = f"Work item '{self.work_item_id}' is invalid: {self.problem}"
        super().__init__(msg)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "invalid_work_item",
            "problem": self.problem,
            "message": str(self),
            "workItemId": self.work_item_id,
        }


@dataclass
class DocumentError(GraphInputError):
    """Raised when a request document cannot be parsed.

    Attributes:
        source: Where the document came from (path or ``"<request>"``).
        location: Dotted location of the first offending field, if known.
        reason: Human-readable description.
    """

    source: str
    reason: str
    location: str = ""

    def __post_init__(self) -> None:
        where = f" at {self.location}" if self.location else ""
        super().__init__(f"Invalid document {self.source}{where}: {self.reason}")

    def to_dict(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "error": "invalid_document",
            "message": str(self),
            "source": self.source,
            "reason": self.reason,
        }
        if self.location:
            doc["location"] = self.location
        return doc


@dataclass
class ConnectionNotFoundError(Exception):
    """Raised when a fix or update targets a connection that does not exist."""

    connection_id: str

    def __post_init__(self) -> None:
        super().__init__(f"Connection '{self.connection_id}' not found")


@dataclass
class CyclicGraphError(Exception):
    """Raised when a scheduling precondition (acyclic hard graph) is violated.

    Attributes:
        remaining: Work item ids that could not be ordered.
    """

    remaining: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        super().__init__(
            f"Hard-ordering graph is cyclic; {len(self.remaining)} item(s) cannot be ordered"
        )


@dataclass
class CycleGuardExceeded(Exception):
    """Raised inside cycle enumeration when the max-cycles guard is hit.

    Not fatal: the detector catches it and reports the partial list with a
    warning.

    Attributes:
        limit: The configured maximum.
        found: Cycles (as id paths) collected before stopping.
    """

    limit: int
    found: list[list[str]] = field(default_factory=list)

    def __post_init__(self) -> None:
        super().__init__(f"Cycle enumeration stopped after {self.limit} cycles")
