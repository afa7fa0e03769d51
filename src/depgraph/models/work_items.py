"""Work item and connection models.

Work items and connections are owned by the surrounding workspace; the
engine reads them as an immutable snapshot. Field names are snake_case in
Python and camelCase on the wire (``sourceItemId``, ``estimatedDurationDays``).

Connection direction: a hard-ordering connection ``source -> target`` means
the source must finish before the target can start.
"""

from __future__ import annotations

from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

WorkItemType = Literal["epic", "feature", "enhancement", "bug", "concept", "task"]

ConnectionType = Literal[
    "dependency",
    "blocks",
    "complements",
    "relates_to",
    "enables",
    "conflicts",
    "duplicates",
    "supersedes",
]

ConnectionStatus = Literal["active", "removed"]

CONNECTION_TYPES: frozenset[str] = frozenset(get_args(ConnectionType))

# Types that impose a must-happen-before constraint
HARD_CONNECTION_TYPES: frozenset[str] = frozenset({"dependency", "blocks"})

CONNECTION_TYPE_LABELS: dict[str, str] = {
    "dependency": "Depends On",
    "blocks": "Blocks",
    "enables": "Enables",
    "complements": "Complements",
    "conflicts": "Conflicts",
    "relates_to": "Relates To",
    "duplicates": "Duplicates",
    "supersedes": "Supersedes",
}


def is_hard_type(connection_type: str) -> bool:
    """Return True for connection types usable for scheduling."""
    return connection_type in HARD_CONNECTION_TYPES


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases.

    Both ``source_item_id`` and ``sourceItemId`` are accepted on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WorkItem(CamelModel):
    """A unit of planned work: epic, feature, bug, etc.

    Attributes:
        id: Unique identifier within the snapshot.
        name: Display name.
        type: Work item kind.
        phase: Lifecycle phase as reported by the workspace.
        status: Free-form status.
        priority: Free-form priority (``critical``, ``high``, ...).
        estimated_hours: Effort estimate in hours.
        estimated_duration_days: Explicit duration estimate in days.
    """

    id: str = Field(min_length=1)
    name: str = ""
    type: WorkItemType = "task"
    phase: str | None = None
    status: str | None = None
    priority: str | None = None
    estimated_hours: float | None = Field(default=None, ge=0)
    estimated_duration_days: float | None = Field(default=None, ge=0)

    @property
    def display_name(self) -> str:
        return self.name or self.id


class Connection(CamelModel):
    """A typed relationship between two work items.

    ``connection_type`` is kept as a plain string so that unrecognized types
    reach :func:`depgraph.graph.model.build_graph`, which rejects them with a
    structured :class:`~depgraph.graph.errors.InvalidEdgeError`.
    """

    id: str = Field(min_length=1)
    source_item_id: str = Field(min_length=1)
    target_item_id: str = Field(min_length=1)
    connection_type: str
    strength: float = Field(default=1.0, ge=0.0, le=1.0)
    status: ConnectionStatus = "active"
    reason: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    @property
    def is_hard(self) -> bool:
        return is_hard_type(self.connection_type)


class WorkItemSummary(CamelModel):
    """Compact work item view attached to suggestions and exports."""

    id: str
    name: str
    type: str

    @classmethod
    def from_work_item(cls, item: WorkItem) -> WorkItemSummary:
        return cls(id=item.id, name=item.display_name, type=item.type)
