"""Analysis result models.

These models are ephemeral: they are recomputed on every analysis request
and never persisted. Serialize with ``model_dump_json(by_alias=True)`` to
get the camelCase wire shape.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from depgraph.models.work_items import CamelModel, WorkItem

CycleSeverity = Literal["low", "medium", "high"]

FixAction = Literal["remove_connection", "reverse_connection", "change_type"]


class CycleFix(CamelModel):
    """A single proposed change that resolves (part of) a cycle."""

    action: FixAction
    connection_id: str
    source_id: str
    target_id: str
    new_type: str | None = None
    reason: str
    impact: str


class Cycle(CamelModel):
    """An elementary cycle over hard-ordering connections.

    Attributes:
        path: Member ids in loop order; the closing edge runs from the last
            member back to the first.
        work_items: Member work items, same order as ``path``.
        connection_ids: Connections forming the loop, in hop order.
        severity: ``high``, ``medium`` or ``low``.
        suggested_fixes: Fixes ordered by estimated impact.
    """

    path: list[str] = Field(min_length=2)
    work_items: list[WorkItem] = Field(default_factory=list)
    connection_ids: list[str] = Field(default_factory=list)
    severity: CycleSeverity
    suggested_fixes: list[CycleFix] = Field(default_factory=list)


class CycleDetectionResult(CamelModel):
    """Output of the cycle detector."""

    has_cycles: bool
    cycles: list[Cycle] = Field(default_factory=list)
    affected_work_items: list[str] = Field(default_factory=list)
    truncated: bool = False
    warnings: list[str] = Field(default_factory=list)

    @property
    def total_cycles(self) -> int:
        return len(self.cycles)


class NodeMetrics(CamelModel):
    """Per-item scheduling and connectivity metrics.

    Timing fields are None when scheduling was skipped because of cycles.
    """

    work_item_id: str
    duration_days: float
    duration_defaulted: bool = False
    earliest_start: float | None = None
    earliest_finish: float | None = None
    latest_start: float | None = None
    latest_finish: float | None = None
    slack: float | None = None
    is_on_critical_path: bool = False
    dependency_count: int = 0
    dependent_count: int = 0
    risk_score: float = 0.0

    @property
    def degree(self) -> int:
        return self.dependency_count + self.dependent_count


class ScheduleResult(CamelModel):
    """Output of the critical path scheduler."""

    nodes: list[NodeMetrics] = Field(default_factory=list)
    critical_path: list[str] = Field(default_factory=list)
    project_duration_days: float = 0


class SlackItem(CamelModel):
    """An item that can slip without delaying the project."""

    work_item_id: str
    work_item_name: str
    slack_days: float


class HealthReport(CamelModel):
    """Output of the health scorer."""

    health_score: int = Field(ge=0, le=100)
    bottlenecks: list[str] = Field(default_factory=list)
    orphaned_work_items: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    nodes: list[NodeMetrics] = Field(default_factory=list)


class AnalysisResult(CamelModel):
    """Combined result of one analysis request."""

    has_cycles: bool
    cycles: list[Cycle] = Field(default_factory=list)
    affected_work_items: list[str] = Field(default_factory=list)
    critical_path: list[str] = Field(default_factory=list)
    project_duration_days: float = 0
    nodes: list[NodeMetrics] = Field(default_factory=list)
    bottlenecks: list[str] = Field(default_factory=list)
    slack_items: list[SlackItem] = Field(default_factory=list)
    health_score: int = Field(ge=0, le=100)
    warnings: list[str] = Field(default_factory=list)

    def node(self, work_item_id: str) -> NodeMetrics | None:
        """Return metrics for *work_item_id*, or None if absent."""
        for metrics in self.nodes:
            if metrics.work_item_id == work_item_id:
                return metrics
        return None
