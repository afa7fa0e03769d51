"""Analysis orchestration.

One call builds a fresh graph from the snapshot, runs the cycle detector,
runs the scheduler only if the hard graph is acyclic, and combines both in
the health scorer. Nothing is cached or shared between calls, so concurrent
calls need no coordination.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from depgraph.config import AnalysisConfig
from depgraph.graph.cycles import detect_cycles
from depgraph.graph.health import score_health
from depgraph.graph.model import build_graph
from depgraph.graph.schedule import compute_critical_path, connectivity_metrics, resolve_durations
from depgraph.models.analysis import AnalysisResult, ScheduleResult, SlackItem
from depgraph.observability.logging import get_logger, snapshot_context

if TYPE_CHECKING:
    from collections.abc import Sequence

    from depgraph.models.documents import AnalysisRequest
    from depgraph.models.work_items import Connection, WorkItem

log = get_logger(__name__)

SCHEDULING_SKIPPED_WARNING = "cannot compute schedule: unresolved cycles"


def analyze(
    work_items: Sequence[WorkItem],
    connections: Sequence[Connection],
    config: AnalysisConfig | None = None,
    workspace_id: str | None = None,
) -> AnalysisResult:
    """Analyse one snapshot of work items and connections.

    Args:
        work_items: Work items of the snapshot.
        connections: Connections of the snapshot.
        config: Engine parameters; defaults when omitted.
        workspace_id: Owning workspace, attached to every logged event.

    Returns:
        The combined analysis result. When cycles exist the scheduling
        fields are empty and a warning says so.

    Raises:
        InvalidEdgeError: If a connection is malformed.
        InvalidWorkItemError: If a work item id is duplicated.
    """
    config = config or AnalysisConfig()
    with snapshot_context(len(work_items), len(connections), workspace_id):
        return _analyze(work_items, connections, config)


def _analyze(
    work_items: Sequence[WorkItem],
    connections: Sequence[Connection],
    config: AnalysisConfig,
) -> AnalysisResult:
    graph = build_graph(work_items, connections)
    durations, defaulted = resolve_durations(
        graph.work_items.values(),
        default_duration_days=config.default_duration_days,
        hours_per_day=config.hours_per_day,
    )

    cycle_result = detect_cycles(graph, max_cycles=config.max_cycles)
    warnings = list(cycle_result.warnings)

    if cycle_result.has_cycles:
        log.info("scheduling_skipped", cycles=cycle_result.total_cycles)
        warnings.append(SCHEDULING_SKIPPED_WARNING)
        schedule = ScheduleResult(nodes=connectivity_metrics(graph, durations, defaulted))
    else:
        schedule = compute_critical_path(graph, durations, defaulted)

    health = score_health(
        cycle_result,
        schedule,
        graph,
        defaulted=defaulted,
        bottleneck_min_degree=config.bottleneck_min_degree,
    )
    warnings.extend(health.warnings)

    slack_items = [
        SlackItem(
            work_item_id=metrics.work_item_id,
            work_item_name=graph.work_items[metrics.work_item_id].display_name,
            slack_days=metrics.slack,
        )
        for metrics in health.nodes
        if metrics.slack is not None and metrics.slack > 0
    ]

    result = AnalysisResult(
        has_cycles=cycle_result.has_cycles,
        cycles=cycle_result.cycles,
        affected_work_items=cycle_result.affected_work_items,
        critical_path=schedule.critical_path,
        project_duration_days=schedule.project_duration_days,
        nodes=health.nodes,
        bottlenecks=health.bottlenecks,
        slack_items=slack_items,
        health_score=health.health_score,
        warnings=warnings,
    )

    log.info(
        "analysis_complete",
        has_cycles=result.has_cycles,
        project_duration_days=result.project_duration_days,
        health_score=result.health_score,
    )
    return result


def analyze_request(
    request: AnalysisRequest,
    config: AnalysisConfig | None = None,
) -> AnalysisResult:
    """Analyse a parsed request document."""
    return analyze(
        request.work_items, request.connections, config, workspace_id=request.workspace_id
    )
