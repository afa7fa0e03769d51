"""Health scoring: bottlenecks, risk scores and a single 0-100 summary.

Score formula (higher is better), starting at 100:
    - 40 if any unresolved cycle exists
    - min(25, 5 * bottleneck count)
    - min(15, orphaned item count)
floored at 0.

Bottlenecks use the top-decile degree rule with an extra floor: the degree
threshold is never below ``bottleneck_min_degree`` (default 3). This floor is
a deliberate addition to the plain top-decile rule; setting
``bottleneck_min_degree`` to 1 restores the plain rule.

These weightings are a documented baseline and are open to recalibration.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from depgraph.models.analysis import HealthReport, NodeMetrics
from depgraph.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence

    from depgraph.graph.model import Graph
    from depgraph.models.analysis import CycleDetectionResult, ScheduleResult

log = get_logger(__name__)

CYCLE_PENALTY = 40
BOTTLENECK_PENALTY = 5
BOTTLENECK_PENALTY_CAP = 25
ORPHAN_PENALTY_CAP = 15

DEFAULT_BOTTLENECK_MIN_DEGREE = 3
FAN_OUT_THRESHOLD = 3
BOTTLENECK_WARNING_THRESHOLD = 3

MAX_RISK_SCORE = 100.0


def risk_score(metrics: NodeMetrics, project_duration_days: float) -> float:
    """Risk of one node: connectivity weighted by how little slack it has.

    ``degree * (1 - slack / max(1, project duration))`` clamped to [0, 100].
    Unknown slack (scheduling skipped) counts as zero.
    """
    slack = metrics.slack or 0.0
    raw = metrics.degree * (1 - slack / max(1.0, project_duration_days))
    return round(min(MAX_RISK_SCORE, max(0.0, raw)), 4)


def find_bottlenecks(
    nodes: Sequence[NodeMetrics],
    graph: Graph,
    min_degree: int = DEFAULT_BOTTLENECK_MIN_DEGREE,
) -> list[str]:
    """Identify bottleneck items.

    A node is a bottleneck when its hard degree is in the top decile of the
    graph (ties included) and at least *min_degree*, or when it has zero
    slack and fans out to at least three dependents.

    Returns:
        Ids ordered by degree (highest first), then input order.
    """
    if not nodes:
        return []

    degrees = sorted((m.degree for m in nodes), reverse=True)
    top_k = max(1, math.ceil(len(nodes) / 10))
    threshold = max(degrees[top_k - 1], min_degree, 1)

    selected: list[NodeMetrics] = []
    for metrics in nodes:
        in_top_decile = metrics.degree >= threshold
        zero_slack_fan_out = (
            metrics.slack is not None
            and math.isclose(metrics.slack, 0.0, abs_tol=1e-9)
            and metrics.dependent_count >= FAN_OUT_THRESHOLD
        )
        if in_top_decile or zero_slack_fan_out:
            selected.append(metrics)

    selected.sort(key=lambda m: (-m.degree, graph.position(m.work_item_id)))
    return [m.work_item_id for m in selected]


def _format_ids(ids: Sequence[str], limit: int = 5) -> str:
    shown = ", ".join(ids[:limit])
    if len(ids) > limit:
        shown += f", ... and {len(ids) - limit} more"
    return shown


def score_health(
    cycle_result: CycleDetectionResult,
    schedule_result: ScheduleResult,
    graph: Graph,
    defaulted: Collection[str] = (),
    bottleneck_min_degree: int = DEFAULT_BOTTLENECK_MIN_DEGREE,
) -> HealthReport:
    """Combine cycle and schedule results into a health report.

    Args:
        cycle_result: Output of the cycle detector.
        schedule_result: Output of the scheduler, or connectivity-only
            metrics when scheduling was skipped.
        graph: Graph model, for connectivity over all connection types.
        defaulted: Ids whose duration was defaulted.
        bottleneck_min_degree: Minimum hard degree for the top-decile rule.

    Returns:
        Health report with score, bottlenecks, orphans, warnings and nodes
        carrying risk scores.
    """
    duration = schedule_result.project_duration_days
    nodes = [
        metrics.model_copy(update={"risk_score": risk_score(metrics, duration)})
        for metrics in schedule_result.nodes
    ]

    bottlenecks = find_bottlenecks(nodes, graph, min_degree=bottleneck_min_degree)
    orphans = [node for node in graph.work_items if graph.is_orphan(node)]

    score = 100
    if cycle_result.has_cycles:
        score -= CYCLE_PENALTY
    score -= min(BOTTLENECK_PENALTY_CAP, BOTTLENECK_PENALTY * len(bottlenecks))
    score -= min(ORPHAN_PENALTY_CAP, len(orphans))
    score = max(0, score)

    warnings: list[str] = []
    if cycle_result.has_cycles:
        count = cycle_result.total_cycles
        noun = "dependency" if count == 1 else "dependencies"
        warnings.append(f"{count} unresolved circular {noun} detected")
    if len(bottlenecks) > BOTTLENECK_WARNING_THRESHOLD:
        warnings.append(
            f"{len(bottlenecks)} bottleneck items detected; these items may delay the project"
        )
    if orphans:
        warnings.append(
            f"{len(orphans)} work item(s) have no connections: {_format_ids(orphans)}"
        )
    defaulted_ids = set(defaulted)
    defaulted_critical = [node for node in schedule_result.critical_path if node in defaulted_ids]
    if defaulted_critical:
        warnings.append(
            f"{len(defaulted_critical)} item(s) on the critical path use a default duration: "
            f"{_format_ids(defaulted_critical)}"
        )

    log.debug(
        "health_scored",
        health_score=score,
        bottlenecks=len(bottlenecks),
        orphans=len(orphans),
    )

    return HealthReport(
        health_score=score,
        bottlenecks=bottlenecks,
        orphaned_work_items=orphans,
        warnings=warnings,
        nodes=nodes,
    )
