"""Critical Path Method scheduling over the hard-ordering graph.

Algorithm:
    1. Topologically order nodes (Kahn's algorithm, input-order tie-breaking).
    2. Forward pass: ES(n) = max EF(p) over predecessors (0 for roots),
       EF(n) = ES(n) + duration(n).
    3. Project duration = max EF over every item.
    4. Backward pass: LF(n) = min LS(s) over successors (project duration
       for sinks), LS(n) = LF(n) - duration(n).
    5. Slack = LS - ES. Zero-slack connected nodes are critical; the critical
       path lists all of them ordered by ES, then input order.

Items with no hard-ordering connection are pinned to ES = LS = 0 with zero
slack. They count towards the project duration but never join the critical
path.
"""

from __future__ import annotations

import heapq
import math
from typing import TYPE_CHECKING

from depgraph.graph.errors import CyclicGraphError
from depgraph.models.analysis import NodeMetrics, ScheduleResult
from depgraph.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Mapping

    from depgraph.graph.model import Graph
    from depgraph.models.work_items import WorkItem

log = get_logger(__name__)

DEFAULT_DURATION_DAYS = 1.0
DEFAULT_HOURS_PER_DAY = 8.0


def _is_zero(value: float) -> bool:
    return math.isclose(value, 0.0, abs_tol=1e-9)


def resolve_durations(
    work_items: Iterable[WorkItem],
    default_duration_days: float = DEFAULT_DURATION_DAYS,
    hours_per_day: float = DEFAULT_HOURS_PER_DAY,
) -> tuple[dict[str, float], set[str]]:
    """Resolve each work item's duration in days.

    Uses ``estimated_duration_days`` when set, else whole days derived from
    ``estimated_hours`` (at least one), else the default.

    Returns:
        Tuple of (durations by id, ids whose duration was defaulted).
    """
    durations: dict[str, float] = {}
    defaulted: set[str] = set()
    for item in work_items:
        if item.estimated_duration_days is not None:
            durations[item.id] = float(item.estimated_duration_days)
        elif item.estimated_hours is not None:
            durations[item.id] = float(max(1, math.ceil(item.estimated_hours / hours_per_day)))
        else:
            durations[item.id] = float(default_duration_days)
            defaulted.add(item.id)
    return durations, defaulted


def topological_order(graph: Graph) -> list[str]:
    """Order work items so every hard predecessor comes first.

    Kahn's algorithm over in-degrees of the hard graph. Ties are broken by
    input order, so the result is deterministic.

    Raises:
        CyclicGraphError: If the hard graph contains a cycle.
    """
    in_degree = {node: graph.hard_in_degree(node) for node in graph.work_items}
    queue = [(graph.position(node), node) for node, deg in in_degree.items() if deg == 0]
    heapq.heapify(queue)
    order: list[str] = []

    while queue:
        _, node = heapq.heappop(queue)
        order.append(node)
        for succ in graph.hard_graph[node]:
            in_degree[succ] -= 1
            if in_degree[succ] == 0:
                heapq.heappush(queue, (graph.position(succ), succ))

    if len(order) != len(graph.work_items):
        placed = set(order)
        remaining = [node for node in graph.work_items if node not in placed]
        raise CyclicGraphError(remaining=remaining)

    return order


def connectivity_metrics(
    graph: Graph,
    durations: Mapping[str, float],
    defaulted: Collection[str] = (),
) -> list[NodeMetrics]:
    """Per-node degree metrics without timing, for graphs that cannot be scheduled."""
    return [
        NodeMetrics(
            work_item_id=node,
            duration_days=durations.get(node, DEFAULT_DURATION_DAYS),
            duration_defaulted=node in defaulted,
            dependency_count=graph.hard_in_degree(node),
            dependent_count=graph.hard_out_degree(node),
        )
        for node in graph.work_items
    ]


def compute_critical_path(
    graph: Graph,
    durations: Mapping[str, float],
    defaulted: Collection[str] = (),
) -> ScheduleResult:
    """Run forward and backward CPM passes over the hard graph.

    Args:
        graph: Graph model whose hard graph is acyclic.
        durations: Duration in days per work item id; missing ids take the
            default of one day.
        defaulted: Ids whose duration was defaulted, carried into the metrics.

    Returns:
        Schedule with per-node timing, the critical path and project duration.

    Raises:
        CyclicGraphError: If the hard graph contains a cycle.
    """
    order = topological_order(graph)

    def duration(node: str) -> float:
        return durations.get(node, DEFAULT_DURATION_DAYS)

    isolated = {node for node in order if graph.is_hard_isolated(node)}
    connected = [node for node in order if node not in isolated]

    earliest_start: dict[str, float] = {}
    earliest_finish: dict[str, float] = {}
    for node in order:
        if node in isolated:
            earliest_start[node] = 0.0
        else:
            earliest_start[node] = max(
                (earliest_finish[p] for p in graph.hard_predecessors[node]), default=0.0
            )
        earliest_finish[node] = earliest_start[node] + duration(node)

    project_duration = max(earliest_finish.values(), default=0.0)

    latest_start: dict[str, float] = {}
    latest_finish: dict[str, float] = {}
    for node in reversed(order):
        if node in isolated:
            latest_start[node] = 0.0
            latest_finish[node] = duration(node)
            continue
        latest_finish[node] = min(
            (latest_start[s] for s in graph.hard_graph[node]), default=project_duration
        )
        latest_start[node] = latest_finish[node] - duration(node)

    slack = {node: latest_start[node] - earliest_start[node] for node in order}
    critical = {node for node in connected if _is_zero(slack[node])}

    critical_path = sorted(critical, key=lambda node: (earliest_start[node], graph.position(node)))

    nodes = [
        NodeMetrics(
            work_item_id=node,
            duration_days=duration(node),
            duration_defaulted=node in defaulted,
            earliest_start=earliest_start[node],
            earliest_finish=earliest_finish[node],
            latest_start=latest_start[node],
            latest_finish=latest_finish[node],
            slack=0.0 if _is_zero(slack[node]) else slack[node],
            is_on_critical_path=node in critical,
            dependency_count=graph.hard_in_degree(node),
            dependent_count=graph.hard_out_degree(node),
        )
        for node in graph.work_items
    ]

    log.debug(
        "critical_path_computed",
        project_duration_days=project_duration,
        critical_path_length=len(critical_path),
        isolated=len(isolated),
    )

    return ScheduleResult(
        nodes=nodes,
        critical_path=critical_path,
        project_duration_days=project_duration,
    )
