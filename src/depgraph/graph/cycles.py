"""Cycle detection over hard-ordering connections.

Finds every elementary cycle of the hard graph, ranks its severity and
proposes fixes. Pure functions; the graph is never modified.

Enumeration is a depth-first search that keeps the current path as a stack.
An edge back to the start node closes a cycle (the stack slice is the
cycle), after which the search resumes with the remaining neighbours. Nodes
that cannot reach the start node are blocked until one of their successors
is unblocked (Johnson's scheme), and the search is confined to one strongly
connected component at a time, so each elementary cycle is produced exactly
once and acyclic regions cost O(V + E).
"""

from __future__ import annotations

import heapq
from collections import defaultdict
from typing import TYPE_CHECKING

from depgraph.graph.errors import CycleGuardExceeded
from depgraph.models.analysis import Cycle, CycleDetectionResult, CycleFix, CycleSeverity
from depgraph.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Collection, Iterator, Mapping, Sequence

    from depgraph.graph.model import Graph
    from depgraph.models.work_items import Connection

log = get_logger(__name__)

DEFAULT_MAX_CYCLES = 100

# Item types whose involvement makes any cycle high severity
HIGH_SEVERITY_ITEM_TYPES = frozenset({"bug", "epic"})

_ACTION_RANK = {"remove_connection": 0, "change_type": 1, "reverse_connection": 2}


def strongly_connected_components(
    adjacency: Mapping[str, Sequence[str]],
    nodes: Sequence[str],
) -> list[list[str]]:
    """Compute strongly connected components (iterative Tarjan).

    Only edges between members of *nodes* are considered.

    Args:
        adjacency: Successor lists.
        nodes: Nodes to partition, in the order roots are tried.

    Returns:
        Components in reverse topological order of the condensation.
    """
    allowed = set(nodes)
    index_of: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    on_stack: set[str] = set()
    stack: list[str] = []
    components: list[list[str]] = []
    counter = 0

    for root in nodes:
        if root in index_of:
            continue
        index_of[root] = lowlink[root] = counter
        counter += 1
        stack.append(root)
        on_stack.add(root)
        work = [(root, iter(adjacency.get(root, ())))]

        while work:
            node, successors = work[-1]
            descended = False
            for succ in successors:
                if succ not in allowed:
                    continue
                if succ not in index_of:
                    index_of[succ] = lowlink[succ] = counter
                    counter += 1
                    stack.append(succ)
                    on_stack.add(succ)
                    work.append((succ, iter(adjacency.get(succ, ()))))
                    descended = True
                    break
                if succ in on_stack:
                    lowlink[node] = min(lowlink[node], index_of[succ])
            if descended:
                continue

            work.pop()
            if work:
                parent = work[-1][0]
                lowlink[parent] = min(lowlink[parent], lowlink[node])

            if lowlink[node] == index_of[node]:
                component: list[str] = []
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    component.append(member)
                    if member == node:
                        break
                components.append(component)

    return components


def _unblock(node: str, blocked: set[str], blocked_by: dict[str, set[str]]) -> None:
    pending = {node}
    while pending:
        current = pending.pop()
        if current in blocked:
            blocked.remove(current)
            pending.update(blocked_by[current])
            blocked_by[current].clear()


def _elementary_cycles(
    adjacency: Mapping[str, Sequence[str]],
    order: Sequence[str],
) -> Iterator[list[str]]:
    """Yield every elementary cycle as a list of node ids.

    Each cycle starts at its member that comes first in *order* and follows
    successor order. Cycles are grouped by start node, in *order*.
    """
    position = {node: i for i, node in enumerate(order)}

    # Min-heap of (first member position, tie-breaker, component)
    pending: list[tuple[int, int, list[str]]] = []
    tie = 0

    def _push_components(sub: Mapping[str, Sequence[str]], nodes: Sequence[str]) -> None:
        nonlocal tie
        for component in strongly_connected_components(sub, nodes):
            if len(component) > 1:
                members = sorted(component, key=position.__getitem__)
                heapq.heappush(pending, (position[members[0]], tie, members))
                tie += 1

    _push_components(adjacency, list(order))

    while pending:
        _, _, component = heapq.heappop(pending)
        members = set(component)
        start = component[0]
        sub = {n: [s for s in adjacency.get(n, ()) if s in members] for n in component}

        path = [start]
        blocked = {start}
        closed: set[str] = set()
        blocked_by: dict[str, set[str]] = defaultdict(set)
        # Neighbour lists are reversed so pop() visits them in input order
        stack = [(start, list(reversed(sub[start])))]

        while stack:
            node, neighbours = stack[-1]
            if neighbours:
                nxt = neighbours.pop()
                if nxt == start:
                    yield list(path)
                    closed.update(path)
                elif nxt not in blocked:
                    path.append(nxt)
                    stack.append((nxt, list(reversed(sub[nxt]))))
                    closed.discard(nxt)
                    blocked.add(nxt)
                    continue
            if not neighbours:
                if node in closed:
                    _unblock(node, blocked, blocked_by)
                else:
                    for succ in sub[node]:
                        blocked_by[succ].add(node)
                stack.pop()
                path.pop()

        remainder = component[1:]
        rest = {n: [s for s in sub[n] if s != start] for n in remainder}
        _push_components(rest, remainder)


def enumerate_cycles(graph: Graph, max_cycles: int = DEFAULT_MAX_CYCLES) -> list[list[str]]:
    """Enumerate elementary cycles of the hard graph as id paths.

    Args:
        graph: Graph model.
        max_cycles: Maximum number of cycles to collect.

    Returns:
        Cycle paths in deterministic order.

    Raises:
        ValueError: If max_cycles is smaller than 1.
        CycleGuardExceeded: If more than max_cycles cycles exist. The
            exception carries the cycles collected so far.
    """
    if max_cycles < 1:
        msg = f"max_cycles must be at least 1, got {max_cycles}"
        raise ValueError(msg)

    found: list[list[str]] = []
    for cycle in _elementary_cycles(graph.hard_graph, graph.node_ids):
        if len(found) == max_cycles:
            raise CycleGuardExceeded(limit=max_cycles, found=found)
        found.append(cycle)
    return found


def _reaches(
    graph: Graph,
    start: str,
    goal: str,
    exclude_connection_ids: Collection[str],
) -> bool:
    """Depth-first reachability over hard edges, skipping excluded connections."""
    seen = {start}
    frontier = [start]
    while frontier:
        node = frontier.pop()
        for succ in graph.hard_graph.get(node, []):
            if succ in seen:
                continue
            backing = graph.hard_edges.get((node, succ), [])
            if exclude_connection_ids and all(cid in exclude_connection_ids for cid in backing):
                continue
            if succ == goal:
                return True
            seen.add(succ)
            frontier.append(succ)
    return False


def would_create_cycle(
    graph: Graph,
    source_id: str,
    target_id: str,
    exclude_connection_ids: Collection[str] = (),
) -> bool:
    """Check whether a new hard edge ``source -> target`` would close a loop.

    Args:
        graph: Graph model.
        source_id: Proposed source work item.
        target_id: Proposed target work item.
        exclude_connection_ids: Connections to treat as absent, for trial
            evaluation of hypothetical edge sets.

    Returns:
        True if the target already reaches the source over hard edges.
    """
    if source_id == target_id:
        return True
    if source_id not in graph.work_items or target_id not in graph.work_items:
        return False
    return _reaches(graph, target_id, source_id, exclude_connection_ids)


def cycle_hops(path: Sequence[str]) -> list[tuple[str, str]]:
    """Return the ``(source, target)`` hops of a cycle, including the closing hop."""
    return list(zip(path, [*path[1:], path[0]], strict=True))


def _severity(graph: Graph, path: Sequence[str], connections: Sequence[Connection]) -> CycleSeverity:
    if any(conn.connection_type == "blocks" for conn in connections):
        return "high"
    if any(graph.work_items[node].type in HIGH_SEVERITY_ITEM_TYPES for node in path):
        return "high"
    if len(path) <= 3:
        return "medium"
    return "low"


def _hop_phrase(conn: Connection, source_name: str, target_name: str) -> str:
    if conn.connection_type == "blocks":
        return f"{source_name} will no longer block {target_name}"
    return f"{target_name} will no longer depend on {source_name}"


def _suggest_fixes(graph: Graph, path: Sequence[str]) -> list[CycleFix]:
    ranked: list[tuple[tuple[int, float, int, str], CycleFix]] = []

    for source, target in cycle_hops(path):
        hop_connections = graph.hard_connections_between(source, target)
        breaks_loop = len(hop_connections) == 1
        source_name = graph.work_items[source].display_name
        target_name = graph.work_items[target].display_name

        for conn in hop_connections:
            strength_pct = round(conn.strength * 100)
            rank = 0 if breaks_loop else 1
            note = "" if breaks_loop else "; a parallel connection still links these items"

            remove = CycleFix(
                action="remove_connection",
                connection_id=conn.id,
                source_id=source,
                target_id=target,
                reason=f"Remove '{conn.connection_type}' connection ({strength_pct}% strength){note}",
                impact=_hop_phrase(conn, source_name, target_name),
            )
            ranked.append(((rank, conn.strength, _ACTION_RANK[remove.action], conn.id), remove))

            if conn.connection_type == "blocks":
                change = CycleFix(
                    action="change_type",
                    connection_id=conn.id,
                    source_id=source,
                    target_id=target,
                    new_type="relates_to",
                    reason='Change "blocks" to "relates_to" (informational only)',
                    impact=f"{source_name} will relate to {target_name} without blocking",
                )
                ranked.append(((rank, conn.strength, _ACTION_RANK[change.action], conn.id), change))

            # Trial run: the reversed edge target -> source on the edge set without conn
            if not would_create_cycle(graph, target, source, exclude_connection_ids={conn.id}):
                reverse = CycleFix(
                    action="reverse_connection",
                    connection_id=conn.id,
                    source_id=source,
                    target_id=target,
                    reason="Reverse direction (may have been recorded the wrong way round)",
                    impact=f"{target_name} will come before {source_name} instead",
                )
                ranked.append(
                    ((rank, conn.strength, _ACTION_RANK[reverse.action], conn.id), reverse)
                )

    ranked.sort(key=lambda entry: entry[0])
    return [fix for _, fix in ranked]


def build_cycle(graph: Graph, path: Sequence[str]) -> Cycle:
    """Assemble a Cycle with severity and ranked fixes for an id path."""
    connections = [
        conn
        for source, target in cycle_hops(path)
        for conn in graph.hard_connections_between(source, target)
    ]
    return Cycle(
        path=list(path),
        work_items=[graph.work_items[node] for node in path],
        connection_ids=[conn.id for conn in connections],
        severity=_severity(graph, path, connections),
        suggested_fixes=_suggest_fixes(graph, path),
    )


def detect_cycles(graph: Graph, max_cycles: int = DEFAULT_MAX_CYCLES) -> CycleDetectionResult:
    """Detect all elementary cycles over hard-ordering connections.

    Exceeding the max-cycles guard is not an error: the partial list is
    returned with ``truncated=True`` and a warning.

    Args:
        graph: Graph model.
        max_cycles: Maximum number of cycles to report.

    Returns:
        Detection result with cycles, affected items and warnings.
    """
    truncated = False
    warnings: list[str] = []
    try:
        paths = enumerate_cycles(graph, max_cycles)
    except CycleGuardExceeded as exc:
        paths = exc.found
        truncated = True
        warnings.append(
            f"cycle enumeration stopped after {exc.limit} cycles; the cycle list may be incomplete"
        )
        log.warning("cycle_guard_exceeded", limit=exc.limit)

    cycles = [build_cycle(graph, path) for path in paths]

    members = {node for path in paths for node in path}
    affected = sorted(members, key=graph.position)

    if cycles:
        log.info(
            "cycles_detected",
            count=len(cycles),
            affected=len(affected),
            high=sum(1 for c in cycles if c.severity == "high"),
        )

    return CycleDetectionResult(
        has_cycles=bool(cycles),
        cycles=cycles,
        affected_work_items=affected,
        truncated=truncated,
        warnings=warnings,
    )
