"""Graph model: work items as nodes, typed connections as edges.

Pure data structure with no algorithm logic. ``hard_graph`` is restricted to
hard-ordering connections (``dependency``, ``blocks``) and feeds cycle
detection and scheduling; ``full_graph`` covers every active connection and
feeds connectivity and health metrics.

All adjacency lists preserve input order so that downstream algorithms are
deterministic for a given snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from depgraph.graph.errors import InvalidEdgeError, InvalidWorkItemError
from depgraph.models.work_items import CONNECTION_TYPES, Connection, WorkItem, is_hard_type
from depgraph.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

log = get_logger(__name__)


@dataclass
class Graph:
    """Adjacency representation keyed by work item id.

    Attributes:
        work_items: Work items by id, in input order.
        connections: Active connections by id, in input order.
        hard_graph: Successor ids over hard-ordering connections.
        hard_predecessors: Predecessor ids over hard-ordering connections.
        full_graph: Neighbour ids over all active connections, ignoring direction.
        hard_edges: Connection ids backing each hard ``(source, target)`` hop.
    """

    work_items: dict[str, WorkItem] = field(default_factory=dict)
    connections: dict[str, Connection] = field(default_factory=dict)
    hard_graph: dict[str, list[str]] = field(default_factory=dict)
    hard_predecessors: dict[str, list[str]] = field(default_factory=dict)
    full_graph: dict[str, list[str]] = field(default_factory=dict)
    hard_edges: dict[tuple[str, str], list[str]] = field(default_factory=dict)
    _positions: dict[str, int] = field(default_factory=dict, repr=False)

    @property
    def node_ids(self) -> list[str]:
        return list(self.work_items)

    def position(self, node_id: str) -> int:
        """Input-order position of a work item, used for tie-breaking."""
        return self._positions[node_id]

    def hard_in_degree(self, node_id: str) -> int:
        return len(self.hard_predecessors.get(node_id, []))

    def hard_out_degree(self, node_id: str) -> int:
        return len(self.hard_graph.get(node_id, []))

    def hard_degree(self, node_id: str) -> int:
        return self.hard_in_degree(node_id) + self.hard_out_degree(node_id)

    def degree(self, node_id: str) -> int:
        """Number of distinct neighbours over any active connection."""
        return len(self.full_graph.get(node_id, []))

    def is_hard_isolated(self, node_id: str) -> bool:
        """True when the item has no hard-ordering connection at all."""
        return self.hard_degree(node_id) == 0

    def is_orphan(self, node_id: str) -> bool:
        """True when the item has no active connection of any type."""
        return self.degree(node_id) == 0

    def has_hard_edges(self) -> bool:
        return bool(self.hard_edges)

    def hard_connections_between(self, source_id: str, target_id: str) -> list[Connection]:
        """Return the hard connections backing the hop ``source -> target``."""
        return [self.connections[cid] for cid in self.hard_edges.get((source_id, target_id), [])]


def _validate_connection(
    conn: Connection,
    work_items: dict[str, WorkItem],
) -> None:
    if conn.connection_type not in CONNECTION_TYPES:
        raise InvalidEdgeError(
            connection_id=conn.id,
            source_id=conn.source_item_id,
            target_id=conn.target_item_id,
            connection_type=conn.connection_type,
            problem="unknown_type",
        )

    if conn.source_item_id == conn.target_item_id:
        raise InvalidEdgeError(
            connection_id=conn.id,
            source_id=conn.source_item_id,
            target_id=conn.target_item_id,
            connection_type=conn.connection_type,
            problem="self_loop",
        )

    source_missing = conn.source_item_id not in work_items
    target_missing = conn.target_item_id not in work_items
    if source_missing or target_missing:
        if source_missing and target_missing:
            missing = "both"
        elif source_missing:
            missing = "source"
        else:
            missing = "target"
        raise InvalidEdgeError(
            connection_id=conn.id,
            source_id=conn.source_item_id,
            target_id=conn.target_item_id,
            connection_type=conn.connection_type,
            problem="dangling_endpoint",
            missing=missing,
            available=list(work_items),
        )


def _append_unique(adjacency: dict[str, list[str]], key: str, value: str) -> None:
    neighbours = adjacency[key]
    if value not in neighbours:
        neighbours.append(value)


def build_graph(
    work_items: Iterable[WorkItem],
    connections: Iterable[Connection],
) -> Graph:
    """Build the graph model for one analysis snapshot.

    Connections with status ``removed`` are ignored. Every active connection
    is validated; invalid ones are rejected, never silently dropped.

    Args:
        work_items: Work items of the snapshot.
        connections: Connections of the snapshot.

    Returns:
        A freshly built Graph.

    Raises:
        InvalidWorkItemError: If a work item id appears twice.
        InvalidEdgeError: If a connection is a self-loop, has an unknown type,
            or references a work item that is not in the snapshot.
    """
    graph = Graph()

    for item in work_items:
        if item.id in graph.work_items:
            raise InvalidWorkItemError(work_item_id=item.id)
        graph._positions[item.id] = len(graph.work_items)
        graph.work_items[item.id] = item
        graph.hard_graph[item.id] = []
        graph.hard_predecessors[item.id] = []
        graph.full_graph[item.id] = []

    skipped = 0
    for conn in connections:
        if not conn.is_active:
            skipped += 1
            continue

        _validate_connection(conn, graph.work_items)
        if conn.id in graph.connections:
            raise InvalidEdgeError(
                connection_id=conn.id,
                source_id=conn.source_item_id,
                target_id=conn.target_item_id,
                connection_type=conn.connection_type,
                problem="duplicate_id",
            )
        graph.connections[conn.id] = conn

        source, target = conn.source_item_id, conn.target_item_id
        _append_unique(graph.full_graph, source, target)
        _append_unique(graph.full_graph, target, source)

        if is_hard_type(conn.connection_type):
            _append_unique(graph.hard_graph, source, target)
            _append_unique(graph.hard_predecessors, target, source)
            graph.hard_edges.setdefault((source, target), []).append(conn.id)

    log.debug(
        "graph_built",
        work_items=len(graph.work_items),
        connections=len(graph.connections),
        hard_edges=sum(len(ids) for ids in graph.hard_edges.values()),
        skipped_removed=skipped,
    )
    return graph
