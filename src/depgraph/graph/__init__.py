"""Graph package - dependency graph construction and analysis.

Every analysis builds a fresh Graph from an immutable snapshot of work items
and connections. The detector, scheduler and scorer are pure functions over
that Graph; fixes and approved suggestions are written to a ConnectionStore.
"""

from depgraph.graph.cycles import detect_cycles, enumerate_cycles, would_create_cycle
from depgraph.graph.errors import (
    ConnectionNotFoundError,
    CycleGuardExceeded,
    CyclicGraphError,
    DocumentError,
    GraphInputError,
    InvalidEdgeError,
    InvalidWorkItemError,
)
from depgraph.graph.fixes import apply_fix, apply_suggestion
from depgraph.graph.health import find_bottlenecks, risk_score, score_health
from depgraph.graph.model import Graph, build_graph
from depgraph.graph.schedule import compute_critical_path, resolve_durations, topological_order
from depgraph.graph.store import ConnectionStore, DictConnectionStore
from depgraph.graph.suggestions import review_suggestions, validate_suggestions

__all__ = [
    "ConnectionNotFoundError",
    "ConnectionStore",
    "CycleGuardExceeded",
    "CyclicGraphError",
    "DictConnectionStore",
    "DocumentError",
    "Graph",
    "GraphInputError",
    "InvalidEdgeError",
    "InvalidWorkItemError",
    "apply_fix",
    "apply_suggestion",
    "build_graph",
    "compute_critical_path",
    "detect_cycles",
    "enumerate_cycles",
    "find_bottlenecks",
    "resolve_durations",
    "review_suggestions",
    "risk_score",
    "score_health",
    "topological_order",
    "validate_suggestions",
    "would_create_cycle",
]
