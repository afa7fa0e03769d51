"""Builders for work item snapshots used across the unit tests."""

from __future__ import annotations

from depgraph.models import AnalysisRequest, Connection, WorkItem


def make_item(item_id: str, days: float | None = None, **fields: object) -> WorkItem:
    """Build a work item named after its id."""
    return WorkItem.model_validate(
        {"id": item_id, "name": f"Item {item_id}", "estimated_duration_days": days, **fields}
    )


def make_connection(
    source: str,
    target: str,
    connection_type: str = "dependency",
    connection_id: str | None = None,
    **fields: object,
) -> Connection:
    """Build a connection with a readable default id like ``A-B``."""
    return Connection.model_validate(
        {
            "id": connection_id or f"{source}-{target}",
            "source_item_id": source,
            "target_item_id": target,
            "connection_type": connection_type,
            **fields,
        }
    )


def make_diamond_snapshot() -> AnalysisRequest:
    """Diamond A -> {B, C} -> D with durations A=2, B=3, C=1, D=2."""
    return AnalysisRequest(
        workspace_id="ws-1",
        work_items=[
            make_item("A", 2),
            make_item("B", 3),
            make_item("C", 1),
            make_item("D", 2),
        ],
        connections=[
            make_connection("A", "B"),
            make_connection("B", "D"),
            make_connection("A", "C"),
            make_connection("C", "D"),
        ],
    )


def make_triangle_snapshot() -> AnalysisRequest:
    """Triangle A -> B -> C -> A whose closing edge is a ``blocks``."""
    return AnalysisRequest(
        workspace_id="ws-1",
        work_items=[make_item("A"), make_item("B"), make_item("C")],
        connections=[
            make_connection("A", "B"),
            make_connection("B", "C"),
            make_connection("C", "A", "blocks"),
        ],
    )


def make_chain_snapshot(length: int, days: float = 1) -> AnalysisRequest:
    """Linear chain N0 -> N1 -> ... of *length* items."""
    ids = [f"N{i}" for i in range(length)]
    return AnalysisRequest(
        work_items=[make_item(i, days) for i in ids],
        connections=[make_connection(a, b) for a, b in zip(ids, ids[1:], strict=False)],
    )
