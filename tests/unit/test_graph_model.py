"""Tests for graph construction and input validation."""

from __future__ import annotations

import pytest

from depgraph.graph.errors import InvalidEdgeError, InvalidWorkItemError
from depgraph.graph.model import build_graph
from tests.fixtures.graph_fixtures import make_connection, make_item


class TestBuildGraph:
    """Tests for build_graph adjacency construction."""

    def test_hard_graph_holds_only_hard_types(self) -> None:
        """Soft connections appear in full_graph but not in hard_graph."""
        graph = build_graph(
            [make_item("A"), make_item("B"), make_item("C")],
            [make_connection("A", "B"), make_connection("B", "C", "relates_to")],
        )

        assert graph.hard_graph == {"A": ["B"], "B": [], "C": []}
        assert graph.hard_predecessors == {"A": [], "B": ["A"], "C": []}
        assert graph.full_graph["B"] == ["A", "C"]
        assert graph.full_graph["C"] == ["B"]

    def test_blocks_is_hard(self) -> None:
        """A blocks connection orders its source before its target."""
        graph = build_graph(
            [make_item("A"), make_item("B")],
            [make_connection("A", "B", "blocks")],
        )

        assert graph.hard_graph["A"] == ["B"]
        assert graph.hard_edges == {("A", "B"): ["A-B"]}

    def test_nodes_keep_input_order(self) -> None:
        """Node ids and positions follow the order work items were given."""
        graph = build_graph([make_item("Z"), make_item("A"), make_item("M")], [])

        assert graph.node_ids == ["Z", "A", "M"]
        assert graph.position("M") == 2

    def test_parallel_hard_connections_share_one_hop(self) -> None:
        """Two hard connections between the same pair create one adjacency entry."""
        graph = build_graph(
            [make_item("A"), make_item("B")],
            [
                make_connection("A", "B", connection_id="c1"),
                make_connection("A", "B", "blocks", connection_id="c2"),
            ],
        )

        assert graph.hard_graph["A"] == ["B"]
        assert graph.hard_edges[("A", "B")] == ["c1", "c2"]
        assert [c.id for c in graph.hard_connections_between("A", "B")] == ["c1", "c2"]

    def test_removed_connections_are_ignored(self) -> None:
        """Connections with status removed never become edges."""
        graph = build_graph(
            [make_item("A"), make_item("B")],
            [make_connection("A", "B", status="removed")],
        )

        assert graph.connections == {}
        assert graph.hard_graph["A"] == []
        assert graph.is_orphan("A")

    def test_degrees(self) -> None:
        """Hard degrees count hard edges only; degree counts any neighbour."""
        graph = build_graph(
            [make_item("A"), make_item("B"), make_item("C")],
            [make_connection("A", "B"), make_connection("C", "B", "complements")],
        )

        assert graph.hard_in_degree("B") == 1
        assert graph.hard_out_degree("A") == 1
        assert graph.hard_degree("C") == 0
        assert graph.degree("B") == 2
        assert graph.is_hard_isolated("C")
        assert not graph.is_orphan("C")
        assert graph.has_hard_edges()


class TestBuildGraphRejectsInvalidInput:
    """Malformed connections are rejected, never silently dropped."""

    def test_self_loop(self) -> None:
        """A connection from an item to itself is rejected."""
        with pytest.raises(InvalidEdgeError, match="to itself") as exc_info:
            build_graph([make_item("A")], [make_connection("A", "A")])

        assert exc_info.value.problem == "self_loop"

    def test_unknown_type(self) -> None:
        """An unrecognized connection type is rejected."""
        with pytest.raises(InvalidEdgeError, match="unknown connection type") as exc_info:
            build_graph(
                [make_item("A"), make_item("B")],
                [make_connection("A", "B", "requires")],
            )

        assert exc_info.value.problem == "unknown_type"
        assert exc_info.value.to_dict()["connectionType"] == "requires"

    def test_dangling_target(self) -> None:
        """A target outside the snapshot is rejected with a did-you-mean hint."""
        with pytest.raises(InvalidEdgeError) as exc_info:
            build_graph(
                [make_item("login-page"), make_item("auth-service")],
                [make_connection("login-page", "auth-servce")],
            )

        error = exc_info.value
        assert error.problem == "dangling_endpoint"
        assert error.missing == "target"
        doc = error.to_dict()
        assert doc["error"] == "invalid_edge"
        assert doc["didYouMean"] == {"auth-servce": ["auth-service"]}

    def test_dangling_both_endpoints(self) -> None:
        """Both missing endpoints are reported together."""
        with pytest.raises(InvalidEdgeError, match="endpoints not found") as exc_info:
            build_graph([make_item("A")], [make_connection("X", "Y")])

        assert exc_info.value.missing == "both"

    def test_duplicate_connection_id(self) -> None:
        """Two active connections may not share an id."""
        with pytest.raises(InvalidEdgeError, match="more than once") as exc_info:
            build_graph(
                [make_item("A"), make_item("B"), make_item("C")],
                [
                    make_connection("A", "B", connection_id="c1"),
                    make_connection("B", "C", connection_id="c1"),
                ],
            )

        assert exc_info.value.problem == "duplicate_id"

    def test_duplicate_work_item_id(self) -> None:
        """Two work items may not share an id."""
        with pytest.raises(InvalidWorkItemError) as exc_info:
            build_graph([make_item("A"), make_item("A")], [])

        assert exc_info.value.to_dict() == {
            "error": "invalid_work_item",
            "problem": "duplicate_id",
            "message": "Work item 'A' appears more than once",
            "workItemId": "A",
        }

    def test_removed_invalid_connection_is_not_checked(self) -> None:
        """Removed connections are skipped before validation."""
        graph = build_graph(
            [make_item("A")],
            [make_connection("A", "ghost", status="removed")],
        )

        assert graph.connections == {}
