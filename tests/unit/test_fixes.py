"""Tests for applying cycle fixes and approved suggestions."""

from __future__ import annotations

import pytest

from depgraph.graph.cycles import detect_cycles
from depgraph.graph.errors import ConnectionNotFoundError, InvalidEdgeError
from depgraph.graph.fixes import apply_fix, apply_suggestion
from depgraph.graph.model import build_graph
from depgraph.graph.store import DictConnectionStore
from depgraph.graph.suggestions import validate_suggestions
from depgraph.models import FixRequest, SuggestionCandidate
from tests.fixtures.graph_fixtures import make_connection, make_item, make_triangle_snapshot


class TestApplyFix:
    """Tests for apply_fix."""

    def test_remove_connection(self) -> None:
        """remove_connection deletes the connection."""
        store = DictConnectionStore([make_connection("A", "B")])

        ack = apply_fix(store, FixRequest(connection_id="A-B", action="remove_connection"))

        assert ack.applied
        assert ack.action == "remove_connection"
        assert store.get("A-B") is None

    def test_reverse_connection(self) -> None:
        """reverse_connection swaps the endpoints."""
        store = DictConnectionStore([make_connection("A", "B")])

        ack = apply_fix(store, FixRequest(connection_id="A-B", action="reverse_connection"))

        connection = store.get("A-B")
        assert connection is not None
        assert (connection.source_item_id, connection.target_item_id) == ("B", "A")
        assert "B -> A" in ack.message

    def test_change_type_defaults_to_relates_to(self) -> None:
        """change_type without new_type demotes the connection to relates_to."""
        store = DictConnectionStore([make_connection("A", "B", "blocks")])

        apply_fix(store, FixRequest(connection_id="A-B", action="change_type"))

        connection = store.get("A-B")
        assert connection is not None
        assert connection.connection_type == "relates_to"

    def test_change_type_to_unknown_type_raises(self) -> None:
        """The new type must be recognized."""
        store = DictConnectionStore([make_connection("A", "B", "blocks")])

        with pytest.raises(InvalidEdgeError):
            apply_fix(
                store,
                FixRequest(connection_id="A-B", action="change_type", new_type="requires"),
            )

    def test_missing_connection_raises(self) -> None:
        """Fixes for unknown connections raise."""
        with pytest.raises(ConnectionNotFoundError):
            apply_fix(
                DictConnectionStore(),
                FixRequest(connection_id="ghost", action="remove_connection"),
            )

    def test_wire_format_request(self) -> None:
        """Fix requests accept the camelCase wire format."""
        request = FixRequest.model_validate(
            {"connectionId": "C-A", "action": "change_type", "newType": "relates_to"}
        )

        assert request.connection_id == "C-A"
        assert request.new_type == "relates_to"

    def test_suggested_fix_resolves_cycle(self) -> None:
        """Applying the top suggested fix through the store breaks the loop."""
        snapshot = make_triangle_snapshot()
        store = DictConnectionStore(snapshot.connections)
        cycle = detect_cycles(build_graph(snapshot.work_items, store.list_active())).cycles[0]
        top = cycle.suggested_fixes[0]

        apply_fix(store, FixRequest(connection_id=top.connection_id, action=top.action))

        graph = build_graph(snapshot.work_items, store.list_active())
        assert not detect_cycles(graph).has_cycles


class TestApplySuggestion:
    """Tests for apply_suggestion."""

    def test_creates_connection(self) -> None:
        """An approved suggestion becomes an active connection."""
        items = [make_item("X"), make_item("Y")]
        store = DictConnectionStore()
        candidate = SuggestionCandidate(
            source_id="X", target_id="Y", connection_type="enables", confidence=0.8, reason="why"
        )
        suggestion = validate_suggestions([candidate], items, store.list_active())[0]

        created = apply_suggestion(store, suggestion, connection_id="c-new")

        assert created.id == "c-new"
        assert created.connection_type == "enables"
        assert created.strength == 0.7
        assert created.reason == "why"
        assert store.list_active() == [created]

    def test_generates_id(self) -> None:
        """Without an explicit id, one is generated."""
        items = [make_item("X"), make_item("Y")]
        store = DictConnectionStore()
        candidate = SuggestionCandidate(
            source_id="X", target_id="Y", connection_type="dependency", confidence=0.9
        )
        suggestion = validate_suggestions([candidate], items, [])[0]

        created = apply_suggestion(store, suggestion)

        assert created.id.startswith("conn_")
        assert created.reason is None
