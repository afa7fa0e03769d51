"""Tests for validation of AI-proposed connections."""

from __future__ import annotations

import pytest

from depgraph.graph.errors import InvalidEdgeError
from depgraph.graph.fixes import apply_suggestion
from depgraph.graph.store import DictConnectionStore
from depgraph.graph.suggestions import review_suggestions, validate_suggestions
from depgraph.models import SuggestionCandidate
from tests.fixtures.graph_fixtures import make_connection, make_item

ITEMS = [make_item("X"), make_item("Y"), make_item("Z")]


def _candidate(
    source: str = "X",
    target: str = "Y",
    connection_type: str = "dependency",
    confidence: float = 0.9,
    **fields: object,
) -> SuggestionCandidate:
    return SuggestionCandidate.model_validate(
        {
            "source_id": source,
            "target_id": target,
            "connection_type": connection_type,
            "confidence": confidence,
            **fields,
        }
    )


class TestValidateSuggestions:
    """Tests for the accepted list."""

    def test_accepts_valid_candidate(self) -> None:
        """A confident, new, well-formed candidate is accepted."""
        accepted = validate_suggestions([_candidate(reason="shared API")], ITEMS, [])

        assert len(accepted) == 1
        suggestion = accepted[0]
        assert suggestion.source_work_item.id == "X"
        assert suggestion.target_work_item.name == "Item Y"
        assert suggestion.reason == "shared API"
        assert suggestion.strength == 0.7
        assert not suggestion.creates_cycle

    def test_rejects_low_confidence(self) -> None:
        """Confidence below 0.6 is rejected."""
        assert validate_suggestions([_candidate(confidence=0.5)], ITEMS, []) == []

    def test_threshold_is_inclusive(self) -> None:
        """Confidence exactly at the threshold is accepted."""
        assert len(validate_suggestions([_candidate(confidence=0.6)], ITEMS, [])) == 1

    def test_rejects_duplicate_of_existing_connection(self) -> None:
        """An active connection with the same endpoints and type wins regardless of confidence."""
        existing = [make_connection("X", "Y")]

        assert validate_suggestions([_candidate(confidence=0.99)], ITEMS, existing) == []

    def test_removed_connection_is_not_a_duplicate(self) -> None:
        """A removed connection may be proposed again."""
        existing = [make_connection("X", "Y", status="removed")]

        assert len(validate_suggestions([_candidate()], ITEMS, existing)) == 1

    def test_other_type_is_not_a_duplicate(self) -> None:
        """The same endpoints with a different type are a new connection."""
        existing = [make_connection("X", "Y", "relates_to")]

        assert len(validate_suggestions([_candidate()], ITEMS, existing)) == 1

    def test_sorted_by_confidence(self) -> None:
        """Accepted suggestions are ordered by confidence, highest first."""
        accepted = validate_suggestions(
            [
                _candidate("X", "Y", confidence=0.7),
                _candidate("Y", "Z", confidence=0.95),
                _candidate("X", "Z", confidence=0.8),
            ],
            ITEMS,
            [],
        )

        assert [(s.source_id, s.target_id) for s in accepted] == [
            ("Y", "Z"),
            ("X", "Z"),
            ("X", "Y"),
        ]

    def test_custom_strength_kept(self) -> None:
        """A strength supplied by the candidate is kept."""
        accepted = validate_suggestions([_candidate(strength=0.4)], ITEMS, [])

        assert accepted[0].strength == 0.4

    def test_flags_cycle_closing_candidate(self) -> None:
        """A hard candidate closing a loop is accepted but flagged."""
        existing = [make_connection("X", "Y"), make_connection("Y", "Z")]

        accepted = validate_suggestions([_candidate("Z", "X")], ITEMS, existing)

        assert accepted[0].creates_cycle

    def test_soft_candidate_never_creates_cycle(self) -> None:
        """Soft types impose no order, so they cannot close a loop."""
        existing = [make_connection("X", "Y"), make_connection("Y", "Z")]

        accepted = validate_suggestions([_candidate("Z", "X", "relates_to")], ITEMS, existing)

        assert not accepted[0].creates_cycle

    def test_invalid_existing_connections_raise(self) -> None:
        """The snapshot the candidates refer to must itself be valid."""
        with pytest.raises(InvalidEdgeError):
            validate_suggestions([_candidate()], ITEMS, [make_connection("X", "ghost")])


class TestReviewSuggestions:
    """Tests for rejection reasons."""

    @pytest.mark.parametrize(
        ("candidate", "reason"),
        [
            (_candidate("X", "ghost"), "unknown_endpoint"),
            (_candidate("X", "X"), "self_loop"),
            (_candidate(connection_type="requires"), "unknown_type"),
            (_candidate(confidence=5), "invalid_value"),
            (_candidate(strength=1.7), "invalid_value"),
            (_candidate(strength=-0.1), "invalid_value"),
            (_candidate(confidence=0.2), "low_confidence"),
        ],
    )
    def test_rejection_reasons(self, candidate: SuggestionCandidate, reason: str) -> None:
        """Each failed check is reported with its reason."""
        review = review_suggestions([candidate], ITEMS, [])

        assert review.accepted == []
        assert [r.reason for r in review.rejected] == [reason]

    def test_duplicate_existing_reported_before_confidence(self) -> None:
        """A low-confidence duplicate is reported as a duplicate."""
        review = review_suggestions(
            [_candidate(confidence=0.1)], ITEMS, [make_connection("X", "Y")]
        )

        assert review.rejected[0].reason == "duplicate_existing"

    def test_type_filter(self) -> None:
        """Candidates of other types are rejected when a type is requested."""
        review = review_suggestions(
            [_candidate(), _candidate("Y", "Z", "blocks")],
            ITEMS,
            [],
            connection_type="blocks",
        )

        assert [s.connection_type for s in review.accepted] == ["blocks"]
        assert review.rejected[0].reason == "type_filtered"

    def test_batch_duplicates_keep_most_confident(self) -> None:
        """Repeated candidates collapse to the most confident copy."""
        review = review_suggestions(
            [_candidate(confidence=0.7), _candidate(confidence=0.9), _candidate(confidence=0.8)],
            ITEMS,
            [],
        )

        assert [s.confidence for s in review.accepted] == [0.9]
        assert sorted(r.candidate.confidence for r in review.rejected) == [0.7, 0.8]
        assert {r.reason for r in review.rejected} == {"duplicate_candidate"}

    def test_custom_threshold(self) -> None:
        """min_confidence moves the acceptance threshold."""
        review = review_suggestions([_candidate(confidence=0.5)], ITEMS, [], min_confidence=0.4)

        assert len(review.accepted) == 1

    def test_out_of_range_strength_never_reaches_the_store(self) -> None:
        """Only in-range candidates are accepted, so approval can always apply them."""
        store = DictConnectionStore()
        review = review_suggestions(
            [_candidate(strength=1.7), _candidate("Y", "Z", strength=0.4)], ITEMS, []
        )

        created = [apply_suggestion(store, s) for s in review.accepted]

        assert [(c.source_item_id, c.strength) for c in created] == [("Y", 0.4)]
        assert review.rejected[0].detail == "strength 1.7 is outside 0 to 1"
