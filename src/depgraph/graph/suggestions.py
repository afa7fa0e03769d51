"""Validation of AI-proposed connections.

This is the only place where output from a generative collaborator crosses
into deterministic logic. Candidates are checked against the current
snapshot, duplicates are dropped, and the rest are returned for human
approval. Nothing here mutates the graph or the connection store.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from depgraph.graph.cycles import would_create_cycle
from depgraph.graph.model import build_graph
from depgraph.models.suggestions import (
    DEFAULT_SUGGESTION_STRENGTH,
    AcceptedSuggestion,
    RejectedSuggestion,
    RejectionReason,
    SuggestionCandidate,
    SuggestionReview,
)
from depgraph.models.work_items import CONNECTION_TYPES, WorkItemSummary, is_hard_type
from depgraph.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from depgraph.models.work_items import Connection, WorkItem

log = get_logger(__name__)

DEFAULT_MIN_CONFIDENCE = 0.6

SuggestionKey = tuple[str, str, str]


def _key(candidate: SuggestionCandidate) -> SuggestionKey:
    return (candidate.source_id, candidate.target_id, candidate.connection_type)


def _check(
    candidate: SuggestionCandidate,
    items: dict[str, WorkItem],
    existing: set[SuggestionKey],
    min_confidence: float,
    connection_type: str | None,
) -> tuple[RejectionReason, str] | None:
    """Return the first failed check for a candidate, or None if it passes."""
    missing = [i for i in (candidate.source_id, candidate.target_id) if i not in items]
    if missing:
        return "unknown_endpoint", f"unknown work item(s): {', '.join(missing)}"
    if candidate.source_id == candidate.target_id:
        return "self_loop", "source and target are the same work item"
    if candidate.connection_type not in CONNECTION_TYPES:
        return "unknown_type", f"unknown connection type '{candidate.connection_type}'"
    for field, value in (("confidence", candidate.confidence), ("strength", candidate.strength)):
        if value is not None and not 0.0 <= value <= 1.0:
            return "invalid_value", f"{field} {value} is outside 0 to 1"
    if connection_type is not None and candidate.connection_type != connection_type:
        return "type_filtered", f"only '{connection_type}' suggestions were requested"
    if _key(candidate) in existing:
        return "duplicate_existing", "an active connection with the same type already exists"
    if candidate.confidence < min_confidence:
        return "low_confidence", f"confidence {candidate.confidence:.2f} is below {min_confidence:.2f}"
    return None


def review_suggestions(
    candidates: Iterable[SuggestionCandidate],
    work_items: Sequence[WorkItem],
    existing_connections: Sequence[Connection],
    min_confidence: float = DEFAULT_MIN_CONFIDENCE,
    connection_type: str | None = None,
) -> SuggestionReview:
    """Validate candidates and keep the reason for every rejection.

    Checks, in order: both endpoints exist, not a self-loop, recognized
    type, confidence and strength within 0 to 1, matches the requested type
    filter, not already an active connection, confidence at or above
    *min_confidence*. Within one batch, repeats of the same (source,
    target, type) keep the most confident one.

    Args:
        candidates: Proposed connections.
        work_items: Work items of the snapshot.
        existing_connections: Current connections of the snapshot.
        min_confidence: Acceptance threshold.
        connection_type: Optional filter; other types are rejected.

    Returns:
        Review with accepted suggestions (confidence descending) and
        rejected candidates with reasons.

    Raises:
        InvalidEdgeError: If the existing connections are malformed.
    """
    graph = build_graph(work_items, existing_connections)
    items = graph.work_items
    existing = {
        (c.source_item_id, c.target_item_id, c.connection_type) for c in graph.connections.values()
    }

    accepted: dict[SuggestionKey, AcceptedSuggestion] = {}
    accepted_candidates: dict[SuggestionKey, SuggestionCandidate] = {}
    rejected: list[RejectedSuggestion] = []

    for candidate in candidates:
        failure = _check(candidate, items, existing, min_confidence, connection_type)
        if failure is not None:
            reason, detail = failure
            rejected.append(RejectedSuggestion(candidate=candidate, reason=reason, detail=detail))
            log.debug(
                "suggestion_rejected",
                source=candidate.source_id,
                target=candidate.target_id,
                type=candidate.connection_type,
                reason=reason,
            )
            continue

        key = _key(candidate)
        previous = accepted_candidates.get(key)
        if previous is not None:
            if candidate.confidence <= previous.confidence:
                rejected.append(
                    RejectedSuggestion(
                        candidate=candidate,
                        reason="duplicate_candidate",
                        detail="the same suggestion appears earlier in this batch",
                    )
                )
                continue
            rejected.append(
                RejectedSuggestion(
                    candidate=previous,
                    reason="duplicate_candidate",
                    detail="a more confident copy appears later in this batch",
                )
            )

        accepted_candidates[key] = candidate
        accepted[key] = AcceptedSuggestion(
            source_id=candidate.source_id,
            target_id=candidate.target_id,
            connection_type=candidate.connection_type,
            confidence=candidate.confidence,
            reason=candidate.reason,
            strength=(
                candidate.strength
                if candidate.strength is not None
                else DEFAULT_SUGGESTION_STRENGTH
            ),
            source_work_item=WorkItemSummary.from_work_item(items[candidate.source_id]),
            target_work_item=WorkItemSummary.from_work_item(items[candidate.target_id]),
            creates_cycle=(
                is_hard_type(candidate.connection_type)
                and would_create_cycle(graph, candidate.source_id, candidate.target_id)
            ),
        )

    ordered = sorted(accepted.values(), key=lambda s: -s.confidence)

    log.info("suggestions_reviewed", accepted=len(ordered), rejected=len(rejected))
    return SuggestionReview(accepted=ordered, rejected=rejected)


def validate_suggestions(
    candidates: Iterable[SuggestionCandidate],
    work_items: Sequence[WorkItem],
    existing_connections: Sequence[Connection],
    min_confidence: float = DEFAULT_MIN_CONFIDENCE,
    connection_type: str | None = None,
) -> list[AcceptedSuggestion]:
    """Return the candidates that may be shown to a human for approval.

    See :func:`review_suggestions` for the checks applied.
    """
    review = review_suggestions(
        candidates,
        work_items,
        existing_connections,
        min_confidence=min_confidence,
        connection_type=connection_type,
    )
    return review.accepted
