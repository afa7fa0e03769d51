"""Relationship suggestion models.

Candidates come from a generative collaborator and are untrusted: types and
confidences are parsed loosely here and judged by
:mod:`depgraph.graph.suggestions`.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from depgraph.models.work_items import CamelModel, WorkItemSummary

DEFAULT_SUGGESTION_STRENGTH = 0.7

RejectionReason = Literal[
    "unknown_endpoint",
    "self_loop",
    "unknown_type",
    "invalid_value",
    "duplicate_existing",
    "duplicate_candidate",
    "low_confidence",
    "type_filtered",
]


class SuggestionCandidate(CamelModel):
    """A proposed connection between two work items."""

    source_id: str
    target_id: str
    connection_type: str
    confidence: float
    reason: str = ""
    strength: float | None = None


class AcceptedSuggestion(CamelModel):
    """A candidate that passed validation, awaiting human approval.

    Attributes:
        creates_cycle: True when the candidate is a hard-ordering type and
            adding it would close a loop in the current graph.
    """

    source_id: str
    target_id: str
    connection_type: str
    confidence: float = Field(ge=0.0, le=1.0)
    reason: str = ""
    strength: float = Field(default=DEFAULT_SUGGESTION_STRENGTH, ge=0.0, le=1.0)
    source_work_item: WorkItemSummary
    target_work_item: WorkItemSummary
    creates_cycle: bool = False


class RejectedSuggestion(CamelModel):
    """A candidate that was dropped, with the reason for audit."""

    candidate: SuggestionCandidate
    reason: RejectionReason
    detail: str = ""


class SuggestionReview(CamelModel):
    """Accepted and rejected candidates from one validation pass."""

    accepted: list[AcceptedSuggestion] = Field(default_factory=list)
    rejected: list[RejectedSuggestion] = Field(default_factory=list)
