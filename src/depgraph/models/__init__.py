"""Pydantic models for depgraph inputs, outputs and documents."""

from depgraph.models.analysis import (
    AnalysisResult,
    Cycle,
    CycleDetectionResult,
    CycleFix,
    HealthReport,
    NodeMetrics,
    ScheduleResult,
    SlackItem,
)
from depgraph.models.documents import (
    AnalysisRequest,
    FixAcknowledgement,
    FixRequest,
    SuggestionRequest,
)
from depgraph.models.suggestions import (
    AcceptedSuggestion,
    RejectedSuggestion,
    SuggestionCandidate,
    SuggestionReview,
)
from depgraph.models.work_items import (
    CONNECTION_TYPES,
    HARD_CONNECTION_TYPES,
    Connection,
    WorkItem,
    WorkItemSummary,
)

__all__ = [
    "CONNECTION_TYPES",
    "HARD_CONNECTION_TYPES",
    "AcceptedSuggestion",
    "AnalysisRequest",
    "AnalysisResult",
    "Connection",
    "Cycle",
    "CycleDetectionResult",
    "CycleFix",
    "FixAcknowledgement",
    "FixRequest",
    "HealthReport",
    "NodeMetrics",
    "RejectedSuggestion",
    "ScheduleResult",
    "SlackItem",
    "SuggestionCandidate",
    "SuggestionRequest",
    "SuggestionReview",
    "WorkItem",
    "WorkItemSummary",
]
