"""Request and response documents exchanged with callers."""

from __future__ import annotations

from pydantic import Field

from depgraph.models.analysis import FixAction  # noqa: TC001 - pydantic needs it at runtime
from depgraph.models.suggestions import SuggestionCandidate
from depgraph.models.work_items import CamelModel, Connection, WorkItem


class AnalysisRequest(CamelModel):
    """Snapshot of a workspace's work items and connections."""

    workspace_id: str | None = None
    work_items: list[WorkItem] = Field(default_factory=list)
    connections: list[Connection] = Field(default_factory=list)


class SuggestionRequest(CamelModel):
    """AI-proposed candidates plus the snapshot they refer to."""

    candidates: list[SuggestionCandidate] = Field(default_factory=list)
    work_items: list[WorkItem] = Field(default_factory=list)
    connections: list[Connection] = Field(default_factory=list)
    connection_type: str | None = None


class FixRequest(CamelModel):
    """A request to apply one cycle fix to the connection store."""

    connection_id: str = Field(min_length=1)
    action: FixAction
    new_type: str | None = None


class FixAcknowledgement(CamelModel):
    """Acknowledgement of a fix request. Callers re-request analysis."""

    connection_id: str
    action: FixAction
    applied: bool
    message: str = ""
