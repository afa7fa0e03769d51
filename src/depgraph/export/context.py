"""Build ExportContext from an analysis request and its result."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from depgraph.export.base import ExportContext

if TYPE_CHECKING:
    from depgraph.models.analysis import AnalysisResult
    from depgraph.models.documents import AnalysisRequest


def build_export_context(
    request: AnalysisRequest,
    result: AnalysisResult,
    exported_at: datetime | None = None,
) -> ExportContext:
    """Collect the data needed by exporters.

    Removed connections are left out of the export.

    Args:
        request: The analysed snapshot.
        result: Analysis of that snapshot.
        exported_at: Export timestamp; the current UTC time when omitted.

    Returns:
        ExportContext for the snapshot.
    """
    timestamp = exported_at or datetime.now(UTC)
    return ExportContext(
        workspace_id=request.workspace_id,
        exported_at=timestamp.isoformat(),
        work_items=[
            item.model_dump(by_alias=True, exclude_none=True) for item in request.work_items
        ],
        connections=[
            conn.model_dump(by_alias=True, exclude_none=True)
            for conn in request.connections
            if conn.is_active
        ],
        critical_path=list(result.critical_path),
        health_score=result.health_score,
    )
