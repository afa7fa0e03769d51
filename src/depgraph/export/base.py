"""Export data model and Exporter protocol.

Defines the intermediate representation (ExportContext) that exporters
consume, plus the Exporter protocol they must implement.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from pathlib import Path

EXPORT_FORMAT_VERSION = "1.0"


@dataclass
class ExportContext:
    """A workspace snapshot plus the headline numbers of its analysis.

    Work items and connections are kept in their camelCase wire form so
    exported documents can be loaded back as analysis requests.
    """

    workspace_id: str | None
    exported_at: str
    work_items: list[dict[str, Any]]
    connections: list[dict[str, Any]]
    critical_path: list[str] = field(default_factory=list)
    health_score: int = 100
    version: str = EXPORT_FORMAT_VERSION

    def to_document(self) -> dict[str, Any]:
        """Return the camelCase export document."""
        return {
            "workspaceId": self.workspace_id,
            "exportedAt": self.exported_at,
            "workItems": self.work_items,
            "connections": self.connections,
            "criticalPath": self.critical_path,
            "healthScore": self.health_score,
            "version": self.version,
        }


class Exporter(Protocol):
    """Protocol for export format handlers."""

    format_name: str

    def export(self, context: ExportContext, output_dir: Path) -> Path:
        """Export the snapshot to the given output directory.

        Args:
            context: Snapshot and analysis summary.
            output_dir: Directory to write output files.

        Returns:
            Path to the main output file.
        """
        ...
