"""JSON export format.

Serializes the ExportContext to a JSON document that external tools can
read, and that ``depgraph analyze`` accepts back as a request.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from depgraph.export.base import ExportContext


class JsonExporter:
    """Export a workspace snapshot as structured JSON."""

    format_name = "json"
    filename = "dependency-graph.json"

    def export(self, context: ExportContext, output_dir: Path) -> Path:
        """Write the export document as formatted JSON.

        Args:
            context: Snapshot and analysis summary.
            output_dir: Directory to write output files.

        Returns:
            Path to the generated dependency-graph.json file.
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        output_file = output_dir / self.filename

        data = context.to_document()
        output_file.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")

        return output_file
