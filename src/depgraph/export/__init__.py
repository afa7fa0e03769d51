"""Export format handlers."""

from __future__ import annotations

from depgraph.export.base import EXPORT_FORMAT_VERSION, ExportContext, Exporter
from depgraph.export.context import build_export_context
from depgraph.export.json_exporter import JsonExporter

_EXPORTERS: dict[str, type[JsonExporter]] = {
    "json": JsonExporter,
}


def get_exporter(format_name: str) -> JsonExporter:
    """Get an exporter instance by format name.

    Args:
        format_name: Export format (e.g., "json").

    Returns:
        Exporter instance.

    Raises:
        ValueError: If the format is not supported.
    """
    cls = _EXPORTERS.get(format_name)
    if cls is None:
        supported = ", ".join(sorted(_EXPORTERS))
        msg = f"Unknown export format '{format_name}'. Supported: {supported}"
        raise ValueError(msg)
    return cls()


__all__ = [
    "EXPORT_FORMAT_VERSION",
    "ExportContext",
    "Exporter",
    "JsonExporter",
    "build_export_context",
    "get_exporter",
]
