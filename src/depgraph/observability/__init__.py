"""Observability module for depgraph.

Provides structured logging for the analysis engine and the CLI.
"""

from depgraph.observability.logging import (
    close_file_logging,
    configure_logging,
    get_logger,
    snapshot_context,
)

__all__ = [
    "close_file_logging",
    "configure_logging",
    "get_logger",
    "snapshot_context",
]
