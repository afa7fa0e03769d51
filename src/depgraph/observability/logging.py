"""Structured logging for depgraph.

Every module logs through ``get_logger(__name__)`` with snake_case event
names and keyword context::

    log.info("cycles_detected", count=2, affected=5)

Events go through the stdlib ``logging`` bridge so one processor chain feeds
two sinks:

- the console, a rich handler on stderr gated by ``-v``
- ``{log_root}/logs/debug.jsonl`` when ``--log`` is given, one JSON object
  per event at DEBUG level

Events logged inside :func:`snapshot_context` carry the snapshot being
analysed (``workspace_id``, ``work_items``, ``connections``), so lines from
different analyses in one log file can be told apart.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

import structlog
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from structlog.typing import EventDict, Processor, WrappedLogger

LOG_FILENAME = "debug.jsonl"

_configured = False
_file_handler: logging.FileHandler | None = None


def _drop_rich_columns(_logger: WrappedLogger, _name: str, event_dict: EventDict) -> EventDict:
    # RichHandler prints level and time in its own columns
    event_dict.pop("level", None)
    event_dict.pop("timestamp", None)
    return event_dict


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def _console_handler(verbosity: int) -> logging.Handler:
    levels = {0: logging.WARNING, 1: logging.INFO}
    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        tracebacks_show_locals=verbosity >= 2,
        show_time=verbosity >= 1,
        show_path=verbosity >= 2,
        markup=False,
        level=levels.get(verbosity, logging.DEBUG),
    )
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_shared_processors(),
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _drop_rich_columns,
                structlog.dev.ConsoleRenderer(colors=False),
            ],
        )
    )
    return handler


def _jsonl_handler(path: Path) -> logging.FileHandler:
    handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_shared_processors(),
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(default=str),
            ],
        )
    )
    return handler


def configure_logging(
    verbosity: int = 0,
    log_to_file: bool = False,
    log_root: Path | None = None,
) -> None:
    """Configure console and optional JSONL file logging.

    Calling it again replaces the previous configuration and closes any
    open log file.

    Args:
        verbosity: 0=WARNING (default), 1=INFO, 2+=DEBUG on the console.
        log_to_file: Also write every event to ``{log_root}/logs/debug.jsonl``.
        log_root: Directory under which ``logs/`` is created.

    Raises:
        ValueError: If log_to_file=True but log_root is not provided.
    """
    global _configured, _file_handler

    if log_to_file and log_root is None:
        raise ValueError("log_root is required when log_to_file=True")

    close_file_logging()

    handlers = [_console_handler(verbosity)]
    if log_to_file and log_root is not None:
        logs_dir = log_root / "logs"
        logs_dir.mkdir(parents=True, exist_ok=True)
        _file_handler = _jsonl_handler(logs_dir / LOG_FILENAME)
        handlers.append(_file_handler)

    root_level = logging.DEBUG if (verbosity > 0 or log_to_file) else logging.WARNING
    logging.basicConfig(level=root_level, handlers=handlers, force=True)

    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        cache_logger_on_first_use=True,
    )

    _configured = True


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Return a bound logger, configuring defaults on first use."""
    if not _configured:
        configure_logging()

    logger: structlog.typing.FilteringBoundLogger = structlog.get_logger(name)
    return logger


@contextmanager
def snapshot_context(
    work_items: int,
    connections: int,
    workspace_id: str | None = None,
) -> Iterator[None]:
    """Tag every event logged inside the block with the snapshot it concerns.

    Args:
        work_items: Number of work items in the snapshot.
        connections: Number of connections in the snapshot.
        workspace_id: Owning workspace, when known.
    """
    context: dict[str, object] = {"work_items": work_items, "connections": connections}
    if workspace_id is not None:
        context["workspace_id"] = workspace_id
    with structlog.contextvars.bound_contextvars(**context):
        yield


def close_file_logging() -> None:
    """Close the JSONL file handler, if one is open."""
    global _file_handler
    if _file_handler is not None:
        _file_handler.close()
        _file_handler = None
