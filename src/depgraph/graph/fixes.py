"""Applying cycle fixes and approved suggestions to a connection store.

Each operation issues a single create, update or delete to the store and
returns an acknowledgement. No analysis is embedded; callers re-request
analysis afterwards.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from depgraph.graph.errors import ConnectionNotFoundError
from depgraph.graph.store import new_connection_id
from depgraph.models.documents import FixAcknowledgement
from depgraph.models.work_items import Connection
from depgraph.observability.logging import get_logger

if TYPE_CHECKING:
    from depgraph.graph.store import ConnectionStore
    from depgraph.models.documents import FixRequest
    from depgraph.models.suggestions import AcceptedSuggestion

log = get_logger(__name__)

DEFAULT_CHANGE_TYPE = "relates_to"


def apply_fix(store: ConnectionStore, request: FixRequest) -> FixAcknowledgement:
    """Apply one cycle fix.

    ``remove_connection`` deletes the connection, ``reverse_connection``
    swaps its endpoints and ``change_type`` sets ``new_type`` (``relates_to``
    when omitted).

    Args:
        store: Connection store to write to.
        request: The fix to apply.

    Returns:
        Acknowledgement describing what was done.

    Raises:
        ConnectionNotFoundError: If the connection does not exist.
        InvalidEdgeError: If ``new_type`` is not a recognized type.
    """
    connection = store.get(request.connection_id)
    if connection is None:
        raise ConnectionNotFoundError(connection_id=request.connection_id)

    if request.action == "remove_connection":
        store.delete(connection.id)
        message = (
            f"Removed '{connection.connection_type}' connection "
            f"{connection.source_item_id} -> {connection.target_item_id}"
        )
    elif request.action == "reverse_connection":
        store.update(
            connection.id,
            source_item_id=connection.target_item_id,
            target_item_id=connection.source_item_id,
        )
        message = (
            f"Reversed connection to {connection.target_item_id} -> {connection.source_item_id}"
        )
    else:
        new_type = request.new_type or DEFAULT_CHANGE_TYPE
        store.update(connection.id, connection_type=new_type)
        message = f"Changed connection type from '{connection.connection_type}' to '{new_type}'"

    log.info("fix_applied", connection_id=connection.id, action=request.action)
    return FixAcknowledgement(
        connection_id=connection.id,
        action=request.action,
        applied=True,
        message=message,
    )


def apply_suggestion(
    store: ConnectionStore,
    suggestion: AcceptedSuggestion,
    connection_id: str | None = None,
) -> Connection:
    """Create a connection from a suggestion a human has approved.

    Args:
        store: Connection store to write to.
        suggestion: A suggestion returned by the validator.
        connection_id: Id for the new connection; generated when omitted.

    Returns:
        The created connection.
    """
    connection = Connection(
        id=connection_id or new_connection_id(),
        source_item_id=suggestion.source_id,
        target_item_id=suggestion.target_id,
        connection_type=suggestion.connection_type,
        strength=suggestion.strength,
        reason=suggestion.reason or None,
    )
    created = store.create(connection)
    log.info(
        "suggestion_applied",
        connection_id=created.id,
        source=created.source_item_id,
        target=created.target_item_id,
        type=created.connection_type,
    )
    return created
