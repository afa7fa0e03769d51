"""Connection storage protocol and dict-based implementation.

The engine never persists analysis results. The only writes it issues are
ordinary connection create/update/delete calls, made when a cycle fix is
applied or an approved suggestion is accepted. ConnectionStore describes
that collaborator; DictConnectionStore is the in-memory implementation used
by the CLI and tests.

Conflicting concurrent writes are resolved by the store (last write wins);
the engine adds no transactional coupling.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from depgraph.graph.errors import ConnectionNotFoundError, InvalidEdgeError
from depgraph.models.work_items import CONNECTION_TYPES, Connection

if TYPE_CHECKING:
    from collections.abc import Iterable


def new_connection_id() -> str:
    """Generate an id for a connection created by the engine."""
    return f"conn_{uuid.uuid4().hex[:12]}"


@runtime_checkable
class ConnectionStore(Protocol):
    """Storage backend protocol for connections.

    Implementations provide low-level CRUD. ``create`` must reject
    self-loops and unknown connection types.
    """

    def get(self, connection_id: str) -> Connection | None:
        """Get a connection by ID, or None if not found."""
        ...

    def create(self, connection: Connection) -> Connection:
        """Store a new connection and return it."""
        ...

    def update(self, connection_id: str, **updates: Any) -> Connection:
        """Merge field updates into an existing connection and return it."""
        ...

    def delete(self, connection_id: str) -> bool:
        """Delete a connection. Return True if removed, False if absent."""
        ...

    def list_active(self) -> list[Connection]:
        """Return all connections with status ``active``."""
        ...


def _check_creatable(connection: Connection) -> None:
    if connection.connection_type not in CONNECTION_TYPES:
        problem = "unknown_type"
    elif connection.source_item_id == connection.target_item_id:
        problem = "self_loop"
    else:
        return
    raise InvalidEdgeError(
        connection_id=connection.id,
        source_id=connection.source_item_id,
        target_id=connection.target_item_id,
        connection_type=connection.connection_type,
        problem=problem,
    )


class DictConnectionStore:
    """In-memory dict-based connection store."""

    def __init__(self, connections: Iterable[Connection] | None = None) -> None:
        self._connections: dict[str, Connection] = {}
        for connection in connections or []:
            self._connections[connection.id] = connection

    # -- Reads -----------------------------------------------------------------

    def get(self, connection_id: str) -> Connection | None:
        return self._connections.get(connection_id)

    def list_active(self) -> list[Connection]:
        return [c for c in self._connections.values() if c.is_active]

    def all(self) -> list[Connection]:
        return list(self._connections.values())

    def __len__(self) -> int:
        return len(self._connections)

    # -- Writes ----------------------------------------------------------------

    def create(self, connection: Connection) -> Connection:
        _check_creatable(connection)
        if connection.id in self._connections:
            raise InvalidEdgeError(
                connection_id=connection.id,
                source_id=connection.source_item_id,
                target_id=connection.target_item_id,
                connection_type=connection.connection_type,
                problem="duplicate_id",
            )
        self._connections[connection.id] = connection
        return connection

    def update(self, connection_id: str, **updates: Any) -> Connection:
        current = self._connections.get(connection_id)
        if current is None:
            raise ConnectionNotFoundError(connection_id=connection_id)
        updated = Connection.model_validate({**current.model_dump(), **updates})
        _check_creatable(updated)
        self._connections[connection_id] = updated
        return updated

    def delete(self, connection_id: str) -> bool:
        return self._connections.pop(connection_id, None) is not None

    # -- Serialization ---------------------------------------------------------

    def to_list(self) -> list[dict[str, Any]]:
        """Serialize all connections in camelCase wire format."""
        return [c.model_dump(by_alias=True, exclude_none=True) for c in self._connections.values()]
