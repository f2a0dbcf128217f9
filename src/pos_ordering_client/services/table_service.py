"""Table status board for dine-in seating."""

import logging
import time
from typing import Any

from pydantic.alias_generators import to_camel

from pos_ordering_client.models.table_models import Table, TableStats, TableStatus
from pos_ordering_client.observability import traced
from pos_ordering_client.observability.metrics import record_degraded_write
from pos_ordering_client.services.pos_backend_client import PosBackendClient

logger = logging.getLogger(__name__)

ALL = "all"


class TableValidationError(ValueError):
    """Raised when table fields are rejected before any change."""


class TableNotFoundError(LookupError):
    """Raised when no table has the requested id."""


def _validate_fields(table_number: str | None, capacity: int | None) -> None:
    if table_number is not None and not table_number.strip():
        raise TableValidationError("Table number is required")
    if capacity is not None and (isinstance(capacity, bool) or capacity <= 0):
        raise TableValidationError("Capacity must be a positive integer")


class TableStatusBoard:
    """Collection of tables and their occupancy status.

    Status changes are unconditional: any status can move to any other,
    including itself. Record edits (number, capacity, area) never touch the
    status. Every write is applied locally first; a backend failure is
    logged and reported but never rolled back.
    """

    def __init__(self, backend_client: PosBackendClient) -> None:
        """Initialize an empty board.

        Args:
            backend_client: Client for the table endpoints
        """
        self.backend_client = backend_client
        self._tables: dict[str, Table] = {}

    @property
    def tables(self) -> list[Table]:
        return list(self._tables.values())

    def get(self, table_id: str) -> Table:
        """Return a table by id.

        Raises:
            TableNotFoundError: If no table has this id
        """
        try:
            return self._tables[table_id]
        except KeyError:
            raise TableNotFoundError(f"Table {table_id} not found") from None

    @traced("tables.load")
    async def load(self) -> bool:
        """Replace the board with the backend's tables.

        Returns:
            bool: True if loaded, False if the backend failed and the board was kept
        """
        tables = await self.backend_client.get_tables()
        if tables is None:
            logger.error("Failed to load tables, keeping current board")
            return False

        self._tables = {table.id: table for table in tables}
        return True

    @traced("tables.set_status")
    async def set_status(
        self, table_id: str, status: TableStatus | str, order_id: str | None = None
    ) -> tuple[Table, bool]:
        """Move a table to a new status.

        Args:
            table_id: Table to update
            status: Target status, from any current status
            order_id: Order to attach; None detaches any previous order

        Returns:
            Tuple of (updated table, whether the backend accepted the change)

        Raises:
            TableNotFoundError: If no table has this id
            TableValidationError: If the status is unknown
        """
        table = self.get(table_id)
        try:
            new_status = TableStatus(status)
        except ValueError:
            raise TableValidationError(f"Unknown table status: {status!r}") from None

        updated = table.model_copy(update={"status": new_status, "current_order_id": order_id})
        self._tables[table_id] = updated

        synced = await self.backend_client.update_table_status(table_id, new_status, order_id)
        if not synced:
            logger.warning(f"Status of table {table_id} changed locally only")
            record_degraded_write("tables", "set_status")

        return updated, synced

    @traced("tables.create")
    async def create(self, table_number: str, capacity: int = 2, area: str = "Indoor") -> tuple[Table, bool]:
        """Add a table; new tables start available.

        Returns:
            Tuple of (new table, whether the backend accepted it)

        Raises:
            TableValidationError: If the number is empty or capacity is not positive
        """
        _validate_fields(table_number, capacity)
        fields = {"tableNumber": table_number.strip(), "capacity": capacity, "area": area}

        created = await self.backend_client.create_table(fields)
        synced = created is not None
        if created is None:
            logger.warning(f"Table {table_number} created locally only")
            record_degraded_write("tables", "create")
            created = Table(
                id=self._local_id(),
                table_number=fields["tableNumber"],
                capacity=capacity,
                area=area,
            )

        self._tables[created.id] = created
        return created, synced

    def _local_id(self) -> str:
        stamp = int(time.time() * 1000)
        while str(stamp) in self._tables:
            stamp += 1
        return str(stamp)

    @traced("tables.update")
    async def update(
        self,
        table_id: str,
        table_number: str | None = None,
        capacity: int | None = None,
        area: str | None = None,
    ) -> tuple[Table, bool]:
        """Edit a table's number, capacity or area.

        Returns:
            Tuple of (updated table, whether the backend accepted the change)

        Raises:
            TableNotFoundError: If no table has this id
            TableValidationError: If the number is empty or capacity is not positive
        """
        table = self.get(table_id)
        _validate_fields(table_number, capacity)

        changes: dict[str, Any] = {}
        if table_number is not None:
            changes["table_number"] = table_number.strip()
        if capacity is not None:
            changes["capacity"] = capacity
        if area is not None:
            changes["area"] = area

        updated = table.model_copy(update=changes)
        self._tables[table_id] = updated

        wire = {to_camel(name): value for name, value in changes.items()}
        synced = await self.backend_client.update_table(table_id, wire)
        if not synced:
            logger.warning(f"Table {table_id} updated locally only")
            record_degraded_write("tables", "update")

        return updated, synced

    @traced("tables.delete")
    async def delete(self, table_id: str) -> bool:
        """Remove a table.

        Returns:
            bool: Whether the backend accepted the delete

        Raises:
            TableNotFoundError: If no table has this id
        """
        self.get(table_id)
        del self._tables[table_id]

        synced = await self.backend_client.delete_table(table_id)
        if not synced:
            logger.warning(f"Table {table_id} deleted locally only")
            record_degraded_write("tables", "delete")
        return synced

    def filter_tables(self, status: TableStatus | str = ALL, area: str = ALL) -> list[Table]:
        """Tables matching a status and an area; "all" disables either filter."""
        result = self.tables
        if status != ALL:
            result = [t for t in result if t.status == status]
        if area != ALL:
            result = [t for t in result if t.area == area]
        return result

    def areas(self) -> list[str]:
        """Distinct areas in first-seen order."""
        return list(dict.fromkeys(t.area for t in self._tables.values()))

    def stats(self) -> TableStats:
        tables = self._tables.values()
        return TableStats(
            total=len(tables),
            available=sum(1 for t in tables if t.status is TableStatus.AVAILABLE),
            occupied=sum(1 for t in tables if t.status is TableStatus.OCCUPIED),
            reserved=sum(1 for t in tables if t.status is TableStatus.RESERVED),
        )

    def clear(self) -> None:
        self._tables = {}
