"""Dining table models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TableStatus(str, Enum):
    """Enumeration of table occupancy states."""

    AVAILABLE = "available"
    OCCUPIED = "occupied"
    RESERVED = "reserved"


class Table(BaseModel):
    """Physical table in the dining area.

    ``table_number`` is assigned by staff and is not checked for uniqueness.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="Unique table identifier")
    table_number: str = Field(..., description="Human-assigned table label", min_length=1)
    capacity: int = Field(default=2, description="Number of seats", gt=0)
    area: str = Field(default="Indoor", description="Location tag")
    status: TableStatus = Field(default=TableStatus.AVAILABLE, description="Occupancy state")
    current_order_id: str | None = Field(None, description="Order attached by the last status change")
    is_active: bool = Field(default=True, description="Whether table is in service")


class TableStats(BaseModel):
    """Table counts per status."""

    total: int = 0
    available: int = 0
    occupied: int = 0
    reserved: int = 0
