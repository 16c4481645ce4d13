"""Domain models shared across services."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional, Union
from uuid import uuid4

from pydantic import BaseModel, Field


class MeasureType(str, Enum):
    """Kinds of meter a reading can be taken from."""

    WATER = "WATER"
    GAS = "GAS"


class Measure(BaseModel):
    """A single meter reading as persisted in the measures table."""

    measure_uuid: str = Field(default_factory=lambda: str(uuid4()))
    customer_code: str
    measure_type: MeasureType
    measure_datetime: datetime
    value: Optional[Union[int, float]] = None
    image_url: str
    has_confirmed: bool = False

    @property
    def period(self) -> tuple[int, int]:
        """Calendar ``(year, month)`` the reading belongs to."""
        return self.measure_datetime.year, self.measure_datetime.month
