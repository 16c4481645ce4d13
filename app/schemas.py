"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional, Union

from pydantic import BaseModel, Field

from models.records import Measure, MeasureType


class UploadRequest(BaseModel):
    """Body of a reading upload.

    Fields are left loosely typed so that the service reports its own
    validation errors in a fixed order.
    """

    image: Optional[Any] = Field(
        default=None, description="Base64 data URI of the meter photograph."
    )
    customer_code: Optional[Any] = None
    measure_datetime: Optional[Any] = Field(
        default=None, description="ISO-8601 timestamp of the reading."
    )
    measure_type: Optional[Any] = Field(default=None, description="WATER or GAS.")


class UploadResponse(BaseModel):
    image_url: str
    measure_value: Optional[Union[int, float]] = None
    measure_uuid: str

    @classmethod
    def from_measure(cls, measure: Measure) -> "UploadResponse":
        return cls(
            image_url=measure.image_url,
            measure_value=measure.value,
            measure_uuid=measure.measure_uuid,
        )


class ConfirmRequest(BaseModel):
    measure_uuid: Optional[Any] = None
    confirmed_value: Optional[Any] = None


class ConfirmResponse(BaseModel):
    success: bool = True


class MeasureSummary(BaseModel):
    """Listing entry for a single reading."""

    measure_uuid: str
    measure_datetime: datetime
    measure_type: MeasureType
    has_confirmed: bool
    image_url: str

    @classmethod
    def from_measure(cls, measure: Measure) -> "MeasureSummary":
        return cls(
            measure_uuid=measure.measure_uuid,
            measure_datetime=measure.measure_datetime,
            measure_type=measure.measure_type,
            has_confirmed=measure.has_confirmed,
            image_url=measure.image_url,
        )


class MeasureListResponse(BaseModel):
    customer_code: str
    measures: List[MeasureSummary] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    error_code: str
    error_description: Optional[str] = None
