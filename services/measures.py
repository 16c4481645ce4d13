"""Lifecycle of meter readings: creation from a photo, confirmation and listing."""

from __future__ import annotations

import logging
import math
from functools import lru_cache
from typing import Any, Optional

from datastore.measure_table import MeasureTable, build_default_table
from models.records import Measure, MeasureType
from services.errors import (
    ConfirmationDuplicate,
    DoubleReport,
    InvalidData,
    InvalidType,
    MeasureNotFound,
    MeasuresNotFound,
)
from services.recognition import RecognitionClient, build_default_recognizer
from services.validators import (
    is_encoded_image,
    is_known_category,
    is_non_empty_string,
    is_parseable_timestamp,
    is_valid_customer_code,
    parse_timestamp,
)
from storage.temp_images import (
    InvalidImagePayload,
    TemporaryImageStore,
    build_default_image_store,
)

logger = logging.getLogger(__name__)

MISSING_DATA = "missing or invalid data"


def _coerce_number(value: Any) -> Optional[int | float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        return None
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


class MeasureService:
    """Coordinates validation, image recognition and the measures table."""

    def __init__(
        self,
        table: MeasureTable,
        images: TemporaryImageStore,
        recognizer: RecognitionClient,
    ) -> None:
        self.table = table
        self.images = images
        self.recognizer = recognizer

    def create_measure(
        self,
        image: Any,
        customer_code: Any,
        measure_datetime: Any,
        measure_type: Any,
    ) -> Measure:
        """Validate the upload, reject a second reading in the same month and record a new one."""
        if not all(
            is_non_empty_string(field)
            for field in (image, customer_code, measure_datetime, measure_type)
        ):
            raise InvalidData(MISSING_DATA)
        if not is_encoded_image(image):
            raise InvalidData("invalid image format")
        if not is_valid_customer_code(customer_code):
            raise InvalidData("invalid customer code format")
        if not is_parseable_timestamp(measure_datetime):
            raise InvalidData("invalid measurement timestamp format")
        if not is_known_category(measure_type):
            raise InvalidData("invalid measurement type")

        kind = MeasureType(measure_type.upper())
        taken_at = parse_timestamp(measure_datetime)
        period = f"{taken_at.month}/{taken_at.year}"

        existing = self.table.find_in_period(customer_code, kind, taken_at.year, taken_at.month)
        if existing is not None:
            logger.info(
                "Rejected duplicate reading",
                extra={
                    "customer_code": customer_code,
                    "measure_type": kind.value,
                    "period": period,
                    "error_code": DoubleReport.error_code.value,
                },
            )
            raise DoubleReport()

        try:
            stored = self.images.save(
                image, kind.value, customer_code, taken_at.month - 1, taken_at.year
            )
        except InvalidImagePayload as exc:
            raise InvalidData("invalid image format") from exc
        except ValueError as exc:
            # The customer code is the only caller-supplied part of the file name.
            raise InvalidData("invalid customer code format") from exc

        try:
            recognition = self.recognizer.recognize(
                stored.path,
                stored.mime_type,
                f"{kind.value} measure by {customer_code} - {period}",
            )
        finally:
            self.images.discard(stored.path)

        measure = Measure(
            customer_code=customer_code,
            measure_type=kind,
            measure_datetime=taken_at,
            value=recognition.value,
            image_url=recognition.image_url,
        )
        self.table.put_item(measure)
        logger.info(
            "Recorded reading",
            extra={
                "measure_uuid": measure.measure_uuid,
                "customer_code": customer_code,
                "measure_type": kind.value,
                "period": period,
                "measure_value": measure.value,
            },
        )
        return measure

    def confirm_measure(self, measure_uuid: Any, confirmed_value: Any) -> Measure:
        """Overwrite the recognised value once and mark the reading confirmed."""
        if not measure_uuid or confirmed_value is None:
            raise InvalidData(MISSING_DATA)
        if not is_non_empty_string(measure_uuid):
            raise InvalidData("invalid identifier format")
        value = _coerce_number(confirmed_value)
        if value is None:
            raise InvalidData("invalid confirmation value")

        measure = self.table.get_item(measure_uuid)
        if measure is None:
            raise MeasureNotFound()
        if measure.has_confirmed:
            raise ConfirmationDuplicate()

        confirmed = measure.model_copy(update={"value": value, "has_confirmed": True})
        self.table.put_item(confirmed)
        logger.info(
            "Confirmed reading",
            extra={"measure_uuid": measure_uuid, "measure_value": value},
        )
        return confirmed

    def list_measures(self, customer_code: Any, measure_type: Any) -> list[Measure]:
        if not customer_code or not measure_type:
            raise InvalidData(MISSING_DATA)
        if not is_valid_customer_code(customer_code):
            raise InvalidData("invalid customer code format")
        if not is_known_category(measure_type):
            raise InvalidType()

        measures = self.table.query(customer_code, MeasureType(measure_type.upper()))
        if not measures:
            raise MeasuresNotFound()
        return measures


@lru_cache
def build_default_service() -> MeasureService:
    """Factory that wires the service with configured collaborators."""
    return MeasureService(
        table=build_default_table(),
        images=build_default_image_store(),
        recognizer=build_default_recognizer(),
    )
