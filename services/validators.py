"""Pure input checks used by the measure lifecycle."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any

from models.records import MeasureType

ENCODED_IMAGE_PATTERN = re.compile(
    r"^data:image/(png|jpeg|jpg|webp|heic|heif);base64,[A-Za-z0-9+/]+={0,2}$"
)

_KNOWN_TYPES = {member.value for member in MeasureType}


def is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    A trailing ``Z`` is accepted and naive values are assumed to be UTC.
    """
    candidate = value.strip()
    if not candidate:
        raise ValueError("Timestamp is empty.")

    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError as exc:
        raise ValueError("Invalid timestamp format") from exc

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return parsed.astimezone(timezone.utc)


def is_parseable_timestamp(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        parse_timestamp(value)
    except ValueError:
        return False
    return True


def is_known_category(value: Any) -> bool:
    return isinstance(value, str) and value.upper() in _KNOWN_TYPES


def is_encoded_image(value: Any) -> bool:
    return isinstance(value, str) and ENCODED_IMAGE_PATTERN.fullmatch(value) is not None


def is_valid_customer_code(value: Any) -> bool:
    # No whitespace of any kind, not just spaces.
    return is_non_empty_string(value) and not any(char.isspace() for char in value)
