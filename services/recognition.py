"""Meter value extraction backed by the Gemini API."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional, Protocol

import google.generativeai as genai

from services.errors import RecognitionError
from settings import get_settings

logger = logging.getLogger(__name__)

MEASURE_PROMPT = (
    "Return an integer corresponding to the measured value on the device if it is "
    "a water or gas meter; otherwise, return 'ERROR'."
)


@dataclass(frozen=True)
class Recognition:
    """Outcome of a recognition call: where the image lives and what it reads."""

    image_url: str
    value: int


class RecognitionClient(Protocol):
    def recognize(self, path: Path, mime_type: str, display_name: str) -> Recognition:
        ...


def parse_measure_value(text: Optional[str]) -> int:
    """Interpret model output as a meter value, falling back to 0."""
    candidate = (text or "").strip()
    if not candidate:
        return 0
    try:
        return int(candidate)
    except ValueError:
        pass
    try:
        parsed = float(candidate)
    except ValueError:
        return 0
    if not math.isfinite(parsed) or not parsed.is_integer():
        return 0
    return int(parsed)


class GeminiRecognitionClient:
    """Uploads the image to the Gemini file store and asks the model for the reading."""

    def __init__(self, api_key: str, model: str) -> None:
        self.model = model
        genai.configure(api_key=api_key)

    def recognize(self, path: Path, mime_type: str, display_name: str) -> Recognition:
        try:
            uploaded = genai.upload_file(
                path=str(path), mime_type=mime_type, display_name=display_name
            )
            response = genai.GenerativeModel(self.model).generate_content(
                [uploaded, MEASURE_PROMPT]
            )
            raw_text = response.text
        except Exception as exc:
            logger.exception("Recognition request failed for %s", display_name)
            raise RecognitionError(str(exc)) from exc

        value = parse_measure_value(raw_text)
        if value == 0:
            logger.warning(
                "Recognition inconclusive for %s: %r", display_name, raw_text
            )
        return Recognition(image_url=uploaded.uri, value=value)


@lru_cache
def build_default_recognizer() -> GeminiRecognitionClient:
    settings = get_settings()
    return GeminiRecognitionClient(
        api_key=settings.gemini_api_key, model=settings.gemini_model
    )
