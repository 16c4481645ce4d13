from __future__ import annotations
import base64
import binascii
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from settings import get_settings

logger = logging.getLogger(__name__)


class InvalidImagePayload(ValueError):
    """Raised when a data URI payload does not decode as base64."""


@dataclass(frozen=True)
class StoredImage:
    path: Path
    mime_type: str


def split_data_uri(encoded_image: str) -> tuple[str, bytes]:
    """Return the image subtype and decoded bytes of a base64 data URI."""
    header, _, payload = encoded_image.partition(",")
    payload = payload.rstrip("=")
    payload += "=" * (-len(payload) % 4)
    extension = header.split(";", 1)[0].split("/", 1)[-1]
    try:
        data = base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise InvalidImagePayload("Image payload is not valid base64.") from exc
    return extension, data


class TemporaryImageStore:
    """Scratch directory holding decoded images while they are recognised."""

    def __init__(self, root_path: Path) -> None:
        self.root_path = root_path

    def save(
        self,
        encoded_image: str,
        measure_type: str,
        customer_code: str,
        month: int,
        year: int,
    ) -> StoredImage:
        """Write the decoded image; ``month`` is zero-based (January is 0)."""
        extension, data = split_data_uri(encoded_image)
        filename = Path(f"{measure_type}-{customer_code}-{month + 1}-{year}.{extension}").name
        path = self.root_path / filename

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.debug("Stored temporary image %s", path)

        mime_subtype = "jpeg" if extension == "jpg" else extension
        return StoredImage(path=path, mime_type=f"image/{mime_subtype}")

    def discard(self, path: Path) -> None:
        path.unlink(missing_ok=True)
        logger.debug("Discarded temporary image %s", path)


@lru_cache
def build_default_image_store(root_path: Optional[str] = None) -> TemporaryImageStore:
    settings = get_settings()
    root = settings.upload_tmp_dir if root_path is None else root_path
    return TemporaryImageStore(root_path=Path(root))
