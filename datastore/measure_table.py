from __future__ import annotations
import json
import logging
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Dict, Optional

from pydantic import ValidationError

from models.records import Measure, MeasureType
from services.errors import DatastoreError
from settings import get_settings

logger = logging.getLogger(__name__)


class MeasureTable:
    """Keyed store of measures with optional JSON persistence.

    The lock only serialises individual calls. A lookup followed by a write
    issued by the caller is not atomic.
    """

    def __init__(self, name: str, persistence_path: Optional[Path] = None) -> None:
        self.name = name
        self._items: Dict[str, Measure] = {}
        self.persistence_path = persistence_path
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def put_item(self, item: Measure) -> None:
        with self._lock:
            candidate = dict(self._items)
            candidate[item.measure_uuid] = item.model_copy(deep=True)
            # Only swap in the new contents once they are on disk.
            self._persist(candidate)
            self._items = candidate

    def get_item(self, key: str) -> Optional[Measure]:
        with self._lock:
            item = self._items.get(key)
            if item is None:
                return None
            return item.model_copy(deep=True)

    def find_in_period(
        self,
        customer_code: str,
        measure_type: MeasureType,
        year: int,
        month: int,
    ) -> Optional[Measure]:
        """Return the first measure for the customer and type taken in ``month``/``year``."""

        with self._lock:
            for item in self._items.values():
                if (
                    item.customer_code == customer_code
                    and item.measure_type == measure_type
                    and item.period == (year, month)
                ):
                    return item.model_copy(deep=True)
        return None

    def query(self, customer_code: str, measure_type: MeasureType) -> list[Measure]:
        with self._lock:
            return [
                item.model_copy(deep=True)
                for item in self._items.values()
                if item.customer_code == customer_code and item.measure_type == measure_type
            ]

    def scan(self) -> list[Measure]:
        """Return deep copies of all stored measures."""

        with self._lock:
            return [item.model_copy(deep=True) for item in self._items.values()]

    def _persist(self, items: Dict[str, Measure]) -> None:
        if not self.persistence_path:
            return
        payload = {
            measure_uuid: item.model_dump(mode="json")
            for measure_uuid, item in items.items()
        }
        try:
            self.persistence_path.write_text(json.dumps(payload, indent=2))
        except OSError as exc:
            logger.exception("Failed to persist table %s", self.name)
            raise DatastoreError(f"Could not write table {self.name!r}.") from exc

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "{}"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError):
            logger.warning("Ignoring unreadable table file %s", self.persistence_path)
            data = {}

        if not isinstance(data, dict):
            logger.warning("Ignoring malformed table file %s", self.persistence_path)
            return

        for measure_uuid, payload in data.items():
            try:
                self._items[measure_uuid] = Measure.model_validate(payload)
            except ValidationError:
                logger.warning(
                    "Skipping invalid record in %s",
                    self.persistence_path,
                    extra={"measure_uuid": measure_uuid},
                )


@lru_cache
def build_default_table(
    name: Optional[str] = None,
    path: Optional[str] = None,
) -> MeasureTable:
    settings = get_settings()
    table_name = settings.table_name if name is None else name
    table_path = settings.table_persistence_path if path is None else path
    persistence = Path(table_path) if table_path else None
    return MeasureTable(name=table_name, persistence_path=persistence)
