"""Unit tests for the JSON-backed measures table."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from datastore.measure_table import MeasureTable
from models.records import Measure, MeasureType
from services.errors import DatastoreError


def _sample_measure(
    measure_uuid: str = "measure-123",
    customer_code: str = "1234",
    measure_type: MeasureType = MeasureType.WATER,
    taken_at: datetime = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc),
) -> Measure:
    return Measure(
        measure_uuid=measure_uuid,
        customer_code=customer_code,
        measure_type=measure_type,
        measure_datetime=taken_at,
        value=321,
        image_url="https://files.example/abc",
    )


def test_put_and_get_round_trip_returns_deep_copy() -> None:
    table = MeasureTable(name="measures")
    original = _sample_measure()

    table.put_item(original)
    fetched = table.get_item(original.measure_uuid)

    assert fetched is not None
    assert fetched == original
    assert fetched is not original

    fetched.value = 42
    fetched_again = table.get_item(original.measure_uuid)
    assert fetched_again is not None
    assert fetched_again.value == 321


def test_get_item_returns_none_when_missing() -> None:
    table = MeasureTable(name="measures")

    assert table.get_item("missing-id") is None


def test_put_item_persists_to_disk_and_reloads(tmp_path) -> None:
    path = tmp_path / "measures.json"
    table = MeasureTable(name="measures", persistence_path=path)
    measure = _sample_measure()

    table.put_item(measure)

    payload = json.loads(path.read_text())
    assert payload[measure.measure_uuid]["measure_type"] == "WATER"
    assert payload[measure.measure_uuid]["has_confirmed"] is False

    loaded = MeasureTable(name="measures", persistence_path=path).get_item(
        measure.measure_uuid
    )
    assert loaded == measure
    assert loaded.measure_datetime.tzinfo is not None


def test_corrupt_persistence_file_is_treated_as_empty(tmp_path) -> None:
    path = tmp_path / "measures.json"
    path.write_text("{not json")

    table = MeasureTable(name="measures", persistence_path=path)

    assert table.scan() == []


def test_write_failure_raises_datastore_error(tmp_path) -> None:
    path = tmp_path / "measures.json"
    table = MeasureTable(name="measures", persistence_path=path)
    path.mkdir()

    with pytest.raises(DatastoreError):
        table.put_item(_sample_measure())


def test_find_in_period_matches_customer_type_and_month() -> None:
    table = MeasureTable(name="measures")
    table.put_item(_sample_measure())

    found = table.find_in_period("1234", MeasureType.WATER, 2024, 1)

    assert found is not None
    assert found.measure_uuid == "measure-123"
    assert table.find_in_period("1234", MeasureType.WATER, 2024, 2) is None
    assert table.find_in_period("1234", MeasureType.WATER, 2023, 1) is None
    assert table.find_in_period("1234", MeasureType.GAS, 2024, 1) is None
    assert table.find_in_period("9999", MeasureType.WATER, 2024, 1) is None


def test_find_in_period_covers_last_instant_of_month() -> None:
    table = MeasureTable(name="measures")
    table.put_item(
        _sample_measure(taken_at=datetime(2024, 1, 31, 23, 59, 59, tzinfo=timezone.utc))
    )

    assert table.find_in_period("1234", MeasureType.WATER, 2024, 1) is not None


def test_query_filters_by_customer_and_type() -> None:
    table = MeasureTable(name="measures")
    table.put_item(_sample_measure(measure_uuid="water-jan"))
    table.put_item(
        _sample_measure(
            measure_uuid="water-feb",
            taken_at=datetime(2024, 2, 1, tzinfo=timezone.utc),
        )
    )
    table.put_item(_sample_measure(measure_uuid="gas-jan", measure_type=MeasureType.GAS))
    table.put_item(_sample_measure(measure_uuid="other", customer_code="5678"))

    water = table.query("1234", MeasureType.WATER)

    assert [item.measure_uuid for item in water] == ["water-jan", "water-feb"]
    assert [item.measure_uuid for item in table.query("1234", MeasureType.GAS)] == ["gas-jan"]
    assert table.query("0000", MeasureType.WATER) == []


def test_failed_write_leaves_table_unchanged(tmp_path) -> None:
    path = tmp_path / "measures.json"
    table = MeasureTable(name="measures", persistence_path=path)
    table.put_item(_sample_measure())
    path.unlink()
    path.mkdir()

    with pytest.raises(DatastoreError):
        table.put_item(_sample_measure(measure_uuid="measure-456"))
    with pytest.raises(DatastoreError):
        table.put_item(_sample_measure().model_copy(update={"has_confirmed": True, "value": 7}))

    assert [item.measure_uuid for item in table.scan()] == ["measure-123"]
    stored = table.get_item("measure-123")
    assert stored is not None
    assert stored.value == 321
    assert stored.has_confirmed is False
    assert table.get_item("measure-456") is None


def test_non_object_persistence_file_is_treated_as_empty(tmp_path) -> None:
    path = tmp_path / "measures.json"
    path.write_text("[]")

    table = MeasureTable(name="measures", persistence_path=path)

    assert table.scan() == []


def test_invalid_records_are_skipped_on_load(tmp_path) -> None:
    path = tmp_path / "measures.json"
    valid = _sample_measure()
    path.write_text(
        json.dumps(
            {
                "broken": {"customer_code": "1"},
                valid.measure_uuid: valid.model_dump(mode="json"),
            }
        )
    )

    table = MeasureTable(name="measures", persistence_path=path)

    assert [item.measure_uuid for item in table.scan()] == [valid.measure_uuid]
