"""Tests for the JSON file entry source."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from timetally.core.entries import AssignedProject, TimeEntry
from timetally.rollups.time_windows import resolve_range
from timetally.storage import EntrySource, JsonEntryStore, StorageError


def ms(dt):
    return int(dt.timestamp() * 1000)


def write_document(path, entries, **extra):
    path.write_text(json.dumps({**extra, "entries": entries}), encoding="utf-8")
    return path


def test_store_is_an_entry_source(tmp_path):
    assert isinstance(JsonEntryStore(tmp_path / "entries.json"), EntrySource)


def test_list_entries_half_open_and_most_recent_first(tmp_path):
    r = resolve_range("2025-10-08", "day", "UTC")
    path = write_document(
        tmp_path / "entries.json",
        [
            {"id": "before", "occurredAt": ms(r.start - timedelta(milliseconds=1)), "minutes": 1},
            {"id": "start", "occurredAt": ms(r.start), "minutes": 2},
            {"id": "noon", "occurredAt": ms(r.start + timedelta(hours=12)), "minutes": 3},
            {"id": "end", "occurredAt": ms(r.end_exclusive), "minutes": 4},
        ],
    )

    entries = JsonEntryStore(path).list_entries(r.start, r.end_exclusive)

    assert [e.id for e in entries] == ["noon", "start"]


def test_load_all_accepts_bare_list(tmp_path):
    path = tmp_path / "entries.json"
    path.write_text(json.dumps([{"id": "e1", "occurredAt": 0, "minutes": 5}]), encoding="utf-8")

    assert [e.id for e in JsonEntryStore(path).load_all()] == ["e1"]


def test_missing_file(tmp_path):
    with pytest.raises(StorageError, match="not found"):
        JsonEntryStore(tmp_path / "missing.json").load_all()


def test_invalid_json(tmp_path):
    path = tmp_path / "entries.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(StorageError, match="Invalid JSON"):
        JsonEntryStore(path).load_all()


def test_schema_violation_lists_errors(tmp_path):
    path = write_document(tmp_path / "entries.json", [{"id": "e1", "occurredAt": 0, "minutes": -1}])

    with pytest.raises(StorageError) as exc_info:
        JsonEntryStore(path).load_all()

    assert "Invalid entries document" in str(exc_info.value)
    assert exc_info.value.errors


def test_save_writes_endpoint_shape(tmp_path):
    entry = TimeEntry(
        id="e1",
        occurred_at=datetime(2025, 10, 8, 9, tzinfo=timezone.utc),
        minutes=30,
        project=AssignedProject(id="p1", name="Alpha"),
        task_name="Design",
    )
    store = JsonEntryStore(tmp_path / "nested" / "entries.json")

    store.save([entry], from_iso="2025-10-06", to_iso="2025-10-13")

    document = json.loads(store.path.read_text(encoding="utf-8"))
    assert document["from"] == "2025-10-06"
    assert document["to"] == "2025-10-13"
    assert document["entries"][0]["projectName"] == "Alpha"
    assert store.load_all() == [entry]
