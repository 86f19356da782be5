import json
from datetime import datetime, timedelta, timezone

import pytest

from runreport.core.errors import PersistError
from runreport.models import ExecutorInfo, Grade, Report, ResultCounts
from runreport.services import ReportStore

BASE_TIME = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def _build_report(report_id: str, *, minutes: int = 0, name: str = "Bob") -> Report:
    return Report(
        id=report_id,
        executor=ExecutorInfo(name=name, version="2.1", type="ci"),
        system={"os": "linux", "cpu": {"cores": 8}},
        player={"name": "tester"},
        results=ResultCounts(total=12, passed=10, failed=2, success_rate=83.3),
        categories=({"name": "ui", "passes": 4, "fails": 1}, {"name": "api", "passes": 6, "fails": 1}),
        grade=Grade.B,
        duration=1532,
        created_at=BASE_TIME + timedelta(minutes=minutes),
        timestamp=BASE_TIME + timedelta(minutes=minutes, seconds=-5),
        source_address="10.0.0.7",
        raw_payload={"executor": {"name": name}, "passes": 10, "fails": 2},
    )


def test_load_without_file_starts_empty(tmp_path):
    store = ReportStore(tmp_path / "reports.json")

    assert store.load() == ()
    assert len(store) == 0
    assert store.latest_created_at is None


def test_append_then_reload_round_trips_every_field(tmp_path):
    path = tmp_path / "reports.json"
    store = ReportStore(path)
    store.load()
    first = _build_report("AAAA1111")
    second = _build_report("BBBB2222", minutes=5, name="Alice")

    store.append(first)
    store.append(second)

    restarted = ReportStore(path)
    reloaded = restarted.load()

    assert reloaded == (first, second)
    assert restarted.get("BBBB2222") == second


def test_mirror_is_a_json_array_of_camel_case_records(tmp_path):
    path = tmp_path / "reports.json"
    store = ReportStore(path)
    store.append(_build_report("AAAA1111"))

    document = json.loads(path.read_text(encoding="utf-8"))

    assert isinstance(document, list)
    assert document[0]["id"] == "AAAA1111"
    assert document[0]["results"]["successRate"] == 83.3
    assert document[0]["sourceAddress"] == "10.0.0.7"
    assert "createdAt" in document[0]


def test_unparseable_mirror_is_ignored(tmp_path, caplog):
    path = tmp_path / "reports.json"
    path.write_text("{not json", encoding="utf-8")
    store = ReportStore(path)

    assert store.load() == ()
    assert "Ignoring unreadable reports file" in caplog.text
    assert not path.exists()
    assert store.set_aside_path.read_text(encoding="utf-8") == "{not json"


def test_mirror_with_invalid_records_is_ignored(tmp_path):
    path = tmp_path / "reports.json"
    legacy = json.dumps([{"id": 1, "data": {"x": 1}, "executor": {"name": "Old"}}])
    path.write_text(legacy, encoding="utf-8")
    store = ReportStore(path)

    assert store.load() == ()
    store.append(_build_report("AAAA1111"))

    assert store.set_aside_path is not None
    assert store.set_aside_path.name.startswith("reports.json.unreadable-")
    assert store.set_aside_path.read_text(encoding="utf-8") == legacy
    assert [item["id"] for item in json.loads(path.read_text(encoding="utf-8"))] == ["AAAA1111"]


def test_unreadable_mirror_that_cannot_be_moved_is_fatal(tmp_path, monkeypatch):
    path = tmp_path / "reports.json"
    path.write_text("{not json", encoding="utf-8")

    def refuse_replace(src, dst):
        raise PermissionError("read-only directory")

    monkeypatch.setattr("runreport.services.report_store.os.replace", refuse_replace)

    with pytest.raises(PersistError):
        ReportStore(path).load()
    assert path.read_text(encoding="utf-8") == "{not json"


def test_list_is_sorted_newest_first_regardless_of_insertion_order(tmp_path):
    store = ReportStore(tmp_path / "reports.json")
    store.append(_build_report("MIDDLE01", minutes=5))
    store.append(_build_report("OLDEST01", minutes=0))
    store.append(_build_report("NEWEST01", minutes=10))

    summaries = store.list()

    assert [summary.id for summary in summaries] == ["NEWEST01", "MIDDLE01", "OLDEST01"]
    for newer, older in zip(summaries, summaries[1:]):
        assert newer.created_at >= older.created_at


def test_duplicate_ids_are_refused(tmp_path):
    store = ReportStore(tmp_path / "reports.json")
    store.append(_build_report("AAAA1111"))

    with pytest.raises(ValueError):
        store.append(_build_report("AAAA1111", minutes=1))
    assert len(store) == 1


def test_failed_write_keeps_report_in_memory(tmp_path):
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("", encoding="utf-8")
    store = ReportStore(blocker / "reports.json")

    with pytest.raises(PersistError):
        store.append(_build_report("AAAA1111"))

    assert store.get("AAAA1111") is not None
    assert len(store) == 1


def test_get_is_idempotent(tmp_path):
    store = ReportStore(tmp_path / "reports.json")
    store.append(_build_report("AAAA1111"))

    assert store.get("AAAA1111") == store.get("AAAA1111")
    assert store.get("MISSING1") is None
