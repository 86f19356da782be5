import json
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from main import create_app
from runreport.core.config import Settings
from runreport.models import Report


class RecordingSink:
    def __init__(self) -> None:
        self.reports: list[Report] = []

    def notify(self, report: Report) -> None:
        self.reports.append(report)


def _payload(**overrides):
    payload = {
        "executor": {"name": "Bob"},
        "system": {"os": "x"},
        "categories": [],
        "passes": 10,
        "fails": 2,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def reports_file(tmp_path):
    return tmp_path / "reports.json"


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def client(reports_file, sink):
    app = create_app(Settings(reports_file=str(reports_file)), sink=sink)
    with TestClient(app) as test_client:
        yield test_client


def test_submit_report_returns_links(client):
    response = client.post("/report", json=_payload())

    assert response.status_code == 201
    payload = response.json()
    report_id = payload["id"]
    assert len(report_id) == 8
    assert payload["link"] == f"http://testserver/report/{report_id}/json"
    assert payload["viewLink"] == f"http://testserver/report/{report_id}"
    assert "createdAt" in payload


def test_submitted_report_uses_defaults(client):
    report_id = client.post("/report", json=_payload()).json()["id"]

    response = client.get(f"/report/{report_id}/json")

    assert response.status_code == 200
    report = response.json()
    assert report["executor"]["name"] == "Bob"
    assert report["executor"]["version"] == "unknown"
    assert report["results"] == {"total": 0, "passed": 10, "failed": 2, "successRate": 0}
    assert report["grade"] == "F"
    assert report["sourceAddress"] == "testclient"
    assert report["rawPayload"] == _payload()


def test_implausible_results_are_rejected(client):
    response = client.post("/report", json=_payload(passes=2000, fails=0))

    assert response.status_code == 400
    assert response.json()["code"] == "ImplausibleResults"
    assert client.get("/reports").json() == []


def test_missing_executor_is_rejected(client):
    response = client.post("/report", json=_payload(executor={"version": "1"}))

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "MissingExecutor"
    assert body["error"]
    assert client.get("/health").json()["reports"] == 0


def test_non_json_body_is_malformed(client):
    response = client.post("/report", content=b"not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json()["code"] == "MalformedPayload"


def test_unknown_report_returns_not_found(client):
    for path in ("/report/UNKNOWN123", "/report/UNKNOWN123/json"):
        response = client.get(path)
        assert response.status_code == 404
        assert response.json() == {"error": "Report not found"}


def test_listing_is_newest_first(client):
    ids = [client.post("/report", json=_payload(executor={"name": f"exec-{n}"})).json()["id"] for n in range(3)]

    listing = client.get("/reports").json()

    assert {item["id"] for item in listing} == set(ids)
    created = [datetime.fromisoformat(item["createdAt"]) for item in listing]
    assert created == sorted(created, reverse=True)
    assert set(listing[0]) == {
        "id",
        "executor",
        "successRate",
        "grade",
        "total",
        "passed",
        "failed",
        "duration",
        "createdAt",
        "sourceAddress",
    }


def test_html_views_render(client):
    report_id = client.post("/report", json=_payload(categories=[{"name": "ui", "passes": 3, "fails": 1}])).json()["id"]

    detail = client.get(f"/report/{report_id}")
    index = client.get("/")

    assert detail.status_code == 200
    assert detail.headers["content-type"].startswith("text/html")
    assert f"Report {report_id}" in detail.text
    assert "Executor: Bob" in detail.text
    assert report_id in index.text


def test_health_reports_count(client):
    client.post("/report", json=_payload())

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "reports": 1}


def test_notification_is_dispatched_after_store(reports_file, sink):
    app = create_app(Settings(reports_file=str(reports_file)), sink=sink)
    with TestClient(app) as test_client:
        report_id = test_client.post("/report", json=_payload()).json()["id"]

    # leaving the client context drains the dispatcher
    assert [report.id for report in sink.reports] == [report_id]


def test_reports_survive_restart(reports_file, sink):
    settings = Settings(reports_file=str(reports_file))
    with TestClient(create_app(settings, sink=sink)) as first:
        report_id = first.post("/report", json=_payload()).json()["id"]
        original = first.get(f"/report/{report_id}/json").json()

    with TestClient(create_app(settings, sink=sink)) as second:
        reloaded = second.get(f"/report/{report_id}/json").json()

    assert reloaded == original
    assert json.loads(reports_file.read_text(encoding="utf-8"))[0]["id"] == report_id


def test_persistence_failure_returns_server_error(tmp_path, sink):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    app = create_app(Settings(reports_file=str(blocker / "reports.json")), sink=sink)

    with TestClient(app) as test_client:
        response = test_client.post("/report", json=_payload())

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to save report"}
    assert sink.reports == []


def test_public_base_url_and_forwarded_address(tmp_path, sink):
    settings = Settings(
        reports_file=str(tmp_path / "reports.json"),
        public_base_url="https://reports.example.com/",
        trust_proxy_headers=True,
    )
    with TestClient(create_app(settings, sink=sink)) as test_client:
        response = test_client.post(
            "/report", json=_payload(), headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.1"}
        )
        report_id = response.json()["id"]
        report = test_client.get(f"/report/{report_id}/json").json()

    assert response.json()["viewLink"] == f"https://reports.example.com/report/{report_id}"
    assert response.json()["link"] == f"https://reports.example.com/report/{report_id}/json"
    assert report["sourceAddress"] == "203.0.113.9"


@pytest.mark.parametrize("timestamp", ["0001-01-01T00:00:00+01:00", "9999-12-31T23:59:59-01:00"])
def test_out_of_range_timestamp_is_a_structured_rejection(client, timestamp):
    response = client.post("/report", json=_payload(timestamp=timestamp))

    assert response.status_code == 400
    assert response.json()["code"] == "TimestampOutOfBounds"


def test_non_finite_counters_are_rejected(client):
    body = b'{"executor": {"name": "Bob"}, "system": {}, "categories": [], "passes": NaN, "fails": 0}'

    response = client.post("/report", content=body, headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json()["code"] == "MissingResults"
    assert client.get("/reports").json() == []


def test_legacy_mirror_is_kept_aside_on_startup(reports_file, sink):
    legacy = json.dumps([{"id": 1, "data": {"x": 1}, "executor": {"name": "Old"}}])
    reports_file.write_text(legacy, encoding="utf-8")

    with TestClient(create_app(Settings(reports_file=str(reports_file)), sink=sink)) as test_client:
        test_client.post("/report", json=_payload())

    kept = list(reports_file.parent.glob("reports.json.unreadable-*"))
    assert len(kept) == 1
    assert kept[0].read_text(encoding="utf-8") == legacy
