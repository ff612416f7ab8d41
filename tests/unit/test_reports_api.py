"""Tests for the web app reports client, using httpx.MockTransport."""

import json
from datetime import datetime, timezone

import httpx
import pytest

from timetally.adapters.reports_api import ApiError, ReportsApiClient
from timetally.core.entries import UNASSIGNED
from timetally.rollups.time_windows import resolve_range
from timetally.storage import EntrySource

ENTRY = {
    "id": "e1",
    "occurredAt": 1759914000000,
    "minutes": 30,
    "projectId": "p1",
    "projectName": "Alpha",
    "projectColor": "blue",
    "taskName": "Design",
}


def client_for(handler, **kwargs):
    return ReportsApiClient("http://app.test/", transport=httpx.MockTransport(handler), **kwargs)


def test_get_report_entries_sends_query_and_parses_entries():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        seen["accept"] = request.headers.get("accept")
        return httpx.Response(200, json={"from": "2025-10-06", "to": "2025-10-13", "entries": [ENTRY]})

    entries = client_for(handler).get_report_entries("2025-10-06", "2025-10-13")

    assert seen == {
        "path": "/api/reports/entries",
        "params": {"from": "2025-10-06", "to": "2025-10-13"},
        "accept": "application/json",
    }
    assert len(entries) == 1
    assert entries[0].project_name == "Alpha"
    assert entries[0].occurred_at == datetime(2025, 10, 8, 9, tzinfo=timezone.utc)


def test_bearer_token_and_extra_headers():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["authorization"] = request.headers.get("authorization")
        seen["x-user"] = request.headers.get("x-user")
        return httpx.Response(200, json={"entries": []})

    client_for(handler, token="s3cret", headers={"x-user": "u1"}).get_report_entries("2025-10-06", "2025-10-13")

    assert seen == {"authorization": "Bearer s3cret", "x-user": "u1"}


def test_list_entries_uses_local_dates_of_the_window():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(request.url.params)
        return httpx.Response(200, json={"entries": [{**ENTRY, "projectId": None}]})

    client = client_for(handler)
    r = resolve_range("2025-10-08", "week", "America/New_York")

    entries = client.list_entries(r.start, r.end_exclusive)

    assert isinstance(client, EntrySource)
    assert seen == {"from": "2025-10-06", "to": "2025-10-13"}
    assert entries[0].project is UNASSIGNED


def test_json_error_message_is_extracted():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "from must be < to"})

    with pytest.raises(ApiError) as exc_info:
        client_for(handler).get_report_entries("2025-10-13", "2025-10-06")

    assert exc_info.value.status == 400
    assert exc_info.value.message == "from must be < to"
    assert exc_info.value.details == {"error": "from must be < to"}
    assert str(exc_info.value) == "from must be < to (HTTP 400)"


def test_json_message_field_is_used():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"message": "Unauthorized"})

    with pytest.raises(ApiError, match="Unauthorized") as exc_info:
        client_for(handler).get_report_entries("2025-10-06", "2025-10-13")

    assert exc_info.value.status == 401


def test_text_error_body_is_used():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="Bad gateway")

    with pytest.raises(ApiError) as exc_info:
        client_for(handler).get_report_entries("2025-10-06", "2025-10-13")

    assert exc_info.value.message == "Bad gateway"
    assert exc_info.value.details is None


def test_empty_error_body_falls_back_to_status():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    with pytest.raises(ApiError, match="Request failed: 500"):
        client_for(handler).get_report_entries("2025-10-06", "2025-10-13")


def test_non_json_success_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html></html>")

    with pytest.raises(ApiError, match="Expected a JSON response"):
        client_for(handler).get_report_entries("2025-10-06", "2025-10-13")


def test_connect_error_has_status_zero():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ApiError, match="not available") as exc_info:
        client_for(handler).get_report_entries("2025-10-06", "2025-10-13")

    assert exc_info.value.status == 0
    assert str(exc_info.value) == exc_info.value.message


def test_timeout_has_status_zero():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    with pytest.raises(ApiError, match="timed out") as exc_info:
        client_for(handler, timeout=0.5).get_report_entries("2025-10-06", "2025-10-13")

    assert exc_info.value.status == 0


def test_payload_can_be_a_bare_list():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=json.dumps([ENTRY]), headers={"content-type": "application/json"})

    assert [e.id for e in client_for(handler).get_report_entries("2025-10-06", "2025-10-13")] == ["e1"]


def test_entry_without_occurred_at_is_rejected():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"entries": [{"id": "1", "minutes": 5}]})

    with pytest.raises(ApiError, match="Invalid entries payload") as exc_info:
        client_for(handler).get_report_entries("2025-10-06", "2025-10-13")

    assert exc_info.value.status == 200
    assert any("occurredAt" in error for error in exc_info.value.errors)


def test_negative_minutes_are_rejected():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"entries": [{**ENTRY, "minutes": -30}]})

    with pytest.raises(ApiError, match="Invalid entries payload") as exc_info:
        client_for(handler).get_report_entries("2025-10-06", "2025-10-13")

    assert any("-30" in error for error in exc_info.value.errors)
