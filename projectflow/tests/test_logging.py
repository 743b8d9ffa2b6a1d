"""Structured logging and request_id propagation."""

import json
import logging

import pytest

from projectflow.core.logging import (
    ProjectFlowFormatter,
    latency_bucket_ms,
    log_event,
    request_id_ctx_var,
    truncate,
)


def _record(**attrs):
    record = logging.LogRecord("projectflow", logging.INFO, __file__, 1, "plan.created", None, None)
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


def test_request_id_in_response_and_logs(client, caplog):
    with caplog.at_level(logging.INFO, logger="projectflow"):
        resp = client.get("/api/projects", headers={"X-User-Id": "u1"})

    rid = resp.headers.get("x-request-id")
    assert rid
    completed = [r for r in caplog.records if r.getMessage() == "request.complete"]
    assert completed and completed[-1].request_id == rid
    assert completed[-1].path == "/api/projects"


def test_log_event_truncates_details(caplog):
    with caplog.at_level(logging.INFO, logger="projectflow"):
        log_event("warning", "member.write.retry", project_id="p1", extra={"raw": "x" * 600, "attempt": 2})

    [record] = [r for r in caplog.records if r.getMessage() == "member.write.retry"]
    assert record.levelname == "WARNING"
    assert record.project_id == "p1"
    assert record.details["attempt"] == "2"
    assert record.details["raw"].endswith("...<truncated>")
    assert len(record.details["raw"]) == 500 + len("...<truncated>")


def test_log_event_uses_bound_request_id(caplog):
    token = request_id_ctx_var.set("rid-bound")
    try:
        with caplog.at_level(logging.INFO, logger="projectflow"):
            log_event("info", "plan.created", user_id="u1")
    finally:
        request_id_ctx_var.reset(token)

    assert caplog.records[-1].request_id == "rid-bound"


def test_json_formatter_keeps_context_and_details():
    line = ProjectFlowFormatter(as_json=True).format(
        _record(request_id="rid-1", user_id="u1", project_id=None, details={"credits": "50"})
    )

    entry = json.loads(line)
    assert entry["message"] == "plan.created"
    assert entry["request_id"] == "rid-1"
    assert entry["user_id"] == "u1"
    assert "project_id" not in entry
    assert entry["details"] == {"credits": "50"}
    assert entry["timestamp"].endswith("Z")


def test_plain_formatter_is_one_line():
    line = ProjectFlowFormatter().format(_record(request_id="rid-2", details={"credits": "50"}))

    assert "\n" not in line
    assert "plan.created" in line
    assert "request_id=rid-2" in line
    assert "credits=50" in line


@pytest.mark.parametrize(
    "latency, bucket",
    [(None, "unknown"), (3, "<10ms"), (10, "10-100ms"), (499.9, "100-500ms"), (999, "500-1000ms"), (1000, ">=1000ms")],
)
def test_latency_buckets(latency, bucket):
    assert latency_bucket_ms(latency) == bucket


def test_truncate_short_values_untouched():
    assert truncate(42) == "42"
    assert truncate("abc", limit=2) == "ab...<truncated>"
