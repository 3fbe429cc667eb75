"""Tests for the HTTP metrics middleware and telemetry helpers."""

from unittest.mock import MagicMock, patch

import taskmanager.middleware.metrics as metrics_mod
from taskmanager import telemetry


def _instrumented_client(app):
    meter = MagicMock()
    counter = MagicMock()
    histogram = MagicMock()
    meter.create_counter.return_value = counter
    meter.create_histogram.return_value = histogram

    with patch.object(metrics_mod, "get_meter", return_value=meter):
        metrics_mod.register_metrics_middleware(app)

    return app.test_client(), counter, histogram


def test_records_route_pattern_not_task_id(app, db):
    client, counter, histogram = _instrumented_client(app)

    response = client.get("/tasks/edit/42")
    assert response.status_code == 302

    counter.add.assert_called_once()
    attrs = counter.add.call_args.args[1]
    assert attrs["method"] == "GET"
    assert attrs["route"] == "/tasks/edit/<int:task_id>"
    assert attrs["status"] == "302"

    histogram.record.assert_called_once()
    assert histogram.record.call_args.args[0] >= 0


def test_health_checks_not_recorded(app, db):
    client, counter, histogram = _instrumented_client(app)

    client.get("/api/health")

    counter.add.assert_not_called()
    histogram.record.assert_not_called()


def test_telemetry_helpers_delegate_to_global_providers():
    with patch.object(telemetry.trace, "get_tracer") as get_tracer, patch.object(
        telemetry.metrics, "get_meter"
    ) as get_meter:
        assert telemetry.get_tracer("tasks") is get_tracer.return_value
        assert telemetry.get_meter("tasks") is get_meter.return_value

    get_tracer.assert_called_once_with("tasks")
    get_meter.assert_called_once_with("tasks")
