from __future__ import annotations

import io

import pytest
from prometheus_client import CollectorRegistry, Counter, Gauge

from services.event_metrics_service.app.errors import MetricsExportError
from services.event_metrics_service.app.event_types import EventType
from services.event_metrics_service.app.exposition import format_sample, format_value, render_exposition, write_exposition
from services.event_metrics_service.app.metrics import PrometheusExporter

from .conftest import exported_text, make_event


class BrokenSink(io.RawIOBase):
    def writable(self) -> bool:
        return True

    def write(self, data) -> int:
        raise OSError("connection reset by peer")


def test_integral_values_render_without_fraction():
    assert format_value(2.0) == "2"
    assert format_value(0.0) == "0"
    assert format_value(1.5) == "1.5"
    assert format_value(float("inf")) == "+Inf"


def test_sample_labels_keep_declared_order_with_trailing_comma():
    line = format_sample("keycloak_logins", {"realm": "r", "client": "c", "provider": "p"}, 3.0)
    assert line == 'keycloak_logins{realm="r",client="c",provider="p",} 3\n'


def test_sample_without_labels_has_no_braces():
    assert format_sample("up", {}, 1.0) == "up 1\n"


def test_label_values_are_escaped():
    line = format_sample("m", {"error": 'bad "quote"\\path\nnext'}, 1.0)
    assert line == 'm{error="bad \\"quote\\"\\\\path\\nnext",} 1\n'


def test_counters_are_exposed_under_registered_name():
    registry = CollectorRegistry()
    counter = Counter("keycloak_logins", "Total successful logins", ["realm"], registry=registry)
    counter.labels("myrealm").inc(2)

    lines = render_exposition(registry, own_counters={"keycloak_logins"}).splitlines()

    assert lines == [
        "# HELP keycloak_logins Total successful logins",
        "# TYPE keycloak_logins counter",
        'keycloak_logins{realm="myrealm",} 2',
    ]


def test_other_counters_keep_total_suffix():
    registry = CollectorRegistry()
    Counter("keycloak_logins", "Total successful logins", registry=registry).inc()
    Counter("process_restarts", "Process restarts", registry=registry).inc(3)

    lines = render_exposition(registry, own_counters={"keycloak_logins"}).splitlines()

    assert "keycloak_logins 1" in lines
    assert "# HELP process_restarts_total Process restarts" in lines
    assert "# TYPE process_restarts_total counter" in lines
    assert "process_restarts_total 3" in lines


def test_runtime_counters_keep_their_usual_names():
    exporter = PrometheusExporter(runtime_metrics=True)

    text = exported_text(exporter)

    assert "# TYPE python_gc_objects_collected_total counter\n" in text
    assert 'python_gc_objects_collected_total{generation="0",}' in text
    assert "# TYPE keycloak_logins counter\n" in text


def test_non_counter_metrics_keep_sample_names():
    registry = CollectorRegistry()
    Gauge("open_sessions", "Open sessions\nper realm", registry=registry).set(4)

    text = render_exposition(registry)

    assert "# HELP open_sessions Open sessions\\nper realm\n" in text
    assert "# TYPE open_sessions gauge\n" in text
    assert "open_sessions 4\n" in text


def test_export_contains_help_and_type_for_every_counter(isolated_exporter):
    text = exported_text(isolated_exporter)
    for name in isolated_exporter.counter_names():
        assert f"# TYPE {name} counter\n" in text
    assert "# HELP keycloak_user_event_UPDATE_EMAIL Generic KeyCloak User event\n" in text
    assert "# HELP keycloak_admin_event_UPDATE Generic KeyCloak Admin event\n" in text
    assert "_created" not in text
    assert "_total" not in text


def test_export_includes_runtime_metrics_when_enabled():
    exporter = PrometheusExporter(runtime_metrics=True)
    exporter.record_generic_event(make_event(EventType.UPDATE_EMAIL))

    text = exported_text(exporter)

    assert "python_info{" in text
    assert 'keycloak_user_event_UPDATE_EMAIL{realm="myrealm",client="clientId",} 1' in text


def test_export_leaves_out_runtime_metrics_when_disabled(isolated_exporter):
    assert "python_info" not in exported_text(isolated_exporter)


def test_sink_failure_is_surfaced_to_caller(isolated_exporter):
    with pytest.raises(MetricsExportError):
        isolated_exporter.export(BrokenSink())


def test_closed_sink_is_surfaced_to_caller():
    sink = io.BytesIO()
    sink.close()
    with pytest.raises(MetricsExportError):
        write_exposition(CollectorRegistry(), sink)
