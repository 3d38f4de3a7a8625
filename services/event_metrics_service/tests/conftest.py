from __future__ import annotations

import io

import pytest
from loguru import logger

from services.event_metrics_service.app.metrics import PrometheusExporter, metrics_exporter
from services.event_metrics_service.app.schemas import UserEvent

DEFAULT_REALM = "myrealm"
CLIENT_ID = "clientId"


@pytest.fixture
def exporter() -> PrometheusExporter:
    instance = metrics_exporter()
    instance.reset_counters()
    yield instance
    instance.reset_counters()


@pytest.fixture
def isolated_exporter() -> PrometheusExporter:
    return PrometheusExporter(runtime_metrics=False)


@pytest.fixture
def log_records():
    records: list[dict] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="WARNING")
    yield records
    logger.remove(handler_id)


def make_event(event_type, realm: str = DEFAULT_REALM, client_id: str | None = CLIENT_ID, error: str | None = None, **details: str) -> UserEvent:
    return UserEvent(type=event_type, realm_id=realm, client_id=client_id, error=error, details=details or None)


def exported_text(exporter: PrometheusExporter) -> str:
    sink = io.BytesIO()
    exporter.export(sink)
    return sink.getvalue().decode("utf-8")


def metric_line(name: str, value: int, realm: str = DEFAULT_REALM, client: str = CLIENT_ID, **labels: str) -> str:
    rendered = f'realm="{realm}",client="{client}",'
    rendered += "".join(f'{key}="{val}",' for key, val in labels.items())
    return f"{name}{{{rendered}}} {value}"


def assert_metric(exporter: PrometheusExporter, name: str, value: int, realm: str = DEFAULT_REALM, client: str = CLIENT_ID, **labels: str) -> None:
    expected = metric_line(name, value, realm=realm, client=client, **labels)
    assert expected in exported_text(exporter).splitlines()
