from __future__ import annotations

import pytest
from loguru import logger

from services.event_metrics_service.app.event_types import EventType, OperationType, ResourceType
from services.event_metrics_service.app.listener import MetricsEventListener
from services.event_metrics_service.app.schemas import AdminEvent, UserEvent

from .conftest import assert_metric, make_event


@pytest.fixture
def listener(isolated_exporter) -> MetricsEventListener:
    return MetricsEventListener(isolated_exporter)


def test_login_event_goes_to_login_counter(listener):
    listener.on_event(make_event(EventType.LOGIN, identity_provider="github"))
    assert_metric(listener.exporter, "keycloak_logins", 1, provider="github")


def test_register_event_goes_to_registration_counter(listener):
    listener.on_event(make_event(EventType.REGISTER))
    assert_metric(listener.exporter, "keycloak_registrations", 1, provider="keycloak")


def test_login_error_event_goes_to_failed_login_counter(listener):
    listener.on_event(make_event(EventType.LOGIN_ERROR, error="invalid_user_credentials"))
    assert_metric(
        listener.exporter, "keycloak_failed_login_attempts", 1, provider="keycloak", error="invalid_user_credentials"
    )


def test_other_events_go_to_generic_counters(listener, log_records):
    listener.on_event(make_event(EventType.REGISTER_ERROR))
    listener.on_event(make_event(EventType.CODE_TO_TOKEN))

    assert_metric(listener.exporter, "keycloak_user_event_REGISTER_ERROR", 1)
    assert_metric(listener.exporter, "keycloak_user_event_CODE_TO_TOKEN", 1)
    assert log_records == []


def test_admin_events_go_to_generic_admin_counters(listener):
    listener.on_admin_event(
        AdminEvent(operation_type=OperationType.DELETE, resource_type=ResourceType.REALM_ROLE, realm_id="master")
    )

    value = listener.exporter.registry.get_sample_value(
        "keycloak_admin_event_DELETE_total", {"realm": "master", "resource": "REALM_ROLE"}
    )
    assert value == 1.0


def test_unrecognized_event_type_goes_to_generic_path_and_is_dropped(listener, log_records):
    listener.on_event(make_event("DELETE_ACCOUNT"))

    assert len(log_records) == 1
    assert "DELETE_ACCOUNT" in log_records[0]["message"]
    assert listener.exporter.registry.get_sample_value(
        "keycloak_logins_total", {"realm": "myrealm", "client": "clientId", "provider": "keycloak"}
    ) is None


def test_received_events_are_logged_with_their_context(listener):
    messages: list[str] = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    try:
        listener.on_event(
            UserEvent(
                type=EventType.UPDATE_EMAIL,
                realm_id="myrealm",
                user_id="user-1",
                session_id="session-1",
                ip_address="10.0.0.7",
            )
        )
        listener.on_admin_event(
            AdminEvent(
                operation_type=OperationType.CREATE,
                resource_type=ResourceType.USER,
                realm_id="master",
                resource_path="users/user-1",
            )
        )
    finally:
        logger.remove(handler_id)

    user_line = next(message for message in messages if "UPDATE_EMAIL" in message)
    assert "user-1" in user_line and "session-1" in user_line and "10.0.0.7" in user_line
    admin_line = next(message for message in messages if "Received admin event" in message)
    assert "users/user-1" in admin_line
