from __future__ import annotations

from loguru import logger

from .event_types import EventType, kind_name
from .metrics import PrometheusExporter
from .schemas import AdminEvent, UserEvent


class MetricsEventListener:
    """Routes host events to the exporter's dedicated or generic counters."""

    def __init__(self, exporter: PrometheusExporter) -> None:
        self.exporter = exporter

    def on_event(self, event: UserEvent) -> None:
        logger.debug(
            "Received user event of type {} in realm {} (user: {}, session: {}, ip: {})",
            kind_name(event.type),
            event.realm_id,
            event.user_id,
            event.session_id,
            event.ip_address,
        )
        if event.type is EventType.LOGIN:
            self.exporter.record_login(event)
        elif event.type is EventType.REGISTER:
            self.exporter.record_registration(event)
        elif event.type is EventType.LOGIN_ERROR:
            self.exporter.record_login_error(event)
        else:
            self.exporter.record_generic_event(event)

    def on_admin_event(self, event: AdminEvent) -> None:
        logger.debug(
            "Received admin event of type {} on {} {} in realm {}",
            kind_name(event.operation_type),
            kind_name(event.resource_type),
            event.resource_path,
            event.realm_id,
        )
        self.exporter.record_generic_admin_event(event)
