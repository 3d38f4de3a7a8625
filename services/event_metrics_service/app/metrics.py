"""Prometheus counters for Keycloak user and admin events."""

from __future__ import annotations

import threading
from typing import BinaryIO, Sequence

from loguru import logger
from prometheus_client import CollectorRegistry, Counter, GCCollector, PlatformCollector, ProcessCollector

from .errors import CounterRegistrationError
from .event_types import GENERIC_EVENT_TYPES, EventType, OperationType, kind_name
from .exposition import write_exposition
from .schemas import AdminEvent, UserEvent
from .settings import EventMetricsSettings, event_metrics_settings

IDENTITY_PROVIDER_DETAIL = "identity_provider"

USER_EVENT_LABELS = ("realm", "client")
ADMIN_EVENT_LABELS = ("realm", "resource")
LOGIN_LABELS = ("realm", "client", "provider")
LOGIN_ERROR_LABELS = ("realm", "client", "provider", "error")


class PrometheusExporter:
    """Owns every event counter and turns host events into increments.

    The full counter set is registered in ``__init__``: the three dedicated
    login/registration counters, one counter per generic user event type and
    one per admin operation type. Nothing is registered afterwards, so the
    names in :meth:`counter_names` are stable for the life of the exporter.
    """

    def __init__(
        self,
        namespace: str = "keycloak",
        default_identity_provider: str = "keycloak",
        unknown_client: str = "unknown_client",
        unknown_error: str = "unknown_error",
        registry: CollectorRegistry | None = None,
        runtime_metrics: bool = True,
    ) -> None:
        self.namespace = namespace
        self.default_identity_provider = default_identity_provider
        self.unknown_client = unknown_client
        self.unknown_error = unknown_error
        self.registry = registry if registry is not None else CollectorRegistry()
        self._user_event_prefix = f"{namespace}_user_event_"
        self._admin_event_prefix = f"{namespace}_admin_event_"

        self.counters: dict[str, Counter] = {}
        self._registered_names: set[str] = set()

        self.total_logins = self._register(
            f"{namespace}_logins", "Total successful logins", LOGIN_LABELS
        )
        self.total_failed_login_attempts = self._register(
            f"{namespace}_failed_login_attempts", "Total failed login attempts", LOGIN_ERROR_LABELS
        )
        self.total_registrations = self._register(
            f"{namespace}_registrations", "Total registered users", LOGIN_LABELS
        )

        for event_type in GENERIC_EVENT_TYPES:
            name = self.user_event_counter_name(event_type)
            self.counters[name] = self._register(name, "Generic KeyCloak User event", USER_EVENT_LABELS)

        for operation_type in OperationType:
            name = self.admin_event_counter_name(operation_type)
            self.counters[name] = self._register(name, "Generic KeyCloak Admin event", ADMIN_EVENT_LABELS)

        if runtime_metrics:
            _register_runtime_collectors(self.registry)

        logger.debug(
            "Registered {} generic event counters under namespace '{}'", len(self.counters), namespace
        )

    @classmethod
    def from_settings(cls, settings: EventMetricsSettings) -> PrometheusExporter:
        return cls(
            namespace=settings.namespace,
            default_identity_provider=settings.default_identity_provider,
            unknown_client=settings.unknown_client,
            unknown_error=settings.unknown_error,
            runtime_metrics=settings.runtime_metrics_enabled,
        )

    def _register(self, name: str, documentation: str, labelnames: Sequence[str]) -> Counter:
        if name in self._registered_names:
            raise CounterRegistrationError(f"Counter {name} is already registered")
        self._registered_names.add(name)
        return Counter(name, documentation, labelnames, registry=self.registry)

    def user_event_counter_name(self, event_type: EventType | str) -> str:
        return self._user_event_prefix + kind_name(event_type)

    def admin_event_counter_name(self, operation_type: OperationType | str) -> str:
        return self._admin_event_prefix + kind_name(operation_type)

    def counter_names(self) -> frozenset[str]:
        """Names of every registered counter, dedicated ones included."""
        return frozenset(self._registered_names)

    def lookup(self, counter_name: str) -> Counter | None:
        return self.counters.get(counter_name)

    def record_generic_event(self, event: UserEvent) -> None:
        """Count a user event on its per-type counter."""
        counter = self.lookup(self.user_event_counter_name(event.type))
        if counter is None:
            logger.warning(
                "Counter for event type {} does not exist. Realm: {}, client: {}",
                kind_name(event.type),
                event.realm_id,
                self._client(event),
            )
            return
        counter.labels(event.realm_id, self._client(event)).inc()

    def record_generic_admin_event(self, event: AdminEvent) -> None:
        """Count an admin event on its per-operation counter."""
        counter = self.lookup(self.admin_event_counter_name(event.operation_type))
        if counter is None:
            logger.warning(
                "Counter for admin event operation type {} does not exist. Resource type: {}, realm: {}",
                kind_name(event.operation_type),
                kind_name(event.resource_type),
                event.realm_id,
            )
            return
        counter.labels(event.realm_id, kind_name(event.resource_type)).inc()

    def record_login(self, event: UserEvent) -> None:
        self.total_logins.labels(event.realm_id, self._client(event), self._identity_provider(event)).inc()

    def record_registration(self, event: UserEvent) -> None:
        self.total_registrations.labels(event.realm_id, self._client(event), self._identity_provider(event)).inc()

    def record_login_error(self, event: UserEvent) -> None:
        self.total_failed_login_attempts.labels(
            event.realm_id,
            self._client(event),
            self._identity_provider(event),
            event.error if event.error is not None else self.unknown_error,
        ).inc()

    def _identity_provider(self, event: UserEvent) -> str:
        if event.details:
            provider = event.details.get(IDENTITY_PROVIDER_DETAIL)
            if provider is not None:
                return provider
        return self.default_identity_provider

    def _client(self, event: UserEvent) -> str:
        return event.client_id if event.client_id is not None else self.unknown_client

    def serialize(self, sink: BinaryIO) -> None:
        write_exposition(self.registry, sink, own_counters=self.counter_names())

    def export(self, sink: BinaryIO) -> None:
        """Write the current value of every counter to ``sink``."""
        self.serialize(sink)

    def reset_counters(self) -> None:
        """Drop all recorded label values, keeping every counter registered.

        Only meant for test isolation; counters never go down in production.
        """
        for counter in (*self.counters.values(), self.total_logins, self.total_failed_login_attempts, self.total_registrations):
            counter.clear()


def _register_runtime_collectors(registry: CollectorRegistry) -> None:
    ProcessCollector(registry=registry)
    PlatformCollector(registry=registry)
    GCCollector(registry=registry)


_exporter: PrometheusExporter | None = None
_exporter_lock = threading.Lock()


def metrics_exporter() -> PrometheusExporter:
    """Return the process-wide exporter, building it on first use.

    Creation is guarded so concurrent first callers all receive the same
    instance and the counters are registered exactly once.
    """
    global _exporter
    if _exporter is None:
        with _exporter_lock:
            if _exporter is None:
                _exporter = PrometheusExporter.from_settings(event_metrics_settings())
                logger.info("📊 Metrics exporter initialized with {} counters.", len(_exporter.counter_names()))
    return _exporter
