from __future__ import annotations

from shared.errors import ServiceError


class CounterRegistrationError(ServiceError):
    """A counter name was registered twice while building the exporter."""


class MetricsExportError(ServiceError):
    """Writing the exposition to the output sink failed."""

    error = "Metrics export failed"
