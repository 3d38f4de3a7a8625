from .listener import MetricsEventListener
from .metrics import PrometheusExporter, metrics_exporter


def get_exporter() -> PrometheusExporter:
    return metrics_exporter()


def get_event_listener() -> MetricsEventListener:
    return MetricsEventListener(metrics_exporter())
