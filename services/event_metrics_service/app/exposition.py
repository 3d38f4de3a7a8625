"""Prometheus text exposition (format 0.0.4) for the exporter's registry."""

from __future__ import annotations

import math
from typing import AbstractSet, BinaryIO, Iterable

from prometheus_client import CollectorRegistry
from prometheus_client.metrics_core import Metric
from prometheus_client.utils import floatToGoString

from .errors import MetricsExportError

CONTENT_TYPE_004 = "text/plain; version=0.0.4; charset=utf-8"

# OpenMetrics-only types have no 0.0.4 equivalent.
_LEGACY_TYPES = {"info": "gauge", "stateset": "gauge", "gaugehistogram": "histogram", "unknown": "untyped"}


def _escape_help(text: str) -> str:
    return text.replace("\\", r"\\").replace("\n", r"\n")


def _escape_label_value(value: str) -> str:
    return value.replace("\\", r"\\").replace("\n", r"\n").replace('"', r"\"")


def format_value(value: float) -> str:
    if math.isfinite(value) and value == int(value):
        return str(int(value))
    return floatToGoString(value)


def format_sample(name: str, labels: dict[str, str], value: float) -> str:
    if not labels:
        return f"{name} {format_value(value)}\n"
    rendered = "".join(f'{key}="{_escape_label_value(str(val))}",' for key, val in labels.items())
    return f"{name}{{{rendered}}} {format_value(value)}\n"


def _render_family(metric: Metric, own_counters: AbstractSet[str]) -> Iterable[str]:
    mtype = _LEGACY_TYPES.get(metric.type, metric.type)
    keep_name = metric.type == "counter" and metric.name in own_counters
    # Other counters keep the usual `_total` suffix, as generate_latest writes them
    name = metric.name if keep_name or metric.type != "counter" else f"{metric.name}_total"
    yield f"# HELP {name} {_escape_help(metric.documentation)}\n"
    yield f"# TYPE {name} {mtype}\n"
    for sample in metric.samples:
        if sample.name.endswith("_created"):
            continue
        sample_name = metric.name if keep_name and sample.name == f"{metric.name}_total" else sample.name
        yield format_sample(sample_name, sample.labels, sample.value)


def render_exposition(registry: CollectorRegistry, own_counters: AbstractSet[str] = frozenset()) -> str:
    """Render ``registry``; counters named in ``own_counters`` drop the `_total` suffix."""
    lines: list[str] = []
    for metric in registry.collect():
        lines.extend(_render_family(metric, own_counters))
    return "".join(lines)


def write_exposition(registry: CollectorRegistry, sink: BinaryIO, own_counters: AbstractSet[str] = frozenset()) -> None:
    """Serialize every metric in ``registry`` and write it to ``sink`` as UTF-8.

    The text is rendered in full before the sink is touched, so a slow or
    failing sink never holds up collection. Sink failures are raised as
    ``MetricsExportError``; the caller decides how to report them.
    """
    payload = render_exposition(registry, own_counters).encode("utf-8")
    try:
        sink.write(payload)
        flush = getattr(sink, "flush", None)
        if flush is not None:
            flush()
    except (OSError, ValueError) as exc:
        raise MetricsExportError(f"Failed to write metrics exposition: {exc}") from exc
