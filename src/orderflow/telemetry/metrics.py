"""OpenTelemetry メトリクス定義"""

from __future__ import annotations

from opentelemetry import metrics

_meter = metrics.get_meter("orderflow", version="0.1.0")

validation_outcomes_total = _meter.create_counter(
    name="validation_outcomes_total",
    description="User validation decisions by outcome and decision path",
    unit="1",
)

retry_attempts_total = _meter.create_counter(
    name="retry_attempts_total",
    description="Attempts made by the retry executor, by operation and result",
    unit="1",
)

consumed_messages_total = _meter.create_counter(
    name="consumed_messages_total",
    description="Broker messages handled by the snapshot consumer, by result",
    unit="1",
)

publish_failures_total = _meter.create_counter(
    name="publish_failures_total",
    description="Best-effort event publications that failed",
    unit="1",
)
