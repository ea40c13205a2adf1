"""orderflow telemetry."""

from .logger import new_logger
from .metrics import (
    consumed_messages_total,
    publish_failures_total,
    retry_attempts_total,
    validation_outcomes_total,
)

__all__ = [
    "new_logger",
    "consumed_messages_total",
    "publish_failures_total",
    "retry_attempts_total",
    "validation_outcomes_total",
]
