"""orderflow events: ライフサイクルイベントの消費と発行。"""

from .consumer import ConsumeResult, SnapshotEventConsumer
from .publisher import EventPublisher

__all__ = [
    "ConsumeResult",
    "EventPublisher",
    "SnapshotEventConsumer",
]
