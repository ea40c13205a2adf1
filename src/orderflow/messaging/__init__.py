"""orderflow messaging: ブローカーとのイベント送受信境界。"""

from .consumer import EventConsumer, KafkaEventConsumer
from .exceptions import MessagingError, MessagingErrorCodes
from .memory import InMemoryBroker, InMemoryEventConsumer, InMemoryEventProducer
from .models import (
    BrokerTopology,
    ConsumedMessage,
    ConsumerConfig,
    EventEnvelope,
    EventMetadata,
)
from .producer import EventProducer, KafkaEventProducer
from .routing import RoutingKeys

__all__ = [
    "BrokerTopology",
    "ConsumedMessage",
    "ConsumerConfig",
    "EventConsumer",
    "EventEnvelope",
    "EventMetadata",
    "EventProducer",
    "InMemoryBroker",
    "InMemoryEventConsumer",
    "InMemoryEventProducer",
    "KafkaEventConsumer",
    "KafkaEventProducer",
    "MessagingError",
    "MessagingErrorCodes",
    "RoutingKeys",
]
