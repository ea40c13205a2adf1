"""messaging データモデル"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from .exceptions import MessagingError, MessagingErrorCodes


@dataclass
class EventMetadata:
    """イベントメタデータ。"""

    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    source: str = ""
    timestamp: str = field(default_factory=lambda: datetime.now(UTC).isoformat())
    correlation_id: str = ""


@dataclass
class EventEnvelope:
    """送信イベント。ブローカーに渡した後は破棄される。"""

    routing_key: str
    payload: bytes
    persistent: bool = True
    metadata: EventMetadata = field(default_factory=EventMetadata)
    headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.routing_key:
            raise ValueError("routing_key cannot be empty")

    @classmethod
    def from_json(
        cls, routing_key: str, data: dict[str, Any], source: str = ""
    ) -> EventEnvelope:
        """dict を JSON にシリアライズしてエンベロープを作る。"""
        try:
            payload = json.dumps(data, default=_json_default).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise MessagingError(
                code=MessagingErrorCodes.SERIALIZATION_ERROR,
                message=f"Failed to serialize payload for {routing_key}: {e}",
                cause=e,
            ) from e
        return cls(
            routing_key=routing_key,
            payload=payload,
            metadata=EventMetadata(source=source),
        )


def _json_default(value: Any) -> Any:  # noqa: ANN401
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


@dataclass
class ConsumedMessage:
    """キューから受信したメッセージ。"""

    routing_key: str
    payload: bytes
    delivery_tag: int
    queue: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    # Kafka 実装でのコミット位置
    partition: int | None = None
    offset: int | None = None


@dataclass
class BrokerTopology:
    """トピック型エクスチェンジと、複数ルーティングキーに束縛された永続キュー。"""

    exchange: str
    queue: str
    bindings: list[str]
    durable: bool = True

    def __post_init__(self) -> None:
        if not self.queue:
            raise ValueError("queue cannot be empty")
        if not self.bindings:
            raise ValueError("bindings cannot be empty")


@dataclass
class ConsumerConfig:
    """Kafka コンシューマー設定。"""

    brokers: list[str]
    auto_offset_reset: str = "earliest"
    poll_timeout_seconds: float = 1.0
