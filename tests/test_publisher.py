"""EventPublisher のユニットテスト"""

import json

from orderflow.events import EventPublisher
from orderflow.messaging import (
    InMemoryBroker,
    InMemoryEventProducer,
    MessagingError,
    RoutingKeys,
)


async def test_publish_dict_payload() -> None:
    """dict ペイロードが JSON で永続メッセージとして発行されること。"""
    producer = InMemoryEventProducer(InMemoryBroker())
    publisher = EventPublisher(producer, source="orders")

    ok = await publisher.publish(RoutingKeys.ORDER_CREATED, {"id": "o1"})

    assert ok is True
    envelope = producer.published[0]
    assert envelope.routing_key == RoutingKeys.ORDER_CREATED
    assert envelope.persistent is True
    assert json.loads(envelope.payload) == {"id": "o1"}


async def test_publish_bytes_payload() -> None:
    """bytes ペイロードはそのまま発行されること。"""
    producer = InMemoryEventProducer(InMemoryBroker())
    publisher = EventPublisher(producer)
    assert await publisher.publish(RoutingKeys.USER_UPDATED, b"raw") is True
    assert producer.published[0].payload == b"raw"


async def test_publish_failure_is_swallowed(mocker) -> None:
    """発行失敗は例外を送出せず False を返し、再送しないこと。"""
    producer = mocker.MagicMock()
    producer.publish_async = mocker.AsyncMock(
        side_effect=MessagingError(code="PUBLISH_FAILED", message="broker down")
    )
    publisher = EventPublisher(producer)

    ok = await publisher.publish(RoutingKeys.ORDER_CANCELLED, {"id": "o1"})

    assert ok is False
    producer.publish_async.assert_awaited_once()


async def test_publish_unexpected_error_is_swallowed(mocker) -> None:
    """予期しない例外も呼び出し元に伝わらないこと。"""
    producer = mocker.MagicMock()
    producer.publish_async = mocker.AsyncMock(side_effect=RuntimeError("boom"))
    publisher = EventPublisher(producer)
    assert await publisher.publish(RoutingKeys.ORDER_CREATED, {"id": "o1"}) is False


async def test_publish_unserializable_payload_is_swallowed() -> None:
    """シリアライズできないペイロードでも例外を送出しないこと。"""
    producer = InMemoryEventProducer(InMemoryBroker())
    publisher = EventPublisher(producer)
    assert await publisher.publish(RoutingKeys.ORDER_CREATED, {"bad": object()}) is False
    assert producer.published == []


async def test_publish_without_producer_skips() -> None:
    """ブローカー未接続時は何もせず False。"""
    publisher = EventPublisher()
    assert await publisher.publish(RoutingKeys.ORDER_CREATED, {"id": "o1"}) is False


async def test_broker_outage_at_publish_time() -> None:
    """ブローカー停止中の発行は失敗扱いになるだけであること。"""
    broker = InMemoryBroker()
    producer = InMemoryEventProducer(broker)
    publisher = EventPublisher(producer)
    broker.available = False
    assert await publisher.publish(RoutingKeys.USER_CREATED, {"id": "u1"}) is False
    assert producer.published == []
