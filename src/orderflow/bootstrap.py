"""ブローカー接続の起動処理と注文サービスの組み立て"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable, Callable

import structlog

from .cache import InMemorySnapshotCache
from .config import AppConfig
from .events import EventPublisher, SnapshotEventConsumer
from .messaging import (
    BrokerTopology,
    ConsumerConfig,
    EventConsumer,
    EventProducer,
    InMemoryBroker,
    InMemoryEventConsumer,
    InMemoryEventProducer,
    KafkaEventConsumer,
    KafkaEventProducer,
)
from .orders import InMemoryOrderStore, OrderService
from .retry import RetryPolicy, execute
from .telemetry import new_logger
from .users import HttpUsersClient, UsersClient, UsersClientConfig
from .validation import ValidationCoordinator

logger = structlog.stdlib.get_logger(__name__)

ConsumerFactory = Callable[[], EventConsumer]
ProducerFactory = Callable[[], EventProducer]


async def connect_consumer(
    factory: ConsumerFactory,
    topology: BrokerTopology,
    policy: RetryPolicy,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> EventConsumer | None:
    """コンシューマーを作成してキューを束縛する。

    失敗時はポリシーに従って再試行し、全試行が失敗したら None を返す。
    呼び出し元はキャッシュが空のまま動作を続ける。
    """

    async def setup() -> EventConsumer:
        consumer = factory()
        try:
            await consumer.bind_async(topology)
        except Exception:
            consumer.close()
            raise
        return consumer

    try:
        consumer = await execute(setup, policy, operation_name="broker-setup", sleep=sleep)
    except Exception as e:
        logger.error(
            "broker setup failed after all attempts, consumer not started",
            queue=topology.queue,
            error=str(e),
        )
        return None
    logger.info(
        "broker connected",
        exchange=topology.exchange,
        queue=topology.queue,
        bindings=topology.bindings,
    )
    return consumer


class OrdersRuntime:
    """設定から注文サービスの構成要素を組み立て、バックグラウンド処理を管理する。"""

    def __init__(
        self,
        config: AppConfig,
        users_client: UsersClient | None = None,
        consumer_factory: ConsumerFactory | None = None,
        producer_factory: ProducerFactory | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.config = config
        self.logger = new_logger(config.log.level, config.log.format, name=config.app.name)
        self.topology = BrokerTopology(
            exchange=config.broker.exchange,
            queue=config.broker.queue,
            bindings=config.broker.bindings,
        )
        self.cache = InMemorySnapshotCache()
        self.users_client = users_client or HttpUsersClient(
            UsersClientConfig(
                base_url=config.users.base_url,
                timeout_seconds=config.users.timeout_seconds,
            )
        )
        self.coordinator = ValidationCoordinator(
            self.users_client,
            self.cache,
            policy=config.validation_retry.to_policy(),
            sleep=sleep,
        )
        self.publisher = EventPublisher(source=config.app.name)
        self.orders = OrderService(InMemoryOrderStore(), self.coordinator, self.publisher)
        self.snapshot_consumer: SnapshotEventConsumer | None = None

        self.broker: InMemoryBroker | None = None
        if consumer_factory is None or producer_factory is None:
            default_consumer, default_producer = self._default_factories()
            consumer_factory = consumer_factory or default_consumer
            producer_factory = producer_factory or default_producer
        self._consumer_factory = consumer_factory
        self._producer_factory = producer_factory
        self._producer: EventProducer | None = None
        self._sleep = sleep
        self._bootstrap_task: asyncio.Task[bool] | None = None

    def _default_factories(self) -> tuple[ConsumerFactory, ProducerFactory]:
        broker_cfg = self.config.broker
        if broker_cfg.kind == "memory":
            broker = InMemoryBroker()
            self.broker = broker
            return (
                lambda: InMemoryEventConsumer(broker),
                lambda: InMemoryEventProducer(broker),
            )
        consumer_config = ConsumerConfig(
            brokers=broker_cfg.brokers,
            poll_timeout_seconds=broker_cfg.poll_timeout_seconds,
        )
        return (
            lambda: KafkaEventConsumer(consumer_config),
            lambda: KafkaEventProducer(
                broker_cfg.brokers, timeout_seconds=broker_cfg.publish_timeout_seconds
            ),
        )

    async def start(self) -> None:
        """ブローカー接続をバックグラウンドで開始する。接続完了は待たない。"""
        if self._bootstrap_task is None:
            self._bootstrap_task = asyncio.create_task(self.bootstrap())

    async def bootstrap(self) -> bool:
        """ブローカーに接続し、コンシューマーとプロデューサーを起動する。"""
        consumer = await connect_consumer(
            self._consumer_factory,
            self.topology,
            self.config.broker_retry.to_policy(),
            sleep=self._sleep,
        )
        if consumer is None:
            return False
        self._producer = self._producer_factory()
        self.publisher.attach(self._producer)
        self.snapshot_consumer = SnapshotEventConsumer(
            consumer,
            self.cache,
            routing_keys=self.topology.bindings,
            poll_timeout_seconds=self.config.broker.poll_timeout_seconds,
        )
        self.snapshot_consumer.start()
        return True

    async def stop(self) -> None:
        """バックグラウンド処理を止め、ブローカー接続を閉じる。"""
        if self._bootstrap_task is not None:
            self._bootstrap_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._bootstrap_task
            self._bootstrap_task = None
        if self.snapshot_consumer is not None:
            await self.snapshot_consumer.stop()
            self.snapshot_consumer = None
        await self.publisher.drain()
        self.publisher.attach(None)
        if self._producer is not None:
            self._producer.close()
            self._producer = None
