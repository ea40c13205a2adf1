"""注文サービス"""

from __future__ import annotations

from typing import Any

import structlog

from ..events import EventPublisher
from ..messaging import RoutingKeys
from ..validation import ValidationCoordinator, ValidationOutcome
from .exceptions import (
    InvalidOrderError,
    OrderNotFoundError,
    UserRejectedError,
    UserServiceUnavailableError,
)
from .models import Order
from .store import OrderStore

logger = structlog.stdlib.get_logger(__name__)


class OrderService:
    """ユーザー検証が通った場合だけ注文を作成し、コミット後にイベントを発行する。"""

    def __init__(
        self,
        store: OrderStore,
        coordinator: ValidationCoordinator,
        publisher: EventPublisher,
    ) -> None:
        self._store = store
        self._coordinator = coordinator
        self._publisher = publisher

    async def create_order(self, user_id: str, items: Any, total: Any) -> Order:  # noqa: ANN401
        """注文を作成する。

        Raises:
            InvalidOrderError: 入力が不正な場合
            UserRejectedError: ユーザーが存在しないと確定した場合
            UserServiceUnavailableError: ユーザーの存在を判断できない場合
        """
        if (
            not isinstance(user_id, str)
            or not user_id
            or not isinstance(items, list)
            or isinstance(total, bool)
            or not isinstance(total, (int, float))
        ):
            raise InvalidOrderError("userId, items[], total<number> are required")

        outcome = await self._coordinator.validate(user_id)
        if outcome is ValidationOutcome.INVALID:
            raise UserRejectedError(user_id)
        if outcome is ValidationOutcome.UNAVAILABLE:
            raise UserServiceUnavailableError(user_id)

        order = Order(user_id=user_id, items=list(items), total=float(total))
        await self._store.save(order)
        logger.info("order created", order_id=order.id, user_id=user_id)
        self._publisher.schedule(RoutingKeys.ORDER_CREATED, order.to_dict())
        return order

    async def cancel_order(self, order_id: str) -> Order:
        order = await self._store.find(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        order.cancel()
        await self._store.save(order)
        logger.info("order cancelled", order_id=order.id)
        self._publisher.schedule(RoutingKeys.ORDER_CANCELLED, order.to_dict())
        return order

    async def get_order(self, order_id: str) -> Order:
        order = await self._store.find(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    async def list_orders(self) -> list[Order]:
        return await self._store.list_all()
