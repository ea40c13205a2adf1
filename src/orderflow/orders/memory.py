"""InMemoryOrderStore 実装"""

from __future__ import annotations

import copy

from .models import Order
from .store import OrderStore


class InMemoryOrderStore(OrderStore):
    """インメモリ注文ストア。"""

    def __init__(self) -> None:
        self._orders: dict[str, Order] = {}

    async def save(self, order: Order) -> None:
        self._orders[order.id] = copy.deepcopy(order)

    async def find(self, order_id: str) -> Order | None:
        order = self._orders.get(order_id)
        return copy.deepcopy(order) if order is not None else None

    async def list_all(self) -> list[Order]:
        return [copy.deepcopy(o) for o in self._orders.values()]
