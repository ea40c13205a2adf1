"""OrderStore 抽象基底クラス"""

from __future__ import annotations

from abc import ABC, abstractmethod

from .models import Order


class OrderStore(ABC):
    """注文の永続化インターフェース。"""

    @abstractmethod
    async def save(self, order: Order) -> None:
        """注文を追加または置き換える。"""
        ...

    @abstractmethod
    async def find(self, order_id: str) -> Order | None: ...

    @abstractmethod
    async def list_all(self) -> list[Order]: ...
