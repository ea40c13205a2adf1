"""注文データモデル"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from .exceptions import InvalidOrderTransitionError


class OrderStatus(StrEnum):
    """注文ステータス。CREATED → CANCELLED の一方向のみ。"""

    CREATED = "created"
    CANCELLED = "cancelled"


@dataclass
class Order:
    """注文。"""

    user_id: str
    items: list[Any]
    total: float
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: OrderStatus = OrderStatus.CREATED
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def cancel(self) -> None:
        if self.status is not OrderStatus.CREATED:
            raise InvalidOrderTransitionError(self.id, self.status, OrderStatus.CANCELLED)
        self.status = OrderStatus.CANCELLED

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "items": list(self.items),
            "total": self.total,
            "status": self.status.value,
            "createdAt": self.created_at.isoformat(),
        }
