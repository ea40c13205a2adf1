"""ルーティングキー定義"""

from __future__ import annotations


class RoutingKeys:
    """ドメインイベントのルーティングキー定数。"""

    USER_CREATED: str = "user.created"
    USER_UPDATED: str = "user.updated"
    ORDER_CREATED: str = "order.created"
    ORDER_CANCELLED: str = "order.cancelled"
