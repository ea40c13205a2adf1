"""orderflow orders: ユーザー検証を経て作成される注文。"""

from .exceptions import (
    InvalidOrderError,
    InvalidOrderTransitionError,
    OrderError,
    OrderNotFoundError,
    UserRejectedError,
    UserServiceUnavailableError,
    status_code_for,
)
from .memory import InMemoryOrderStore
from .models import Order, OrderStatus
from .service import OrderService
from .store import OrderStore

__all__ = [
    "InMemoryOrderStore",
    "InvalidOrderError",
    "InvalidOrderTransitionError",
    "Order",
    "OrderError",
    "OrderNotFoundError",
    "OrderService",
    "OrderStatus",
    "OrderStore",
    "UserRejectedError",
    "UserServiceUnavailableError",
    "status_code_for",
]
