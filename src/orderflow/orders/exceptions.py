"""orders パッケージの例外型定義"""

from __future__ import annotations


class OrderError(Exception):
    """orders パッケージのエラー基底クラス。"""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)


class InvalidOrderError(OrderError):
    """注文入力が不正な場合のエラー。"""

    status_code = 400


class UserRejectedError(OrderError):
    """ユーザーが存在しないと確定した場合のエラー。"""

    status_code = 400

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(f"invalid user: {user_id}")


class UserServiceUnavailableError(OrderError):
    """ユーザーサービスが応答せず、キャッシュにもユーザーが無い場合のエラー。"""

    status_code = 503

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(f"users service unavailable and user not in cache: {user_id}")


class OrderNotFoundError(OrderError):
    """注文が見つからない場合のエラー。"""

    status_code = 404

    def __init__(self, order_id: str) -> None:
        self.order_id = order_id
        super().__init__(f"order not found: {order_id}")


class InvalidOrderTransitionError(OrderError):
    """許可されていないステータス遷移のエラー。"""

    status_code = 409

    def __init__(self, order_id: str, current: str, target: str) -> None:
        self.order_id = order_id
        super().__init__(f"order {order_id} cannot move from {current} to {target}")


def status_code_for(error: Exception) -> int:
    """HTTP 層向けにエラーをステータスコードへ対応付ける。"""
    if isinstance(error, OrderError):
        return error.status_code
    return 500
