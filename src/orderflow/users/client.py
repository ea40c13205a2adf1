"""UsersClient 抽象基底クラス"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..retry import AttemptOutcome


class UsersClient(ABC):
    """ユーザーの存在確認を行うリモート呼び出し境界。"""

    @abstractmethod
    async def check_exists(self, user_id: str) -> AttemptOutcome:
        """1 回だけ存在確認を行い、結果を分類して返す。例外は送出しない。"""
        ...
