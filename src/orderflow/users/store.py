"""UserStore 抽象基底クラス"""

from __future__ import annotations

from abc import ABC, abstractmethod

from .models import User


class UserStore(ABC):
    """ユーザーの永続化インターフェース。"""

    @abstractmethod
    async def insert(self, user: User) -> User:
        """ユーザーを追加する。メールアドレス重複時は UserError(DUPLICATE_EMAIL)。"""
        ...

    @abstractmethod
    async def update(self, user: User) -> User:
        """ユーザーを置き換える。存在しなければ UserError(USER_NOT_FOUND)。"""
        ...

    @abstractmethod
    async def find(self, user_id: str) -> User | None: ...

    @abstractmethod
    async def list_all(self) -> list[User]: ...
