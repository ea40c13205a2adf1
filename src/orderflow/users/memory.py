"""InMemoryUserStore 実装"""

from __future__ import annotations

import dataclasses

from .exceptions import UserError, UserErrorCodes
from .models import User
from .store import UserStore


class InMemoryUserStore(UserStore):
    """インメモリユーザーストア。"""

    def __init__(self) -> None:
        self._users: dict[str, User] = {}

    def _check_email(self, user: User) -> None:
        for other in self._users.values():
            if other.id != user.id and other.email == user.email:
                raise UserError(
                    code=UserErrorCodes.DUPLICATE_EMAIL,
                    message=f"email already registered: {user.email}",
                )

    async def insert(self, user: User) -> User:
        self._check_email(user)
        self._users[user.id] = dataclasses.replace(user)
        return dataclasses.replace(user)

    async def update(self, user: User) -> User:
        if user.id not in self._users:
            raise UserError(code=UserErrorCodes.NOT_FOUND, message=f"user not found: {user.id}")
        self._check_email(user)
        self._users[user.id] = dataclasses.replace(user)
        return dataclasses.replace(user)

    async def find(self, user_id: str) -> User | None:
        user = self._users.get(user_id)
        return dataclasses.replace(user) if user is not None else None

    async def list_all(self) -> list[User]:
        return [dataclasses.replace(u) for u in self._users.values()]
