"""ユーザーサービス"""

from __future__ import annotations

import dataclasses
from datetime import UTC, datetime

import structlog

from ..events import EventPublisher
from ..messaging import RoutingKeys
from .exceptions import UserError, UserErrorCodes
from .models import User
from .store import UserStore

logger = structlog.stdlib.get_logger(__name__)


class UserService:
    """ユーザーの作成・更新を行い、コミット後にライフサイクルイベントを発行する。"""

    def __init__(self, store: UserStore, publisher: EventPublisher) -> None:
        self._store = store
        self._publisher = publisher

    async def create_user(self, name: str, email: str) -> User:
        if not name or not email:
            raise UserError(
                code=UserErrorCodes.INVALID_INPUT,
                message="name and email are required",
            )
        user = await self._store.insert(User(name=name, email=email))
        logger.info("user created", user_id=user.id)
        self._publisher.schedule(RoutingKeys.USER_CREATED, user.to_dict())
        return user

    async def update_user(
        self, user_id: str, name: str | None = None, email: str | None = None
    ) -> User:
        """指定されたフィールドだけを更新する。"""
        current = await self.get_user(user_id)
        changed = dataclasses.replace(
            current,
            name=name if name is not None else current.name,
            email=email if email is not None else current.email,
            updated_at=datetime.now(UTC),
        )
        user = await self._store.update(changed)
        logger.info("user updated", user_id=user.id)
        self._publisher.schedule(RoutingKeys.USER_UPDATED, user.to_dict())
        return user

    async def get_user(self, user_id: str) -> User:
        user = await self._store.find(user_id)
        if user is None:
            raise UserError(code=UserErrorCodes.NOT_FOUND, message=f"user not found: {user_id}")
        return user

    async def list_users(self) -> list[User]:
        return await self._store.list_all()
