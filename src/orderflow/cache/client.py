"""SnapshotCache 抽象基底クラス"""

from __future__ import annotations

from abc import ABC, abstractmethod

from .snapshot import EntitySnapshot


class SnapshotCache(ABC):
    """エンティティ ID からスナップショットへの対応表。

    書き込みはキー単位の無条件上書きのみ。キーをまたぐ一貫性は提供しない。
    """

    @abstractmethod
    async def get(self, entity_id: str) -> EntitySnapshot | None:
        """スナップショットを取得する。存在しなければ None。"""
        ...

    @abstractmethod
    async def set(self, entity_id: str, snapshot: EntitySnapshot) -> None:
        """スナップショットを丸ごと置き換える。"""
        ...

    async def contains(self, entity_id: str) -> bool:
        """ID のスナップショットがあるか確認する。"""
        return await self.get(entity_id) is not None

    @abstractmethod
    def __len__(self) -> int: ...
