"""InMemorySnapshotCache 実装"""

from __future__ import annotations

from .client import SnapshotCache
from .snapshot import EntitySnapshot


class InMemorySnapshotCache(SnapshotCache):
    """プロセス内の dict を使ったキャッシュ。上限・失効なし。"""

    def __init__(self) -> None:
        self._store: dict[str, EntitySnapshot] = {}

    async def get(self, entity_id: str) -> EntitySnapshot | None:
        return self._store.get(entity_id)

    async def set(self, entity_id: str, snapshot: EntitySnapshot) -> None:
        self._store[entity_id] = snapshot

    def __len__(self) -> int:
        return len(self._store)
