"""cache パッケージのユニットテスト"""

from datetime import UTC, datetime

import pytest
from orderflow.cache import EntitySnapshot, InMemorySnapshotCache, SnapshotError


def make_snapshot(entity_id: str = "u1", name: str = "Ana") -> EntitySnapshot:
    return EntitySnapshot(
        id=entity_id,
        attributes={"name": name, "email": f"{name.lower()}@example.com"},
        last_updated_at=datetime(2024, 1, 1, tzinfo=UTC),
    )


async def test_get_missing_returns_none() -> None:
    """存在しない ID は None。"""
    cache = InMemorySnapshotCache()
    assert await cache.get("missing") is None
    assert await cache.contains("missing") is False
    assert len(cache) == 0


async def test_set_and_get() -> None:
    """保存したスナップショットを取得できること。"""
    cache = InMemorySnapshotCache()
    snapshot = make_snapshot()
    await cache.set("u1", snapshot)
    assert await cache.get("u1") == snapshot
    assert await cache.contains("u1") is True


async def test_set_same_snapshot_twice_is_idempotent() -> None:
    """同じスナップショットを 2 回適用しても結果は同じ。"""
    cache = InMemorySnapshotCache()
    snapshot = make_snapshot()
    await cache.set("u1", snapshot)
    once = await cache.get("u1")
    await cache.set("u1", snapshot)
    assert await cache.get("u1") == once
    assert len(cache) == 1


async def test_set_replaces_wholesale() -> None:
    """上書きは部分マージせず丸ごと置き換えること。"""
    cache = InMemorySnapshotCache()
    await cache.set("u1", EntitySnapshot(id="u1", attributes={"name": "Ana", "age": 30}))
    await cache.set("u1", EntitySnapshot(id="u1", attributes={"name": "Bia"}))
    snapshot = await cache.get("u1")
    assert snapshot is not None
    assert dict(snapshot.attributes) == {"name": "Bia"}


def test_snapshot_attributes_are_read_only() -> None:
    """スナップショットの属性は変更できないこと。"""
    source = {"name": "Ana"}
    snapshot = EntitySnapshot(id="u1", attributes=source)
    source["name"] = "changed"
    assert snapshot.attributes["name"] == "Ana"
    with pytest.raises(TypeError):
        snapshot.attributes["name"] = "x"  # type: ignore[index]


def test_from_payload_parses_fields() -> None:
    """JSON ペイロードからスナップショットを作れること。"""
    snapshot = EntitySnapshot.from_payload(
        {
            "id": "u1",
            "name": "Ana",
            "email": "ana@example.com",
            "updatedAt": "2024-05-01T10:00:00.000Z",
        }
    )
    assert snapshot.id == "u1"
    assert snapshot.attributes["name"] == "Ana"
    assert snapshot.last_updated_at == datetime(2024, 5, 1, 10, 0, tzinfo=UTC)
    assert snapshot.to_dict()["email"] == "ana@example.com"


def test_from_payload_without_timestamp_uses_now() -> None:
    """updatedAt が無い場合は現在時刻。"""
    before = datetime.now(UTC)
    snapshot = EntitySnapshot.from_payload({"id": "u1"})
    assert snapshot.last_updated_at >= before


@pytest.mark.parametrize(
    "payload",
    [
        [],
        "u1",
        {"name": "no id"},
        {"id": ""},
        {"id": 42},
    ],
)
def test_from_payload_rejects_malformed(payload) -> None:
    """不正なペイロードで SnapshotError。"""
    with pytest.raises(SnapshotError):
        EntitySnapshot.from_payload(payload)


def test_from_payload_skips_non_scalar_attributes() -> None:
    """オブジェクトや配列の属性は読み飛ばし、スカラー属性は保持すること。"""
    snapshot = EntitySnapshot.from_payload(
        {"id": "u1", "name": "Ana", "address": {"city": "X"}, "tags": ["a", "b"]}
    )
    assert snapshot.id == "u1"
    assert dict(snapshot.attributes) == {"name": "Ana"}


def test_from_payload_invalid_timestamp_uses_now() -> None:
    """解釈できない updatedAt は無視して現在時刻を使うこと。"""
    before = datetime.now(UTC)
    snapshot = EntitySnapshot.from_payload({"id": "u1", "updatedAt": "yesterday"})
    assert snapshot.last_updated_at >= before
    assert snapshot.attributes["updatedAt"] == "yesterday"
