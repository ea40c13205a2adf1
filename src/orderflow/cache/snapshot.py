"""エンティティスナップショット"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Any

import structlog

from .exceptions import SnapshotError

logger = structlog.stdlib.get_logger(__name__)

Scalar = str | int | float | bool | None

_SCALAR_TYPES = (str, int, float, bool, type(None))
_UPDATED_AT_KEYS = ("updatedAt", "updated_at")


@dataclass(frozen=True)
class EntitySnapshot:
    """イベント受信時点でのリモートエンティティの公開フィールド。"""

    id: str
    attributes: Mapping[str, Scalar] = field(default_factory=dict)
    last_updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        # 呼び出し元の dict を後から書き換えられないよう読み取り専用で保持する
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    @classmethod
    def from_payload(cls, data: Any) -> EntitySnapshot:  # noqa: ANN401
        """デコード済み JSON からスナップショットを作る。

        スカラーでない属性（オブジェクトや配列）は保持せずに読み飛ばす。

        Raises:
            SnapshotError: オブジェクトでない、または文字列の id が無い場合
        """
        if not isinstance(data, dict):
            raise SnapshotError(f"payload must be a JSON object, got {type(data).__name__}")
        entity_id = data.get("id")
        if not isinstance(entity_id, str) or not entity_id:
            raise SnapshotError("payload has no string 'id'")

        attributes: dict[str, Scalar] = {}
        skipped: list[str] = []
        for key, value in data.items():
            if key == "id":
                continue
            if isinstance(value, _SCALAR_TYPES):
                attributes[key] = value
            else:
                skipped.append(key)
        if skipped:
            logger.info("non-scalar attributes skipped", entity_id=entity_id, keys=skipped)

        return cls(
            id=entity_id,
            attributes=attributes,
            last_updated_at=_parse_updated_at(entity_id, data),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, **self.attributes}


def _parse_updated_at(entity_id: str, data: dict[str, Any]) -> datetime:
    for key in _UPDATED_AT_KEYS:
        raw = data.get(key)
        if raw is None:
            continue
        try:
            parsed = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
        except ValueError:
            logger.info("invalid timestamp ignored", entity_id=entity_id, key=key, value=raw)
            break
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return datetime.now(UTC)
