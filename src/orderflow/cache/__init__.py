"""orderflow cache: イベント駆動で更新されるスナップショットキャッシュ。"""

from .client import SnapshotCache
from .exceptions import SnapshotError
from .memory import InMemorySnapshotCache
from .snapshot import EntitySnapshot

__all__ = [
    "EntitySnapshot",
    "InMemorySnapshotCache",
    "SnapshotCache",
    "SnapshotError",
]
