"""cache パッケージの例外型定義"""

from __future__ import annotations


class SnapshotError(Exception):
    """イベントペイロードからスナップショットを作れない場合のエラー。"""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause
