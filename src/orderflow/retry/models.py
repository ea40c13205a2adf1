"""リトライポリシー"""

from __future__ import annotations

import random
from dataclasses import dataclass


@dataclass(frozen=True)
class RetryPolicy:
    """リトライポリシー。時間はすべて秒。

    attempt k (1 始まり) の失敗後、次の試行までに
    ``base_delay * 2**(k-1) + random[0, jitter_max)`` 秒待機する。
    """

    max_attempts: int = 3
    base_delay: float = 0.5
    jitter_max: float = 1.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must be >= 0")
        if self.jitter_max < 0:
            raise ValueError("jitter_max must be >= 0")

    def backoff(self, attempt: int) -> float:
        """ジッターを含まない待機時間を返す。"""
        return self.base_delay * (2 ** (attempt - 1))

    def compute_delay(self, attempt: int) -> float:
        """attempt 回目の失敗後に待機する秒数を計算する。"""
        return self.backoff(attempt) + random.random() * self.jitter_max
