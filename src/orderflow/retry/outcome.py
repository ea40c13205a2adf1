"""1 回の試行結果を表すタグ付き型"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """確定的な成功。"""

    value: T


@dataclass(frozen=True)
class RetryableFailure:
    """一時的な失敗。再試行で結果が変わりうる。"""

    cause: Exception


@dataclass(frozen=True)
class TerminalFailure:
    """確定的な失敗。再試行しても結果は変わらない。"""

    reason: str
    status_code: int | None = None


AttemptOutcome = Success[Any] | RetryableFailure | TerminalFailure
