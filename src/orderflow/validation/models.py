"""検証結果モデル"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ValidationOutcome(StrEnum):
    """検証結果。

    INVALID は「存在しないと確定した」、UNAVAILABLE は「現時点では判断できない」。
    """

    VALID = "valid"
    INVALID = "invalid"
    UNAVAILABLE = "unavailable"


class DecisionPath(StrEnum):
    """判定に使った経路。"""

    REMOTE = "remote"
    CACHE = "cache"


@dataclass(frozen=True)
class ValidationDecision:
    """検証結果と判定経路。"""

    outcome: ValidationOutcome
    path: DecisionPath
    attempts: int
    reason: str = ""
