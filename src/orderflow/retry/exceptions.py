"""retry パッケージの例外型定義"""

from __future__ import annotations

from .outcome import RetryableFailure


class RetryableAttemptError(Exception):
    """RetryableFailure をリトライ実行器に伝えるための例外。"""

    def __init__(self, failure: RetryableFailure) -> None:
        super().__init__(str(failure.cause))
        self.failure = failure
        self.__cause__ = failure.cause
