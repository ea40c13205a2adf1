"""orderflow retry: 指数バックオフ + ジッター付きリトライ実行。"""

from .exceptions import RetryableAttemptError
from .executor import execute
from .models import RetryPolicy
from .outcome import AttemptOutcome, RetryableFailure, Success, TerminalFailure

__all__ = [
    "AttemptOutcome",
    "RetryPolicy",
    "RetryableAttemptError",
    "RetryableFailure",
    "Success",
    "TerminalFailure",
    "execute",
]
