"""orderflow validation: リトライとキャッシュフォールバックによるユーザー検証。"""

from .coordinator import ValidationCoordinator
from .models import DecisionPath, ValidationDecision, ValidationOutcome

__all__ = [
    "DecisionPath",
    "ValidationCoordinator",
    "ValidationDecision",
    "ValidationOutcome",
]
