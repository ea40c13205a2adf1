"""ValidationCoordinator 実装"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import structlog

from ..cache import SnapshotCache
from ..retry import (
    AttemptOutcome,
    RetryableAttemptError,
    RetryableFailure,
    RetryPolicy,
    Success,
    execute,
)
from ..telemetry.metrics import validation_outcomes_total
from ..users import UsersClient
from .models import DecisionPath, ValidationDecision, ValidationOutcome

logger = structlog.stdlib.get_logger(__name__)

DEFAULT_POLICY = RetryPolicy(max_attempts=3, base_delay=0.5, jitter_max=1.0)


class ValidationCoordinator:
    """注文作成前にユーザーの存在を確認する。

    まずリモートのユーザーサービスに存在確認を行い、一時的な失敗はポリシーに
    従って再試行する。404 などの確定的な応答は再試行しない。全試行が一時的な
    失敗に終わった場合だけ、イベントで更新されるキャッシュを参照する。
    キャッシュはリモートより遅れている可能性があるため、障害時には古い
    ユーザー情報を信用することになる。
    """

    def __init__(
        self,
        client: UsersClient,
        cache: SnapshotCache,
        policy: RetryPolicy = DEFAULT_POLICY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self._cache = cache
        self._policy = policy
        self._sleep = sleep

    async def validate(self, user_id: str) -> ValidationOutcome:
        """ユーザー ID を検証して VALID / INVALID / UNAVAILABLE を返す。"""
        return (await self.decide(user_id)).outcome

    async def decide(self, user_id: str) -> ValidationDecision:
        """検証結果を判定経路つきで返す。"""
        attempts = 0

        async def check_remote() -> AttemptOutcome:
            nonlocal attempts
            attempts += 1
            outcome = await self._client.check_exists(user_id)
            if isinstance(outcome, RetryableFailure):
                raise RetryableAttemptError(outcome)
            return outcome

        try:
            outcome = await execute(
                check_remote,
                self._policy,
                operation_name="validate-user-http",
                retry_on=(RetryableAttemptError,),
                sleep=self._sleep,
            )
        except RetryableAttemptError as e:
            logger.warning(
                "users service unavailable after retries, falling back to cache",
                user_id=user_id,
                attempts=attempts,
                error=str(e),
            )
            return await self._fallback(user_id, attempts)

        if isinstance(outcome, Success):
            decision = ValidationDecision(ValidationOutcome.VALID, DecisionPath.REMOTE, attempts)
        else:
            decision = ValidationDecision(
                ValidationOutcome.INVALID, DecisionPath.REMOTE, attempts, reason=outcome.reason
            )
        return self._record(user_id, decision)

    async def _fallback(self, user_id: str, attempts: int) -> ValidationDecision:
        snapshot = await self._cache.get(user_id)
        if snapshot is not None:
            decision = ValidationDecision(
                ValidationOutcome.VALID,
                DecisionPath.CACHE,
                attempts,
                reason=f"cached snapshot from {snapshot.last_updated_at.isoformat()}",
            )
        else:
            decision = ValidationDecision(
                ValidationOutcome.UNAVAILABLE,
                DecisionPath.CACHE,
                attempts,
                reason="users service unavailable and user not cached",
            )
        return self._record(user_id, decision)

    def _record(self, user_id: str, decision: ValidationDecision) -> ValidationDecision:
        validation_outcomes_total.add(
            1, {"outcome": decision.outcome.value, "path": decision.path.value}
        )
        logger.info(
            "user validated",
            user_id=user_id,
            outcome=decision.outcome.value,
            path=decision.path.value,
            attempts=decision.attempts,
        )
        return decision
