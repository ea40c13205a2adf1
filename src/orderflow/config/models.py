"""設定型定義（pydantic BaseModel）"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from ..messaging import RoutingKeys
from ..retry import RetryPolicy


class AppSection(BaseModel):
    """アプリケーション基本設定。"""

    name: str = "orders"
    environment: str = "development"


class UsersSection(BaseModel):
    """ユーザーサービス接続設定。"""

    base_url: str = "http://localhost:3001"
    timeout_seconds: float = Field(default=2.0, gt=0)


class RetrySection(BaseModel):
    """リトライポリシー設定。"""

    max_attempts: int = Field(default=3, ge=1)
    base_delay_seconds: float = Field(default=0.5, ge=0)
    jitter_max_seconds: float = Field(default=1.0, ge=0)

    def to_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.max_attempts,
            base_delay=self.base_delay_seconds,
            jitter_max=self.jitter_max_seconds,
        )


class BrokerSection(BaseModel):
    """ブローカー接続・トポロジー設定。"""

    kind: Literal["kafka", "memory"] = "kafka"
    brokers: list[str] = Field(default_factory=lambda: ["localhost:9092"])
    exchange: str = "app.topic"
    queue: str = "orders.q"
    user_created_key: str = RoutingKeys.USER_CREATED
    user_updated_key: str = RoutingKeys.USER_UPDATED
    poll_timeout_seconds: float = Field(default=1.0, gt=0)
    publish_timeout_seconds: float = Field(default=10.0, gt=0)

    @property
    def bindings(self) -> list[str]:
        return [self.user_created_key, self.user_updated_key]


class LogSection(BaseModel):
    """ログ設定。"""

    level: str = "INFO"
    format: Literal["json", "text"] = "json"


class AppConfig(BaseModel):
    """注文サービス設定全体。"""

    app: AppSection = Field(default_factory=AppSection)
    users: UsersSection = Field(default_factory=UsersSection)
    broker: BrokerSection = Field(default_factory=BrokerSection)
    validation_retry: RetrySection = Field(default_factory=RetrySection)
    broker_retry: RetrySection = Field(
        default_factory=lambda: RetrySection(
            max_attempts=5, base_delay_seconds=2.0, jitter_max_seconds=1.0
        )
    )
    log: LogSection = Field(default_factory=LogSection)
