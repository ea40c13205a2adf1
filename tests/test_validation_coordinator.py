"""ValidationCoordinator のシナリオテスト（respx モック）"""

import httpx
import respx
from orderflow.cache import EntitySnapshot, InMemorySnapshotCache
from orderflow.retry import RetryPolicy, Success
from orderflow.users import HttpUsersClient, UsersClient, UsersClientConfig
from orderflow.validation import DecisionPath, ValidationCoordinator, ValidationOutcome

BASE_URL = "http://users:3001"
POLICY = RetryPolicy(max_attempts=3, base_delay=0.5, jitter_max=1.0)


class FakeSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def make_coordinator(
    cache: InMemorySnapshotCache | None = None,
) -> tuple[ValidationCoordinator, FakeSleep]:
    sleep = FakeSleep()
    client = HttpUsersClient(UsersClientConfig(base_url=BASE_URL, timeout_seconds=0.5))
    coordinator = ValidationCoordinator(
        client, cache or InMemorySnapshotCache(), policy=POLICY, sleep=sleep
    )
    return coordinator, sleep


@respx.mock
async def test_remote_ok_first_attempt_is_valid() -> None:
    """200 応答なら 1 回の呼び出しで VALID。"""
    route = respx.get(f"{BASE_URL}/u1").mock(return_value=httpx.Response(200, json={"id": "u1"}))
    coordinator, sleep = make_coordinator()

    decision = await coordinator.decide("u1")

    assert decision.outcome is ValidationOutcome.VALID
    assert decision.path is DecisionPath.REMOTE
    assert route.call_count == 1
    assert sleep.delays == []


@respx.mock
async def test_remote_recovers_on_third_attempt() -> None:
    """503, 503, 200 なら 3 回の呼び出しと 2 回の待機で VALID。"""
    route = respx.get(f"{BASE_URL}/u1").mock(
        side_effect=[
            httpx.Response(503),
            httpx.Response(503),
            httpx.Response(200, json={"id": "u1"}),
        ]
    )
    coordinator, sleep = make_coordinator()

    assert await coordinator.validate("u1") is ValidationOutcome.VALID
    assert route.call_count == 3
    assert len(sleep.delays) == 2
    assert 0.5 <= sleep.delays[0] < 1.5
    assert 1.0 <= sleep.delays[1] < 2.0


@respx.mock
async def test_remote_down_and_cached_user_is_valid() -> None:
    """全試行 503 でもキャッシュにあれば VALID（追加の呼び出しなし）。"""
    route = respx.get(f"{BASE_URL}/u1").mock(return_value=httpx.Response(503))
    cache = InMemorySnapshotCache()
    await cache.set("u1", EntitySnapshot(id="u1", attributes={"name": "Ana"}))
    coordinator, _ = make_coordinator(cache)

    decision = await coordinator.decide("u1")

    assert decision.outcome is ValidationOutcome.VALID
    assert decision.path is DecisionPath.CACHE
    assert decision.attempts == 3
    assert route.call_count == 3


@respx.mock
async def test_remote_down_and_uncached_user_is_unavailable() -> None:
    """全試行 503 でキャッシュにも無ければ UNAVAILABLE。"""
    route = respx.get(f"{BASE_URL}/u2").mock(return_value=httpx.Response(503))
    cache = InMemorySnapshotCache()
    await cache.set("u1", EntitySnapshot(id="u1"))
    coordinator, _ = make_coordinator(cache)

    assert await coordinator.validate("u2") is ValidationOutcome.UNAVAILABLE
    assert route.call_count == 3


@respx.mock
async def test_not_found_is_invalid_without_retry() -> None:
    """404 は再試行せず即座に INVALID。"""
    route = respx.get(f"{BASE_URL}/ghost").mock(return_value=httpx.Response(404))
    cache = InMemorySnapshotCache()
    # キャッシュにあっても確定的な 404 が優先される
    await cache.set("ghost", EntitySnapshot(id="ghost"))
    coordinator, sleep = make_coordinator(cache)

    decision = await coordinator.decide("ghost")

    assert decision.outcome is ValidationOutcome.INVALID
    assert decision.path is DecisionPath.REMOTE
    assert route.call_count == 1
    assert sleep.delays == []


@respx.mock
async def test_timeouts_fall_back_to_cache() -> None:
    """タイムアウトも再試行され、尽きたらキャッシュを参照すること。"""
    route = respx.get(f"{BASE_URL}/u1").mock(side_effect=httpx.ConnectTimeout("slow"))
    cache = InMemorySnapshotCache()
    await cache.set("u1", EntitySnapshot(id="u1"))
    coordinator, _ = make_coordinator(cache)

    assert await coordinator.validate("u1") is ValidationOutcome.VALID
    assert route.call_count == 3


@respx.mock
async def test_retryable_then_not_found_is_invalid() -> None:
    """一時的失敗の後に 404 が返れば INVALID。"""
    route = respx.get(f"{BASE_URL}/u1").mock(
        side_effect=[httpx.Response(502), httpx.Response(404)]
    )
    coordinator, sleep = make_coordinator()

    assert await coordinator.validate("u1") is ValidationOutcome.INVALID
    assert route.call_count == 2
    assert len(sleep.delays) == 1


async def test_coordinator_accepts_any_users_client() -> None:
    """UsersClient 実装を差し替えられること。"""

    class AlwaysExists(UsersClient):
        async def check_exists(self, user_id: str):
            return Success(value={"id": user_id})

    coordinator = ValidationCoordinator(AlwaysExists(), InMemorySnapshotCache(), policy=POLICY)
    assert await coordinator.validate("anyone") is ValidationOutcome.VALID


@respx.mock
async def test_empty_id_is_invalid() -> None:
    """空の ID は一覧エンドポイントが 200 を返しても INVALID。"""
    route = respx.get(f"{BASE_URL}/").mock(return_value=httpx.Response(200, json=[]))
    coordinator, sleep = make_coordinator()

    assert await coordinator.validate("") is ValidationOutcome.INVALID
    assert route.call_count == 0
    assert sleep.delays == []
